"""
Membership Tiers

Ordered loyalty levels. A tier decides the cashback credited on every
paid booking and the discounts applied to booking extras.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from shared.domain.exceptions import ValidationError


@dataclass(frozen=True)
class TierBenefits:
    cashback_percent: Decimal
    sauna_discount: Decimal
    first_sauna_hour_free: bool
    kitchenware_free: bool


_BENEFITS = {
    'Bronze': TierBenefits(Decimal('0.10'), Decimal('0'), False, False),
    'Silver': TierBenefits(Decimal('0.20'), Decimal('0.10'), False, False),
    'Gold': TierBenefits(Decimal('0.30'), Decimal('0.20'), False, True),
    'Platinum': TierBenefits(Decimal('0.40'), Decimal('0.40'), True, True),
}


class MembershipTier(Enum):
    """
    Membership level, ordered Bronze < Silver < Gold < Platinum

    Percentages are fractions: cashback_percent 0.10 means 10%.
    """
    BRONZE = 'Bronze'
    SILVER = 'Silver'
    GOLD = 'Gold'
    PLATINUM = 'Platinum'

    @property
    def benefits(self) -> TierBenefits:
        return _BENEFITS[self.value]

    @property
    def cashback_percent(self) -> Decimal:
        return self.benefits.cashback_percent

    @property
    def sauna_discount(self) -> Decimal:
        return self.benefits.sauna_discount

    @property
    def first_sauna_hour_free(self) -> bool:
        return self.benefits.first_sauna_hour_free

    @property
    def kitchenware_free(self) -> bool:
        return self.benefits.kitchenware_free

    @property
    def rank(self) -> int:
        return _ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, MembershipTier):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, MembershipTier):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, MembershipTier):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, MembershipTier):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value) -> 'MembershipTier':
        """Case-insensitive lookup ('gold', 'Gold', 'GOLD')"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for tier in cls:
                if tier.value.lower() == value.strip().lower():
                    return tier
        raise ValidationError(
            f"Unknown membership tier: {value!r}",
            allowed=[tier.value for tier in cls],
        )

    @classmethod
    def choices(cls):
        return [(tier.value, tier.value) for tier in cls]


_ORDER = list(MembershipTier)
