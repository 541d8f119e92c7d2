"""
Booking Pricing

Turns (property, dates, guests, extras, tier) into an itemized price.
The breakdown is the single source for both the displayed quote and the
amount charged: callers read the items from it and never add them up
again on their own.
"""

from dataclasses import dataclass
from decimal import Decimal

from apps.bookings.domain.exceptions import InvalidExtraError, InvalidGuestCountError
from apps.loyalty.domain.tiers import MembershipTier
from apps.properties.domain.linkage import Property
from shared.domain.base import ValueObject
from shared.domain.value_objects import DateRange, Money

EXTRA_GUEST_RATE = Decimal('150')
SAUNA_HOURLY_RATE = Decimal('250')
KITCHENWARE_RATE = Decimal('100')


@dataclass(frozen=True)
class Extras(ValueObject):
    """Paid add-ons requested with a booking"""
    sauna_hours: int = 0
    kitchenware: bool = False

    def __post_init__(self):
        if isinstance(self.sauna_hours, bool) or not isinstance(self.sauna_hours, int):
            raise InvalidExtraError(
                f"Sauna hours must be a whole number, got {self.sauna_hours!r}",
                field='sauna_hours',
            )
        if self.sauna_hours < 0:
            raise InvalidExtraError(
                f"Sauna hours cannot be negative, got {self.sauna_hours}",
                field='sauna_hours',
            )


@dataclass(frozen=True)
class PriceBreakdown(ValueObject):
    """Itemized price of a stay"""
    nights: int
    nightly_rate: Money
    base_price: Money
    extra_guests: int
    extra_guest_fee: Money
    sauna_hours: int
    sauna_fee: Money
    kitchenware_fee: Money
    total: Money

    def to_dict(self) -> dict:
        return {
            'nights': self.nights,
            'nightly_rate': self.nightly_rate.to_plain(),
            'base_price': self.base_price.to_plain(),
            'extra_guests': self.extra_guests,
            'extra_guest_fee': self.extra_guest_fee.to_plain(),
            'sauna_hours': self.sauna_hours,
            'sauna_fee': self.sauna_fee.to_plain(),
            'kitchenware_fee': self.kitchenware_fee.to_plain(),
            'total': self.total.to_plain(),
        }


@dataclass(frozen=True)
class PricingCalculator:
    """
    Pure price calculator

    Rates default to the house price list and can be overridden from
    settings.BOOKING_PRICING. The calculator keeps no state between calls,
    so one instance may be shared freely.
    """
    extra_guest_rate: Decimal = EXTRA_GUEST_RATE
    sauna_hourly_rate: Decimal = SAUNA_HOURLY_RATE
    kitchenware_rate: Decimal = KITCHENWARE_RATE

    @classmethod
    def from_config(cls, config: dict | None) -> 'PricingCalculator':
        config = config or {}
        return cls(
            extra_guest_rate=Decimal(str(config.get('EXTRA_GUEST_RATE', EXTRA_GUEST_RATE))),
            sauna_hourly_rate=Decimal(str(config.get('SAUNA_HOURLY_RATE', SAUNA_HOURLY_RATE))),
            kitchenware_rate=Decimal(str(config.get('KITCHENWARE_RATE', KITCHENWARE_RATE))),
        )

    def calculate(
        self,
        property: Property,
        dates: DateRange,
        guests: int,
        extras: Extras,
        tier: MembershipTier,
    ) -> PriceBreakdown:
        """
        Compute the itemized price

        Raises:
            InvalidGuestCountError: guests < 1
            InvalidExtraError: negative sauna hours
        """
        if isinstance(guests, bool) or not isinstance(guests, int) or guests < 1:
            raise InvalidGuestCountError(
                f"Guests count must be at least 1, got {guests!r}",
                guests=guests if isinstance(guests, int) else str(guests),
            )
        if extras.sauna_hours < 0:
            raise InvalidExtraError(f"Sauna hours cannot be negative, got {extras.sauna_hours}")

        nights = dates.nights()
        base_price = property.nightly_rate * nights

        extra_guests = max(0, guests - property.max_guests)
        extra_guest_fee = Money(self.extra_guest_rate) * extra_guests

        sauna_fee = self._sauna_fee(extras.sauna_hours, tier)
        kitchenware_fee = self._kitchenware_fee(extras.kitchenware, tier)

        total = base_price + extra_guest_fee + sauna_fee + kitchenware_fee

        return PriceBreakdown(
            nights=nights,
            nightly_rate=property.nightly_rate,
            base_price=base_price,
            extra_guests=extra_guests,
            extra_guest_fee=extra_guest_fee,
            sauna_hours=extras.sauna_hours,
            sauna_fee=sauna_fee,
            kitchenware_fee=kitchenware_fee,
            total=total,
        )

    def _sauna_fee(self, hours: int, tier: MembershipTier) -> Money:
        rate = self.sauna_hourly_rate * (Decimal('1') - tier.sauna_discount)
        charged_hours = max(0, hours - 1) if tier.first_sauna_hour_free else hours
        return Money(rate * charged_hours).rounded()

    def _kitchenware_fee(self, requested: bool, tier: MembershipTier) -> Money:
        if not requested or tier.kitchenware_free:
            return Money.zero()
        return Money(self.kitchenware_rate)


def calculate_price(property, dates, guests, extras, tier) -> PriceBreakdown:
    """Price with the default rates"""
    return PricingCalculator().calculate(property, dates, guests, extras, tier)
