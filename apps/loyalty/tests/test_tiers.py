from decimal import Decimal

import pytest

from apps.loyalty.domain.tiers import MembershipTier
from shared.domain.exceptions import ValidationError


def test_tiers_are_ordered():
    assert MembershipTier.BRONZE < MembershipTier.SILVER < MembershipTier.GOLD < MembershipTier.PLATINUM
    assert max(MembershipTier) is MembershipTier.PLATINUM


@pytest.mark.parametrize(
    "tier, cashback",
    [
        (MembershipTier.BRONZE, Decimal("0.10")),
        (MembershipTier.SILVER, Decimal("0.20")),
        (MembershipTier.GOLD, Decimal("0.30")),
        (MembershipTier.PLATINUM, Decimal("0.40")),
    ],
)
def test_cashback_rates(tier, cashback):
    assert tier.cashback_percent == cashback


def test_platinum_benefits():
    tier = MembershipTier.PLATINUM
    assert tier.sauna_discount == Decimal("0.40")
    assert tier.first_sauna_hour_free
    assert tier.kitchenware_free


def test_bronze_has_no_extras_discounts():
    tier = MembershipTier.BRONZE
    assert tier.sauna_discount == 0
    assert not tier.first_sauna_hour_free
    assert not tier.kitchenware_free


def test_parse_is_case_insensitive():
    assert MembershipTier.parse("gold") is MembershipTier.GOLD
    assert MembershipTier.parse(" Platinum ") is MembershipTier.PLATINUM
    assert MembershipTier.parse(MembershipTier.SILVER) is MembershipTier.SILVER


def test_parse_unknown_tier():
    with pytest.raises(ValidationError) as excinfo:
        MembershipTier.parse("Diamond")
    assert excinfo.value.extra["allowed"] == ["Bronze", "Silver", "Gold", "Platinum"]
