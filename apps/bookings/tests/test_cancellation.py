from datetime import date, timedelta
from decimal import Decimal

import pytest

from apps.bookings.domain.cancellation import CancellationPolicy, days_until_check_in
from apps.bookings.domain.entities import Booking, BookingStatus
from apps.bookings.domain.exceptions import NotCancellableError
from apps.bookings.domain.pricing import Extras, PricingCalculator
from apps.bookings.tests.fakes import make_property
from apps.loyalty.domain.tiers import MembershipTier
from shared.domain.value_objects import DateRange, Money

TODAY = date(2026, 12, 5)


def make_booking(check_in, nights=2, tier=MembershipTier.BRONZE):
    dates = DateRange(check_in, check_in + timedelta(days=nights))
    prop = make_property("1", "200")
    return Booking(
        property_id=prop.id,
        user_id="guest-1",
        dates=dates,
        guests_count=2,
        tier=tier,
        price=PricingCalculator().calculate(prop, dates, 2, Extras(), tier),
    )


def test_days_until_check_in():
    assert days_until_check_in(date(2026, 12, 10), TODAY) == 5
    assert days_until_check_in(date(2026, 12, 4), TODAY) == -1


@pytest.mark.parametrize("days_ahead, allowed", [(0, False), (1, False), (2, True), (30, True)])
def test_needs_two_days_notice(days_ahead, allowed):
    booking = make_booking(TODAY + timedelta(days=days_ahead))
    assert CancellationPolicy().can_cancel(booking, TODAY) is allowed


def test_refusal_carries_days_until_check_in():
    booking = make_booking(TODAY + timedelta(days=1))

    with pytest.raises(NotCancellableError) as excinfo:
        CancellationPolicy().compute_refund(booking, TODAY)

    assert excinfo.value.days_until_check_in == 1
    assert excinfo.value.extra["days_until_check_in"] == 1


def test_confirmed_booking_refunds_total_and_claws_back_cashback():
    booking = make_booking(date(2026, 12, 10), tier=MembershipTier.GOLD)
    booking.confirm(Money(Decimal("120")))

    refund = CancellationPolicy().compute_refund(booking, TODAY)

    assert refund.refund_amount == Money(Decimal("400"))
    assert refund.cashback_deducted == Money(Decimal("120"))
    assert refund.days_until_check_in == 5
    assert refund.to_dict() == {
        "refund_amount": "400.00",
        "cashback_deducted": "120.00",
        "days_until_check_in": 5,
    }


def test_pending_booking_moves_no_money():
    booking = make_booking(date(2026, 12, 10))

    refund = CancellationPolicy().compute_refund(booking, TODAY)

    assert refund.refund_amount.is_zero
    assert refund.cashback_deducted.is_zero


@pytest.mark.parametrize("status", [BookingStatus.CANCELLED, BookingStatus.COMPLETED])
def test_final_bookings_are_not_cancellable(status):
    booking = make_booking(date(2026, 12, 20))
    booking.status = status

    with pytest.raises(NotCancellableError):
        CancellationPolicy().ensure_cancellable(booking, TODAY)


def test_notice_is_configurable():
    booking = make_booking(TODAY + timedelta(days=3))
    assert not CancellationPolicy(min_notice_days=7).can_cancel(booking, TODAY)
