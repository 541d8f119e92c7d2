from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.bookings.application.command_handlers import ConfirmPaymentCommand, CreateBookingCommand
from apps.bookings.bootstrap import get_lifecycle, reset_lifecycle
from apps.bookings.models import Booking
from apps.bookings.tasks import complete_elapsed_bookings, release_unpaid_bookings
from apps.loyalty.models import LoyaltyCard
from apps.properties.models import Property


@pytest.fixture
def lux(db):
    prop = Property.objects.create(code="1", title="Lux", nightly_rate=Decimal("200.00"), max_guests=4)
    reset_lifecycle()
    return prop


def book(property_id="1", user_id="guest-1", days_ahead=5):
    check_in = date.today() + timedelta(days=days_ahead)
    return get_lifecycle().create_booking(CreateBookingCommand(
        property_id=property_id,
        user_id=user_id,
        check_in=check_in,
        check_out=check_in + timedelta(days=2),
        guests_count=2,
    ))


@pytest.mark.django_db
def test_release_unpaid_bookings_voids_stale_pending(lux, settings):
    settings.BOOKING_PAYMENT_GRACE_MINUTES = 15
    stale = book()
    Booking.objects.filter(pk=stale.id).update(created_at=timezone.now() - timedelta(minutes=30))
    fresh = book(days_ahead=20)

    result = release_unpaid_bookings.delay().get()

    assert result == {"voided": 1}
    stale_row = Booking.objects.get(pk=stale.id)
    assert stale_row.status == Booking.Status.CANCELLED
    assert stale_row.cancellation_reason == "Payment window elapsed"
    assert Booking.objects.get(pk=fresh.id).status == Booking.Status.PENDING
    assert get_lifecycle().is_free("1", stale.check_in, stale.check_out)


@pytest.mark.django_db
def test_release_unpaid_bookings_keeps_paid(lux):
    LoyaltyCard.objects.create(user_id="guest-1", balance=Decimal("1000.00"))
    booking = book()
    get_lifecycle().confirm_payment(ConfirmPaymentCommand(booking.id))
    Booking.objects.filter(pk=booking.id).update(created_at=timezone.now() - timedelta(hours=2))

    assert release_unpaid_bookings() == {"voided": 0}
    assert Booking.objects.get(pk=booking.id).status == Booking.Status.CONFIRMED


@pytest.mark.django_db
def test_complete_elapsed_bookings(lux):
    LoyaltyCard.objects.create(user_id="guest-1", balance=Decimal("1000.00"))
    booking = book()
    get_lifecycle().confirm_payment(ConfirmPaymentCommand(booking.id))
    past = date.today() - timedelta(days=5)
    Booking.objects.filter(pk=booking.id).update(check_in=past, check_out=past + timedelta(days=2))
    reset_lifecycle()

    assert complete_elapsed_bookings() == {"completed": 1}
    row = Booking.objects.get(pk=booking.id)
    assert row.status == Booking.Status.COMPLETED
    assert row.completed_at is not None
    assert LoyaltyCard.objects.get(user_id="guest-1").balance == Decimal("640.00")
    assert complete_elapsed_bookings() == {"completed": 0}
