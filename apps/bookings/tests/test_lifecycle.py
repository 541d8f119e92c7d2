import threading
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from apps.bookings.application.command_handlers import (
    CancelBookingCommand,
    ConfirmPaymentCommand,
    CreateBookingCommand,
    QuoteBookingCommand,
)
from apps.bookings.domain.entities import Booking, BookingStatus
from apps.bookings.domain.events import BookingCancelled, BookingConfirmed, BookingCreated
from apps.bookings.domain.exceptions import (
    BookingNotFoundError,
    BookingStateError,
    ConflictError,
    InvalidGuestCountError,
    NotCancellableError,
    PropertyNotFoundError,
    UnavailableError,
)
from apps.bookings.domain.pricing import Extras, PricingCalculator
from apps.bookings.tests.fakes import house_properties, make_lifecycle, make_property
from apps.loyalty.domain.exceptions import InsufficientFundsError
from apps.loyalty.domain.tiers import MembershipTier
from shared.application.event_bus import EventBus
from shared.domain.exceptions import InvalidRangeError, ValidationError
from shared.domain.value_objects import DateRange, Money

TODAY = date(2026, 12, 5)


def money(value):
    return Money(Decimal(value))


def create(property_id, check_in, check_out, guests=2, user_id="guest-1", **kwargs):
    return CreateBookingCommand(
        property_id=property_id,
        user_id=user_id,
        check_in=check_in,
        check_out=check_out,
        guests_count=guests,
        **kwargs,
    )


@pytest.fixture
def env():
    return make_lifecycle(house_properties(rate="200"), TODAY)


def test_linked_properties_end_to_end(env):
    lifecycle, store, ledger, _ = env
    ledger.top_up("guest-1", 1000)

    booking = lifecycle.create_booking(create("1", "10.12.2026", "12.12.2026"))
    assert booking.status == BookingStatus.PENDING
    assert booking.total_price == money("400")

    confirmed = lifecycle.confirm_payment(ConfirmPaymentCommand(booking.id))
    assert confirmed.status == BookingStatus.CONFIRMED
    assert confirmed.cashback_earned == money("40")
    assert ledger.get_balance("guest-1") == money("640")

    with pytest.raises(UnavailableError):
        lifecycle.create_booking(create("4", "11.12.2026", "13.12.2026", user_id="guest-2"))

    refund = lifecycle.cancel_booking(CancelBookingCommand(booking.id, reason="Plans changed"))
    assert refund.refund_amount == money("400")
    assert refund.cashback_deducted == money("40")
    assert refund.days_until_check_in == 5
    assert ledger.get_balance("guest-1") == money("1000")
    assert ledger.earned["guest-1"] == Money.zero()

    cancelled = lifecycle.get_booking(booking.id)
    assert cancelled.status == BookingStatus.CANCELLED
    assert cancelled.cancellation_reason == "Plans changed"

    other = lifecycle.create_booking(create("4", "11.12.2026", "13.12.2026", user_id="guest-2"))
    assert other.status == BookingStatus.PENDING


def test_extra_guests_total():
    lifecycle, _, _, _ = make_lifecycle([make_property("7", "150", max_guests=10)], TODAY)

    booking = lifecycle.create_booking(create("7", "2026-12-10", "2026-12-11", guests=15))

    assert booking.price.extra_guest_fee == money("750")
    assert booking.total_price == money("900")


def test_tier_comes_from_card_unless_given(env):
    lifecycle, _, ledger, _ = env
    ledger.tiers["guest-1"] = MembershipTier.PLATINUM

    from_card = lifecycle.create_booking(create("3", "2026-12-10", "2026-12-11", sauna_hours=1))
    explicit = lifecycle.quote(QuoteBookingCommand(
        property_id="3", check_in="2026-12-20", check_out="2026-12-21", guests_count=1,
        sauna_hours=1, tier="bronze",
    ))

    assert from_card.tier is MembershipTier.PLATINUM
    assert from_card.price.sauna_fee.is_zero
    assert explicit.sauna_fee == money("250")


def test_insufficient_funds_keeps_booking_pending_and_dates_held(env):
    lifecycle, _, ledger, _ = env
    ledger.top_up("guest-1", 100)
    booking = lifecycle.create_booking(create("1", "2026-12-10", "2026-12-12"))

    with pytest.raises(InsufficientFundsError) as excinfo:
        lifecycle.confirm_payment(ConfirmPaymentCommand(booking.id))

    assert Decimal(excinfo.value.extra["deficit"]) == Decimal("300")
    assert lifecycle.get_booking(booking.id).status == BookingStatus.PENDING
    assert ledger.get_balance("guest-1") == money("100")
    assert not lifecycle.is_free("2", "2026-12-11", "2026-12-13")

    ledger.top_up("guest-1", 300)
    assert lifecycle.confirm_payment(ConfirmPaymentCommand(str(booking.id))).status == BookingStatus.CONFIRMED


def test_confirm_twice_is_rejected(env):
    lifecycle, _, ledger, _ = env
    ledger.top_up("guest-1", 1000)
    booking = lifecycle.create_booking(create("1", "2026-12-10", "2026-12-12"))
    lifecycle.confirm_payment(ConfirmPaymentCommand(booking.id))

    with pytest.raises(BookingStateError):
        lifecycle.confirm_payment(ConfirmPaymentCommand(booking.id))
    assert ledger.get_balance("guest-1") == money("640")


def test_double_cancel_leaves_ledger_alone(env):
    lifecycle, _, ledger, _ = env
    ledger.top_up("guest-1", 1000)
    booking = lifecycle.create_booking(create("1", "2026-12-10", "2026-12-12"))
    lifecycle.confirm_payment(ConfirmPaymentCommand(booking.id))
    lifecycle.cancel_booking(CancelBookingCommand(booking.id))
    balance = ledger.get_balance("guest-1")
    entries = len(ledger.entries)

    with pytest.raises(NotCancellableError):
        lifecycle.cancel_booking(CancelBookingCommand(booking.id))

    assert ledger.get_balance("guest-1") == balance
    assert len(ledger.entries) == entries


def test_cancel_one_day_before_check_in_is_refused(env):
    lifecycle, _, ledger, _ = env
    ledger.top_up("guest-1", 1000)
    booking = lifecycle.create_booking(create("1", "2026-12-06", "2026-12-08"))
    lifecycle.confirm_payment(ConfirmPaymentCommand(booking.id))

    with pytest.raises(NotCancellableError) as excinfo:
        lifecycle.cancel_booking(CancelBookingCommand(booking.id))

    assert excinfo.value.days_until_check_in == 1
    assert lifecycle.get_booking(booking.id).status == BookingStatus.CONFIRMED
    assert not lifecycle.is_free("1", "2026-12-06", "2026-12-08")


def test_cancel_pending_booking_moves_no_money(env):
    lifecycle, _, ledger, _ = env
    booking = lifecycle.create_booking(create("1", "2026-12-10", "2026-12-12"))

    refund = lifecycle.cancel_booking(CancelBookingCommand(booking.id))

    assert refund.refund_amount.is_zero
    assert ledger.entries == []
    assert lifecycle.is_free("1", "2026-12-10", "2026-12-12")


def test_elapsed_booking_completes_on_read(env):
    lifecycle, _, ledger, clock = env
    ledger.top_up("guest-1", 1000)
    booking = lifecycle.create_booking(create("1", "2026-12-10", "2026-12-12"))
    lifecycle.confirm_payment(ConfirmPaymentCommand(booking.id))
    balance = ledger.get_balance("guest-1")

    clock.today = date(2026, 12, 12)
    assert lifecycle.get_booking(booking.id).status == BookingStatus.CONFIRMED

    clock.today = date(2026, 12, 13)
    completed = lifecycle.get_booking(booking.id)
    assert completed.status == BookingStatus.COMPLETED
    assert completed.completed_at is not None
    assert lifecycle.get_booking(booking.id).status == BookingStatus.COMPLETED
    assert ledger.get_balance("guest-1") == balance
    assert lifecycle.get_booked_dates("1") == []

    with pytest.raises(NotCancellableError):
        lifecycle.cancel_booking(CancelBookingCommand(booking.id))


def test_list_bookings_completes_elapsed(env):
    lifecycle, _, ledger, clock = env
    ledger.top_up("guest-1", 1000)
    booking = lifecycle.create_booking(create("1", "2026-12-10", "2026-12-12"))
    lifecycle.confirm_payment(ConfirmPaymentCommand(booking.id))
    clock.today = date(2026, 12, 20)

    [by_user] = lifecycle.list_user_bookings("guest-1")
    [by_property] = lifecycle.list_property_bookings("1")

    assert by_user.status == BookingStatus.COMPLETED
    assert by_property.status == BookingStatus.COMPLETED


def test_booked_dates_cover_the_linkage_group(env):
    lifecycle, _, _, _ = env
    lifecycle.create_booking(create("3", "2026-12-20", "2026-12-21"))
    lifecycle.create_booking(create("1", "2026-12-10", "2026-12-12"))

    assert lifecycle.get_booked_dates("2") == [
        date(2026, 12, 10), date(2026, 12, 11), date(2026, 12, 12),
        date(2026, 12, 20), date(2026, 12, 21),
    ]


def test_failed_save_releases_reservation(env):
    lifecycle, store, _, _ = env
    store.fail_on_save = True

    with pytest.raises(RuntimeError):
        lifecycle.create_booking(create("1", "2026-12-10", "2026-12-12"))

    store.fail_on_save = False
    assert store.bookings == {}
    assert lifecycle.is_free("1", "2026-12-10", "2026-12-12")


def test_group_rows_are_locked_while_reserving(env):
    lifecycle, store, _, _ = env
    lifecycle.create_booking(create("3", "2026-12-10", "2026-12-12"))
    assert store.locked_property_ids == [frozenset({"1", "2", "3", "4"})]


@pytest.mark.parametrize(
    "command, error",
    [
        (create("1", "2026-12-12", "2026-12-10"), InvalidRangeError),
        (create("1", "2026-12-10", "2026-12-12", guests=0), InvalidGuestCountError),
        (create("1", "2026-12-01", "2026-12-03"), ValidationError),
        (create("1", "10/12/2026", "2026-12-12"), ValidationError),
        (create("9", "2026-12-10", "2026-12-12"), PropertyNotFoundError),
    ],
)
def test_invalid_requests_create_nothing(env, command, error):
    lifecycle, store, _, _ = env

    with pytest.raises(error):
        lifecycle.create_booking(command)
    assert store.bookings == {}


def test_unknown_booking(env):
    lifecycle, _, _, _ = env
    with pytest.raises(BookingNotFoundError):
        lifecycle.get_booking("not-a-uuid")


def test_void_unpaid_bookings(env):
    lifecycle, store, ledger, _ = env
    ledger.top_up("guest-2", 1000)
    stale = lifecycle.create_booking(create("1", "2026-12-10", "2026-12-12"))
    paid = lifecycle.create_booking(create("3", "2026-12-20", "2026-12-22", user_id="guest-2"))
    lifecycle.confirm_payment(ConfirmPaymentCommand(paid.id))

    voided = lifecycle.release_unpaid_bookings(datetime.now(timezone.utc) + timedelta(minutes=1))

    assert voided == 1
    assert lifecycle.get_booking(stale.id).status == BookingStatus.CANCELLED
    assert lifecycle.get_booking(paid.id).status == BookingStatus.CONFIRMED
    assert lifecycle.is_free("1", "2026-12-10", "2026-12-12")
    assert not lifecycle.void_unpaid_booking(paid.id)


def test_complete_elapsed_bookings_sweep(env):
    lifecycle, _, ledger, clock = env
    ledger.top_up("guest-1", 1000)
    booking = lifecycle.create_booking(create("1", "2026-12-10", "2026-12-12"))
    lifecycle.confirm_payment(ConfirmPaymentCommand(booking.id))

    clock.today = date(2026, 12, 13)
    assert lifecycle.complete_elapsed_bookings() == 1
    assert lifecycle.complete_elapsed_bookings() == 0


def test_events_are_published_after_commit():
    bus = EventBus()
    seen = []
    for event_type in (BookingCreated, BookingConfirmed, BookingCancelled):
        bus.subscribe(event_type, seen.append)
    lifecycle, _, ledger, _ = make_lifecycle(house_properties(), TODAY, event_bus=bus)
    ledger.top_up("guest-1", 1000)

    booking = lifecycle.create_booking(create("1", "2026-12-10", "2026-12-12"))
    lifecycle.confirm_payment(ConfirmPaymentCommand(booking.id))
    lifecycle.cancel_booking(CancelBookingCommand(booking.id))

    assert [type(e) for e in seen] == [BookingCreated, BookingConfirmed, BookingCancelled]
    assert seen[1].cashback == money("40")
    assert seen[2].old_status == "confirmed"


def test_rejected_create_publishes_nothing():
    bus = EventBus()
    seen = []
    bus.subscribe(BookingCreated, seen.append)
    lifecycle, _, _, _ = make_lifecycle(house_properties(), TODAY, event_bus=bus)
    lifecycle.create_booking(create("1", "2026-12-10", "2026-12-12"))

    with pytest.raises(UnavailableError):
        lifecycle.create_booking(create("2", "2026-12-11", "2026-12-13"))

    assert len(seen) == 1


def stored_booking(property_id, check_in, check_out):
    prop = make_property(property_id)
    dates = DateRange.parse(check_in, check_out)
    return Booking(
        property_id=property_id,
        user_id="other-worker",
        dates=dates,
        guests_count=1,
        extras=Extras(),
        tier=MembershipTier.BRONZE,
        price=PricingCalculator().calculate(prop, dates, 1, Extras(), MembershipTier.BRONZE),
    )


def test_booking_made_elsewhere_is_a_retryable_conflict(env):
    lifecycle, store, _, _ = env
    elsewhere = stored_booking("2", "2026-12-11", "2026-12-13")
    store.bookings[elsewhere.id] = elsewhere

    with pytest.raises(ConflictError) as excinfo:
        lifecycle.create_booking(create("1", "2026-12-10", "2026-12-12"))

    assert excinfo.value.retryable
    assert excinfo.value.extra["conflicting_property_ids"] == ["2"]
    assert list(store.bookings) == [elsewhere.id]
    assert not lifecycle.is_free("4", "2026-12-12", "2026-12-13")


def test_known_conflict_is_not_retryable(env):
    lifecycle, _, _, _ = env
    lifecycle.create_booking(create("1", "2026-12-10", "2026-12-12"))

    with pytest.raises(UnavailableError) as excinfo:
        lifecycle.create_booking(create("4", "2026-12-12", "2026-12-14"))

    assert type(excinfo.value) is UnavailableError
    assert not excinfo.value.retryable


def test_stale_reservation_does_not_block(env):
    lifecycle, store, _, _ = env
    gone = stored_booking("2", "2026-12-10", "2026-12-12")
    lifecycle.index.reserve("2", gone.id, gone.dates)

    booking = lifecycle.create_booking(create("1", "2026-12-10", "2026-12-12"))

    assert list(store.bookings) == [booking.id]
    assert lifecycle.index.reservation_for(gone.id) is None


def test_concurrent_creates_on_linked_properties(env, monkeypatch):
    lifecycle, store, _, _ = env
    attempts = [("1", "guest-a"), ("2", "guest-b"), ("4", "guest-c"), ("3", "guest-d")] * 3
    # Every request reads the calendar before any of them takes the group lock
    barrier = threading.Barrier(len(attempts))
    is_free = lifecycle.index.is_free

    def is_free_then_wait(*args, **kwargs):
        free = is_free(*args, **kwargs)
        barrier.wait()
        return free

    monkeypatch.setattr(lifecycle.index, "is_free", is_free_then_wait)
    outcomes = []
    outcomes_lock = threading.Lock()

    def attempt(property_id, user_id):
        try:
            lifecycle.create_booking(create(property_id, "2026-12-10", "2026-12-12", user_id=user_id))
            outcome = "ok"
        except ConflictError as e:
            outcome = "retryable" if e.retryable else "conflict"
        except UnavailableError:
            outcome = "unavailable"
        with outcomes_lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=attempt, args=args) for args in attempts]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("retryable") == len(attempts) - 1
    assert len(store.bookings) == 1


def test_reload_waits_for_group_lock_and_applies_new_links():
    properties = [make_property("1"), make_property("2"), make_property("5")]
    lifecycle, store, _, _ = make_lifecycle(properties, TODAY)
    lifecycle.create_booking(create("1", "2026-12-10", "2026-12-12"))
    old_index = lifecycle.index
    held = threading.Event()
    release = threading.Event()

    def hold_group():
        with old_index.locked("1"):
            held.set()
            release.wait()

    holder = threading.Thread(target=hold_group)
    holder.start()
    held.wait()

    store.properties = [make_property("1", linked=("2",)), make_property("2", linked=("1",)), make_property("5")]
    reloader = threading.Thread(target=lifecycle.reload)
    reloader.start()
    reloader.join(timeout=0.2)
    assert reloader.is_alive()
    assert lifecycle.index is old_index

    release.set()
    holder.join()
    reloader.join()

    assert lifecycle.index is not old_index
    assert lifecycle.index.groups.members("2") == frozenset({"1", "2"})
    with pytest.raises(UnavailableError):
        lifecycle.create_booking(create("2", "2026-12-11", "2026-12-13"))
    assert lifecycle.create_booking(create("5", "2026-12-11", "2026-12-13")).property_id == "5"
