"""
Booking Command Handlers

Use cases of the booking domain. BookingLifecycle orchestrates the
availability index, the pricing calculator and the cancellation policy
against the booking store and the loyalty ledger, one unit of work per
use case.

Commands:
- CreateBookingCommand: Reserve dates, price the stay (-> pending)
- ConfirmPaymentCommand: Pay from the loyalty card (pending -> confirmed)
- CancelBookingCommand: Refund and release dates (-> cancelled)
- QuoteBookingCommand: Price a stay without reserving anything
"""

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Iterable, List
from uuid import UUID
import logging
import threading

from apps.bookings.application.ports import AbstractBookingStore
from apps.bookings.domain.cancellation import CancellationPolicy, RefundBreakdown
from apps.bookings.domain.entities import Booking, BookingStatus
from apps.bookings.domain.events import BookingCreated
from apps.bookings.domain.exceptions import (
    BookingNotFoundError,
    BookingStateError,
    ConflictError,
    PropertyNotFoundError,
    UnavailableError,
)
from apps.bookings.domain.inventory import AvailabilityIndex
from apps.bookings.domain.pricing import Extras, PriceBreakdown, PricingCalculator
from apps.loyalty.domain.exceptions import InsufficientFundsError
from apps.loyalty.domain.ledger import AbstractLoyaltyLedger
from apps.loyalty.domain.tiers import MembershipTier
from apps.properties.domain.linkage import LinkageGroups, Property
from shared.application.uow import AbstractUnitOfWork
from shared.domain.exceptions import DomainError, ValidationError
from shared.domain.value_objects import DateRange

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to create a new booking

    ``tier`` may be omitted; the guest's loyalty-card tier is used then.
    Dates accept date objects, ISO strings or DD.MM.YYYY strings.
    """
    property_id: str
    user_id: str
    check_in: object
    check_out: object
    guests_count: int
    sauna_hours: int = 0
    kitchenware: bool = False
    tier: MembershipTier | str | None = None
    notes: str = ''


@dataclass
class ConfirmPaymentCommand:
    """Command to pay for a pending booking from the loyalty card"""
    booking_id: UUID | str


@dataclass
class CancelBookingCommand:
    """Command to cancel a booking"""
    booking_id: UUID | str
    reason: str = ''


@dataclass
class QuoteBookingCommand:
    """Command to price a stay without reserving it"""
    property_id: str
    check_in: object
    check_out: object
    guests_count: int
    sauna_hours: int = 0
    kitchenware: bool = False
    tier: MembershipTier | str | None = None
    user_id: str | None = None


# ===== Lifecycle =====

class BookingLifecycle:
    """
    Booking state machine over the persistence and ledger boundaries

    Every use case either completes or leaves no trace: the unit of work
    rolls storage and ledger back together, and the in-memory reservation
    is dropped again when the booking could not be stored.

    Reads (get_booking, list_*, get_booked_dates) complete confirmed
    bookings whose check-out day has passed before returning them.
    """

    def __init__(
        self,
        store: AbstractBookingStore,
        ledger: AbstractLoyaltyLedger,
        uow_factory: Callable[[], AbstractUnitOfWork],
        *,
        pricing: PricingCalculator | None = None,
        policy: CancellationPolicy | None = None,
        today: Callable[[], date] = date.today,
    ):
        self._store = store
        self._ledger = ledger
        self._uow_factory = uow_factory
        self._pricing = pricing or PricingCalculator()
        self._policy = policy or CancellationPolicy()
        self._today = today
        self._properties: dict[str, Property] = {}
        self._index: AvailabilityIndex | None = None
        self._reload_lock = threading.Lock()
        self.reload()

    @property
    def index(self) -> AvailabilityIndex:
        return self._index

    @property
    def policy(self) -> CancellationPolicy:
        return self._policy

    def reload(self):
        """
        Reload properties and links, then rebuild the availability index

        Links may merge or split groups, so the new index gets new group
        locks. The swap happens while every lock of the old index is held:
        creates already inside a group finish first, and creates that
        reach an old lock afterwards retry on the new index.
        """
        with self._reload_lock:
            previous = self._index
            if previous is None:
                self._swap_index()
                return
            with previous.all_locked():
                self._swap_index()

    def _swap_index(self):
        properties = self._store.load_properties_and_links()
        groups = LinkageGroups(properties)
        index = AvailabilityIndex(groups, self._store.load_active_reservations())
        self._properties = {p.id: p for p in properties}
        self._index = index
        logger.info(f"Booking lifecycle loaded {len(properties)} properties in {len(groups)} linkage groups")

    @contextmanager
    def _group_locked(self, property_id: str):
        """Lock the property's linkage group on the current index and yield that index"""
        while True:
            index = self._index
            with index.locked(property_id):
                if index is self._index:
                    yield index
                    return
            logger.debug(f"Index reloaded while waiting for the group of {property_id}, retrying")

    def get_property(self, property_id) -> Property:
        try:
            return self._properties[str(property_id)]
        except KeyError:
            raise PropertyNotFoundError(
                f"Property {property_id} not found",
                property_id=str(property_id),
            ) from None

    # ----- Queries -----

    def quote(self, command: QuoteBookingCommand) -> PriceBreakdown:
        prop = self.get_property(command.property_id)
        dates = DateRange.parse(command.check_in, command.check_out)
        extras = Extras(sauna_hours=command.sauna_hours, kitchenware=command.kitchenware)
        tier = self._resolve_tier(command.tier, command.user_id)
        return self._pricing.calculate(prop, dates, command.guests_count, extras, tier)

    def get_booking(self, booking_id) -> Booking:
        booking = self._store.load_booking(self._parse_booking_id(booking_id))
        if not booking:
            raise BookingNotFoundError(f"Booking {booking_id} not found", booking_id=str(booking_id))
        self._complete_elapsed([booking])
        return booking

    def list_user_bookings(self, user_id: str) -> List[Booking]:
        return self._complete_elapsed(self._store.list_bookings_by_user(user_id))

    def list_property_bookings(self, property_id: str) -> List[Booking]:
        self.get_property(property_id)
        return self._complete_elapsed(self._store.list_bookings_by_property(str(property_id)))

    def get_booked_dates(self, property_id: str) -> List[date]:
        """Sorted days on which the property (or any linked property) is taken"""
        prop = self.get_property(property_id)
        members = self._index.groups.members(prop.id)
        for member_id in sorted(members):
            self._complete_elapsed(self._store.list_bookings_by_property(member_id))

        with self._group_locked(prop.id) as index:
            members = index.groups.members(prop.id)
            index.replace_group(prop.id, self._store.load_active_reservations(members))
            return sorted(index.booked_dates(prop.id))

    def is_free(self, property_id: str, check_in, check_out) -> bool:
        prop = self.get_property(property_id)
        return self._index.is_free(prop.id, DateRange.parse(check_in, check_out))

    # ----- Commands -----

    def create_booking(self, command: CreateBookingCommand) -> Booking:
        """
        Reserve dates and store a pending booking

        Raises:
            ValidationError: bad dates, guests or extras
            PropertyNotFoundError: unknown property
            UnavailableError: dates taken on this or a linked property
            ConflictError: dates taken by a request that won the race for them
        """
        logger.info(
            f"Creating booking for property {command.property_id}, "
            f"user {command.user_id}, dates {command.check_in} - {command.check_out}"
        )

        prop = self.get_property(command.property_id)
        dates = DateRange.parse(command.check_in, command.check_out)
        if dates.check_in < self._today():
            raise ValidationError(
                "Check-in date cannot be in the past",
                check_in=dates.check_in.isoformat(),
            )
        if not command.user_id:
            raise ValidationError("User is required", field='user_id')

        extras = Extras(sauna_hours=command.sauna_hours, kitchenware=command.kitchenware)
        tier = self._resolve_tier(command.tier, command.user_id)
        price = self._pricing.calculate(prop, dates, command.guests_count, extras, tier)

        booking = Booking(
            property_id=prop.id,
            user_id=str(command.user_id),
            dates=dates,
            guests_count=command.guests_count,
            extras=extras,
            tier=tier,
            price=price,
            notes=command.notes or '',
        )

        # Unlocked look at the cached calendar. A conflict that only shows up
        # after the refresh under the group lock means another request won
        # the race (or another worker booked it), which callers may retry.
        taken_before_lock = not self._index.is_free(prop.id, dates)

        with self._group_locked(prop.id) as index:
            try:
                with self._uow_factory() as uow:
                    members = index.groups.members(prop.id)
                    self._store.lock_properties(members)
                    index.replace_group(prop.id, self._store.load_active_reservations(members))

                    overlapping = index.conflicts(prop.id, dates)
                    if overlapping:
                        conflicting = sorted({r.property_id for r in overlapping})
                        if taken_before_lock:
                            logger.warning(
                                f"Property {prop.id} not available for {dates}: "
                                f"{len(overlapping)} overlapping reservation(s) in its linkage group"
                            )
                            raise UnavailableError(
                                f"Property not available for dates {dates}",
                                property_id=prop.id,
                                conflicting_property_ids=conflicting,
                            )
                        logger.warning(
                            f"Property {prop.id} lost the race for {dates} to "
                            f"booking {overlapping[0].booking_id} on property {overlapping[0].property_id}"
                        )
                        raise ConflictError(
                            f"Dates {dates} are no longer available for property {prop.id}",
                            property_id=prop.id,
                            conflicting_property_ids=conflicting,
                        )

                    index.reserve(prop.id, booking.id, dates)

                    booking.add_event(BookingCreated(
                        aggregate_id=booking.id,
                        booking_id=booking.id,
                        property_id=prop.id,
                        user_id=booking.user_id,
                        dates=dates,
                        total_price=booking.total_price,
                    ))
                    uow.collect_events(booking)
                    self._store.save_booking(booking)
            except Exception:
                index.release(booking.id)
                raise

        logger.info(f"Booking {booking.id} created (pending), total {booking.total_price}")
        return booking

    def confirm_payment(self, command: ConfirmPaymentCommand) -> Booking:
        """
        Debit the loyalty card and confirm the booking

        On InsufficientFundsError the booking stays pending and keeps its
        dates so the guest can top up and retry.
        """
        booking_id = self._parse_booking_id(command.booking_id)
        logger.info(f"Confirming payment for booking {booking_id}")

        with self._uow_factory() as uow:
            booking = self._load_for_update(booking_id)
            if booking.status != BookingStatus.PENDING:
                raise BookingStateError(
                    f"Booking {booking.id} is already {booking.status.value}",
                    status=booking.status.value,
                )

            try:
                self._ledger.debit(
                    booking.user_id,
                    booking.total_price,
                    reason=f"Payment for booking {booking.id} at property {booking.property_id}",
                    booking_id=booking.id,
                )
            except InsufficientFundsError as e:
                logger.warning(f"Booking {booking.id} stays pending: {e}")
                raise

            cashback = (booking.total_price * booking.tier.cashback_percent).rounded()
            booking.confirm(cashback)
            if not cashback.is_zero:
                self._ledger.credit_cashback(booking.user_id, cashback, booking_id=booking.id)

            uow.collect_events(booking)
            self._store.save_booking(booking)

        logger.info(
            f"Booking {booking.id} confirmed: paid {booking.total_price}, "
            f"cashback {cashback} ({booking.tier.value})"
        )
        return booking

    def cancel_booking(self, command: CancelBookingCommand) -> RefundBreakdown:
        """
        Cancel a pending or confirmed booking

        Raises:
            NotCancellableError: too close to check-in, or already completed/cancelled
        """
        booking_id = self._parse_booking_id(command.booking_id)
        logger.info(f"Cancelling booking {booking_id}, reason: {command.reason!r}")

        # Completes an elapsed stay first so it is refused as completed
        self.get_booking(booking_id)
        today = self._today()

        with self._uow_factory() as uow:
            booking = self._load_for_update(booking_id)
            refund = self._policy.compute_refund(booking, today)

            # Refund before clawback so the balance never dips below zero
            if not refund.refund_amount.is_zero:
                self._ledger.credit(
                    booking.user_id,
                    refund.refund_amount,
                    reason=f"Refund for cancelled booking {booking.id}",
                    booking_id=booking.id,
                )
            if not refund.cashback_deducted.is_zero:
                self._ledger.debit_cashback(booking.user_id, refund.cashback_deducted, booking_id=booking.id)

            booking.cancel(command.reason, refund.refund_amount, refund.cashback_deducted)
            uow.collect_events(booking)
            self._store.save_booking(booking)

        self._index.release(booking.id)
        logger.info(
            f"Booking {booking.id} cancelled: refund {refund.refund_amount}, "
            f"cashback deducted {refund.cashback_deducted}"
        )
        return refund

    def void_unpaid_booking(self, booking_id, reason: str = 'Payment window elapsed') -> bool:
        """
        Cancel a pending booking that was never paid, regardless of notice

        Returns False when the booking is no longer pending.
        """
        booking_id = self._parse_booking_id(booking_id)
        with self._uow_factory() as uow:
            booking = self._load_for_update(booking_id)
            if booking.status != BookingStatus.PENDING:
                return False
            booking.cancel(reason)
            uow.collect_events(booking)
            self._store.save_booking(booking)

        self._index.release(booking.id)
        logger.info(f"Unpaid booking {booking.id} voided: {reason}")
        return True

    def release_unpaid_bookings(self, cutoff: datetime) -> int:
        voided = 0
        for booking in self._store.list_pending_created_before(cutoff):
            try:
                if self.void_unpaid_booking(booking.id):
                    voided += 1
            except DomainError as e:
                logger.error(f"Error voiding unpaid booking {booking.id}: {e}", exc_info=True)
        return voided

    def complete_elapsed_bookings(self) -> int:
        bookings = self._store.list_confirmed_checked_out_before(self._today())
        self._complete_elapsed(bookings)
        return sum(1 for b in bookings if b.status == BookingStatus.COMPLETED)

    # ----- Helpers -----

    def _complete_elapsed(self, bookings: Iterable[Booking]) -> List[Booking]:
        bookings = list(bookings)
        today = self._today()
        elapsed = [
            b for b in bookings
            if b.status == BookingStatus.CONFIRMED and today > b.check_out
        ]
        if not elapsed:
            return bookings

        with self._uow_factory() as uow:
            for booking in elapsed:
                if booking.complete_if_elapsed(today):
                    uow.collect_events(booking)
                    self._store.save_booking(booking)

        for booking in elapsed:
            self._index.release(booking.id)
            logger.info(f"Booking {booking.id} completed after check-out {booking.check_out}")
        return bookings

    def _resolve_tier(self, tier, user_id: str | None) -> MembershipTier:
        if tier:
            return MembershipTier.parse(tier)
        if user_id:
            return self._ledger.get_tier(str(user_id))
        return MembershipTier.BRONZE

    def _load_for_update(self, booking_id: UUID) -> Booking:
        booking = self._store.load_booking(booking_id, lock=True)
        if not booking:
            raise BookingNotFoundError(f"Booking {booking_id} not found", booking_id=str(booking_id))
        return booking

    @staticmethod
    def _parse_booking_id(booking_id) -> UUID:
        if isinstance(booking_id, UUID):
            return booking_id
        try:
            return UUID(str(booking_id))
        except ValueError:
            raise BookingNotFoundError(
                f"Booking {booking_id} not found",
                booking_id=str(booking_id),
            ) from None

