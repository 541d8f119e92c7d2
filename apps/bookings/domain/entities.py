"""
Booking Domain Entities

Core business entities for the booking domain:
- Booking: Main aggregate representing a reservation
- BookingStatus: FSM states for booking lifecycle
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from apps.bookings.domain.exceptions import BookingStateError, NotCancellableError
from apps.bookings.domain.pricing import Extras, PriceBreakdown
from apps.loyalty.domain.tiers import MembershipTier
from shared.domain.base import Aggregate, utcnow
from shared.domain.value_objects import DateRange, Money


class BookingStatus(Enum):
    """
    Booking Status Finite State Machine

    State transitions:
    - PENDING -> CONFIRMED (loyalty-card debit succeeded)
    - PENDING -> CANCELLED (guest cancelled or payment window elapsed)
    - CONFIRMED -> CANCELLED (guest cancelled with enough notice)
    - CONFIRMED -> COMPLETED (check-out day has passed)

    COMPLETED and CANCELLED are final.
    """
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    @property
    def blocks_dates(self) -> bool:
        return self in (BookingStatus.PENDING, BookingStatus.CONFIRMED)

    @property
    def is_final(self) -> bool:
        return self in (BookingStatus.COMPLETED, BookingStatus.CANCELLED)


@dataclass(kw_only=True, eq=False)
class Booking(Aggregate):
    """
    Booking Aggregate Root

    Key invariants:
    - dates is a valid DateRange (check_out > check_in)
    - price is fixed at creation and never recomputed
    - cashback_earned is set once, on confirmation
    - final states have no outgoing transitions
    """

    property_id: str
    user_id: str
    dates: DateRange
    guests_count: int
    extras: Extras = field(default_factory=Extras)
    tier: MembershipTier = MembershipTier.BRONZE
    price: PriceBreakdown
    notes: str = ''

    status: BookingStatus = BookingStatus.PENDING

    cashback_earned: Money = field(default_factory=Money.zero)
    refund_amount: Money = field(default_factory=Money.zero)
    cashback_deducted: Money = field(default_factory=Money.zero)
    cancellation_reason: str = ''

    confirmed_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None

    @property
    def total_price(self) -> Money:
        return self.price.total

    @property
    def nights(self) -> int:
        return self.dates.nights()

    @property
    def check_in(self) -> date:
        return self.dates.check_in

    @property
    def check_out(self) -> date:
        return self.dates.check_out

    def blocks_dates(self) -> bool:
        """Only PENDING and CONFIRMED bookings hold the property calendar"""
        return self.status.blocks_dates

    def confirm(self, cashback: Money):
        """
        Confirm payment (PENDING -> CONFIRMED)

        Events: BookingConfirmed
        """
        if self.status != BookingStatus.PENDING:
            raise BookingStateError(
                f"Cannot confirm payment from status {self.status.value}. "
                f"Booking must be pending.",
                status=self.status.value,
            )

        from apps.bookings.domain.events import BookingConfirmed

        self.status = BookingStatus.CONFIRMED
        self.cashback_earned = cashback
        self.confirmed_at = utcnow()
        self.touch()

        self.add_event(BookingConfirmed(
            aggregate_id=self.id,
            booking_id=self.id,
            property_id=self.property_id,
            user_id=self.user_id,
            amount_paid=self.total_price,
            cashback=cashback,
        ))

    def complete_if_elapsed(self, today: date) -> bool:
        """
        Complete a stay whose check-out day has passed (CONFIRMED -> COMPLETED)

        Safe to call on every read: returns False and changes nothing
        unless the booking is confirmed and today is after check-out.
        Events: BookingCompleted
        """
        if self.status != BookingStatus.CONFIRMED or not today > self.check_out:
            return False

        from apps.bookings.domain.events import BookingCompleted

        self.status = BookingStatus.COMPLETED
        self.completed_at = utcnow()
        self.touch()

        self.add_event(BookingCompleted(
            aggregate_id=self.id,
            booking_id=self.id,
            property_id=self.property_id,
            user_id=self.user_id,
        ))
        return True

    def cancel(self, reason: str = '', refund_amount: Money | None = None, cashback_deducted: Money | None = None):
        """
        Cancel booking (PENDING or CONFIRMED -> CANCELLED)

        Events: BookingCancelled
        """
        if self.status.is_final:
            raise NotCancellableError(
                f"Booking {self.id} is already {self.status.value}",
                status=self.status.value,
            )

        from apps.bookings.domain.events import BookingCancelled

        old_status = self.status
        self.status = BookingStatus.CANCELLED
        self.cancellation_reason = reason
        self.refund_amount = refund_amount or Money.zero()
        self.cashback_deducted = cashback_deducted or Money.zero()
        self.cancelled_at = utcnow()
        self.touch()

        self.add_event(BookingCancelled(
            aggregate_id=self.id,
            booking_id=self.id,
            property_id=self.property_id,
            user_id=self.user_id,
            reason=reason,
            refund_amount=self.refund_amount,
            cashback_deducted=self.cashback_deducted,
            old_status=old_status.value,
        ))

    def __str__(self):
        return f"Booking {self.id} ({self.status.value})"

    def __repr__(self):
        return (
            f"Booking(id={self.id}, property_id={self.property_id}, "
            f"status={self.status.value}, dates={self.dates!r})"
        )
