"""
Cancellation Policy

A booking may be cancelled only with enough notice before check-in.
Cancelling a paid booking refunds the full price and takes back the
cashback credited for it; cancelling an unpaid booking moves no money.
"""

from dataclasses import dataclass
from datetime import date

from apps.bookings.domain.entities import Booking, BookingStatus
from apps.bookings.domain.exceptions import NotCancellableError
from shared.domain.base import ValueObject
from shared.domain.value_objects import Money

MIN_NOTICE_DAYS = 2


def days_until_check_in(check_in: date, today: date) -> int:
    """Whole calendar days from today to check-in (negative once it has passed)"""
    return (check_in - today).days


@dataclass(frozen=True)
class RefundBreakdown(ValueObject):
    refund_amount: Money
    cashback_deducted: Money
    days_until_check_in: int

    def to_dict(self) -> dict:
        return {
            'refund_amount': self.refund_amount.to_plain(),
            'cashback_deducted': self.cashback_deducted.to_plain(),
            'days_until_check_in': self.days_until_check_in,
        }


@dataclass(frozen=True)
class CancellationPolicy:
    """
    Notice-based cancellation rule, the same for every tier

    Full refund with at least ``min_notice_days`` before check-in,
    no cancellation at all with less.
    """
    min_notice_days: int = MIN_NOTICE_DAYS

    def can_cancel(self, booking: Booking, today: date) -> bool:
        return days_until_check_in(booking.check_in, today) >= self.min_notice_days

    def ensure_cancellable(self, booking: Booking, today: date) -> int:
        """
        Raises:
            NotCancellableError: booking is final or notice is too short
        """
        days = days_until_check_in(booking.check_in, today)
        if booking.status.is_final:
            raise NotCancellableError(
                f"Booking {booking.id} is already {booking.status.value}",
                days_until_check_in=days,
                status=booking.status.value,
            )
        if days < self.min_notice_days:
            raise NotCancellableError(
                f"Cancellation is available at least {self.min_notice_days} days before check-in. "
                f"Days until check-in: {days}.",
                days_until_check_in=days,
                status=booking.status.value,
            )
        return days

    def compute_refund(self, booking: Booking, today: date) -> RefundBreakdown:
        days = self.ensure_cancellable(booking, today)

        if booking.status != BookingStatus.CONFIRMED:
            # Nothing was debited for an unpaid booking
            return RefundBreakdown(Money.zero(), Money.zero(), days)

        return RefundBreakdown(
            refund_amount=booking.total_price,
            cashback_deducted=booking.cashback_earned,
            days_until_check_in=days,
        )
