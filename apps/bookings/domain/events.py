"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
They are published after successful transaction commits.
"""

from dataclasses import dataclass
from uuid import UUID

from shared.domain.base import DomainEvent
from shared.domain.value_objects import DateRange, Money


@dataclass(kw_only=True)
class BookingCreated(DomainEvent):
    """
    Event: A new booking was created (dates reserved, payment pending)

    Triggers:
    - Ask the guest to complete payment
    """
    booking_id: UUID
    property_id: str
    user_id: str
    dates: DateRange
    total_price: Money


@dataclass(kw_only=True)
class BookingConfirmed(DomainEvent):
    """
    Event: Booking paid from the loyalty card (PENDING -> CONFIRMED)

    Triggers:
    - Notify administrators about the paid booking and its extras
    """
    booking_id: UUID
    property_id: str
    user_id: str
    amount_paid: Money
    cashback: Money


@dataclass(kw_only=True)
class BookingCompleted(DomainEvent):
    """Event: Check-out day has passed (CONFIRMED -> COMPLETED)"""
    booking_id: UUID
    property_id: str
    user_id: str


@dataclass(kw_only=True)
class BookingCancelled(DomainEvent):
    """
    Event: Booking was cancelled

    Triggers:
    - Tell the guest how much was refunded and how much cashback was taken back
    """
    booking_id: UUID
    property_id: str
    user_id: str
    reason: str
    refund_amount: Money
    cashback_deducted: Money
    old_status: str
