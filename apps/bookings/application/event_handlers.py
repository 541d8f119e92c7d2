"""
Booking Event Handlers

Reactions to booking events published after commit. Guest and admin
notifications are delivered by an external service; these handlers
record what should be sent.
"""

import logging

from apps.bookings.domain.events import (
    BookingCancelled,
    BookingCompleted,
    BookingConfirmed,
    BookingCreated,
)
from shared.application.event_bus import EventBus

logger = logging.getLogger(__name__)


def on_booking_created(event: BookingCreated):
    logger.info(
        f"Notify user {event.user_id}: booking {event.booking_id} on property "
        f"{event.property_id} for {event.dates} awaits payment of {event.total_price}"
    )


def on_booking_confirmed(event: BookingConfirmed):
    logger.info(
        f"Notify admins: booking {event.booking_id} on property {event.property_id} "
        f"paid {event.amount_paid}, cashback {event.cashback} credited to user {event.user_id}"
    )


def on_booking_completed(event: BookingCompleted):
    logger.info(f"Notify user {event.user_id}: stay {event.booking_id} completed, review requested")


def on_booking_cancelled(event: BookingCancelled):
    logger.info(
        f"Notify user {event.user_id}: booking {event.booking_id} cancelled "
        f"(was {event.old_status}), refund {event.refund_amount}, "
        f"cashback deducted {event.cashback_deducted}"
    )


def register_event_handlers(bus: EventBus) -> EventBus:
    bus.subscribe(BookingCreated, on_booking_created)
    bus.subscribe(BookingConfirmed, on_booking_confirmed)
    bus.subscribe(BookingCompleted, on_booking_completed)
    bus.subscribe(BookingCancelled, on_booking_cancelled)
    return bus
