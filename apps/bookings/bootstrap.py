"""Wiring of the booking engine for the Django process.

One ``BookingLifecycle`` (and so one availability index) is kept per
process. Changing properties or their links reloads it in place, so
requests already holding a group lock finish before the new groups apply.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from django.conf import settings  # type: ignore

from apps.bookings.application.command_handlers import BookingLifecycle
from apps.bookings.application.event_handlers import register_event_handlers
from apps.bookings.domain.cancellation import MIN_NOTICE_DAYS, CancellationPolicy
from apps.bookings.domain.pricing import PricingCalculator
from apps.bookings.repositories import DjangoBookingStore
from apps.loyalty.services import DjangoLoyaltyLedger
from shared.application.event_bus import EventBus
from shared.application.uow import DjangoUnitOfWork

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_event_bus() -> EventBus:
    return register_event_handlers(EventBus())


@lru_cache(maxsize=1)
def get_lifecycle() -> BookingLifecycle:
    bus = get_event_bus()
    return BookingLifecycle(
        store=DjangoBookingStore(),
        ledger=DjangoLoyaltyLedger(),
        uow_factory=lambda: DjangoUnitOfWork(bus),
        pricing=PricingCalculator.from_config(getattr(settings, "BOOKING_PRICING", None)),
        policy=CancellationPolicy(
            min_notice_days=getattr(settings, "BOOKING_MIN_CANCELLATION_NOTICE_DAYS", MIN_NOTICE_DAYS),
        ),
    )


def refresh_lifecycle() -> None:
    """Reload properties and links into the running lifecycle, if one was built."""
    if get_lifecycle.cache_info().currsize:
        get_lifecycle().reload()
        logger.info("Booking lifecycle reloaded after a property change")


def reset_lifecycle() -> None:
    """Forget the cached lifecycle so it is rebuilt on next use."""
    get_lifecycle.cache_clear()
    logger.info("Booking lifecycle reset")
