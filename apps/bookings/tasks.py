"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from .bootstrap import get_lifecycle

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_GRACE_MINUTES = 15


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.release_unpaid_bookings")
def release_unpaid_bookings() -> dict[str, int]:
    """
    Cancel pending bookings left unpaid for longer than the grace period.

    The grace period is settings.BOOKING_PAYMENT_GRACE_MINUTES. Voided
    bookings give their dates back to the calendar.

    Returns:
        dict: {"voided": number of cancelled bookings}
    """
    grace = getattr(settings, "BOOKING_PAYMENT_GRACE_MINUTES", DEFAULT_PAYMENT_GRACE_MINUTES)
    cutoff = timezone.now() - timedelta(minutes=grace)

    voided = get_lifecycle().release_unpaid_bookings(cutoff)
    if voided:
        logger.info(f"Voided {voided} unpaid bookings created before {cutoff.isoformat()}")
    return {"voided": voided}


@shared_task(name="bookings.complete_elapsed_bookings")
def complete_elapsed_bookings() -> dict[str, int]:
    """
    Complete confirmed bookings whose check-out day has passed.

    Reads complete such bookings on their own; this sweep catches the ones
    nobody looked at.

    Returns:
        dict: {"completed": number of completed bookings}
    """
    completed = get_lifecycle().complete_elapsed_bookings()
    if completed:
        logger.info(f"Completed {completed} bookings after check-out")
    return {"completed": completed}
