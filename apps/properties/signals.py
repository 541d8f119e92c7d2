"""Reload the booking engine whenever properties or links change."""

from __future__ import annotations

from django.db.models.signals import post_delete, post_save  # type: ignore
from django.dispatch import receiver  # type: ignore

from .models import Property, PropertyLink


@receiver(post_save, sender=Property)
@receiver(post_delete, sender=Property)
@receiver(post_save, sender=PropertyLink)
@receiver(post_delete, sender=PropertyLink)
def reload_booking_engine(sender, **kwargs):
    from apps.bookings.bootstrap import refresh_lifecycle

    refresh_lifecycle()
