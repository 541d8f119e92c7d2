"""Booking persistence models.

Rows mirror the ``Booking`` aggregate; ``DjangoBookingStore`` maps between
the two. Prices are stored itemized as they were at booking time.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Booking(models.Model):
    """Бронирование объекта."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending payment")
        CONFIRMED = "confirmed", _("Confirmed")
        COMPLETED = "completed", _("Completed")
        CANCELLED = "cancelled", _("Cancelled")

    class Tier(models.TextChoices):
        BRONZE = "Bronze", _("Bronze")
        SILVER = "Silver", _("Silver")
        GOLD = "Gold", _("Gold")
        PLATINUM = "Platinum", _("Platinum")

    BLOCKING_STATUSES = (Status.PENDING, Status.CONFIRMED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    user_id = models.CharField(max_length=64, db_index=True)
    check_in = models.DateField()
    check_out = models.DateField()
    guests_count = models.PositiveSmallIntegerField(default=1)
    sauna_hours = models.PositiveSmallIntegerField(default=0)
    kitchenware = models.BooleanField(default=False)
    tier = models.CharField(max_length=16, choices=Tier.choices, default=Tier.BRONZE)
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )

    nights = models.PositiveSmallIntegerField(default=1)
    nightly_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Nightly rate at booking time."),
    )
    base_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    extra_guests = models.PositiveSmallIntegerField(default=0)
    extra_guest_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    sauna_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    kitchenware_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    cashback_earned = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    refund_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    cashback_deducted = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    notes = models.TextField(blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)

    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()
    confirmed_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="booking_valid_dates",
            ),
            models.CheckConstraint(
                condition=models.Q(guests_count__gte=1),
                name="booking_guests_positive",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "check_in", "check_out"], name="booking_property_dates_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.id} for {self.property_id}"
