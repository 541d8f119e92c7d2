"""Property models.

Объекты, которые можно забронировать, и связи между ними. Связанные
объекты делят один календарь: территория целиком занята, если занят
любой из её домиков, и наоборот.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Property(models.Model):
    """Bookable property with a fixed nightly rate."""

    code = models.CharField(
        max_length=32,
        primary_key=True,
        help_text=_("Short property code, e.g. '1'."),
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    nightly_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    max_guests = models.PositiveSmallIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
        help_text=_("Guests included in the nightly rate."),
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Property")
        verbose_name_plural = _("Properties")
        ordering = ["code"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(max_guests__gte=1),
                name="property_max_guests_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(nightly_rate__gte=0),
                name="property_nightly_rate_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.code}: {self.title}"


class PropertyLink(models.Model):
    """Symmetric link: the two properties cannot be booked for overlapping dates."""

    from_property = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name="links_from",
    )
    to_property = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name="links_to",
    )

    class Meta:
        verbose_name = _("Property link")
        verbose_name_plural = _("Property links")
        constraints = [
            models.UniqueConstraint(
                fields=["from_property", "to_property"],
                name="property_link_unique_pair",
            ),
            models.CheckConstraint(
                condition=~models.Q(from_property=models.F("to_property")),
                name="property_link_not_self",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.from_property_id} <-> {self.to_property_id}"
