"""Loyalty card models."""

from __future__ import annotations

from decimal import Decimal

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class LoyaltyCard(models.Model):
    """Prepaid card of a guest; bookings are paid from its balance."""

    class Level(models.TextChoices):
        BRONZE = "Bronze", _("Bronze")
        SILVER = "Silver", _("Silver")
        GOLD = "Gold", _("Gold")
        PLATINUM = "Platinum", _("Platinum")

    user_id = models.CharField(max_length=64, unique=True)
    balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_spent = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_earned = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Lifetime cashback, net of clawbacks."),
    )
    membership_level = models.CharField(
        max_length=16,
        choices=Level.choices,
        default=Level.BRONZE,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Loyalty card")
        verbose_name_plural = _("Loyalty cards")
        ordering = ["user_id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(balance__gte=0),
                name="loyalty_card_balance_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(total_earned__gte=0),
                name="loyalty_card_earned_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"Card {self.user_id} ({self.membership_level}, {self.balance})"


class LedgerEntry(models.Model):
    """One balance movement on a loyalty card."""

    class Kind(models.TextChoices):
        DEBIT = "debit", _("Debit")
        CREDIT = "credit", _("Credit")
        CASHBACK = "cashback", _("Cashback")
        CASHBACK_CLAWBACK = "cashback_clawback", _("Cashback clawback")

    card = models.ForeignKey(
        LoyaltyCard,
        on_delete=models.CASCADE,
        related_name="entries",
    )
    kind = models.CharField(max_length=20, choices=Kind.choices)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    reason = models.CharField(max_length=255, blank=True)
    balance_before = models.DecimalField(max_digits=12, decimal_places=2)
    balance_after = models.DecimalField(max_digits=12, decimal_places=2)
    booking_id = models.UUIDField(null=True, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Ledger entry")
        verbose_name_plural = _("Ledger entries")
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"{self.kind} {self.amount} on {self.card.user_id}"
