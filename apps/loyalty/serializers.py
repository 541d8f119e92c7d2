"""Serializers for the loyalty card API."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from .models import LedgerEntry, LoyaltyCard


class LoyaltyCardSerializer(serializers.ModelSerializer):
    class Meta:
        model = LoyaltyCard
        fields = ["user_id", "balance", "total_spent", "total_earned", "membership_level"]


class TopUpSerializer(serializers.Serializer):
    """Пополнение баланса карты."""

    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    payment_method = serializers.CharField(max_length=32, required=False, default="card")


class LedgerEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = LedgerEntry
        fields = [
            "id",
            "kind",
            "amount",
            "reason",
            "balance_before",
            "balance_after",
            "booking_id",
            "created_at",
        ]
