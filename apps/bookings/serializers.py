"""Serializers for the booking API.

Input serializers only check types; business rules (date order, guest
count, extras, availability) are enforced by the booking lifecycle so the
API and other callers get the same errors.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.bookings.application.command_handlers import (
    CancelBookingCommand,
    CreateBookingCommand,
    QuoteBookingCommand,
)


class QuoteSerializer(serializers.Serializer):
    """Price request for a stay; dates as YYYY-MM-DD or DD.MM.YYYY."""

    property_id = serializers.CharField(max_length=32)
    check_in = serializers.CharField()
    check_out = serializers.CharField()
    guests_count = serializers.IntegerField(default=1)
    sauna_hours = serializers.IntegerField(default=0)
    kitchenware = serializers.BooleanField(default=False)
    tier = serializers.CharField(required=False, allow_blank=True)
    user_id = serializers.CharField(max_length=64, required=False, allow_blank=True)

    def to_command(self) -> QuoteBookingCommand:
        data = self.validated_data
        return QuoteBookingCommand(
            property_id=data["property_id"],
            check_in=data["check_in"],
            check_out=data["check_out"],
            guests_count=data["guests_count"],
            sauna_hours=data["sauna_hours"],
            kitchenware=data["kitchenware"],
            tier=data.get("tier") or None,
            user_id=data.get("user_id") or None,
        )


class BookingCreateSerializer(serializers.Serializer):
    """Создание брони гостем."""

    property_id = serializers.CharField(max_length=32)
    user_id = serializers.CharField(max_length=64)
    check_in = serializers.CharField()
    check_out = serializers.CharField()
    guests_count = serializers.IntegerField(default=1)
    sauna_hours = serializers.IntegerField(default=0)
    kitchenware = serializers.BooleanField(default=False)
    tier = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def to_command(self) -> CreateBookingCommand:
        data = self.validated_data
        return CreateBookingCommand(
            property_id=data["property_id"],
            user_id=data["user_id"],
            check_in=data["check_in"],
            check_out=data["check_out"],
            guests_count=data["guests_count"],
            sauna_hours=data["sauna_hours"],
            kitchenware=data["kitchenware"],
            tier=data.get("tier") or None,
            notes=data.get("notes", ""),
        )


class BookingCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)

    def to_command(self, booking_id) -> CancelBookingCommand:
        return CancelBookingCommand(booking_id=booking_id, reason=self.validated_data.get("reason", ""))


class BookingSerializer(serializers.Serializer):
    """Read model of a booking aggregate."""

    id = serializers.UUIDField()
    property_id = serializers.CharField()
    user_id = serializers.CharField()
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    nights = serializers.IntegerField()
    guests_count = serializers.IntegerField()
    sauna_hours = serializers.IntegerField(source="extras.sauna_hours")
    kitchenware = serializers.BooleanField(source="extras.kitchenware")
    tier = serializers.CharField(source="tier.value")
    status = serializers.CharField(source="status.value")
    price = serializers.SerializerMethodField()
    total_price = serializers.DecimalField(source="total_price.amount", max_digits=12, decimal_places=2)
    cashback_earned = serializers.DecimalField(source="cashback_earned.amount", max_digits=12, decimal_places=2)
    refund_amount = serializers.DecimalField(source="refund_amount.amount", max_digits=12, decimal_places=2)
    cashback_deducted = serializers.DecimalField(source="cashback_deducted.amount", max_digits=12, decimal_places=2)
    notes = serializers.CharField()
    cancellation_reason = serializers.CharField()
    created_at = serializers.DateTimeField()
    confirmed_at = serializers.DateTimeField(allow_null=True)
    completed_at = serializers.DateTimeField(allow_null=True)
    cancelled_at = serializers.DateTimeField(allow_null=True)

    def get_price(self, obj) -> dict:
        return obj.price.to_dict()
