"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "property",
        "user_id",
        "status",
        "tier",
        "check_in",
        "check_out",
        "total_price",
        "created_at",
    )
    list_filter = ("status", "tier", "check_in", "check_out")
    search_fields = ("id", "property__title", "user_id")
    readonly_fields = (
        "created_at",
        "updated_at",
        "nights",
        "nightly_rate",
        "base_price",
        "extra_guest_fee",
        "sauna_fee",
        "kitchenware_fee",
        "total_price",
        "cashback_earned",
        "refund_amount",
        "cashback_deducted",
    )
