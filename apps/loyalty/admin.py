"""Admin registration for loyalty cards."""

from __future__ import annotations

from django.contrib import admin

from .models import LedgerEntry, LoyaltyCard


class LedgerEntryInline(admin.TabularInline):
    model = LedgerEntry
    extra = 0
    can_delete = False
    fields = ("kind", "amount", "reason", "balance_before", "balance_after", "booking_id", "created_at")
    readonly_fields = fields


@admin.register(LoyaltyCard)
class LoyaltyCardAdmin(admin.ModelAdmin):
    list_display = ("user_id", "membership_level", "balance", "total_spent", "total_earned", "updated_at")
    list_filter = ("membership_level",)
    search_fields = ("user_id",)
    readonly_fields = ("balance", "total_spent", "total_earned", "created_at", "updated_at")
    inlines = [LedgerEntryInline]


@admin.register(LedgerEntry)
class LedgerEntryAdmin(admin.ModelAdmin):
    list_display = ("card", "kind", "amount", "balance_before", "balance_after", "booking_id", "created_at")
    list_filter = ("kind",)
    search_fields = ("card__user_id", "reason")
