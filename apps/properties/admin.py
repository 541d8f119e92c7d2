"""Admin registrations for properties domain."""

from __future__ import annotations

from django.contrib import admin

from .models import Property, PropertyLink


class PropertyLinkInline(admin.TabularInline):
    model = PropertyLink
    fk_name = "from_property"
    extra = 0
    fields = ("to_property",)


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = ("code", "title", "nightly_rate", "max_guests", "is_active")
    list_filter = ("is_active",)
    search_fields = ("code", "title")
    inlines = [PropertyLinkInline]


@admin.register(PropertyLink)
class PropertyLinkAdmin(admin.ModelAdmin):
    list_display = ("from_property", "to_property")
