"""Serializers for the properties domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Property


class PropertySerializer(serializers.ModelSerializer):
    """Объект с кодами связанных объектов."""

    id = serializers.CharField(source="code", read_only=True)
    linked_property_ids = serializers.SerializerMethodField()

    class Meta:
        model = Property
        fields = [
            "id",
            "title",
            "description",
            "nightly_rate",
            "max_guests",
            "linked_property_ids",
        ]

    def get_linked_property_ids(self, obj: Property) -> list[str]:
        linked = {link.to_property_id for link in obj.links_from.all()}
        linked.update(link.from_property_id for link in obj.links_to.all())
        return sorted(linked)
