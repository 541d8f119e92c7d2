"""API views for the properties domain."""

from __future__ import annotations

from rest_framework import viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.bootstrap import get_lifecycle

from .models import Property
from .serializers import PropertySerializer


class PropertyViewSet(viewsets.ReadOnlyModelViewSet):
    """Каталог объектов и их занятые даты."""

    queryset = Property.objects.filter(is_active=True).prefetch_related("links_from", "links_to")
    serializer_class = PropertySerializer
    lookup_value_regex = "[^/]+"

    @action(detail=True, methods=["get"], url_path="booked-dates")
    def booked_dates(self, request, pk=None):  # type: ignore
        """Days taken on this property or any property sharing its calendar."""
        lifecycle = get_lifecycle()
        days = lifecycle.get_booked_dates(pk)
        group = sorted(lifecycle.index.groups.members(pk))
        return Response({
            "property_id": pk,
            "linked_group": group,
            "dates": [day.isoformat() for day in days],
        })
