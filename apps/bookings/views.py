"""API views for the booking domain."""

from __future__ import annotations

import logging

from rest_framework import status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.application.command_handlers import ConfirmPaymentCommand
from apps.bookings.bootstrap import get_lifecycle
from shared.domain.exceptions import ValidationError

from .serializers import (
    BookingCancelSerializer,
    BookingCreateSerializer,
    BookingSerializer,
    QuoteSerializer,
)

logger = logging.getLogger(__name__)


class BookingViewSet(viewsets.ViewSet):
    """Создание, оплата и отмена бронирований через BookingLifecycle."""

    def list(self, request):  # type: ignore
        user_id = request.query_params.get("user_id")
        property_id = request.query_params.get("property_id")
        lifecycle = get_lifecycle()

        if user_id:
            bookings = lifecycle.list_user_bookings(user_id)
        elif property_id:
            bookings = lifecycle.list_property_bookings(property_id)
        else:
            raise ValidationError("Pass user_id or property_id", fields=["user_id", "property_id"])

        return Response(BookingSerializer(bookings, many=True).data)

    def retrieve(self, request, pk=None):  # type: ignore
        booking = get_lifecycle().get_booking(pk)
        return Response(BookingSerializer(booking).data)

    def create(self, request):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = get_lifecycle().create_booking(serializer.to_command())
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"])
    def quote(self, request):  # type: ignore
        serializer = QuoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        price = get_lifecycle().quote(serializer.to_command())
        return Response(price.to_dict())

    @action(detail=True, methods=["post"], url_path="confirm-payment")
    def confirm_payment(self, request, pk=None):  # type: ignore
        booking = get_lifecycle().confirm_payment(ConfirmPaymentCommand(booking_id=pk))
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        serializer = BookingCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        refund = get_lifecycle().cancel_booking(serializer.to_command(pk))
        return Response({"booking_id": pk, "status": "cancelled", **refund.to_dict()})
