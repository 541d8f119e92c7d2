"""Django ORM implementation of the booking store."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, List
from uuid import UUID

from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from apps.bookings.application.ports import AbstractBookingStore
from apps.bookings.domain.entities import Booking, BookingStatus
from apps.bookings.domain.inventory import Reservation
from apps.bookings.domain.pricing import Extras, PriceBreakdown
from apps.loyalty.domain.tiers import MembershipTier
from apps.properties.domain.linkage import Property
from shared.domain.value_objects import DateRange, Money

from .models import Booking as BookingModel

logger = logging.getLogger(__name__)


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def booking_from_row(row: BookingModel) -> Booking:
    dates = DateRange(row.check_in, row.check_out)
    price = PriceBreakdown(
        nights=row.nights,
        nightly_rate=Money(row.nightly_rate),
        base_price=Money(row.base_price),
        extra_guests=row.extra_guests,
        extra_guest_fee=Money(row.extra_guest_fee),
        sauna_hours=row.sauna_hours,
        sauna_fee=Money(row.sauna_fee),
        kitchenware_fee=Money(row.kitchenware_fee),
        total=Money(row.total_price),
    )
    return Booking(
        id=row.id,
        created_at=row.created_at,
        updated_at=row.updated_at,
        property_id=row.property_id,
        user_id=row.user_id,
        dates=dates,
        guests_count=row.guests_count,
        extras=Extras(sauna_hours=row.sauna_hours, kitchenware=row.kitchenware),
        tier=MembershipTier(row.tier),
        price=price,
        notes=row.notes,
        status=BookingStatus(row.status),
        cashback_earned=Money(row.cashback_earned),
        refund_amount=Money(row.refund_amount),
        cashback_deducted=Money(row.cashback_deducted),
        cancellation_reason=row.cancellation_reason,
        confirmed_at=row.confirmed_at,
        completed_at=row.completed_at,
        cancelled_at=row.cancelled_at,
    )


def booking_to_fields(booking: Booking) -> dict:
    price = booking.price
    return {
        "property_id": booking.property_id,
        "user_id": booking.user_id,
        "check_in": booking.check_in,
        "check_out": booking.check_out,
        "guests_count": booking.guests_count,
        "sauna_hours": booking.extras.sauna_hours,
        "kitchenware": booking.extras.kitchenware,
        "tier": booking.tier.value,
        "status": booking.status.value,
        "nights": price.nights,
        "nightly_rate": price.nightly_rate.amount,
        "base_price": price.base_price.amount,
        "extra_guests": price.extra_guests,
        "extra_guest_fee": price.extra_guest_fee.amount,
        "sauna_fee": price.sauna_fee.amount,
        "kitchenware_fee": price.kitchenware_fee.amount,
        "total_price": price.total.amount,
        "cashback_earned": booking.cashback_earned.amount,
        "refund_amount": booking.refund_amount.amount,
        "cashback_deducted": booking.cashback_deducted.amount,
        "notes": booking.notes,
        "cancellation_reason": booking.cancellation_reason[:255],
        "created_at": booking.created_at,
        "updated_at": booking.updated_at,
        "confirmed_at": booking.confirmed_at,
        "completed_at": booking.completed_at,
        "cancelled_at": booking.cancelled_at,
    }


class DjangoBookingStore(AbstractBookingStore):
    """Bookings, properties and links stored with the Django ORM."""

    def load_properties_and_links(self) -> List[Property]:
        from apps.properties.models import Property as PropertyModel, PropertyLink

        linked: dict[str, set[str]] = {}
        for from_id, to_id in PropertyLink.objects.values_list("from_property_id", "to_property_id"):
            linked.setdefault(from_id, set()).add(to_id)
            linked.setdefault(to_id, set()).add(from_id)

        properties = [
            Property(
                id=row.code,
                title=row.title,
                nightly_rate=Money(row.nightly_rate),
                max_guests=row.max_guests,
                linked_property_ids=frozenset(linked.get(row.code, ())),
            )
            for row in PropertyModel.objects.filter(is_active=True).order_by("code")
        ]
        active_ids = {p.id for p in properties}
        # Links to deactivated properties are dropped with them
        return [
            Property(
                id=p.id,
                title=p.title,
                nightly_rate=p.nightly_rate,
                max_guests=p.max_guests,
                linked_property_ids=p.linked_property_ids & active_ids,
            )
            for p in properties
        ]

    def load_active_reservations(self, property_ids: Iterable[str] | None = None) -> List[Reservation]:
        queryset = BookingModel.objects.filter(status__in=BookingModel.BLOCKING_STATUSES)
        if property_ids is not None:
            queryset = queryset.filter(property_id__in=list(property_ids))
        return [
            Reservation(
                booking_id=booking_id,
                property_id=property_id,
                dates=DateRange(check_in, check_out),
            )
            for booking_id, property_id, check_in, check_out in queryset.values_list(
                "id", "property_id", "check_in", "check_out"
            )
        ]

    def save_booking(self, booking: Booking) -> None:
        BookingModel.objects.update_or_create(id=booking.id, defaults=booking_to_fields(booking))
        logger.debug(f"Saved booking {booking.id} ({booking.status.value})")

    def load_booking(self, booking_id: UUID, lock: bool = False) -> Booking | None:
        queryset = BookingModel.objects.filter(pk=booking_id)
        if lock:
            queryset = _lock_queryset_if_possible(queryset)
        row = queryset.first()
        return booking_from_row(row) if row else None

    def list_bookings_by_user(self, user_id: str) -> List[Booking]:
        rows = BookingModel.objects.filter(user_id=str(user_id)).order_by("check_in", "created_at")
        return [booking_from_row(row) for row in rows]

    def list_bookings_by_property(self, property_id: str) -> List[Booking]:
        rows = BookingModel.objects.filter(property_id=str(property_id)).order_by("check_in", "created_at")
        return [booking_from_row(row) for row in rows]

    def list_pending_created_before(self, cutoff: datetime) -> List[Booking]:
        rows = BookingModel.objects.filter(
            status=BookingModel.Status.PENDING,
            created_at__lt=cutoff,
        ).order_by("created_at")
        return [booking_from_row(row) for row in rows]

    def list_confirmed_checked_out_before(self, day: date) -> List[Booking]:
        rows = BookingModel.objects.filter(
            status=BookingModel.Status.CONFIRMED,
            check_out__lt=day,
        ).order_by("check_out")
        return [booking_from_row(row) for row in rows]

    def lock_properties(self, property_ids: Iterable[str]) -> None:
        from apps.properties.models import Property as PropertyModel

        queryset = PropertyModel.objects.filter(code__in=sorted(property_ids)).order_by("code")
        # Evaluating the queryset takes the row locks
        list(_lock_queryset_if_possible(queryset).values_list("code", flat=True))
