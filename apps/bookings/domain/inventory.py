"""
Availability Index

This is the component that prevents double bookings. All date
reservations go through it.

Reservations are kept per linkage group: properties sharing a calendar
are checked and reserved as one resource. The index is a cache over the
pending and confirmed bookings and can always be rebuilt from them.

Strategy:
1. In-process lock per linkage group around check-then-reserve
2. Row locks on the group's properties (SELECT FOR UPDATE) taken by the
   lifecycle inside the same transaction
3. Group state refreshed from persisted bookings under both locks
"""

import logging
import threading
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Set
from uuid import UUID

from apps.bookings.domain.exceptions import ConflictError
from apps.properties.domain.linkage import LinkageGroups
from shared.domain.value_objects import DateRange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reservation:
    """Dates held by one pending or confirmed booking"""
    booking_id: UUID
    property_id: str
    dates: DateRange


class AvailabilityIndex:
    """
    Free/busy index keyed by linkage group

    Usage:
        with index.locked(property_id):
            if not index.is_free(property_id, dates):
                raise UnavailableError(...)
            index.reserve(property_id, booking_id, dates)
    """

    def __init__(self, groups: LinkageGroups, reservations: Iterable[Reservation] = ()):
        self._groups = groups
        self._by_group: Dict[str, Dict[UUID, Reservation]] = {}
        self._group_of_booking: Dict[UUID, str] = {}
        self._locks: Dict[str, threading.RLock] = {
            group_id: threading.RLock() for group_id in groups.group_ids()
        }
        # Guards the dictionaries themselves; group locks guard check-then-act
        self._state_lock = threading.RLock()
        self.rebuild(reservations)

    @property
    def groups(self) -> LinkageGroups:
        return self._groups

    @contextmanager
    def locked(self, property_id: str):
        """Mutual exclusion for the whole linkage group of a property"""
        group_id = self._groups.group_id(property_id)
        with self._locks[group_id]:
            yield group_id

    @contextmanager
    def all_locked(self):
        """Hold every group lock at once, taken in group-id order"""
        with ExitStack() as stack:
            for group_id in sorted(self._locks):
                stack.enter_context(self._locks[group_id])
            yield

    def is_free(self, property_id: str, dates: DateRange, exclude_booking_id: UUID | None = None) -> bool:
        return not self.conflicts(property_id, dates, exclude_booking_id)

    def conflicts(self, property_id: str, dates: DateRange, exclude_booking_id: UUID | None = None) -> List[Reservation]:
        """Reservations in the property's group that overlap the dates"""
        group_id = self._groups.group_id(property_id)
        with self._state_lock:
            return [
                r for r in self._by_group.get(group_id, {}).values()
                if r.booking_id != exclude_booking_id and r.dates.overlaps(dates)
            ]

    def reserve(self, property_id: str, booking_id: UUID, dates: DateRange) -> Reservation:
        """
        Reserve dates for a booking

        Raises:
            ConflictError: an overlapping reservation exists in the group
        """
        with self.locked(property_id) as group_id:
            existing = self.reservation_for(booking_id)
            if existing and existing.property_id == property_id and existing.dates == dates:
                return existing

            overlapping = self.conflicts(property_id, dates, exclude_booking_id=booking_id)
            if overlapping:
                raise ConflictError(
                    f"Dates {dates} are no longer available for property {property_id}. "
                    f"Overlaps with booking {overlapping[0].booking_id} "
                    f"on property {overlapping[0].property_id}",
                    property_id=property_id,
                    check_in=dates.check_in.isoformat(),
                    check_out=dates.check_out.isoformat(),
                )

            reservation = Reservation(booking_id=booking_id, property_id=property_id, dates=dates)
            with self._state_lock:
                self._drop(booking_id)
                self._by_group.setdefault(group_id, {})[booking_id] = reservation
                self._group_of_booking[booking_id] = group_id

        logger.debug(f"Reserved {dates} on property {property_id} for booking {booking_id}")
        return reservation

    def release(self, booking_id: UUID) -> bool:
        """Remove a booking's reservation; no-op when there is none"""
        with self._state_lock:
            released = self._drop(booking_id)
        if released:
            logger.debug(f"Released reservation of booking {booking_id}")
        return released

    def reservation_for(self, booking_id: UUID) -> Reservation | None:
        with self._state_lock:
            group_id = self._group_of_booking.get(booking_id)
            if group_id is None:
                return None
            return self._by_group[group_id].get(booking_id)

    def reservations(self, property_id: str) -> List[Reservation]:
        group_id = self._groups.group_id(property_id)
        with self._state_lock:
            return list(self._by_group.get(group_id, {}).values())

    def booked_dates(self, property_id: str) -> Set[date]:
        """Every day covered by a reservation anywhere in the property's group"""
        days: Set[date] = set()
        for reservation in self.reservations(property_id):
            days.update(reservation.dates.enumerate_dates())
        return days

    def replace_group(self, property_id: str, reservations: Iterable[Reservation]):
        """Swap the group's reservations for a freshly loaded set"""
        group_id = self._groups.group_id(property_id)
        fresh = {}
        for reservation in reservations:
            if self._groups.group_id(reservation.property_id) != group_id:
                raise ValueError(
                    f"Reservation for property {reservation.property_id} "
                    f"does not belong to the group of {property_id}"
                )
            fresh[reservation.booking_id] = reservation

        with self._state_lock:
            for booking_id in list(self._by_group.get(group_id, {})):
                self._group_of_booking.pop(booking_id, None)
            for booking_id in fresh:
                self._drop(booking_id)
                self._group_of_booking[booking_id] = group_id
            self._by_group[group_id] = fresh

    def rebuild(self, reservations: Iterable[Reservation]):
        """Replace the whole index with the given reservations"""
        by_group: Dict[str, Dict[UUID, Reservation]] = {}
        group_of_booking: Dict[UUID, str] = {}
        for reservation in reservations:
            group_id = self._groups.group_id(reservation.property_id)
            by_group.setdefault(group_id, {})[reservation.booking_id] = reservation
            group_of_booking[reservation.booking_id] = group_id

        with self._state_lock:
            self._by_group = by_group
            self._group_of_booking = group_of_booking

        logger.info(
            f"Availability index rebuilt: {len(group_of_booking)} reservations "
            f"in {len(self._groups)} linkage groups"
        )

    def _drop(self, booking_id: UUID) -> bool:
        group_id = self._group_of_booking.pop(booking_id, None)
        if group_id is None:
            return False
        self._by_group.get(group_id, {}).pop(booking_id, None)
        return True

    def __len__(self) -> int:
        with self._state_lock:
            return len(self._group_of_booking)

    def __str__(self):
        return f"AvailabilityIndex(groups={len(self._groups)}, reservations={len(self)})"
