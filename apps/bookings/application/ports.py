"""
Booking Persistence Port

What the lifecycle needs from storage. ``DjangoBookingStore`` in
``apps.bookings.repositories`` implements it on the Django ORM.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Iterable, List
from uuid import UUID

from apps.bookings.domain.entities import Booking
from apps.bookings.domain.inventory import Reservation
from apps.properties.domain.linkage import Property


class AbstractBookingStore(ABC):

    @abstractmethod
    def load_properties_and_links(self) -> List[Property]:
        """All bookable properties with their linked property ids"""
        raise NotImplementedError

    @abstractmethod
    def load_active_reservations(self, property_ids: Iterable[str] | None = None) -> List[Reservation]:
        """Reservations of pending and confirmed bookings, optionally for some properties only"""
        raise NotImplementedError

    @abstractmethod
    def save_booking(self, booking: Booking) -> None:
        raise NotImplementedError

    @abstractmethod
    def load_booking(self, booking_id: UUID, lock: bool = False) -> Booking | None:
        """Load a booking; ``lock`` holds it against concurrent changes until the transaction ends"""
        raise NotImplementedError

    @abstractmethod
    def list_bookings_by_user(self, user_id: str) -> List[Booking]:
        raise NotImplementedError

    @abstractmethod
    def list_bookings_by_property(self, property_id: str) -> List[Booking]:
        raise NotImplementedError

    @abstractmethod
    def list_pending_created_before(self, cutoff: datetime) -> List[Booking]:
        raise NotImplementedError

    @abstractmethod
    def list_confirmed_checked_out_before(self, day: date) -> List[Booking]:
        raise NotImplementedError

    def lock_properties(self, property_ids: Iterable[str]) -> None:
        """
        Hold storage-level locks on the properties until the transaction ends

        Stores without transactions have nothing to lock.
        """
        return None
