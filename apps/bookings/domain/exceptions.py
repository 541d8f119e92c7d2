"""
Booking Domain Errors

Validation errors are fixed by re-prompting the guest, availability
errors by picking other dates. ConflictError is the retryable flavour
raised when another request took the dates between the check and the
reservation.
"""

from apps.properties.domain.exceptions import PropertyNotFoundError  # noqa: F401
from shared.domain.exceptions import DomainError, NotFoundError, ValidationError


class InvalidGuestCountError(ValidationError):
    """Guests count must be at least 1"""

    code = 'invalid_guest_count'


class InvalidExtraError(ValidationError):
    """Invalid booking extras"""

    code = 'invalid_extra'


class UnavailableError(DomainError):
    """Selected dates are already booked"""

    code = 'unavailable'
    retryable = False


class ConflictError(UnavailableError):
    """Dates are no longer available"""

    code = 'dates_no_longer_available'
    retryable = True


class NotCancellableError(DomainError):
    """Booking cannot be cancelled"""

    code = 'not_cancellable'

    def __init__(self, message: str = '', *, days_until_check_in: int | None = None, status: str | None = None):
        extra = {}
        if days_until_check_in is not None:
            extra['days_until_check_in'] = days_until_check_in
        if status is not None:
            extra['status'] = status
        super().__init__(message, **extra)
        self.days_until_check_in = days_until_check_in


class BookingStateError(DomainError):
    """Booking is not in a state that allows this operation"""

    code = 'invalid_booking_state'


class BookingNotFoundError(NotFoundError):
    """Booking not found"""

    code = 'booking_not_found'
