"""
Domain Exceptions

Root of the error taxonomy shared by all bounded contexts. Each error
carries a stable ``code`` used by the API layer, and ``extra`` holds
structured details the caller needs to explain the failure.
"""


class DomainError(Exception):
    """Base class for all business rule violations"""

    code = 'domain_error'

    def __init__(self, message: str = '', **extra):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__
        self.extra = extra

    def to_dict(self) -> dict:
        return {'error': self.code, 'detail': self.message, **self.extra}


class ValidationError(DomainError, ValueError):
    """Input is invalid"""

    code = 'validation_error'


class InvalidRangeError(ValidationError):
    """Check-out date must be after check-in date"""

    code = 'invalid_range'


class NotFoundError(DomainError, LookupError):
    """Requested object does not exist"""

    code = 'not_found'
