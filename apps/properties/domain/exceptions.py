"""Property domain errors."""

from shared.domain.exceptions import NotFoundError


class PropertyNotFoundError(NotFoundError):
    """Property not found"""

    code = 'property_not_found'
