"""DRF exception handler for domain errors.

Every error response has the same shape::

    {"success": false, "error": "<code>", "detail": "<message>", ...extra}
"""

from __future__ import annotations

import logging

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler as drf_exception_handler  # type: ignore

from apps.bookings.domain.exceptions import (
    BookingStateError,
    NotCancellableError,
    UnavailableError,
)
from apps.loyalty.domain.exceptions import InsufficientFundsError
from shared.domain.exceptions import DomainError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# First match wins, so subclasses come before their bases
STATUS_BY_ERROR = (
    (InsufficientFundsError, status.HTTP_402_PAYMENT_REQUIRED),
    (NotCancellableError, status.HTTP_400_BAD_REQUEST),
    (BookingStateError, status.HTTP_409_CONFLICT),
    (UnavailableError, status.HTTP_409_CONFLICT),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
)


def status_for(exc: DomainError) -> int:
    for error_class, http_status in STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            return http_status
    return status.HTTP_400_BAD_REQUEST


def domain_exception_handler(exc, context):
    """Map DomainError subclasses to HTTP responses; leave the rest to DRF."""

    if isinstance(exc, DomainError):
        http_status = status_for(exc)
        view = context.get("view")
        logger.info(
            f"{view.__class__.__name__ if view else 'API'} rejected request "
            f"with {exc.code} ({http_status}): {exc.message}"
        )
        payload = {"success": False, **exc.to_dict()}
        if getattr(exc, "retryable", False):
            payload["retryable"] = True
        return Response(payload, status=http_status)

    response = drf_exception_handler(exc, context)
    if response is not None:
        detail = response.data
        if isinstance(detail, dict) and set(detail) == {"detail"}:
            detail = detail["detail"]
        code = getattr(exc, "default_code", "error")
        response.data = {"success": False, "error": code, "detail": detail}
    return response
