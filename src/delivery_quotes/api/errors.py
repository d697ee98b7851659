"""Mapping of domain exceptions to HTTP responses."""

from __future__ import annotations

from fastapi import HTTPException, status

from ..errors import (
    ForbiddenError,
    NotFoundError,
    QuoteAlreadyUsedError,
    QuoteExpiredError,
    QuoteServiceError,
    ValidationError,
)

_STATUS_BY_ERROR: tuple[tuple[type[QuoteServiceError], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (QuoteExpiredError, status.HTTP_410_GONE),
    (QuoteAlreadyUsedError, status.HTTP_409_CONFLICT),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
)


def to_http_exception(exc: QuoteServiceError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
