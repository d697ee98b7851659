"""Domain exceptions raised by the quoting and pricing services."""

from __future__ import annotations


class QuoteServiceError(Exception):
    """Base class for business-rule failures surfaced to callers."""


class NotFoundError(QuoteServiceError, LookupError):
    """A quote, pricing rule or delivery zone id did not resolve."""


class QuoteExpiredError(QuoteServiceError):
    """The quote's validity window elapsed before it was linked."""


class QuoteAlreadyUsedError(QuoteServiceError):
    """The quote is already linked to an order or a parcel."""


class ForbiddenError(QuoteServiceError):
    """The caller lacks the platform admin capability."""


class ValidationError(QuoteServiceError, ValueError):
    """Rejected input for a pricing rule mutation."""
