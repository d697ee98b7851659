"""Quote storage: Supabase table with an in-process fallback."""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import asdict, replace
from datetime import datetime
from functools import lru_cache
from typing import Any, Literal, Protocol

from ..db.supabase import get_supabase_client
from ..errors import NotFoundError, QuoteAlreadyUsedError, QuoteExpiredError
from ..models.domain import DeliveryQuote

QUOTES_TABLE = "delivery_quotes"

LinkField = Literal["order_id", "parcel_id"]

_TIMESTAMP_FIELDS = ("created_at", "expires_at", "used_at")

logger = logging.getLogger(__name__)


class QuoteStore(Protocol):
    def insert(self, quote: DeliveryQuote) -> DeliveryQuote: ...

    def get(self, quote_id: str) -> DeliveryQuote | None: ...

    def get_by_field(self, field: LinkField, value: str) -> DeliveryQuote | None: ...

    def link(self, quote_id: str, field: LinkField, value: str, now: datetime) -> DeliveryQuote: ...


def new_quote_id() -> str:
    return str(uuid.uuid4())


def quote_to_record(quote: DeliveryQuote) -> dict[str, Any]:
    record = asdict(quote)
    for key in _TIMESTAMP_FIELDS:
        if record[key] is not None:
            record[key] = record[key].isoformat()
    return record


def quote_from_record(row: dict[str, Any]) -> DeliveryQuote:
    values = {name: row.get(name) for name in DeliveryQuote.__dataclass_fields__}
    for key in _TIMESTAMP_FIELDS:
        if isinstance(values[key], str):
            values[key] = datetime.fromisoformat(values[key])
    return DeliveryQuote(**values)


def raise_link_failure(quote: DeliveryQuote | None, now: datetime) -> None:
    """Raise the error explaining why a quote could not be linked."""
    if quote is None:
        raise NotFoundError("Quote not found")
    if quote.is_expired(now):
        raise QuoteExpiredError("Quote has expired")
    if quote.is_used:
        raise QuoteAlreadyUsedError("Quote has already been used")


class SupabaseQuoteStore:
    """Quotes persisted in the ``delivery_quotes`` table."""

    def __init__(self, client) -> None:
        self.client = client

    def insert(self, quote: DeliveryQuote) -> DeliveryQuote:
        response = self.client.table(QUOTES_TABLE).insert(quote_to_record(quote)).execute()
        rows = response.data or []
        return quote_from_record(rows[0]) if rows else quote

    def get(self, quote_id: str) -> DeliveryQuote | None:
        response = self.client.table(QUOTES_TABLE).select("*").eq("id", quote_id).limit(1).execute()
        rows = response.data or []
        return quote_from_record(rows[0]) if rows else None

    def get_by_field(self, field: LinkField, value: str) -> DeliveryQuote | None:
        response = self.client.table(QUOTES_TABLE).select("*").eq(field, value).limit(1).execute()
        rows = response.data or []
        return quote_from_record(rows[0]) if rows else None

    def link(self, quote_id: str, field: LinkField, value: str, now: datetime) -> DeliveryQuote:
        """Set the link and ``used_at`` in one conditional UPDATE.

        The row only changes while it is unused and unexpired; when nothing
        was updated the quote is read back to report why.
        """
        now_iso = now.isoformat()
        response = (
            self.client.table(QUOTES_TABLE)
            .update({field: value, "used_at": now_iso})
            .eq("id", quote_id)
            .is_("used_at", "null")
            .gte("expires_at", now_iso)
            .execute()
        )
        rows = response.data or []
        if rows:
            return quote_from_record(rows[0])

        current = self.get(quote_id)
        raise_link_failure(current, now)
        # Unused and unexpired on re-read: another writer raced us and the row
        # was re-read before its update became visible.
        raise QuoteAlreadyUsedError("Quote has already been used")


class InMemoryQuoteStore:
    """Process-local store used when Supabase is not configured and in tests."""

    def __init__(self) -> None:
        self._quotes: dict[str, DeliveryQuote] = {}
        self._lock = threading.Lock()

    def insert(self, quote: DeliveryQuote) -> DeliveryQuote:
        with self._lock:
            self._quotes[quote.id] = replace(quote)
            return replace(quote)

    def get(self, quote_id: str) -> DeliveryQuote | None:
        with self._lock:
            quote = self._quotes.get(quote_id)
            return replace(quote) if quote else None

    def get_by_field(self, field: LinkField, value: str) -> DeliveryQuote | None:
        with self._lock:
            for quote in self._quotes.values():
                if getattr(quote, field) == value:
                    return replace(quote)
        return None

    def link(self, quote_id: str, field: LinkField, value: str, now: datetime) -> DeliveryQuote:
        with self._lock:
            quote = self._quotes.get(quote_id)
            raise_link_failure(quote, now)
            updated = replace(quote, used_at=now, **{field: value})
            self._quotes[quote_id] = updated
            return replace(updated)


@lru_cache()
def _in_memory_store() -> InMemoryQuoteStore:
    logger.warning("Supabase not configured - quotes are kept in process memory only")
    return InMemoryQuoteStore()


def get_quote_store() -> QuoteStore:
    """Supabase-backed store when configured, otherwise the process-wide memory store."""
    client = get_supabase_client()
    if client is not None:
        return SupabaseQuoteStore(client)
    return _in_memory_store()
