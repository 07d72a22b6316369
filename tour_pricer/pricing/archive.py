from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pydantic

from tour_pricer.constants import QUOTES_STORAGE_KEY
from tour_pricer.engine.exceptions import PricingError
from tour_pricer.pricing.documents import (
    load_validator,
    read_collection,
    write_document,
)
from tour_pricer.pricing.models import Params, SavedQuote
from tour_pricer.pricing.schemas import SavedQuoteRecord
from tour_pricer.pricing.storage import KeyValueStore
from tour_pricer.settings import get_project_root

logger = logging.getLogger(__name__)


class QuoteArchive:
    """Named parameter snapshots, newest first."""

    def __init__(
        self,
        storage: KeyValueStore,
        schema_dir: Path | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage
        self._clock = clock
        schema_dir = schema_dir or get_project_root() / "schema"
        self._validator = load_validator(
            schema_dir / "saved_quotes.schema.json"
        )
        self._quotes = self._load()

    def quotes(self) -> list[SavedQuote]:
        """Return all saved quotes, most recent first."""
        return list(self._quotes)

    def get(self, quote_id: int) -> SavedQuote:
        """Return the quote with ``quote_id``."""
        for quote in self._quotes:
            if quote.id == quote_id:
                return quote
        raise PricingError(
            "QUOTE_NOT_FOUND",
            "Quote not found",
            details={"quote_id": quote_id},
        )

    def save(self, name: str, params: Params) -> SavedQuote:
        """Archive ``params`` under ``name`` and return the new quote."""
        name = name.strip() if isinstance(name, str) else ""
        if not name:
            raise PricingError(
                "INVALID_REQUEST",
                "Quote name must not be empty",
                details={"field": "name"},
            )

        now = self._clock()
        quote = SavedQuote(
            id=self._next_id(now),
            name=name,
            timestamp=datetime.fromtimestamp(now, UTC).isoformat(),
            params=params,
        )
        self._write([quote, *self._quotes])
        logger.info(
            "quote_saved",
            extra={"event": "quote_saved", "quote_id": quote.id},
        )
        return quote

    def delete(self, quote_id: int) -> None:
        """Remove the quote with ``quote_id``."""
        quote = self.get(quote_id)
        self._write([item for item in self._quotes if item is not quote])
        logger.info(
            "quote_deleted",
            extra={"event": "quote_deleted", "quote_id": quote_id},
        )

    def _next_id(self, now: float) -> int:
        candidate = int(now * 1000)
        used = {quote.id for quote in self._quotes}
        while candidate in used:
            candidate += 1
        return candidate

    def _load(self) -> list[SavedQuote]:
        raw = read_collection(
            self._storage,
            QUOTES_STORAGE_KEY,
            self._validator,
        )
        if raw is None:
            return []

        quotes: list[SavedQuote] = []
        for item in raw:
            try:
                quotes.append(SavedQuoteRecord.model_validate(item).to_quote())
            except pydantic.ValidationError as exc:
                logger.warning(
                    "stored_document_invalid",
                    extra={
                        "event": "stored_document_invalid",
                        "storage_key": QUOTES_STORAGE_KEY,
                        "quote_id": item.get("id"),
                        "reason": str(exc),
                    },
                )
        return quotes

    def _write(self, quotes: list[SavedQuote]) -> None:
        write_document(
            self._storage,
            QUOTES_STORAGE_KEY,
            [
                SavedQuoteRecord.from_quote(quote).to_payload()
                for quote in quotes
            ],
        )
        self._quotes = quotes
