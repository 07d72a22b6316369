from __future__ import annotations

import logging

from tour_pricer import __version__
from tour_pricer.engine.calculator import (
    PriceResult,
    compute_for_inputs,
    table_for_inputs,
)
from tour_pricer.logging import configure_logging
from tour_pricer.pricing.archive import QuoteArchive
from tour_pricer.pricing.models import Language, SavedQuote
from tour_pricer.pricing.repository import ConfigurationStore
from tour_pricer.pricing.storage import JsonFileStore
from tour_pricer.presentation.export import (
    describe_breakdown,
    export_csv,
    price_table_rows,
)
from tour_pricer.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class PricingSession:
    """Prices the stored configuration and manages saved quotes.

    Every computation first takes one consistent snapshot from the
    configuration store, so a result never mixes old and new settings.
    """

    def __init__(
        self,
        store: ConfigurationStore,
        archive: QuoteArchive,
    ) -> None:
        self._store = store
        self._archive = archive

    @property
    def store(self) -> ConfigurationStore:
        """Return the configuration store backing this session."""
        return self._store

    @property
    def archive(self) -> QuoteArchive:
        """Return the quote archive backing this session."""
        return self._archive

    def current(self) -> PriceResult:
        """Price the configured party size."""
        inputs = self._store.snapshot().inputs()
        return compute_for_inputs(inputs.params.pax, inputs)

    def table(self) -> list[PriceResult]:
        """Price every supported party size."""
        return table_for_inputs(self._store.snapshot().inputs())

    def breakdown(self, lang: Language = "zh") -> list[str]:
        """Describe the cost components behind the current price."""
        return describe_breakdown(self._store.snapshot().inputs(), lang)

    def export_csv(self, lang: Language = "zh") -> str:
        """Export the full price table as CSV text."""
        inputs = self._store.snapshot().inputs()
        rows = price_table_rows(inputs.params, table_for_inputs(inputs))
        logger.info(
            "table_exported",
            extra={
                "event": "table_exported",
                "round_mode": inputs.params.round_mode,
            },
        )
        return export_csv(rows, lang)

    def quotes(self) -> list[SavedQuote]:
        """List saved quotes, newest first."""
        return self._archive.quotes()

    def save_quote(self, name: str) -> SavedQuote:
        """Archive the current params under ``name``."""
        return self._archive.save(name, self._store.params)

    def load_quote(self, quote_id: int) -> SavedQuote:
        """Overwrite the current params with a saved quote's params."""
        quote = self._archive.get(quote_id)
        self._store.replace(quote.params)
        logger.info(
            "quote_loaded",
            extra={"event": "quote_loaded", "quote_id": quote_id},
        )
        return quote

    def delete_quote(self, quote_id: int) -> None:
        """Remove a saved quote."""
        self._archive.delete(quote_id)


def create_session(settings: Settings | None = None) -> PricingSession:
    """Create a session backed by JSON files in the settings data dir."""
    configure_logging()
    settings = settings or get_settings()

    storage = JsonFileStore(settings.data_dir)
    store = ConfigurationStore(storage, schema_dir=settings.schema_dir)
    archive = QuoteArchive(storage, schema_dir=settings.schema_dir)

    logger.info(
        "session_started",
        extra={
            "event": "session_started",
            "version": __version__,
            "data_dir": str(settings.data_dir),
        },
    )
    return PricingSession(store=store, archive=archive)
