from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import pydantic

from tour_pricer.constants import (
    MEAL_PRESETS,
    NEW_TICKET_ID_PREFIX,
    NEW_TICKET_NAMES,
    PARAMS_STORAGE_KEY,
    SUPPORTED_LANGUAGES,
    TICKETS_STORAGE_KEY,
    VEHICLE_TIER_COUNT,
)
from tour_pricer.engine.calculator import PricingInputs
from tour_pricer.engine.exceptions import PricingError
from tour_pricer.engine.resolvers import (
    resolve_effective_meal,
    resolve_ticket_sum,
)
from tour_pricer.pricing.documents import (
    load_validator,
    read_collection,
    read_document,
    write_document,
)
from tour_pricer.pricing.models import (
    DEFAULT_PARAMS,
    DEFAULT_TICKETS,
    MARKUP_TYPES,
    MEAL_MODES,
    ROUND_MODES,
    Language,
    MarkupType,
    MealMode,
    Params,
    RoundMode,
    TicketItem,
)
from tour_pricer.pricing.schemas import (
    TicketItemRecord,
    clamp_party_size,
    coerce_amount,
    params_from_payload,
    params_to_payload,
)
from tour_pricer.pricing.storage import KeyValueStore
from tour_pricer.settings import get_project_root

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigSnapshot:
    params: Params
    catalog: tuple[TicketItem, ...]

    def inputs(self) -> PricingInputs:
        """Resolve the per-person scalars the engine consumes."""
        return PricingInputs(
            params=self.params,
            ticket_sum_per_person=resolve_ticket_sum(
                self.params, self.catalog
            ),
            effective_meal_per_person=resolve_effective_meal(self.params),
        )


ChangeListener = Callable[[ConfigSnapshot], None]


def coerce_fee(value: Any) -> float:
    """Coerce a cost entry to a finite, non-negative amount."""
    return max(0.0, coerce_amount(value))


class ConfigurationStore:
    def __init__(
        self,
        storage: KeyValueStore,
        schema_dir: Path | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Load the params and ticket catalog documents from storage."""
        self._storage = storage
        self._schema_dir = schema_dir or get_project_root() / "schema"
        self._clock = clock
        self._params_validator = load_validator(
            self._schema_dir / "params.schema.json"
        )
        self._catalog_validator = load_validator(
            self._schema_dir / "ticket_catalog.schema.json"
        )
        self._listeners: list[ChangeListener] = []
        self._params = self._load_params()
        self._catalog = self._load_catalog()

    @property
    def params(self) -> Params:
        """Return the current parameter snapshot."""
        return self._params

    @property
    def catalog(self) -> tuple[TicketItem, ...]:
        """Return the current ticket catalog in display order."""
        return self._catalog

    def snapshot(self) -> ConfigSnapshot:
        """Return params and catalog as one consistent snapshot."""
        return ConfigSnapshot(params=self._params, catalog=self._catalog)

    def load(self) -> Params:
        """Re-read both documents from storage and return the params."""
        self._params = self._load_params()
        self._catalog = self._load_catalog()
        return self._params

    def save(self, params: Params) -> None:
        """Persist new params, then make them current and notify."""
        write_document(
            self._storage,
            PARAMS_STORAGE_KEY,
            params_to_payload(params),
        )
        self._params = params
        logger.info(
            "params_saved",
            extra={
                "event": "params_saved",
                "party_size": params.pax,
                "round_mode": params.round_mode,
            },
        )
        self._notify()

    def replace(self, params: Params) -> None:
        """Swap in a whole params snapshot, e.g. one from a saved quote."""
        self.save(params)

    def on_change(self, listener: ChangeListener) -> Callable[[], None]:
        """Subscribe to changes; returns a callable that unsubscribes."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def reset(self) -> None:
        """Restore default params and the default ticket catalog."""
        self._write_catalog(DEFAULT_TICKETS)
        logger.info("config_reset", extra={"event": "config_reset"})
        self.save(DEFAULT_PARAMS)

    # ------------------------------------------------------------------
    # Typed parameter updates
    # ------------------------------------------------------------------

    def set_pax(self, value: Any) -> None:
        """Set the party size, rounded and clamped to the priced range."""
        self.save(replace(self._params, pax=clamp_party_size(value)))

    def set_guide_fee(self, value: Any) -> None:
        self.save(replace(self._params, guide_fee=coerce_fee(value)))

    def set_boat_included(self, included: bool) -> None:
        _require_bool("boat_included", included)
        self.save(replace(self._params, boat_included=included))

    def set_boat_fee(self, value: Any) -> None:
        self.save(replace(self._params, boat_fee=coerce_fee(value)))

    def set_drink_included(self, included: bool) -> None:
        _require_bool("drink_included", included)
        self.save(replace(self._params, drink_included=included))

    def set_drink_fee(self, value: Any) -> None:
        self.save(
            replace(self._params, drink_fee_per_person=coerce_fee(value))
        )

    def set_vehicle_tier(self, tier: int, value: Any) -> None:
        """Set the vehicle fee of tier 1..4."""
        fee = coerce_fee(value)
        if tier == 1:
            params = replace(self._params, car_tier1=fee)
        elif tier == 2:
            params = replace(self._params, car_tier2=fee)
        elif tier == 3:
            params = replace(self._params, car_tier3=fee)
        elif tier == 4:
            params = replace(self._params, car_tier4=fee)
        else:
            raise PricingError(
                "INVALID_REQUEST",
                f"Vehicle tier must be between 1 and {VEHICLE_TIER_COUNT}",
                details={"tier": tier},
            )
        self.save(params)

    def set_use_ticket_catalog(self, enabled: bool) -> None:
        _require_bool("use_ticket_catalog", enabled)
        self.save(replace(self._params, use_ticket_catalog=enabled))

    def set_manual_ticket_fee(self, value: Any) -> None:
        self.save(
            replace(
                self._params,
                manual_ticket_fee_per_person=coerce_fee(value),
            )
        )

    def toggle_ticket(self, ticket_id: str) -> None:
        """Select a catalog ticket, or deselect it if already selected."""
        selected = set(self._params.selected_ticket_ids)
        if ticket_id in selected:
            selected.discard(ticket_id)
        else:
            self._get_ticket(ticket_id)
            selected.add(ticket_id)
        self.save(
            replace(self._params, selected_ticket_ids=frozenset(selected))
        )

    def set_meal_enabled(self, enabled: bool) -> None:
        _require_bool("meal_enabled", enabled)
        self.save(replace(self._params, meal_enabled=enabled))

    def set_meal_mode(self, mode: MealMode) -> None:
        _require_choice("meal_mode", mode, MEAL_MODES)
        self.save(replace(self._params, meal_mode=mode))

    def select_meal_preset(self, value: int) -> None:
        """Pick one of the preset per-person meal budgets."""
        if isinstance(value, bool) or value not in MEAL_PRESETS:
            raise PricingError(
                "INVALID_REQUEST",
                "Meal preset not available",
                details={"value": value, "presets": list(MEAL_PRESETS)},
            )
        self.save(
            replace(
                self._params,
                meal_mode="preset",
                meal_per_person=float(value),
            )
        )

    def set_custom_meal(self, value: Any) -> None:
        """Enter a free-form per-person meal budget."""
        self.save(
            replace(
                self._params,
                meal_mode="custom",
                meal_per_person=coerce_fee(value),
            )
        )

    def set_vat_enabled(self, enabled: bool) -> None:
        _require_bool("vat_enabled", enabled)
        self.save(replace(self._params, vat_enabled=enabled))

    def set_vat_rate(self, value: Any) -> None:
        self.save(replace(self._params, vat_rate=coerce_amount(value)))

    def set_markup_enabled(self, enabled: bool) -> None:
        _require_bool("markup_enabled", enabled)
        self.save(replace(self._params, markup_enabled=enabled))

    def set_markup_type(self, markup_type: MarkupType) -> None:
        _require_choice("markup_type", markup_type, MARKUP_TYPES)
        self.save(replace(self._params, markup_type=markup_type))

    def set_markup_rate(self, value: Any) -> None:
        self.save(replace(self._params, markup_rate=coerce_amount(value)))

    def set_markup_amount(self, value: Any) -> None:
        self.save(replace(self._params, markup_amount=coerce_amount(value)))

    def set_round_mode(self, mode: RoundMode) -> None:
        _require_choice("round_mode", mode, ROUND_MODES)
        self.save(replace(self._params, round_mode=mode))

    def set_itinerary(self, text: str) -> None:
        if not isinstance(text, str):
            raise PricingError(
                "INVALID_REQUEST",
                "Itinerary must be text",
                details={"field": "itinerary"},
            )
        self.save(replace(self._params, itinerary=text))

    # ------------------------------------------------------------------
    # Ticket catalog
    # ------------------------------------------------------------------

    def add_ticket(self) -> TicketItem:
        """Append a zero-priced placeholder item and return it."""
        stamp = int(self._clock() * 1000)
        existing = {item.id for item in self._catalog}
        while f"{NEW_TICKET_ID_PREFIX}{stamp}" in existing:
            stamp += 1

        item = TicketItem(
            id=f"{NEW_TICKET_ID_PREFIX}{stamp}",
            name_zh=NEW_TICKET_NAMES["zh"],
            name_en=NEW_TICKET_NAMES["en"],
            price=0.0,
        )
        self._write_catalog((*self._catalog, item))
        logger.info(
            "ticket_added",
            extra={"event": "ticket_added", "ticket_id": item.id},
        )
        self._notify()
        return item

    def rename_ticket(self, ticket_id: str, lang: Language, name: str) -> None:
        """Change the display name of an item for one language."""
        if lang not in SUPPORTED_LANGUAGES:
            raise PricingError(
                "INVALID_REQUEST",
                "Unsupported language",
                details={"lang": lang},
            )
        item = self._get_ticket(ticket_id)
        if lang == "zh":
            updated = replace(item, name_zh=name)
        else:
            updated = replace(item, name_en=name)
        self._replace_ticket(updated)

    def set_ticket_price(self, ticket_id: str, value: Any) -> None:
        """Change the per-person price of an item."""
        item = self._get_ticket(ticket_id)
        self._replace_ticket(replace(item, price=coerce_fee(value)))

    def remove_ticket(self, ticket_id: str) -> None:
        """Delete an item and drop it from the current selection."""
        self._get_ticket(ticket_id)
        self._write_catalog(
            tuple(item for item in self._catalog if item.id != ticket_id)
        )
        logger.info(
            "ticket_removed",
            extra={"event": "ticket_removed", "ticket_id": ticket_id},
        )
        self.save(
            replace(
                self._params,
                selected_ticket_ids=self._params.selected_ticket_ids
                - {ticket_id},
            )
        )

    def _get_ticket(self, ticket_id: str) -> TicketItem:
        for item in self._catalog:
            if item.id == ticket_id:
                return item
        raise PricingError(
            "TICKET_NOT_FOUND",
            "Ticket not found",
            details={"ticket_id": ticket_id},
        )

    def _replace_ticket(self, updated: TicketItem) -> None:
        self._write_catalog(
            tuple(
                updated if item.id == updated.id else item
                for item in self._catalog
            )
        )
        self._notify()

    # ------------------------------------------------------------------
    # Internal loading
    # ------------------------------------------------------------------

    def _load_params(self) -> Params:
        raw = read_document(
            self._storage,
            PARAMS_STORAGE_KEY,
            self._params_validator,
        )
        if raw is None:
            return DEFAULT_PARAMS

        try:
            return params_from_payload(raw)
        except pydantic.ValidationError as exc:
            _log_invalid(PARAMS_STORAGE_KEY, exc)
            return DEFAULT_PARAMS

    def _load_catalog(self) -> tuple[TicketItem, ...]:
        raw = read_collection(
            self._storage,
            TICKETS_STORAGE_KEY,
            self._catalog_validator,
        )
        if raw is None:
            return DEFAULT_TICKETS

        items: dict[str, TicketItem] = {}
        for entry in raw:
            try:
                record = TicketItemRecord.model_validate(entry)
            except pydantic.ValidationError as exc:
                _log_invalid(
                    TICKETS_STORAGE_KEY, exc, ticket_id=entry.get("id")
                )
                continue
            if record.id in items:
                logger.warning(
                    "duplicate_ticket_ignored",
                    extra={
                        "event": "duplicate_ticket_ignored",
                        "ticket_id": record.id,
                    },
                )
                continue
            items[record.id] = record.to_item()
        return tuple(items.values())

    def _write_catalog(self, catalog: tuple[TicketItem, ...]) -> None:
        write_document(
            self._storage,
            TICKETS_STORAGE_KEY,
            [
                TicketItemRecord.from_item(item).model_dump()
                for item in catalog
            ],
        )
        self._catalog = catalog

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)


def _require_bool(field: str, value: Any) -> None:
    if not isinstance(value, bool):
        raise PricingError(
            "INVALID_REQUEST",
            f"{field} must be true or false",
            details={"field": field, "value": value},
        )


def _require_choice(field: str, value: Any, choices: tuple[str, ...]) -> None:
    if value not in choices:
        raise PricingError(
            "INVALID_REQUEST",
            f"{field} must be one of {list(choices)}",
            details={"field": field, "value": value},
        )


def _log_invalid(key: str, exc: Exception, **context: Any) -> None:
    logger.warning(
        "stored_document_invalid",
        extra={
            "event": "stored_document_invalid",
            "storage_key": key,
            "reason": str(exc),
            **context,
        },
    )
