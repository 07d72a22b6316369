from __future__ import annotations

import math
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from tour_pricer.constants import MAX_PARTY_SIZE, MIN_PARTY_SIZE
from tour_pricer.engine.calculator import round_half_up
from tour_pricer.pricing.models import (
    DEFAULT_PARAMS,
    MarkupType,
    MealMode,
    Params,
    RoundMode,
    SavedQuote,
    TicketItem,
)

AMOUNT_FIELDS = (
    "guide_fee",
    "boat_fee",
    "drink_fee_per_person",
    "car_tier1",
    "car_tier2",
    "car_tier3",
    "car_tier4",
    "manual_ticket_fee_per_person",
    "meal_per_person",
    "vat_rate",
    "markup_rate",
    "markup_amount",
)


def coerce_amount(value: Any) -> float:
    """Coerce user or stored input to a finite float, falling back to 0."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    elif isinstance(value, str):
        try:
            number = float(value.strip() or 0)
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def clamp_party_size(value: Any) -> int:
    """Round a party size entry and clamp it to the supported range."""
    rounded = round_half_up(coerce_amount(value))
    return min(MAX_PARTY_SIZE, max(MIN_PARTY_SIZE, rounded))


class ParamsRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    pax: int
    guide_fee: float = Field(alias="guideFee")
    boat_included: bool = Field(alias="boatIncluded")
    boat_fee: float = Field(alias="boatFee")
    drink_included: bool = Field(alias="drinkIncluded")
    drink_fee_per_person: float = Field(alias="drinkFeePerPerson")
    car_tier1: float = Field(alias="carTier1")
    car_tier2: float = Field(alias="carTier2")
    car_tier3: float = Field(alias="carTier3")
    car_tier4: float = Field(alias="carTier4")
    use_ticket_catalog: bool = Field(alias="useTicketCatalog")
    manual_ticket_fee_per_person: float = Field(
        alias="manualTicketFeePerPerson"
    )
    selected_ticket_ids: list[str] = Field(alias="selectedTicketIds")
    meal_enabled: bool = Field(alias="mealEnabled")
    meal_mode: MealMode = Field(alias="mealMode")
    meal_per_person: float = Field(alias="mealPerPerson")
    vat_enabled: bool = Field(alias="vatEnabled")
    vat_rate: float = Field(alias="vatRate")
    markup_enabled: bool = Field(alias="markupEnabled")
    markup_type: MarkupType = Field(alias="markupType")
    markup_rate: float = Field(alias="markupRate")
    markup_amount: float = Field(alias="markupAmount")
    round_mode: RoundMode = Field(alias="roundMode")
    itinerary: str = ""

    @pydantic.field_validator(*AMOUNT_FIELDS, mode="before")
    @classmethod
    def coerce_amounts(cls: type["ParamsRecord"], value: Any) -> float:
        """Treat missing, malformed or non-finite amounts as zero."""
        return coerce_amount(value)

    @pydantic.field_validator("pax", mode="before")
    @classmethod
    def clamp_pax(cls: type["ParamsRecord"], value: Any) -> int:
        """Keep the stored party size inside the priced range."""
        return clamp_party_size(value)

    @pydantic.field_validator("selected_ticket_ids")
    @classmethod
    def dedupe_ticket_ids(
        cls: type["ParamsRecord"],
        value: list[str],
    ) -> list[str]:
        """Drop repeated ticket ids while keeping first-seen order."""
        return list(dict.fromkeys(value))

    @classmethod
    def from_params(cls, params: Params) -> "ParamsRecord":
        """Build a record from a domain snapshot."""
        return cls(
            pax=params.pax,
            guide_fee=params.guide_fee,
            boat_included=params.boat_included,
            boat_fee=params.boat_fee,
            drink_included=params.drink_included,
            drink_fee_per_person=params.drink_fee_per_person,
            car_tier1=params.car_tier1,
            car_tier2=params.car_tier2,
            car_tier3=params.car_tier3,
            car_tier4=params.car_tier4,
            use_ticket_catalog=params.use_ticket_catalog,
            manual_ticket_fee_per_person=params.manual_ticket_fee_per_person,
            selected_ticket_ids=sorted(params.selected_ticket_ids),
            meal_enabled=params.meal_enabled,
            meal_mode=params.meal_mode,
            meal_per_person=params.meal_per_person,
            vat_enabled=params.vat_enabled,
            vat_rate=params.vat_rate,
            markup_enabled=params.markup_enabled,
            markup_type=params.markup_type,
            markup_rate=params.markup_rate,
            markup_amount=params.markup_amount,
            round_mode=params.round_mode,
            itinerary=params.itinerary,
        )

    @classmethod
    def from_stored(cls, raw: dict[str, Any]) -> "ParamsRecord":
        """Merge a stored (possibly partial) record over the defaults."""
        merged = cls.from_params(DEFAULT_PARAMS).to_payload()
        merged.update(raw)
        return cls.model_validate(merged)

    def to_params(self) -> Params:
        """Convert the record to an immutable domain snapshot."""
        return Params(
            pax=self.pax,
            guide_fee=self.guide_fee,
            boat_included=self.boat_included,
            boat_fee=self.boat_fee,
            drink_included=self.drink_included,
            drink_fee_per_person=self.drink_fee_per_person,
            car_tier1=self.car_tier1,
            car_tier2=self.car_tier2,
            car_tier3=self.car_tier3,
            car_tier4=self.car_tier4,
            use_ticket_catalog=self.use_ticket_catalog,
            manual_ticket_fee_per_person=self.manual_ticket_fee_per_person,
            selected_ticket_ids=frozenset(self.selected_ticket_ids),
            meal_enabled=self.meal_enabled,
            meal_mode=self.meal_mode,
            meal_per_person=self.meal_per_person,
            vat_enabled=self.vat_enabled,
            vat_rate=self.vat_rate,
            markup_enabled=self.markup_enabled,
            markup_type=self.markup_type,
            markup_rate=self.markup_rate,
            markup_amount=self.markup_amount,
            round_mode=self.round_mode,
            itinerary=self.itinerary,
        )

    def to_payload(self) -> dict[str, Any]:
        """Serialize using the camelCase storage keys."""
        return self.model_dump(by_alias=True)


class TicketItemRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    name_zh: str = ""
    name_en: str = ""
    price: float = 0.0

    @pydantic.field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls: type["TicketItemRecord"], value: Any) -> float:
        """Treat malformed or non-finite prices as zero."""
        return coerce_amount(value)

    @classmethod
    def from_item(cls, item: TicketItem) -> "TicketItemRecord":
        """Build a record from a catalog entry."""
        return cls(
            id=item.id,
            name_zh=item.name_zh,
            name_en=item.name_en,
            price=item.price,
        )

    def to_item(self) -> TicketItem:
        """Convert the record to a catalog entry."""
        return TicketItem(
            id=self.id,
            name_zh=self.name_zh,
            name_en=self.name_en,
            price=self.price,
        )


class SavedQuoteRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str = Field(min_length=1)
    timestamp: str
    params: ParamsRecord

    @pydantic.field_validator("params", mode="before")
    @classmethod
    def merge_params_defaults(
        cls: type["SavedQuoteRecord"],
        value: Any,
    ) -> Any:
        """Fill fields missing from quotes saved by older versions."""
        if isinstance(value, dict):
            return ParamsRecord.from_stored(value)
        return value

    @classmethod
    def from_quote(cls, quote: SavedQuote) -> "SavedQuoteRecord":
        """Build a record from an archived quote."""
        return cls(
            id=quote.id,
            name=quote.name,
            timestamp=quote.timestamp,
            params=ParamsRecord.from_params(quote.params),
        )

    def to_quote(self) -> SavedQuote:
        """Convert the record to an archived quote."""
        return SavedQuote(
            id=self.id,
            name=self.name,
            timestamp=self.timestamp,
            params=self.params.to_params(),
        )

    def to_payload(self) -> dict[str, Any]:
        """Serialize with the params record in camelCase."""
        return {
            "id": self.id,
            "name": self.name,
            "timestamp": self.timestamp,
            "params": self.params.to_payload(),
        }


def params_to_payload(params: Params) -> dict[str, Any]:
    """Serialize a params snapshot to its storage record."""
    return ParamsRecord.from_params(params).to_payload()


def params_from_payload(raw: dict[str, Any]) -> Params:
    """Parse a stored params record, filling gaps from the defaults."""
    return ParamsRecord.from_stored(raw).to_params()
