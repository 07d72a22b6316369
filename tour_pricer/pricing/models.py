from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

RoundMode = Literal["perPerson", "groupThenDivide"]
MarkupType = Literal["percent", "amount"]
MealMode = Literal["preset", "custom"]
Language = Literal["zh", "en"]

ROUND_MODES: tuple[RoundMode, ...] = ("perPerson", "groupThenDivide")
MARKUP_TYPES: tuple[MarkupType, ...] = ("percent", "amount")
MEAL_MODES: tuple[MealMode, ...] = ("preset", "custom")


@dataclass(frozen=True)
class Params:
    pax: int
    guide_fee: float
    boat_included: bool
    boat_fee: float
    drink_included: bool
    drink_fee_per_person: float
    car_tier1: float
    car_tier2: float
    car_tier3: float
    car_tier4: float
    use_ticket_catalog: bool
    manual_ticket_fee_per_person: float
    selected_ticket_ids: frozenset[str]
    meal_enabled: bool
    meal_mode: MealMode
    meal_per_person: float
    vat_enabled: bool
    vat_rate: float
    markup_enabled: bool
    markup_type: MarkupType
    markup_rate: float
    markup_amount: float
    round_mode: RoundMode
    # free text, no computational role
    itinerary: str


@dataclass(frozen=True)
class TicketItem:
    id: str
    name_zh: str
    name_en: str
    price: float

    def name(self, lang: Language) -> str:
        """Return the display name for a language."""
        return self.name_zh if lang == "zh" else self.name_en


@dataclass(frozen=True)
class SavedQuote:
    id: int
    name: str
    timestamp: str
    params: Params


DEFAULT_PARAMS = Params(
    pax=2,
    guide_fee=2500.0,
    boat_included=True,
    boat_fee=2000.0,
    drink_included=True,
    drink_fee_per_person=80.0,
    car_tier1=2000.0,
    car_tier2=2200.0,
    car_tier3=2500.0,
    car_tier4=5000.0,
    use_ticket_catalog=True,
    manual_ticket_fee_per_person=1140.0,
    selected_ticket_ids=frozenset({"grandPalace", "watPho"}),
    meal_enabled=False,
    meal_mode="preset",
    meal_per_person=300.0,
    vat_enabled=False,
    vat_rate=7.0,
    markup_enabled=False,
    markup_type="percent",
    markup_rate=20.0,
    markup_amount=0.0,
    round_mode="perPerson",
    itinerary="",
)

DEFAULT_TICKETS: tuple[TicketItem, ...] = (
    TicketItem(
        id="grandPalace",
        name_zh="大皇宫",
        name_en="Grand Palace",
        price=500.0,
    ),
    TicketItem(
        id="watPho",
        name_zh="卧佛寺",
        name_en="Wat Pho",
        price=200.0,
    ),
    TicketItem(
        id="watArun",
        name_zh="郑王庙",
        name_en="Wat Arun",
        price=200.0,
    ),
)
