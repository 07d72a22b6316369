from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from dataclasses import dataclass

from tour_pricer.constants import DEFAULT_LANGUAGE
from tour_pricer.engine.calculator import (
    PriceResult,
    PricingInputs,
    vehicle_fee_for,
)
from tour_pricer.engine.resolvers import finite_or_zero
from tour_pricer.pricing.models import Language, Params
from tour_pricer.presentation.formatting import (
    format_rate,
    format_thb,
    label,
)


@dataclass(frozen=True)
class PriceTableRow:
    party_size: int
    per_person: float
    group_total: int
    vehicle_fee: float
    boat_included: bool
    drink_included: bool


def price_table_rows(
    params: Params,
    results: Sequence[PriceResult],
) -> list[PriceTableRow]:
    """Pair each table result with the inclusion flags shown beside it."""
    return [
        PriceTableRow(
            party_size=result.party_size,
            per_person=result.per_person,
            group_total=result.group_total,
            vehicle_fee=result.vehicle_fee,
            boat_included=params.boat_included,
            drink_included=params.drink_included,
        )
        for result in results
    ]


def export_csv(
    rows: Sequence[PriceTableRow],
    lang: Language = DEFAULT_LANGUAGE,
) -> str:
    """Render the price table as CSV text with a localised header."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(
        [
            "#",
            label("perPerson", lang),
            label("total", lang),
            label("vehicle", lang),
            label("boat", lang),
            label("drink", lang),
        ]
    )
    for row in rows:
        writer.writerow(
            [
                row.party_size,
                _plain_number(row.per_person),
                row.group_total,
                _plain_number(row.vehicle_fee),
                _yes_no(row.boat_included, lang),
                _yes_no(row.drink_included, lang),
            ]
        )
    return buffer.getvalue()


def describe_breakdown(
    inputs: PricingInputs,
    lang: Language = DEFAULT_LANGUAGE,
) -> list[str]:
    """Summarise where the current party's price comes from.

    Produces a fixed-cost line, a per-person variable-cost line and, when
    markup or VAT is switched on, a line stating their rates.
    """
    params = inputs.params

    fixed_parts = [
        f"{format_thb(params.guide_fee)} ({label('guide', lang)})",
        (
            f"{format_thb(vehicle_fee_for(params.pax, params))} "
            f"({label('vehicle', lang)})"
        ),
    ]
    if params.boat_included:
        fixed_parts.append(
            f"{format_thb(params.boat_fee)} ({label('boat', lang)})"
        )

    ticket_source = "catalog" if params.use_ticket_catalog else "manualTicket"
    variable_parts = [
        (
            f"{format_thb(inputs.ticket_sum_per_person)} "
            f"({label(ticket_source, lang)})"
        ),
    ]
    if params.drink_included:
        variable_parts.append(
            f"{format_thb(params.drink_fee_per_person)} "
            f"({label('drink', lang)})"
        )
    if finite_or_zero(inputs.effective_meal_per_person) > 0:
        variable_parts.append(
            f"{format_thb(inputs.effective_meal_per_person)} "
            f"({label('meal', lang)})"
        )

    lines = [
        f"{label('fixed', lang)}: {' + '.join(fixed_parts)}",
        f"{label('variable', lang)}: {' + '.join(variable_parts)}",
    ]

    adjustments: list[str] = []
    if params.markup_enabled:
        markup = (
            format_rate(params.markup_rate)
            if params.markup_type == "percent"
            else format_thb(params.markup_amount)
        )
        adjustments.append(f"{label('markupLabel', lang)}: {markup}")
    if params.vat_enabled:
        adjustments.append(
            f"{label('vatLabel', lang)}: {format_rate(params.vat_rate)}"
        )
    if adjustments:
        lines.append(" | ".join(adjustments))

    return lines


def _plain_number(value: float) -> str:
    number = finite_or_zero(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def _yes_no(flag: bool, lang: Language) -> str:
    return label("yes", lang) if flag else label("no", lang)
