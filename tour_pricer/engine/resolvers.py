from __future__ import annotations

import math
from collections.abc import Iterable

from tour_pricer.pricing.models import Params, TicketItem


def finite_or_zero(value: float) -> float:
    """Return ``value`` as a float, or 0.0 when it is NaN or infinite."""
    number = float(value)
    return number if math.isfinite(number) else 0.0


def resolve_ticket_sum(
    params: Params,
    catalog: Iterable[TicketItem],
) -> float:
    """Resolve the per-person ticket cost from the catalog or manual entry.

    Selected catalog prices are summed in catalog order; a non-finite
    price contributes nothing. With the catalog disabled the manual
    per-person figure is used instead.
    """
    if not params.use_ticket_catalog:
        return finite_or_zero(params.manual_ticket_fee_per_person)

    total = 0.0
    for item in catalog:
        if item.id in params.selected_ticket_ids:
            total += finite_or_zero(item.price)
    return total


def resolve_effective_meal(params: Params) -> float:
    """Return the per-person meal cost, or zero when meals are disabled."""
    if not params.meal_enabled:
        return 0.0
    return finite_or_zero(params.meal_per_person)
