"""Engine package exports."""

from tour_pricer.engine.calculator import (
    PriceResult,
    PricingInputs,
    build_price_table,
    compute_prices,
    round_half_up,
    vehicle_fee_for,
)
from tour_pricer.engine.exceptions import PricingError
from tour_pricer.engine.resolvers import (
    resolve_effective_meal,
    resolve_ticket_sum,
)

__all__ = [
    "PriceResult",
    "PricingError",
    "PricingInputs",
    "build_price_table",
    "compute_prices",
    "resolve_effective_meal",
    "resolve_ticket_sum",
    "round_half_up",
    "vehicle_fee_for",
]
