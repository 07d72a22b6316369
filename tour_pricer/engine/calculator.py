from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal, localcontext

from tour_pricer.constants import (
    MAX_PARTY_SIZE,
    MIN_PARTY_SIZE,
    VEHICLE_TIER_LIMITS,
)
from tour_pricer.engine.exceptions import PricingError
from tour_pricer.engine.resolvers import finite_or_zero
from tour_pricer.pricing.models import Params

HALF = Decimal("0.5")
# Enough digits to hold any double plus 0.5 exactly, subnormals included.
EXACT_PRECISION = 1100


@dataclass(frozen=True)
class PriceResult:
    party_size: int
    per_person: float
    group_total: int
    vehicle_fee: float


@dataclass(frozen=True)
class PricingInputs:
    params: Params
    ticket_sum_per_person: float
    effective_meal_per_person: float


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward positive infinity.

    The addition happens on the exact decimal expansion of the float, so
    values just below a tie (e.g. 0.49999999999999994) still round down.
    """
    with localcontext() as ctx:
        ctx.prec = EXACT_PRECISION
        shifted = Decimal(value) + HALF
        return int(shifted.to_integral_value(rounding=ROUND_FLOOR))


def vehicle_fee_for(n: int, config: Params) -> float:
    """Return the vehicle fee of the tier whose bracket contains ``n``."""
    tier1_max, tier2_max, tier3_max = VEHICLE_TIER_LIMITS
    if n <= tier1_max:
        fee = config.car_tier1
    elif n <= tier2_max:
        fee = config.car_tier2
    elif n <= tier3_max:
        fee = config.car_tier3
    else:
        fee = config.car_tier4
    return finite_or_zero(fee)


def compute_prices(
    n: int,
    config: Params,
    ticket_sum_per_person: float,
    effective_meal_per_person: float,
) -> PriceResult:
    """Price a party of ``n`` people.

    Fixed costs are charged once per group and variable costs once per
    person. Markup is applied to the pre-tax total and VAT is levied on
    the marked-up figure. ``config.round_mode`` decides whether the group
    total or the per-person share is rounded to a whole currency unit.
    """
    _validate_party_size(n)

    vehicle_fee = vehicle_fee_for(n, config)
    boat_fee = finite_or_zero(config.boat_fee) if config.boat_included else 0.0
    fixed_base = finite_or_zero(config.guide_fee) + vehicle_fee + boat_fee

    drink_fee = (
        finite_or_zero(config.drink_fee_per_person)
        if config.drink_included
        else 0.0
    )
    variable_base = (
        drink_fee
        + finite_or_zero(ticket_sum_per_person)
        + finite_or_zero(effective_meal_per_person)
    )

    total_before_tax = fixed_base + variable_base * n
    if config.markup_enabled:
        if config.markup_type == "percent":
            total_before_tax *= 1 + finite_or_zero(config.markup_rate) / 100
        else:
            total_before_tax += finite_or_zero(config.markup_amount)

    total_with_tax = total_before_tax
    if config.vat_enabled:
        total_with_tax *= 1 + finite_or_zero(config.vat_rate) / 100

    # overflow from huge but finite inputs
    total_with_tax = finite_or_zero(total_with_tax)

    if config.round_mode == "groupThenDivide":
        group_total = round_half_up(total_with_tax)
        return PriceResult(
            party_size=n,
            per_person=group_total / n,
            group_total=group_total,
            vehicle_fee=vehicle_fee,
        )

    per_person = round_half_up(total_with_tax / n)
    return PriceResult(
        party_size=n,
        per_person=per_person,
        group_total=per_person * n,
        vehicle_fee=vehicle_fee,
    )


def build_price_table(
    config: Params,
    ticket_sum_per_person: float,
    effective_meal_per_person: float,
) -> list[PriceResult]:
    """Price every party size independently, smallest first."""
    return [
        compute_prices(
            n,
            config,
            ticket_sum_per_person,
            effective_meal_per_person,
        )
        for n in range(MIN_PARTY_SIZE, MAX_PARTY_SIZE + 1)
    ]


def compute_for_inputs(n: int, inputs: PricingInputs) -> PriceResult:
    """Price ``n`` people from a resolved input snapshot."""
    return compute_prices(
        n,
        inputs.params,
        inputs.ticket_sum_per_person,
        inputs.effective_meal_per_person,
    )


def table_for_inputs(inputs: PricingInputs) -> list[PriceResult]:
    """Build the full price table from a resolved input snapshot."""
    return build_price_table(
        inputs.params,
        inputs.ticket_sum_per_person,
        inputs.effective_meal_per_person,
    )


def _validate_party_size(n: int) -> None:
    if isinstance(n, bool) or not isinstance(n, int) or n < MIN_PARTY_SIZE:
        raise PricingError(
            "INVALID_PARTY_SIZE",
            "Party size must be a positive integer",
            details={"party_size": n, "min": MIN_PARTY_SIZE},
        )
