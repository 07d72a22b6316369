from __future__ import annotations

from dataclasses import replace

import pytest

from tour_pricer.engine.calculator import PricingInputs, build_price_table
from tour_pricer.pricing.models import Params
from tour_pricer.presentation.export import (
    describe_breakdown,
    export_csv,
    price_table_rows,
)
from tour_pricer.presentation.formatting import format_rate, format_thb, label


@pytest.mark.parametrize(
    ("amount", "expected"),
    [
        (4030, "฿4,030"),
        (4080.4, "฿4,080"),
        (2.5, "฿3"),
        (0, "฿0"),
        (-1234, "-฿1,234"),
        (1_234_567.0, "฿1,234,567"),
        (float("nan"), "฿0"),
    ],
)
def test_format_thb(amount: float, expected: str) -> None:
    """Format whole-baht amounts with grouping separators."""
    assert format_thb(amount) == expected


def test_format_rate() -> None:
    """Drop a trailing .0 from percentages."""
    assert format_rate(7.0) == "7%"
    assert format_rate(7.5) == "7.5%"


def test_labels_fall_back_to_key() -> None:
    """Translate known labels and echo unknown keys."""
    assert label("total", "zh") == "团体总价"
    assert label("total", "en") == "Group Total"
    assert label("nonexistent", "en") == "nonexistent"


def test_export_csv_english(base_params: Params) -> None:
    """Write a header plus one raw-valued row per party size."""
    rows = price_table_rows(
        base_params, build_price_table(base_params, 700.0, 0.0)
    )

    lines = export_csv(rows, "en").splitlines()

    assert lines[0] == "#,Price / Person,Group Total,Vehicle,Boat,Drinks"
    assert len(lines) == 16
    # 2500 + 2000 + 2000 + 780
    assert lines[1] == "1,7280,7280,2000,Yes,Yes"


def test_export_csv_keeps_fractional_shares(base_params: Params) -> None:
    """Leave group-rounded per-person shares unrounded in the export."""
    params = replace(
        base_params,
        round_mode="groupThenDivide",
        boat_included=False,
    )
    rows = price_table_rows(params, build_price_table(params, 700.0, 0.0))

    lines = export_csv(rows, "zh").splitlines()

    assert lines[0] == "#,人均价,团体总价,车辆费,船,饮品"
    # 2500 + 2200 + 780 * 3 = 7040
    assert lines[3] == f"3,{7040 / 3!r},7040,2200,否,是"


def test_breakdown_for_reference_tour(base_params: Params) -> None:
    """List fixed and variable components for the current party."""
    inputs = PricingInputs(
        params=base_params,
        ticket_sum_per_person=700.0,
        effective_meal_per_person=0.0,
    )

    lines = describe_breakdown(inputs, "en")

    assert lines == [
        "Fixed costs: ฿2,500 (Guide) + ฿2,000 (Vehicle) + ฿2,000 (Boat)",
        "Variable (/person): ฿700 (Item catalog) + ฿80 (Drinks)",
    ]


def test_breakdown_with_meal_markup_and_vat(base_params: Params) -> None:
    """Add meal, markup and VAT details when they apply."""
    params = replace(
        base_params,
        boat_included=False,
        use_ticket_catalog=False,
        meal_enabled=True,
        markup_enabled=True,
        markup_type="amount",
        markup_amount=500.0,
        vat_enabled=True,
        vat_rate=7.0,
    )
    inputs = PricingInputs(
        params=params,
        ticket_sum_per_person=1140.0,
        effective_meal_per_person=300.0,
    )

    lines = describe_breakdown(inputs, "zh")

    assert lines == [
        "固定成本: ฿2,500 (导游费) + ฿2,000 (车辆费)",
        "可变成本 (/人): ฿1,140 (手动项目合计) + ฿80 (饮品) + ฿300 (基础餐标)",
        "加价: ฿500 | VAT: 7%",
    ]
