from __future__ import annotations

from tour_pricer.constants import CURRENCY_SYMBOL, DEFAULT_LANGUAGE
from tour_pricer.engine.calculator import round_half_up
from tour_pricer.engine.resolvers import finite_or_zero
from tour_pricer.pricing.models import Language

LABELS: dict[str, dict[str, str]] = {
    "title": {
        "zh": "BYG 报价管理系统",
        "en": "BYG Quote Management System",
    },
    "pax": {"zh": "人数 (1–15)", "en": "Party Size (1–15)"},
    "guide": {"zh": "导游费", "en": "Guide"},
    "vehicle": {"zh": "车辆费", "en": "Vehicle"},
    "boat": {"zh": "船", "en": "Boat"},
    "drink": {"zh": "饮品", "en": "Drinks"},
    "catalog": {"zh": "项目库", "en": "Item catalog"},
    "manualTicket": {"zh": "手动项目合计", "en": "Manual item total"},
    "meal": {"zh": "基础餐标", "en": "Base meal"},
    "fixed": {"zh": "固定成本", "en": "Fixed costs"},
    "variable": {"zh": "可变成本 (/人)", "en": "Variable (/person)"},
    "markupLabel": {"zh": "加价", "en": "Markup"},
    "vatLabel": {"zh": "VAT", "en": "VAT"},
    "perPerson": {"zh": "人均价", "en": "Price / Person"},
    "total": {"zh": "团体总价", "en": "Group Total"},
    "tableTitle": {
        "zh": "1–15人完整价格表",
        "en": "Full Price Table (1–15 pax)",
    },
    "yes": {"zh": "是", "en": "Yes"},
    "no": {"zh": "否", "en": "No"},
}


def label(key: str, lang: Language = DEFAULT_LANGUAGE) -> str:
    """Translate a label key, falling back to the key itself."""
    entry = LABELS.get(key)
    if entry is None:
        return key
    return entry.get(lang, key)


def format_thb(amount: float) -> str:
    """Format an amount as whole Thai baht, e.g. ``฿4,030``.

    Display rounding only; engine results are never re-rounded here.
    """
    rounded = round_half_up(finite_or_zero(amount))
    sign = "-" if rounded < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{abs(rounded):,}"


def format_rate(rate: float) -> str:
    """Render a percentage without a trailing ``.0``."""
    value = finite_or_zero(rate)
    if value.is_integer():
        return f"{int(value)}%"
    return f"{value}%"
