"""Derived display values for the tenant forms.

Pure functions over a snapshot of form values. They never raise and are
recomputed on every call rather than cached.
"""

from __future__ import annotations

import math
from typing import Any, Mapping

from shared.config_store import get_config_value

TOOL_NAME = "tenant-forms"
DEFAULT_AFFORDABILITY_RATIO = 0.3


def round_half_up(x: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(x + 0.5))


def parse_number(value: Any) -> float | None:
    """Parse a user-entered amount like ``"3000"``, ``"$3,000"`` or ``3000``.

    Returns None for absent, boolean or non-numeric input.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "").lstrip("$").strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def affordability(monthly_income: Any, ratio: float | None = None) -> int:
    """Estimated comfortable monthly rent: income x 30%, rounded.

    Args:
        monthly_income: Raw monthly income value from the form.
        ratio: Share of income; defaults to the configured
            ``affordability_ratio`` (0.3).

    Returns:
        Whole-dollar amount, or 0 when the income is missing, non-numeric
        or negative.
    """
    income = parse_number(monthly_income)
    if income is None or income < 0:
        return 0
    if ratio is None:
        ratio = get_config_value(TOOL_NAME, "affordability_ratio", DEFAULT_AFFORDABILITY_RATIO)
    return round_half_up(income * ratio)


def annual_income(monthly_income: Any) -> int:
    """Monthly income x 12, or 0 when it cannot be parsed."""
    income = parse_number(monthly_income)
    if income is None or income < 0:
        return 0
    return round_half_up(income * 12)


def display_name(values: Mapping[str, Any]) -> str:
    """Best available name for headings and file names."""
    full = str(values.get("fullName") or "").strip()
    if full:
        return full
    parts = [
        str(values.get(k) or "").strip()
        for k in ("firstName", "middleName", "lastName")
    ]
    return " ".join(p for p in parts if p)


def derive_values(form_type: str, values: Mapping[str, Any]) -> dict[str, Any]:
    """Bundle the derived values a form shows alongside its fields."""
    derived: dict[str, Any] = {"display_name": display_name(values)}
    if form_type == "edge":
        derived["affordable_rent"] = affordability(values.get("monthlyIncome"))
        derived["annual_income"] = annual_income(values.get("monthlyIncome"))
    return derived
