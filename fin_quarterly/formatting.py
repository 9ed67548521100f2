"""
fin_quarterly/formatting.py
===========================
Metric names, units, value and quarter labels and company colours for display.
"""
from __future__ import annotations
from typing import Dict, Optional

from .metric_patterns import METRIC_DISPLAY, METRIC_UNITS
from .types import QuarterKey

PALETTE = (
    "#1e40af", "#10b981", "#f59e0b", "#ef4444", "#8b5cf6",
    "#0ea5e9", "#ec4899", "#14b8a6", "#f97316", "#6b7280",
)


def metric_label(metric: str) -> str:
    """Display name, e.g. "net_profit" → "Net Profit"; unknown names pass through."""
    return METRIC_DISPLAY.get(metric, metric)


def metric_unit(metric: str) -> str:
    return METRIC_UNITS.get(metric, "")


def format_number(value: Optional[float], decimals: int = 2) -> str:
    if value is None:
        return "—"
    return f"{value:,.{decimals}f}".replace(",", " ")


def format_metric_value(metric: str, value: Optional[float], decimals: int = 2) -> str:
    """
    Format a value with its metric's unit.
    e.g. ("pe", 5.2) → "5.20x", ("roe", 21.5) → "21.50%", ("revenue", 1234.5) → "1 234.50"
    """
    if value is None:
        return "—"
    unit = metric_unit(metric)
    if unit == "x":
        return f"{value:.{decimals}f}x"
    if unit == "%":
        return f"{value:.{decimals}f}%"
    return format_number(value, decimals)


def quarter_label(year: int, quarter: str) -> str:
    """(2023, "Q1") → "2023-Q1"."""
    return str(QuarterKey(year, quarter))


def company_color(company: str, saved: Optional[Dict[str, str]] = None) -> str:
    """Saved colour if any, otherwise a stable pick from the palette."""
    if saved and company in saved:
        return saved[company]
    idx = sum(ord(ch) for ch in company) % len(PALETTE)
    return PALETTE[idx]
