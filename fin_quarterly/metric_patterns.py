"""
fin_quarterly/metric_patterns.py
================================
Row-label rules for the quarterly statement exports.

Labels in the exports are Russian, with free-form suffixes ("Выручка, млрд руб",
"Чистая прибыль н/с, млрд руб" ...). Some labels are lexical supersets of
others, so rules are evaluated top to bottom and the first match wins.
"""
from __future__ import annotations
from typing import Dict, List, Optional, Tuple

from .types import MetricSlot

# ─── Universally Skipped Rows ─────────────────────────────────────────────────

SKIP_LABELS: Tuple[str, ...] = ("Дата отчета", "Валюта отчета")


def should_skip_label(label: str) -> bool:
    return label.strip() in SKIP_LABELS


# ─── Rule Definitions ─────────────────────────────────────────────────────────

class MetricRule:
    __slots__ = ("slot", "tokens", "exclude_tokens", "prefix")

    def __init__(
        self,
        slot: MetricSlot,
        tokens: List[str],
        exclude_tokens: Optional[List[str]] = None,
        prefix: bool = False,
    ):
        self.slot = slot
        self.tokens = tokens
        self.exclude_tokens = exclude_tokens or []
        self.prefix = prefix

    def matches(self, label: str) -> bool:
        if self.prefix:
            hit = any(label.startswith(tok) for tok in self.tokens)
        else:
            hit = any(tok in label for tok in self.tokens)
        if not hit:
            return False
        return not any(ex in label for ex in self.exclude_tokens)

    def __repr__(self) -> str:
        return f"MetricRule({self.slot!r}, {self.tokens!r}, exclude={self.exclude_tokens!r}, prefix={self.prefix})"


METRIC_RULES: List[MetricRule] = [
    # "Чистый долг" and "Долг" share the token; only gross debt is tracked.
    MetricRule("debt", ["Долг"], ["Чистый"]),
    MetricRule("pe", ["P/E"]),
    # "н/с" marks the restated / adjusted net income row.
    MetricRule("net_profit", ["Чистая прибыль"], ["н/с"]),
    # Base vocabulary: prefix match only. None of these is a prefix of another.
    MetricRule("capitalization", ["Капитализация"], prefix=True),
    MetricRule("revenue", ["Выручка"], prefix=True),
    MetricRule("ebitda", ["EBITDA"], prefix=True),
    MetricRule("roe", ["ROE"], prefix=True),
]


def classify_metric(label: str, rules: Optional[List[MetricRule]] = None) -> Optional[MetricSlot]:
    """
    Map a raw row label to its metric slot, or None if the row is ignored.
    Skip labels ("Дата отчета", "Валюта отчета") never classify.
    """
    label = label.strip()
    if not label or should_skip_label(label):
        return None
    for rule in (rules if rules is not None else METRIC_RULES):
        if rule.matches(label):
            return rule.slot
    return None


# ─── Display Names ────────────────────────────────────────────────────────────

METRIC_DISPLAY: Dict[str, str] = {
    "capitalization": "Market Cap",
    "revenue": "Revenue",
    "net_profit": "Net Profit",
    "ebitda": "EBITDA",
    "debt": "Debt",
    "pe": "P/E Ratio",
    "roe": "ROE (%)",
}

METRIC_UNITS: Dict[str, str] = {
    "pe": "x",
    "roe": "%",
}
