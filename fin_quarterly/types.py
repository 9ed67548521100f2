"""
fin_quarterly/types.py
======================
Dataclasses shared by the parser, the repository and the dashboard.
"""
from __future__ import annotations
from dataclasses import dataclass, field, fields
from functools import total_ordering
from typing import Dict, List, Literal, Optional, Tuple

# ─── Metric Vocabulary ────────────────────────────────────────────────────────

MetricSlot = Literal[
    "capitalization", "revenue", "net_profit", "ebitda", "debt", "pe", "roe",
]

METRIC_SLOTS: Tuple[str, ...] = (
    "capitalization", "revenue", "net_profit", "ebitda", "debt", "pe", "roe",
)

QUARTER_ORDER: Dict[str, int] = {"Q1": 1, "Q2": 2, "Q3": 3, "Q4": 4}


def quarter_number(quarter: str) -> int:
    """Q1..Q4 → 1..4; any other label sorts after Q4."""
    return QUARTER_ORDER.get(quarter, len(QUARTER_ORDER) + 1)


# ─── Core Data Types ──────────────────────────────────────────────────────────

@total_ordering
@dataclass(frozen=True)
class QuarterKey:
    year: int
    quarter: str

    def sort_key(self) -> Tuple[int, int, str]:
        return (self.year, quarter_number(self.quarter), self.quarter)

    def __lt__(self, other: "QuarterKey") -> bool:
        if not isinstance(other, QuarterKey):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __str__(self) -> str:
        return f"{self.year}-{self.quarter}"


@dataclass
class QuarterRecord:
    """
    One row of the company_financials time series.

    Identity is (year, quarter, company). Every financial field is optional:
    None means "not reported", which the upsert keeps distinct from 0.0.
    """
    year: int
    quarter: str
    company: str
    category: str
    capitalization: Optional[float] = None
    revenue: Optional[float] = None
    net_profit: Optional[float] = None
    ebitda: Optional[float] = None
    debt: Optional[float] = None
    pe: Optional[float] = None
    roe: Optional[float] = None

    @property
    def key(self) -> QuarterKey:
        return QuarterKey(self.year, self.quarter)

    def set_metric(self, slot: MetricSlot, value: float) -> None:
        if slot not in METRIC_SLOTS:
            raise ValueError(f"unknown metric slot: {slot}")
        setattr(self, slot, value)

    def metrics(self) -> Dict[str, Optional[float]]:
        return {slot: getattr(self, slot) for slot in METRIC_SLOTS}

    def is_empty(self) -> bool:
        return all(getattr(self, slot) is None for slot in METRIC_SLOTS)


# ─── Parse / Import Results ───────────────────────────────────────────────────

@dataclass
class FileError:
    path: str
    reason: str


@dataclass
class ParseResult:
    records: List[QuarterRecord] = field(default_factory=list)
    errors: List[FileError] = field(default_factory=list)
    files_parsed: int = 0


@dataclass
class ImportStats:
    records_total: int = 0
    records_saved: int = 0
    records_failed: int = 0
    files_parsed: int = 0
    files_failed: int = 0


# ─── Read Side ────────────────────────────────────────────────────────────────

@dataclass
class CompanyMetric:
    year: int
    quarter: str
    company: str
    value: Optional[float]


@dataclass
class CompanyInfo:
    company: str
    category: str


def record_field_names() -> List[str]:
    return [f.name for f in fields(QuarterRecord)]
