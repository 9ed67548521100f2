"""
fin_quarterly/frames.py
=======================
pandas views over parsed records and stored metric series, used by the
CLI preview and the dashboard tables.
"""
from __future__ import annotations
from dataclasses import asdict
from typing import List

import pandas as pd

from .formatting import quarter_label
from .types import CompanyMetric, QuarterKey, QuarterRecord, quarter_number, record_field_names

PERIOD_COLUMN = "period"


def records_frame(records: List[QuarterRecord]) -> pd.DataFrame:
    """One row per record, sorted by company then (year, quarter number)."""
    df = pd.DataFrame([asdict(r) for r in records], columns=record_field_names())
    if df.empty:
        return df
    df["_q"] = df["quarter"].map(quarter_number)
    df = df.sort_values(["company", "year", "_q", "quarter"]).drop(columns="_q")
    return df.reset_index(drop=True)


def metric_frame(metrics: List[CompanyMetric]) -> pd.DataFrame:
    """Long format: year, quarter, company, value, period ("2023-Q1")."""
    df = pd.DataFrame(
        [asdict(m) for m in metrics],
        columns=["year", "quarter", "company", "value"],
    )
    df["value"] = pd.to_numeric(df["value"])
    df[PERIOD_COLUMN] = [quarter_label(y, q) for y, q in zip(df["year"], df["quarter"])]
    return df


def pivot_metric(metrics: List[CompanyMetric]) -> pd.DataFrame:
    """
    Company × period table with periods in chronological order.
    Missing quarters are NaN.
    """
    if not metrics:
        return pd.DataFrame()
    df = metric_frame(metrics)
    keys = sorted({QuarterKey(m.year, m.quarter) for m in metrics})
    periods = [str(k) for k in keys]
    table = df.pivot_table(index="company", columns=PERIOD_COLUMN, values="value", aggfunc="first")
    return table.reindex(columns=periods)
