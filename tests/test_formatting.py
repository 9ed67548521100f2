"""
tests/test_formatting.py
========================
Display helpers and the pandas views used by the CLI and the dashboard.
"""

import math
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fin_quarterly.formatting import (
    PALETTE,
    company_color,
    format_metric_value,
    format_number,
    metric_label,
    quarter_label,
)
from fin_quarterly.frames import metric_frame, pivot_metric, records_frame
from fin_quarterly.types import CompanyMetric, QuarterRecord


class TestMetricLabel:
    def test_known(self):
        assert metric_label("net_profit") == "Net Profit"
        assert metric_label("pe") == "P/E Ratio"

    def test_unknown_passthrough(self):
        assert metric_label("dividends") == "dividends"


class TestFormatMetricValue:
    def test_ratio(self):
        assert format_metric_value("pe", 5.2) == "5.20x"

    def test_percent(self):
        assert format_metric_value("roe", 21.5) == "21.50%"

    def test_amount(self):
        assert format_metric_value("revenue", 1234.5) == "1 234.50"

    def test_none(self):
        assert format_metric_value("revenue", None) == "—"
        assert format_number(None) == "—"


class TestLabelsAndColours:
    def test_quarter_label(self):
        assert quarter_label(2023, "Q1") == "2023-Q1"

    def test_company_color_is_stable(self):
        assert company_color("SBER") == company_color("SBER")
        assert company_color("SBER") in PALETTE

    def test_saved_color_wins(self):
        assert company_color("SBER", {"SBER": "#123456"}) == "#123456"


class TestFrames:
    def test_records_frame_sorted(self):
        records = [
            QuarterRecord(2024, "Q1", "SBER", "Banks", revenue=3.0),
            QuarterRecord(2023, "Q4", "SBER", "Banks", revenue=2.0),
            QuarterRecord(2023, "Q1", "AFLT", "Transport", revenue=1.0),
        ]
        df = records_frame(records)
        assert list(df["company"]) == ["AFLT", "SBER", "SBER"]
        assert list(df["quarter"]) == ["Q1", "Q4", "Q1"]
        assert "capitalization" in df.columns

    def test_records_frame_empty(self):
        assert records_frame([]).empty

    def test_metric_frame_period(self):
        df = metric_frame([CompanyMetric(2023, "Q2", "SBER", 1.5)])
        assert list(df["period"]) == ["2023-Q2"]

    def test_pivot_chronological_columns(self):
        rows = [
            CompanyMetric(2024, "Q1", "SBER", 4.0),
            CompanyMetric(2023, "Q4", "SBER", 3.0),
            CompanyMetric(2023, "Q4", "GAZP", 7.0),
        ]
        table = pivot_metric(rows)
        assert list(table.columns) == ["2023-Q4", "2024-Q1"]
        assert table.loc["SBER", "2024-Q1"] == 4.0
        assert math.isnan(table.loc["GAZP", "2024-Q1"])

    def test_pivot_empty(self):
        assert pivot_metric([]).empty
