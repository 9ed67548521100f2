"""
tests/test_repository.py
========================
Upsert merge semantics and the read queries, against a file-backed SQLite database.
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from sqlalchemy import func, select

from fin_quarterly.exceptions import CompanyNotFoundError, UnknownMetricError
from fin_quarterly.models import CompanyFinancials
from fin_quarterly.types import QuarterRecord


def _rec(year=2023, quarter="Q1", company="SBER", category="Banks", **metrics):
    return QuarterRecord(year=year, quarter=quarter, company=company, category=category, **metrics)


def _row_count(repo):
    with repo.engine.connect() as conn:
        return conn.execute(select(func.count()).select_from(CompanyFinancials)).scalar_one()


# ─── Upsert ───────────────────────────────────────────────────────────────────

class TestUpsert:
    def test_insert(self, repo):
        repo.save_quarter_record(_rec(revenue=250.0, pe=5.5))
        stored = repo.get_quarter_record(2023, "Q1", "SBER")
        assert stored.revenue == 250.0
        assert stored.pe == 5.5
        assert stored.capitalization is None
        assert stored.category == "Banks"

    def test_same_record_twice_is_idempotent(self, repo):
        rec = _rec(revenue=250.0, debt=500.0)
        repo.save_quarter_record(rec)
        first = repo.get_quarter_record(2023, "Q1", "SBER")
        repo.save_quarter_record(rec)
        assert repo.get_quarter_record(2023, "Q1", "SBER") == first
        assert _row_count(repo) == 1

    def test_disjoint_fields_merge(self, repo):
        repo.save_quarter_record(_rec(capitalization=1000.0))
        repo.save_quarter_record(_rec(revenue=250.0, roe=21.5))
        stored = repo.get_quarter_record(2023, "Q1", "SBER")
        assert stored.capitalization == 1000.0
        assert stored.revenue == 250.0
        assert stored.roe == 21.5
        assert _row_count(repo) == 1

    def test_present_value_overwrites(self, repo):
        repo.save_quarter_record(_rec(revenue=250.0, debt=500.0))
        repo.save_quarter_record(_rec(revenue=260.0))
        stored = repo.get_quarter_record(2023, "Q1", "SBER")
        assert stored.revenue == 260.0
        assert stored.debt == 500.0

    def test_zero_is_persisted_and_kept(self, repo):
        repo.save_quarter_record(_rec(pe=0.0))
        repo.save_quarter_record(_rec(revenue=1.0))
        assert repo.get_quarter_record(2023, "Q1", "SBER").pe == 0.0

    def test_zero_overwrites_stored_value(self, repo):
        repo.save_quarter_record(_rec(net_profit=40.0))
        repo.save_quarter_record(_rec(net_profit=0.0))
        assert repo.get_quarter_record(2023, "Q1", "SBER").net_profit == 0.0

    def test_category_kept_on_conflict(self, repo):
        repo.save_quarter_record(_rec(category="Banks", revenue=1.0))
        repo.save_quarter_record(_rec(category="Finance", ebitda=2.0))
        assert repo.get_quarter_record(2023, "Q1", "SBER").category == "Banks"

    def test_identity_is_year_quarter_company(self, repo):
        repo.save_quarter_record(_rec(revenue=1.0))
        repo.save_quarter_record(_rec(quarter="Q2", revenue=2.0))
        repo.save_quarter_record(_rec(company="GAZP", revenue=3.0))
        repo.save_quarter_record(_rec(year=2024, revenue=4.0))
        assert _row_count(repo) == 4

    def test_missing_record(self, repo):
        assert repo.get_quarter_record(2030, "Q1", "NOPE") is None


# ─── Read Queries ─────────────────────────────────────────────────────────────

class TestReadQueries:
    @pytest.fixture
    def loaded(self, repo):
        for year, quarter, value in [(2024, "Q1", 4.0), (2023, "Q4", 3.0), (2023, "Q1", 1.0), (2023, "Q2", 2.0)]:
            repo.save_quarter_record(_rec(year=year, quarter=quarter, revenue=value, pe=value))
        repo.save_quarter_record(_rec(company="GAZP", category="Energy", quarter="Q1", pe=7.0))
        repo.save_quarter_record(_rec(company="AFLT", category="Transport", quarter="Q1", revenue=9.0))
        return repo

    def test_metric_ordered_by_year_then_quarter(self, loaded):
        rows = loaded.get_companies_metric(["SBER"], "revenue")
        assert [(r.year, r.quarter) for r in rows] == [(2023, "Q1"), (2023, "Q2"), (2023, "Q4"), (2024, "Q1")]
        assert [r.value for r in rows] == [1.0, 2.0, 3.0, 4.0]

    def test_metric_absent_value_is_none(self, loaded):
        rows = loaded.get_companies_metric(["GAZP"], "revenue")
        assert [(r.company, r.value) for r in rows] == [("GAZP", None)]

    def test_metric_company_filter(self, loaded):
        rows = loaded.get_companies_metric(["SBER", "GAZP"], "pe")
        assert {r.company for r in rows} == {"SBER", "GAZP"}

    def test_metric_all_companies(self, loaded):
        rows = loaded.get_companies_metric([], "revenue")
        assert {r.company for r in rows} == {"SBER", "GAZP", "AFLT"}

    def test_unknown_metric(self, loaded):
        with pytest.raises(UnknownMetricError):
            loaded.get_companies_metric(["SBER"], "dividends")

    def test_metric_name_is_not_sql(self, loaded):
        with pytest.raises(UnknownMetricError):
            loaded.get_companies_metric(["SBER"], "revenue FROM company_financials; --")

    def test_companies_sorted_and_distinct(self, loaded):
        assert loaded.get_all_companies() == ["AFLT", "GAZP", "SBER"]

    def test_categories(self, loaded):
        assert loaded.get_all_categories() == ["Banks", "Energy", "Transport"]

    def test_companies_with_categories(self, loaded):
        infos = loaded.get_companies_with_categories()
        assert [(i.company, i.category) for i in infos] == [
            ("AFLT", "Transport"), ("GAZP", "Energy"), ("SBER", "Banks"),
        ]


# ─── Company Maintenance ──────────────────────────────────────────────────────

class TestCompanyMaintenance:
    def test_delete_company(self, repo):
        repo.save_quarter_record(_rec(revenue=1.0))
        repo.save_quarter_record(_rec(quarter="Q2", revenue=2.0))
        repo.save_quarter_record(_rec(company="GAZP", revenue=3.0))
        repo.save_company_note("SBER", "watch")
        repo.save_company_color("SBER", "#ff0000")

        assert repo.delete_company(" SBER ") == 2
        assert repo.get_all_companies() == ["GAZP"]
        assert repo.get_company_note("SBER") == ""
        assert repo.get_company_color("SBER") is None

    def test_delete_unknown_company(self, repo):
        with pytest.raises(CompanyNotFoundError):
            repo.delete_company("NOPE")

    def test_blank_company_rejected(self, repo):
        with pytest.raises(ValueError):
            repo.delete_company("   ")
        with pytest.raises(ValueError):
            repo.save_company_note("", "x")

    def test_notes(self, repo):
        assert repo.get_company_note("SBER") == ""
        repo.save_company_note("SBER", "first")
        repo.save_company_note("SBER", "second")
        assert repo.get_company_note("SBER") == "second"
        repo.delete_company_note("SBER")
        assert repo.get_company_note("SBER") == ""

    def test_colors(self, repo):
        assert repo.get_company_color("SBER") is None
        repo.save_company_color("SBER", "#10b981")
        assert repo.get_company_color("SBER") == "#10b981"
        repo.save_company_color("GAZP", "  ")
        assert repo.get_company_color("GAZP") == "#000000"
        assert repo.get_company_colors() == {"SBER": "#10b981", "GAZP": "#000000"}

    def test_reset_color(self, repo):
        repo.save_company_color("SBER", "#10b981")
        repo.delete_company_color("SBER")
        assert repo.get_company_color("SBER") is None
        assert repo.get_company_colors() == {}
        repo.delete_company_color("SBER")
