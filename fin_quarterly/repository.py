"""
fin_quarterly/repository.py
===========================
Persistence for quarter records plus the read queries behind the dashboard.

save_quarter_record is an upsert keyed on (year, quarter, company): on
conflict each financial column takes the incoming value only when it is not
NULL, otherwise the stored value is kept. Re-importing a file is idempotent
and two partial imports of the same quarter merge.
"""
from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlalchemy import case, create_engine, delete, distinct, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .exceptions import CompanyNotFoundError, FinQuarterlyError, UnknownMetricError
from .models import Base, CompanyColor, CompanyFinancials, CompanyNote
from .types import (
    METRIC_SLOTS, QUARTER_ORDER, CompanyInfo, CompanyMetric, QuarterRecord,
)

DEFAULT_COLOR = "#000000"

_UPSERT_INSERTS: Dict[str, Callable[..., Any]] = {
    "sqlite": sqlite_insert,
    "postgresql": pg_insert,
}


def _quarter_order():
    return case(QUARTER_ORDER, value=CompanyFinancials.quarter, else_=len(QUARTER_ORDER) + 1)


def _require_company(company: str) -> str:
    company = (company or "").strip()
    if not company:
        raise ValueError("company name is required")
    return company


class QuarterRepository:
    def __init__(self, engine: Engine):
        self._engine = engine
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)

    @classmethod
    def from_url(cls, database_url: str) -> "QuarterRepository":
        return cls(create_engine(database_url))

    @property
    def engine(self) -> Engine:
        return self._engine

    def create_schema(self) -> None:
        Base.metadata.create_all(self._engine)

    def dispose(self) -> None:
        self._engine.dispose()

    # ─── Write Side ───────────────────────────────────────────────────────────

    def save_quarter_record(self, record: QuarterRecord) -> None:
        dialect = self._engine.dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise FinQuarterlyError(f"upsert is not supported for dialect {dialect}")

        table = CompanyFinancials.__table__
        stmt = insert(table).values(
            year=record.year,
            quarter=record.quarter,
            company=record.company,
            category=record.category,
            **record.metrics(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.year, table.c.quarter, table.c.company],
            set_={slot: func.coalesce(stmt.excluded[slot], table.c[slot]) for slot in METRIC_SLOTS},
        )
        with self._sessions.begin() as session:
            session.execute(stmt)

    def get_quarter_record(self, year: int, quarter: str, company: str) -> Optional[QuarterRecord]:
        stmt = select(CompanyFinancials).where(
            CompanyFinancials.year == year,
            CompanyFinancials.quarter == quarter,
            CompanyFinancials.company == company,
        )
        with self._sessions() as session:
            row = session.scalars(stmt).first()
            if row is None:
                return None
            return QuarterRecord(
                year=row.year,
                quarter=row.quarter,
                company=row.company,
                category=row.category,
                **{slot: getattr(row, slot) for slot in METRIC_SLOTS},
            )

    # ─── Read Side ────────────────────────────────────────────────────────────

    def get_companies_metric(self, companies: Iterable[str], metric: str) -> List[CompanyMetric]:
        """
        (year, quarter, company, value) for one metric, ordered by year then
        Q1 < Q2 < Q3 < Q4. An empty company list selects every company.
        """
        if metric not in METRIC_SLOTS:
            raise UnknownMetricError(metric)

        column = getattr(CompanyFinancials, metric)
        stmt = select(
            CompanyFinancials.year,
            CompanyFinancials.quarter,
            CompanyFinancials.company,
            column,
        ).order_by(CompanyFinancials.year, _quarter_order(), CompanyFinancials.company)

        companies = list(companies)
        if companies:
            stmt = stmt.where(CompanyFinancials.company.in_(companies))

        with self._sessions() as session:
            return [
                CompanyMetric(year=year, quarter=quarter, company=company, value=value)
                for year, quarter, company, value in session.execute(stmt)
            ]

    def get_all_companies(self) -> List[str]:
        stmt = (
            select(distinct(CompanyFinancials.company))
            .where(CompanyFinancials.company != "")
            .order_by(CompanyFinancials.company)
        )
        with self._sessions() as session:
            return list(session.scalars(stmt))

    def get_all_categories(self) -> List[str]:
        stmt = (
            select(distinct(CompanyFinancials.category))
            .where(CompanyFinancials.category != "")
            .order_by(CompanyFinancials.category)
        )
        with self._sessions() as session:
            return list(session.scalars(stmt))

    def get_companies_with_categories(self) -> List[CompanyInfo]:
        stmt = (
            select(CompanyFinancials.company, CompanyFinancials.category)
            .where(CompanyFinancials.company != "")
            .distinct()
            .order_by(CompanyFinancials.company, CompanyFinancials.category)
        )
        with self._sessions() as session:
            return [CompanyInfo(company=c, category=cat) for c, cat in session.execute(stmt)]

    # ─── Company Maintenance ──────────────────────────────────────────────────

    def delete_company(self, company: str) -> int:
        """Remove every quarter row of a company along with its note and colour."""
        company = _require_company(company)
        with self._sessions.begin() as session:
            deleted = session.execute(
                delete(CompanyFinancials).where(CompanyFinancials.company == company)
            ).rowcount
            if not deleted:
                raise CompanyNotFoundError(company)
            session.execute(delete(CompanyNote).where(CompanyNote.company == company))
            session.execute(delete(CompanyColor).where(CompanyColor.company == company))
        return deleted

    def get_company_note(self, company: str) -> str:
        company = _require_company(company)
        with self._sessions() as session:
            note = session.get(CompanyNote, company)
            return note.note if note is not None else ""

    def save_company_note(self, company: str, note: str) -> None:
        company = _require_company(company)
        with self._sessions.begin() as session:
            session.merge(CompanyNote(company=company, note=note or ""))

    def delete_company_note(self, company: str) -> None:
        company = _require_company(company)
        with self._sessions.begin() as session:
            session.execute(delete(CompanyNote).where(CompanyNote.company == company))

    def get_company_color(self, company: str) -> Optional[str]:
        company = _require_company(company)
        with self._sessions() as session:
            color = session.get(CompanyColor, company)
            return color.color if color is not None else None

    def save_company_color(self, company: str, color: str) -> None:
        company = _require_company(company)
        color = (color or "").strip() or DEFAULT_COLOR
        with self._sessions.begin() as session:
            session.merge(CompanyColor(company=company, color=color))

    def delete_company_color(self, company: str) -> None:
        company = _require_company(company)
        with self._sessions.begin() as session:
            session.execute(delete(CompanyColor).where(CompanyColor.company == company))

    def get_company_colors(self) -> Dict[str, str]:
        with self._sessions() as session:
            return {c.company: c.color for c in session.scalars(select(CompanyColor))}
