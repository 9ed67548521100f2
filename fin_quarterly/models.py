"""
fin_quarterly/models.py
=======================
SQLAlchemy tables. company_financials is unique on (year, quarter, company);
financial columns are nullable, NULL meaning "not reported".
"""
from __future__ import annotations
from typing import Optional

from sqlalchemy import Float, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class CompanyFinancials(Base):
    __tablename__ = "company_financials"
    __table_args__ = (
        UniqueConstraint("year", "quarter", "company", name="uq_company_financials_period"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    quarter: Mapped[str] = mapped_column(String(16), nullable=False)
    company: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(255), nullable=False, default="unknown")
    capitalization: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    revenue: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    net_profit: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    ebitda: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    debt: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    pe: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    roe: Mapped[Optional[float]] = mapped_column(Float, nullable=True)


class CompanyNote(Base):
    __tablename__ = "company_notes"

    company: Mapped[str] = mapped_column(String(255), primary_key=True)
    note: Mapped[str] = mapped_column(Text, nullable=False, default="")


class CompanyColor(Base):
    __tablename__ = "company_colors"

    company: Mapped[str] = mapped_column(String(255), primary_key=True)
    color: Mapped[str] = mapped_column(String(16), nullable=False, default="#000000")
