"""
tests/conftest.py
=================
Shared pytest fixtures for the quarterly financials test suite.
"""
import sys
import os

# Ensure the project root is on the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from fin_quarterly.repository import QuarterRepository


SAMPLE_EXPORT = (
    ";2023Q1;2023Q2;2023Q3;LTM\n"
    "Дата отчета;2023-04-28;2023-07-28;2023-10-27;\n"
    "Валюта отчета;руб;руб;руб;руб\n"
    "Капитализация, млрд руб;1 000,5;1 100;-;1 200\n"
    "Выручка, млрд руб;250;260;270;1 000\n"
    "Чистая прибыль, млрд руб;40,1;0.00;42;160\n"
    "Чистая прибыль н/с, млрд руб;39;38;41;150\n"
    "Долг, млрд руб;500;510;520;520\n"
    "Чистый Долг, млрд руб;300;310;320;320\n"
    "P/E;5,5;5,6;5,7;5,8\n"
    "ROE, %;21,5%;22%;;22%\n"
    "Дивиденды, руб;10;;;10\n"
)


@pytest.fixture
def write_csv(tmp_path):
    """Factory: write_csv("SBER_Banks.csv", text) → absolute path."""
    def _write(relpath: str, text: str) -> str:
        path = tmp_path / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def sample_export(write_csv):
    return write_csv("SBER_Banks.csv", SAMPLE_EXPORT)


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'financials.db'}"


@pytest.fixture
def repo(db_url):
    repository = QuarterRepository.from_url(db_url)
    repository.create_schema()
    yield repository
    repository.dispose()
