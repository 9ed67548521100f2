"""
fin_quarterly/exceptions.py
===========================
Error taxonomy for the import pipeline and the repository.
"""
from __future__ import annotations
from typing import Optional

from .types import ImportStats


class FinQuarterlyError(Exception):
    """Base class for every error raised by fin_quarterly."""


class RootPathError(FinQuarterlyError):
    """The source tree cannot be walked; aborts the whole run."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"failed to walk directory {path}: {reason}")
        self.path = path
        self.reason = reason


class FileParseError(FinQuarterlyError):
    """A single source file cannot be read; the walk skips it."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class UnknownMetricError(FinQuarterlyError, ValueError):
    def __init__(self, metric: str):
        super().__init__(f"unknown metric: {metric}")
        self.metric = metric


class CompanyNotFoundError(FinQuarterlyError, LookupError):
    def __init__(self, company: str):
        super().__init__(f"company not found: {company}")
        self.company = company


class ImportCancelled(FinQuarterlyError):
    """Raised between two upserts once a stop was requested."""

    def __init__(self, stats: Optional[ImportStats] = None):
        super().__init__("import cancelled")
        self.stats = stats or ImportStats()
