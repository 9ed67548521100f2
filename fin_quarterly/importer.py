"""
fin_quarterly/importer.py
=========================
Import run: parse a CSV tree, then upsert the records one by one.

Each upsert is independent, so a failed write is logged and counted and
the run goes on; a stop request is honoured between two writes and leaves
a consistent partial dataset behind.
"""
from __future__ import annotations
import threading
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from .exceptions import ImportCancelled
from .log import get_logger
from .parser import parse_tree
from .repository import QuarterRepository
from .types import ImportStats

log = get_logger(__name__)


def run_import(
    root_path: str,
    repository: QuarterRepository,
    stop_event: Optional[threading.Event] = None,
) -> ImportStats:
    """
    Raises RootPathError if the tree cannot be walked, ImportCancelled on stop.
    Only SQLAlchemyError counts as a per-record write failure; a
    FinQuarterlyError from the repository (e.g. a dialect without upsert
    support) is a configuration error and propagates on the first record.
    """
    result = parse_tree(root_path)
    stats = ImportStats(
        records_total=len(result.records),
        files_parsed=result.files_parsed,
        files_failed=len(result.errors),
    )

    for record in result.records:
        if stop_event is not None and stop_event.is_set():
            log.warning("import cancelled", extra={"extra": {
                "records_saved": stats.records_saved,
                "records_remaining": stats.records_total - stats.records_saved - stats.records_failed,
            }})
            raise ImportCancelled(stats)
        try:
            repository.save_quarter_record(record)
        except SQLAlchemyError as exc:
            stats.records_failed += 1
            log.warning("failed to save quarter record", extra={"extra": {
                "company": record.company,
                "year": record.year,
                "quarter": record.quarter,
                "error": str(exc),
            }})
            continue
        stats.records_saved += 1

    log.info("import completed", extra={"extra": {
        "records_processed": stats.records_total,
        "records_saved": stats.records_saved,
        "records_failed": stats.records_failed,
        "files_parsed": stats.files_parsed,
        "files_failed": stats.files_failed,
    }})
    return stats
