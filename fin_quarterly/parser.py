"""
fin_quarterly/parser.py
=======================
Quarterly statement CSV parser. Handles:
  - ';'-separated exports with a quarter header row ("2023Q1", "2023Q2", ..., "LTM")
  - row labels classified by metric_patterns
  - cell values in mixed notation ("1 234,56", "12,5%", "-", "0.00")

Each file yields one QuarterRecord per (year, quarter); company and category
come from the file name ("SBER_Banks.csv" → SBER / Banks).
"""
from __future__ import annotations
import csv
import math
import os
import re
import stat
import warnings
from typing import Dict, Iterator, List, Optional, Tuple

import pandas as pd

from .exceptions import FileParseError, RootPathError
from .log import get_logger
from .metric_patterns import classify_metric, should_skip_label
from .types import FileError, ParseResult, QuarterKey, QuarterRecord

log = get_logger(__name__)

CSV_DELIMITER = ";"
CSV_EXTENSION = ".csv"
UNKNOWN_CATEGORY = "unknown"
SKIP_QUARTER_TOKENS = ("", "LTM")

# Sentinels meaning "not reported"; compared after cleanup.
NO_DATA_VALUES = ("", "-", "0.00")

_DECIMAL_RE = re.compile(r'^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$')
_YEAR_RE = re.compile(r'^[+-]?\d+$')
_WHITESPACE_RE = re.compile(r'\s+')


# ─── Cell Values ──────────────────────────────────────────────────────────────

def normalize_value(raw: Optional[str]) -> Optional[float]:
    """
    Convert a cell to float, or None when it carries no data.
    "1 234,56" → 1234.56, "12,5%" → 12.5, "-" / "" / "0.00" → None.
    """
    if raw is None:
        return None
    s = str(raw).strip()
    s = s.replace(',', '.')
    s = _WHITESPACE_RE.sub('', s)
    s = s.replace('"', '')
    if s.endswith('%'):
        s = s[:-1]
    if s in NO_DATA_VALUES:
        return None
    if not _DECIMAL_RE.match(s):
        return None
    value = float(s)
    if not math.isfinite(value):
        return None
    return value


# ─── Quarter Header ───────────────────────────────────────────────────────────

def resolve_quarter(token: str) -> Optional[QuarterKey]:
    """
    "2023_Q1" / "2023 Q1" / "2023Q1" → QuarterKey(2023, "Q1").
    A non-alphanumeric character at index 4 is a separator; the rest of the
    token is taken verbatim as the quarter label, without validation.
    """
    if len(token) < 6:
        return None
    head = token[:4]
    if not _YEAR_RE.match(head):
        return None
    label = token[4:] if token[4].isalnum() else token[5:]
    return QuarterKey(int(head), label)


# ─── File Identity ────────────────────────────────────────────────────────────

def extract_identity(file_path: str) -> Tuple[str, str]:
    """File stem split on '_' → (company, category)."""
    stem = os.path.splitext(os.path.basename(file_path))[0]
    parts = stem.split('_')
    if len(parts) < 2:
        return stem, UNKNOWN_CATEGORY
    return parts[0], parts[1]


# ─── Reading ──────────────────────────────────────────────────────────────────

def _keep_bad_line(bad_line: List[str]) -> List[str]:
    # Rows wider than the header: pandas drops the cells past the header width.
    return bad_line


def read_table(file_path: str) -> pd.DataFrame:
    """
    Read a ';'-separated export into a DataFrame of strings. Row 0 is the
    quarter header, column 0 the row label. Short rows are padded with "".
    """
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", pd.errors.ParserWarning)
            df = pd.read_csv(
                file_path,
                sep=CSV_DELIMITER,
                header=None,
                dtype=str,
                keep_default_na=False,
                engine="python",
                on_bad_lines=_keep_bad_line,
                encoding="utf-8",
                encoding_errors="replace",
            )
    except pd.errors.EmptyDataError as exc:
        raise FileParseError(file_path, "insufficient rows: 0") from exc
    except (OSError, ValueError, csv.Error) as exc:
        raise FileParseError(file_path, f"failed to read CSV: {exc}") from exc

    if len(df) < 2:
        raise FileParseError(file_path, f"insufficient rows: {len(df)}")
    return df.fillna("")


# ─── Record Assembly ──────────────────────────────────────────────────────────

def assemble_records(table: pd.DataFrame, company: str, category: str) -> List[QuarterRecord]:
    """
    Fold every (metric row × quarter column) cell into one record per quarter.
    Unknown labels, blank/LTM headers and no-data cells are skipped silently.
    """
    header = [str(tok).strip() for tok in table.iloc[0]]
    acc: Dict[QuarterKey, QuarterRecord] = {}

    for row in table.iloc[1:].itertuples(index=False, name=None):
        if not row:
            continue
        label = str(row[0]).strip()
        if should_skip_label(label):
            continue
        slot = classify_metric(label)
        if slot is None:
            continue

        for col in range(1, min(len(row), len(header))):
            token = header[col]
            if token in SKIP_QUARTER_TOKENS:
                continue
            key = resolve_quarter(token)
            if key is None:
                continue
            value = normalize_value(row[col])
            if value is None:
                continue

            record = acc.get(key)
            if record is None:
                record = QuarterRecord(year=key.year, quarter=key.quarter, company=company, category=category)
                acc[key] = record
            record.set_metric(slot, value)

    return [r for r in acc.values() if not r.is_empty()]


def parse_file(file_path: str) -> List[QuarterRecord]:
    """Parse one export. Raises FileParseError; holds no state between files."""
    table = read_table(file_path)
    company, category = extract_identity(file_path)
    return assemble_records(table, company, category)


# ─── Tree Walk ────────────────────────────────────────────────────────────────

def iter_csv_files(root_path: str) -> Iterator[str]:
    """
    Yield every *.csv (any case) under root_path in sorted order. A root that
    is itself a CSV file is yielded alone.
    """
    try:
        st = os.stat(root_path)
    except OSError as exc:
        raise RootPathError(root_path, exc.strerror or str(exc)) from exc

    if not stat.S_ISDIR(st.st_mode):
        if root_path.lower().endswith(CSV_EXTENSION):
            yield root_path
        return

    def _on_walk_error(exc: OSError) -> None:
        raise RootPathError(exc.filename or root_path, exc.strerror or str(exc)) from exc

    for dirpath, dirnames, filenames in os.walk(root_path, onerror=_on_walk_error):
        dirnames.sort()
        for name in sorted(filenames):
            if name.lower().endswith(CSV_EXTENSION):
                yield os.path.join(dirpath, name)


def parse_tree(root_path: str) -> ParseResult:
    """
    Parse every CSV under root_path. A file that fails is logged and listed
    in ParseResult.errors; only an unwalkable tree raises (RootPathError).
    """
    result = ParseResult()
    for file_path in iter_csv_files(root_path):
        log.debug("parsing file", extra={"extra": {"path": file_path}})
        try:
            records = parse_file(file_path)
        except FileParseError as exc:
            log.error("failed to parse file", extra={"extra": {"path": file_path, "error": exc.reason}})
            result.errors.append(FileError(path=file_path, reason=exc.reason))
            continue
        result.files_parsed += 1
        result.records.extend(records)
    return result
