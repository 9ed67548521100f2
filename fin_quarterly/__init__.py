"""Quarterly financials importer — CSV statement exports to a queryable time series."""
from .types import *
from .exceptions import *
from .parser import (
    normalize_value,
    resolve_quarter,
    extract_identity,
    parse_file,
    parse_tree,
)
from .metric_patterns import classify_metric
from .repository import QuarterRepository
from .importer import run_import
