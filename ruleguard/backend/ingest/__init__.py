"""
ingest/__init__.py

Public API for the CSV ingestion sub-package.
"""

from .columns import DEFAULT_MAPPINGS, RULE_FIELDS, auto_map_columns
from .csv_loader import IngestError, load_rules_from_csv, read_csv_rows, rows_to_rules

__all__ = [
    "DEFAULT_MAPPINGS",
    "RULE_FIELDS",
    "IngestError",
    "auto_map_columns",
    "load_rules_from_csv",
    "read_csv_rows",
    "rows_to_rules",
]
