# debtdesk/ingest/__init__.py
"""
Account Import Pipeline

Turns an uploaded spreadsheet into validated account records plus
per-row diagnostics.

Components:
    - grid_loader: bytes -> RawGrid (xlsx via openpyxl, csv)
    - header_resolver: header row -> ColumnIndexMap
    - row_validator: one row -> NormalizedRecord or RowErrors
    - pipeline: drives the three above into an IngestionResult
    - template: example file in the same container format

Usage:
    from debtdesk.ingest import ingest_file

    result = ingest_file(content, filename="accounts.xlsx")
"""

from debtdesk.ingest.contract import (
    ACCOUNT_CONTRACT,
    VALID_STATUSES,
    CanonicalField,
    FieldContract,
    FieldSpec,
    IngestionResult,
    NormalizedRecord,
    RowError,
    RowErrorKind,
)
from debtdesk.ingest.errors import (
    IngestError,
    MalformedFileError,
    MissingColumnsError,
    RowValidationError,
)
from debtdesk.ingest.grid_loader import load_grid
from debtdesk.ingest.header_resolver import match_headers, resolve_columns
from debtdesk.ingest.pipeline import ingest_file, ingest_grid
from debtdesk.ingest.row_validator import validate_row
from debtdesk.ingest.template import build_template_grid, generate_template

__all__ = [
    "ACCOUNT_CONTRACT",
    "VALID_STATUSES",
    "CanonicalField",
    "FieldContract",
    "FieldSpec",
    "IngestionResult",
    "NormalizedRecord",
    "RowError",
    "RowErrorKind",
    "IngestError",
    "MalformedFileError",
    "MissingColumnsError",
    "RowValidationError",
    "load_grid",
    "match_headers",
    "resolve_columns",
    "validate_row",
    "ingest_grid",
    "ingest_file",
    "build_template_grid",
    "generate_template",
]
