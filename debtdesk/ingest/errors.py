# debtdesk/ingest/errors.py
"""
Ingest exceptions.

Only MalformedFileError escapes the orchestrator. MissingColumnsError and
RowValidationError are raised by the resolver and the validator and turned
into RowError entries of the IngestionResult.
"""

from __future__ import annotations

from typing import Sequence

from .contract import (
    HEADER_ROW_NUMBER,
    FieldSpec,
    RowError,
    RowErrorKind,
)


class IngestError(Exception):
    """Base exception for the account import pipeline."""


class MalformedFileError(IngestError):
    """The uploaded bytes cannot be decoded as a spreadsheet grid."""

    def __init__(self, reason: str, filename: str | None = None):
        self.reason = reason
        self.filename = filename
        prefix = f"Failed to parse file '{filename}'" if filename else "Failed to parse file"
        super().__init__(f"{prefix}: {reason}")


class MissingColumnsError(IngestError):
    """One or more required canonical fields have no matching header."""

    def __init__(self, missing: Sequence[FieldSpec]):
        self.missing = list(missing)
        names = ", ".join(spec.field.value for spec in self.missing)
        super().__init__(f"Missing required columns: {names}")

    def to_row_errors(self) -> list[RowError]:
        """One row-1 error per missing field, naming its accepted aliases."""
        return [
            RowError(
                row=HEADER_ROW_NUMBER,
                message=(
                    f"Required column '{spec.field.value}' not found. "
                    f"Expected one of: {', '.join(spec.aliases)}"
                ),
                kind=RowErrorKind.STRUCTURAL_MISSING_COLUMNS,
                field=spec.field,
            )
            for spec in self.missing
        ]


class RowValidationError(IngestError):
    """A data row failed validation; carries one or more RowErrors."""

    def __init__(self, errors: Sequence[RowError]):
        self.errors = list(errors)
        super().__init__("; ".join(str(error) for error in self.errors))

    @property
    def row(self) -> int:
        return self.errors[0].row
