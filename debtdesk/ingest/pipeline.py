# debtdesk/ingest/pipeline.py
"""
Ingestion Orchestrator

bytes -> grid (loader) -> column map (resolver, once) -> records/errors
(validator, per row, in original order).

Row problems never raise: they are reported in IngestionResult.errors next
to whatever records were valid. Only MalformedFileError escapes, when the
bytes cannot be decoded at all.

Usage:
    from debtdesk.ingest.pipeline import ingest_file

    result = ingest_file(content, filename="accounts.xlsx")
    print(result.summary())
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from .contract import (
    ACCOUNT_CONTRACT,
    HEADER_ROW_NUMBER,
    FieldContract,
    IngestionResult,
    RowError,
    RowErrorKind,
)
from .errors import MissingColumnsError, RowValidationError
from .grid_loader import load_grid
from .header_resolver import resolve_columns
from .row_validator import VALIDATED_FIELDS, validate_row

logger = logging.getLogger(__name__)

# Header row plus at least one data row
MIN_GRID_ROWS = 2

# Data row i (0-based within the grid) is row i + 1 of the file
FIRST_DATA_ROW_NUMBER = HEADER_ROW_NUMBER + 1


def ingest_grid(
    grid: Sequence[Sequence[Any]],
    contract: FieldContract = ACCOUNT_CONTRACT,
    accumulate: bool = False,
) -> IngestionResult:
    """
    Run header resolution and row validation over a decoded grid.

    Args:
        grid: Row-major cells, header row first
        contract: Field table used for header resolution. It must mark every
            field the row validator checks (names, account number, original
            balance) as required.
        accumulate: Report every failing check per row instead of the first

    Returns:
        IngestionResult with records in original row order

    Raises:
        ValueError: If the contract does not require the validated fields
    """
    unchecked = [f.value for f in VALIDATED_FIELDS if f not in contract.required_fields]
    if unchecked:
        raise ValueError(f"Contract must require fields: {', '.join(unchecked)}")

    result = IngestionResult()

    if len(grid) < MIN_GRID_ROWS:
        logger.debug("[ingest] Grid has %d row(s), rejecting", len(grid))
        result.errors.append(
            RowError(
                row=HEADER_ROW_NUMBER,
                message="File must contain at least a header row and one data row",
                kind=RowErrorKind.STRUCTURAL_TOO_FEW_ROWS,
            )
        )
        return result

    try:
        columns = resolve_columns(grid[0], contract)
    except MissingColumnsError as exc:
        logger.debug("[ingest] Header resolution failed: %s", exc)
        result.errors.extend(exc.to_row_errors())
        return result

    for offset, row in enumerate(grid[1:]):
        row_number = FIRST_DATA_ROW_NUMBER + offset
        result.rows_processed += 1
        try:
            result.records.append(validate_row(row, columns, row_number, accumulate))
        except RowValidationError as exc:
            result.errors.extend(exc.errors)

    return result


def ingest_file(
    content: bytes,
    filename: Optional[str] = None,
    fmt: Optional[str] = None,
    contract: FieldContract = ACCOUNT_CONTRACT,
    accumulate: bool = False,
) -> IngestionResult:
    """
    Decode uploaded bytes and ingest them.

    Raises:
        MalformedFileError: If the bytes are not a readable spreadsheet
    """
    grid = load_grid(content, filename=filename, fmt=fmt)
    result = ingest_grid(grid, contract=contract, accumulate=accumulate)

    logger.info(
        "[ingest] %s (file=%s)",
        result.summary(),
        filename or "<upload>",
        extra={
            "rows_processed": result.rows_processed,
            "records": len(result.records),
            "row_errors": len(result.errors),
        },
    )
    return result
