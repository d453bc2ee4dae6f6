# debtdesk/ingest/row_validator.py
"""
Row Validator

Extracts, coerces and validates one data row using a resolved column map.
Checks run in a fixed order (names, account number, original balance,
current balance, status, email). By default the first failing check ends
the row; with accumulate=True every failing check is reported.

A failing row never yields a partial record. Any unexpected coercion error
is converted into a ROW_PROCESSING_FAILED RowError for that row.
"""

from __future__ import annotations

import logging
import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Sequence

from .contract import (
    DEFAULT_STATUS,
    PASSTHROUGH_FIELDS,
    VALID_STATUSES,
    CanonicalField,
    NormalizedRecord,
    RowError,
    RowErrorKind,
)
from .errors import RowValidationError
from .grid_loader import cell_text
from .header_resolver import ColumnIndexMap

logger = logging.getLogger(__name__)

# local@domain.tld with no whitespace and a single "@"
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_LEADING_NUMBER = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")

# Fields whose checks are built into validate_row; a contract must require them
VALIDATED_FIELDS = (
    CanonicalField.FIRST_NAME,
    CanonicalField.LAST_NAME,
    CanonicalField.ACCOUNT_NUMBER,
    CanonicalField.ORIGINAL_BALANCE,
)


def _fits_json_number(amount: Decimal) -> bool:
    as_float = float(amount)
    return math.isfinite(as_float) and Decimal(repr(as_float)) == amount


def parse_amount(value: Any) -> Optional[Decimal]:
    """
    Coerce a cell to a Decimal, or None when it is not a number.

    Numeric cells convert directly. Text cells keep only digits, "." and
    "-", then the leading decimal literal is parsed ("$1,250.50" -> 1250.50,
    "1.2.3" -> 1.2).

    Amounts that a JSON number cannot carry exactly (overflowing or with
    more significant digits than a double holds) are not numbers either.
    """
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            return None
    else:
        cleaned = _NON_NUMERIC.sub("", cell_text(value))
        match = _LEADING_NUMBER.match(cleaned)
        if not match:
            return None
        amount = Decimal(match.group(0))

    if not amount.is_finite() or not _fits_json_number(amount):
        return None
    return amount


def _raw_cell(row: Sequence[Any], columns: ColumnIndexMap, field: CanonicalField) -> Any:
    index = columns.get(field)
    if index is None or index >= len(row):
        return None
    return row[index]


def _text(row: Sequence[Any], columns: ColumnIndexMap, field: CanonicalField) -> str:
    return cell_text(_raw_cell(row, columns, field)).strip()


class _RowErrors:
    """Collects errors for one row, raising on the first one unless accumulating."""

    def __init__(self, row_number: int, accumulate: bool):
        self.row_number = row_number
        self.accumulate = accumulate
        self.errors: list[RowError] = []

    def fail(self, message: str, kind: RowErrorKind, field: CanonicalField) -> None:
        self.errors.append(RowError(self.row_number, message, kind, field))
        if not self.accumulate:
            raise RowValidationError(self.errors)


def validate_row(
    row: Sequence[Any],
    columns: ColumnIndexMap,
    row_number: int,
    accumulate: bool = False,
) -> NormalizedRecord:
    """
    Validate one data row.

    Args:
        row: Raw cells of the data row
        columns: Resolved column map
        row_number: 1-based row number in the original file
        accumulate: Report every failing check instead of only the first

    Returns:
        The NormalizedRecord for the row

    Raises:
        RowValidationError: Carrying the row's errors
    """
    sink = _RowErrors(row_number, accumulate)
    try:
        return _build_record(row, columns, sink)
    except RowValidationError:
        raise
    except Exception as exc:
        logger.warning("[ingest] Row %d could not be processed: %s", row_number, exc)
        processing_error = RowError(
            row_number,
            f"Error processing row: {exc}",
            RowErrorKind.ROW_PROCESSING_FAILED,
        )
        raise RowValidationError([*sink.errors, processing_error]) from exc


def _build_record(
    row: Sequence[Any],
    columns: ColumnIndexMap,
    sink: _RowErrors,
) -> NormalizedRecord:
    first_name = _text(row, columns, CanonicalField.FIRST_NAME)
    if not first_name:
        sink.fail(
            "First name is required",
            RowErrorKind.MISSING_REQUIRED_FIELD,
            CanonicalField.FIRST_NAME,
        )

    last_name = _text(row, columns, CanonicalField.LAST_NAME)
    if not last_name:
        sink.fail(
            "Last name is required",
            RowErrorKind.MISSING_REQUIRED_FIELD,
            CanonicalField.LAST_NAME,
        )

    account_number = _text(row, columns, CanonicalField.ACCOUNT_NUMBER)
    if not account_number:
        sink.fail(
            "Account number is required",
            RowErrorKind.MISSING_REQUIRED_FIELD,
            CanonicalField.ACCOUNT_NUMBER,
        )

    original_balance = parse_amount(_raw_cell(row, columns, CanonicalField.ORIGINAL_BALANCE))
    if original_balance is None or original_balance <= 0:
        sink.fail(
            "Original balance must be a positive number",
            RowErrorKind.INVALID_NUMBER,
            CanonicalField.ORIGINAL_BALANCE,
        )

    # Unparseable or empty current balance silently falls back to the original
    current_balance = original_balance
    current_cell = _raw_cell(row, columns, CanonicalField.CURRENT_BALANCE)
    if cell_text(current_cell).strip():
        parsed = parse_amount(current_cell)
        if parsed is not None:
            current_balance = parsed

    status = _text(row, columns, CanonicalField.STATUS).lower() or DEFAULT_STATUS
    if status not in VALID_STATUSES:
        sink.fail(
            f"Invalid status '{status}'. Must be one of: {', '.join(VALID_STATUSES)}",
            RowErrorKind.INVALID_STATUS,
            CanonicalField.STATUS,
        )

    email = _text(row, columns, CanonicalField.EMAIL)
    if email and not EMAIL_PATTERN.fullmatch(email):
        sink.fail("Invalid email format", RowErrorKind.INVALID_EMAIL, CanonicalField.EMAIL)

    if sink.errors:
        raise RowValidationError(sink.errors)

    optional = {
        field.value: _text(row, columns, field) or None for field in PASSTHROUGH_FIELDS
    }

    return NormalizedRecord(
        first_name=first_name,
        last_name=last_name,
        account_number=account_number,
        original_balance=original_balance,
        current_balance=current_balance,
        status=status,
        email=email or None,
        **optional,
    )
