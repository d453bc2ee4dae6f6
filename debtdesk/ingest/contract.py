# debtdesk/ingest/contract.py
"""
Account Import Contract - Single Source of Truth

This module defines the canonical data contract for spreadsheet account
imports. Every stage of the pipeline (header resolution, row validation,
template generation) reads the same FieldContract.

Usage:
    from debtdesk.ingest.contract import (
        ACCOUNT_CONTRACT,
        CanonicalField,
        RowErrorKind,
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Iterator, Optional

# =============================================================================
# Canonical Fields
# =============================================================================


class CanonicalField(str, Enum):
    """Semantic account columns, valued by their primary header name."""

    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    EMAIL = "email"
    ADDRESS = "address"
    CITY = "city"
    STATE = "state"
    ZIP = "zip"
    PHONE = "phone"
    ACCOUNT_NUMBER = "account_number"
    ORIGINAL_BALANCE = "original_balance"
    CURRENT_BALANCE = "current_balance"
    STATUS = "status"
    CREDITOR_NAME = "creditor_name"
    CLIENT_NAME = "client_name"
    PORTFOLIO_ID = "portfolio_id"
    CASE_FILE_NUMBER = "case_file_number"
    DATE_LOADED = "date_loaded"
    ORIGINATION_DATE = "origination_date"
    CHARGED_OFF_DATE = "charged_off_date"
    PURCHASE_DATE = "purchase_date"


@dataclass(frozen=True)
class FieldSpec:
    """One canonical field: its aliases (priority order) and required flag."""

    field: CanonicalField
    aliases: tuple[str, ...]
    required: bool = False

    @property
    def primary_alias(self) -> str:
        return self.aliases[0]


class FieldContract:
    """
    Immutable table of FieldSpecs in declared order.

    Injected into the header resolver and the template generator so tests
    can swap in a reduced contract.
    """

    def __init__(self, specs: tuple[FieldSpec, ...]):
        self._specs = tuple(specs)
        self._by_field = {spec.field: spec for spec in self._specs}

    def __iter__(self) -> Iterator[FieldSpec]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    def spec_for(self, canonical: CanonicalField) -> FieldSpec:
        return self._by_field[canonical]

    @property
    def required_fields(self) -> tuple[CanonicalField, ...]:
        return tuple(spec.field for spec in self._specs if spec.required)

    @property
    def primary_headers(self) -> list[str]:
        """Primary alias of every field, in declared order."""
        return [spec.primary_alias for spec in self._specs]


# Aliases are matched against lower-cased, trimmed header cells.
# The first alias present in the file wins, regardless of column position.
ACCOUNT_CONTRACT = FieldContract(
    (
        FieldSpec(CanonicalField.FIRST_NAME, ("first_name", "firstname", "first name"), True),
        FieldSpec(CanonicalField.LAST_NAME, ("last_name", "lastname", "last name"), True),
        FieldSpec(CanonicalField.EMAIL, ("email", "email_address")),
        FieldSpec(CanonicalField.ADDRESS, ("address", "street_address")),
        FieldSpec(CanonicalField.CITY, ("city",)),
        FieldSpec(CanonicalField.STATE, ("state",)),
        FieldSpec(CanonicalField.ZIP, ("zip", "zipcode", "zip_code")),
        FieldSpec(CanonicalField.PHONE, ("phone", "phone_number", "telephone")),
        FieldSpec(
            CanonicalField.ACCOUNT_NUMBER,
            ("account_number", "accountnumber", "account number", "account #"),
            True,
        ),
        FieldSpec(
            CanonicalField.ORIGINAL_BALANCE,
            ("original_balance", "originalbalance", "original balance"),
            True,
        ),
        FieldSpec(
            CanonicalField.CURRENT_BALANCE,
            ("current_balance", "currentbalance", "current balance", "balance"),
        ),
        FieldSpec(CanonicalField.STATUS, ("status",)),
        FieldSpec(CanonicalField.CREDITOR_NAME, ("creditor_name", "creditor", "original_creditor")),
        FieldSpec(CanonicalField.CLIENT_NAME, ("client_name", "client")),
        FieldSpec(CanonicalField.PORTFOLIO_ID, ("portfolio_id", "portfolio")),
        FieldSpec(
            CanonicalField.CASE_FILE_NUMBER, ("case_file_number", "case_number", "file_number")
        ),
        FieldSpec(CanonicalField.DATE_LOADED, ("date_loaded", "load_date")),
        FieldSpec(CanonicalField.ORIGINATION_DATE, ("origination_date", "orig_date")),
        FieldSpec(CanonicalField.CHARGED_OFF_DATE, ("charged_off_date", "charge_off_date")),
        FieldSpec(CanonicalField.PURCHASE_DATE, ("purchase_date",)),
    )
)

# Closed status set, in the order used by error messages
VALID_STATUSES: tuple[str, ...] = ("active", "paid", "inactive", "disputed")
DEFAULT_STATUS = "active"

# Optional text fields copied through as opaque trimmed strings
# (dates included: no format checking is applied to them)
PASSTHROUGH_FIELDS: tuple[CanonicalField, ...] = (
    CanonicalField.ADDRESS,
    CanonicalField.CITY,
    CanonicalField.STATE,
    CanonicalField.ZIP,
    CanonicalField.PHONE,
    CanonicalField.CREDITOR_NAME,
    CanonicalField.CLIENT_NAME,
    CanonicalField.PORTFOLIO_ID,
    CanonicalField.CASE_FILE_NUMBER,
    CanonicalField.DATE_LOADED,
    CanonicalField.ORIGINATION_DATE,
    CanonicalField.CHARGED_OFF_DATE,
    CanonicalField.PURCHASE_DATE,
)

# Header rows sit at row 1 of the original file
HEADER_ROW_NUMBER = 1


# =============================================================================
# Error Codes
# =============================================================================


class RowErrorKind(Enum):
    """
    Stable error codes reported next to the human-readable message.

    Prefixes:
        - STRUCT_* : whole-file problems, always reported at row 1
        - ROW_*    : one data row failed
    """

    MISSING_REQUIRED_FIELD = ("ROW_REQUIRED", "Required field is empty")
    INVALID_NUMBER = ("ROW_NUMBER", "Value is not a positive number")
    INVALID_STATUS = ("ROW_STATUS", "Status is not one of the accepted values")
    INVALID_EMAIL = ("ROW_EMAIL", "Email address is malformed")
    ROW_PROCESSING_FAILED = ("ROW_PROCESSING", "Row could not be processed")
    STRUCTURAL_MISSING_COLUMNS = ("STRUCT_COLUMNS", "Required column is missing")
    STRUCTURAL_TOO_FEW_ROWS = ("STRUCT_ROWS", "File has no data rows")

    def __init__(self, code: str, description: str):
        self._code = code
        self._description = description

    @property
    def code(self) -> str:
        return self._code

    @property
    def description(self) -> str:
        return self._description

    @property
    def is_structural(self) -> bool:
        return self._code.startswith("STRUCT_")


# =============================================================================
# Result Types
# =============================================================================


@dataclass(frozen=True)
class RowError:
    """A diagnostic tied to one 1-based row of the original file."""

    row: int
    message: str
    kind: RowErrorKind = RowErrorKind.ROW_PROCESSING_FAILED
    field: Optional[CanonicalField] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "row": self.row,
            "message": self.message,
            "code": self.kind.code,
            "field": self.field.value if self.field else None,
        }

    def __str__(self) -> str:
        return f"row {self.row}: {self.message}"


@dataclass(frozen=True)
class NormalizedRecord:
    """One validated account. Absent optional fields are None, never ""."""

    first_name: str
    last_name: str
    account_number: str
    original_balance: Decimal
    current_balance: Decimal
    status: str = DEFAULT_STATUS
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    phone: Optional[str] = None
    creditor_name: Optional[str] = None
    client_name: Optional[str] = None
    portfolio_id: Optional[str] = None
    case_file_number: Optional[str] = None
    date_loaded: Optional[str] = None
    origination_date: Optional[str] = None
    charged_off_date: Optional[str] = None
    purchase_date: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """camelCase payload for the bulk-insert endpoint; absent fields omitted."""
        payload: dict[str, Any] = {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "accountNumber": self.account_number,
            "originalBalance": float(self.original_balance),
            "currentBalance": float(self.current_balance),
            "status": self.status,
        }
        optional = {
            "email": self.email,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zip": self.zip,
            "phone": self.phone,
            "creditorName": self.creditor_name,
            "clientName": self.client_name,
            "portfolioId": self.portfolio_id,
            "caseFileNumber": self.case_file_number,
            "dateLoaded": self.date_loaded,
            "originationDate": self.origination_date,
            "chargedOffDate": self.charged_off_date,
            "purchaseDate": self.purchase_date,
        }
        payload.update({key: value for key, value in optional.items() if value is not None})
        return payload


@dataclass
class IngestionResult:
    """Clean records plus row diagnostics from one ingestion run."""

    records: list[NormalizedRecord] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)
    rows_processed: int = 0

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def has_records(self) -> bool:
        return bool(self.records)

    @property
    def structural(self) -> bool:
        """True when the whole file was rejected before row validation."""
        return any(error.kind.is_structural for error in self.errors)

    def summary(self) -> str:
        """Human-readable summary of the run."""
        if self.structural:
            return f"Import REJECTED: {len(self.errors)} structural error(s)"
        return (
            f"Import {'OK' if self.ok else 'PARTIAL'}: "
            f"{self.rows_processed} rows, "
            f"{len(self.records)} valid, "
            f"{len(self.errors)} errored"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "records": [record.to_dict() for record in self.records],
            "errors": [error.to_dict() for error in self.errors],
            "summary": {
                "rows": self.rows_processed,
                "records": len(self.records),
                "errors": len(self.errors),
                "structural": self.structural,
            },
        }
