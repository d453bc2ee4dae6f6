# debtdesk/ingest/template.py
"""
Template Generator

Builds the downloadable example file users fill in: one header row with
every field's primary alias, followed by example accounts that pass every
validation rule.
"""

from __future__ import annotations

import csv
import io
from typing import Any

from openpyxl import Workbook

from .contract import ACCOUNT_CONTRACT, CanonicalField, FieldContract
from .grid_loader import RawGrid

TEMPLATE_SHEET_NAME = "Accounts Template"

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MEDIA_TYPE = "text/csv"

EXAMPLE_ACCOUNTS: tuple[dict[CanonicalField, str], ...] = (
    {
        CanonicalField.FIRST_NAME: "John",
        CanonicalField.LAST_NAME: "Doe",
        CanonicalField.EMAIL: "john.doe@example.com",
        CanonicalField.ADDRESS: "123 Main St",
        CanonicalField.CITY: "Chicago",
        CanonicalField.STATE: "IL",
        CanonicalField.ZIP: "60601",
        CanonicalField.PHONE: "(555) 123-4567",
        CanonicalField.ACCOUNT_NUMBER: "ACC-12345",
        CanonicalField.ORIGINAL_BALANCE: "1000.00",
        CanonicalField.CURRENT_BALANCE: "750.00",
        CanonicalField.STATUS: "active",
        CanonicalField.CREDITOR_NAME: "First Financial",
        CanonicalField.CLIENT_NAME: "Legal Recovery Services",
        CanonicalField.PORTFOLIO_ID: "Portfolio-2024",
        CanonicalField.CASE_FILE_NUMBER: "CASE-123456",
        CanonicalField.DATE_LOADED: "2024-01-01",
        CanonicalField.ORIGINATION_DATE: "2023-06-15",
        CanonicalField.CHARGED_OFF_DATE: "2023-12-01",
        CanonicalField.PURCHASE_DATE: "2024-01-01",
    },
    {
        CanonicalField.FIRST_NAME: "Jane",
        CanonicalField.LAST_NAME: "Smith",
        CanonicalField.EMAIL: "jane.smith@example.com",
        CanonicalField.ADDRESS: "456 Oak Ave",
        CanonicalField.CITY: "New York",
        CanonicalField.STATE: "NY",
        CanonicalField.ZIP: "10001",
        CanonicalField.PHONE: "(555) 987-6543",
        CanonicalField.ACCOUNT_NUMBER: "ACC-12346",
        CanonicalField.ORIGINAL_BALANCE: "2500.00",
        CanonicalField.CURRENT_BALANCE: "2000.00",
        CanonicalField.STATUS: "active",
        CanonicalField.CREDITOR_NAME: "Credit Corp",
        CanonicalField.CLIENT_NAME: "Legal Recovery Services",
        CanonicalField.PORTFOLIO_ID: "Portfolio-2024",
        CanonicalField.CASE_FILE_NUMBER: "CASE-123457",
        CanonicalField.DATE_LOADED: "2024-01-02",
        CanonicalField.ORIGINATION_DATE: "2023-07-20",
        CanonicalField.CHARGED_OFF_DATE: "2023-12-15",
        CanonicalField.PURCHASE_DATE: "2024-01-02",
    },
)


def build_template_grid(contract: FieldContract = ACCOUNT_CONTRACT) -> RawGrid:
    """Header row of primary aliases plus one row per example account."""
    grid: RawGrid = [contract.primary_headers]
    for example in EXAMPLE_ACCOUNTS:
        grid.append([example.get(spec.field, "") for spec in contract])
    return grid


def render_xlsx(grid: RawGrid, sheet_name: str = TEMPLATE_SHEET_NAME) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_name
    for row in grid:
        sheet.append(row)

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def render_csv(grid: RawGrid) -> bytes:
    buffer = io.StringIO(newline="")
    writer = csv.writer(buffer)
    writer.writerows(grid)
    return buffer.getvalue().encode("utf-8")


def generate_template(fmt: str = "xlsx", contract: FieldContract = ACCOUNT_CONTRACT) -> bytes:
    """
    Encode the template grid in a format the grid loader accepts.

    Args:
        fmt: "xlsx" (default) or "csv"
        contract: Field table providing the header row

    Returns:
        File bytes ready for download
    """
    grid = build_template_grid(contract)
    if fmt == "xlsx":
        return render_xlsx(grid)
    if fmt == "csv":
        return render_csv(grid)
    raise ValueError(f"Unsupported template format: {fmt}")


def template_download(fmt: str = "xlsx") -> dict[str, Any]:
    """Filename and media type for serving the template."""
    media_type = XLSX_MEDIA_TYPE if fmt == "xlsx" else CSV_MEDIA_TYPE
    return {"filename": f"accounts_template.{fmt}", "media_type": media_type}
