"""
tests/conftest.py

Pytest configuration and shared fixtures for the DebtDesk test suite.

Spreadsheets are built in memory with openpyxl so every test exercises the
same container format the upload endpoint receives.
"""

from __future__ import annotations

import csv
import io
from typing import Any, Callable, Iterator, Sequence

import pytest
from openpyxl import Workbook

from debtdesk.core.config import reset_settings

MINIMAL_HEADER = ["first_name", "last_name", "account_number", "original_balance"]


def build_xlsx(rows: Sequence[Sequence[Any]], sheet_name: str = "Sheet1") -> bytes:
    """Encode rows as the first worksheet of an xlsx workbook."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_name
    for row in rows:
        sheet.append(list(row))
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def build_csv(rows: Sequence[Sequence[Any]]) -> bytes:
    buffer = io.StringIO(newline="")
    csv.writer(buffer).writerows(rows)
    return buffer.getvalue().encode("utf-8")


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Fresh settings per test, never influenced by the developer's shell."""
    for var in (
        "DEBTDESK_ENV",
        "LOG_LEVEL",
        "DEBTDESK_CORS_ORIGINS",
        "IMPORT_MAX_UPLOAD_BYTES",
        "IMPORT_ACCUMULATE_ROW_ERRORS",
    ):
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def make_xlsx() -> Callable[..., bytes]:
    return build_xlsx


@pytest.fixture
def make_csv() -> Callable[..., bytes]:
    return build_csv


@pytest.fixture
def minimal_header() -> list[str]:
    return list(MINIMAL_HEADER)


@pytest.fixture
def full_header() -> list[str]:
    return [
        "first_name",
        "last_name",
        "email",
        "account_number",
        "original_balance",
        "current_balance",
        "status",
        "city",
        "zip",
        "date_loaded",
    ]


@pytest.fixture
def full_row() -> list[Any]:
    return [
        "Jane",
        "Smith",
        "jane.smith@example.com",
        "ACC-2",
        "2500.00",
        "2000.00",
        "Paid",
        "New York",
        "10001",
        "2024-01-02",
    ]
