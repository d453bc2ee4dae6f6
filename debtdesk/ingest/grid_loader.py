# debtdesk/ingest/grid_loader.py
"""
Cell Grid Loader

Decodes uploaded bytes into a RawGrid: a row-major list of rows, each a list
of raw cell values. Row 0 is the header row. No business validation happens
here, only structural decoding.

Supported containers:
    - xlsx (zipped XML workbook), first worksheet only, via openpyxl
    - csv (UTF-8, dialect sniffed), when the upload is named *.csv

Usage:
    from debtdesk.ingest.grid_loader import load_grid

    grid = load_grid(content, filename="accounts.xlsx")
"""

from __future__ import annotations

import csv
import io
import logging
import math
from datetime import date, datetime, time
from typing import Any, List, Optional

from openpyxl import load_workbook

from .errors import MalformedFileError

logger = logging.getLogger(__name__)

RawGrid = List[List[Any]]

XLSX_SIGNATURE = b"PK\x03\x04"
OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

SUPPORTED_FORMATS = ("xlsx", "csv")


def detect_format(content: bytes, filename: Optional[str] = None) -> str:
    """Pick the container format from the byte signature, then the filename."""
    if not content:
        raise MalformedFileError("file is empty", filename)
    if content.startswith(XLSX_SIGNATURE):
        return "xlsx"
    if content.startswith(OLE2_SIGNATURE):
        raise MalformedFileError(
            "legacy .xls workbooks are not supported, save the file as .xlsx", filename
        )
    if filename and filename.lower().endswith(".csv"):
        return "csv"
    raise MalformedFileError("unsupported file format, expected .xlsx or .csv", filename)


def load_grid(
    content: bytes,
    filename: Optional[str] = None,
    fmt: Optional[str] = None,
) -> RawGrid:
    """
    Decode file bytes into a RawGrid.

    Args:
        content: Raw bytes of the uploaded file
        filename: Original filename, used for format detection and messages
        fmt: Force a container format ("xlsx" or "csv")

    Returns:
        Row-major grid with trailing empty rows removed

    Raises:
        MalformedFileError: If the bytes cannot be decoded as a grid
    """
    if fmt is None:
        fmt = detect_format(content, filename)
    elif fmt not in SUPPORTED_FORMATS:
        raise MalformedFileError(f"unsupported format '{fmt}'", filename)

    if fmt == "xlsx":
        grid = _load_xlsx(content, filename)
    else:
        grid = _load_csv(content, filename)

    grid = _trim_trailing_empty_rows(grid)
    logger.debug("[ingest] Decoded %s grid: %d rows", fmt, len(grid))
    return grid


def _load_xlsx(content: bytes, filename: Optional[str]) -> RawGrid:
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as exc:
        raise MalformedFileError(f"not a readable xlsx workbook ({exc})", filename) from exc

    try:
        if not workbook.worksheets:
            raise MalformedFileError("workbook contains no worksheets", filename)
        sheet = workbook.worksheets[0]
        try:
            return [list(row) for row in sheet.iter_rows(values_only=True)]
        except Exception as exc:
            raise MalformedFileError(f"worksheet could not be read ({exc})", filename) from exc
    finally:
        workbook.close()


def _load_csv(content: bytes, filename: Optional[str]) -> RawGrid:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise MalformedFileError("csv file is not valid UTF-8", filename) from exc

    sample = text[:8192]
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=",\t;|")
    except csv.Error:
        dialect = csv.excel  # type: ignore

    try:
        return [list(row) for row in csv.reader(io.StringIO(text, newline=""), dialect)]
    except csv.Error as exc:
        raise MalformedFileError(f"csv could not be parsed ({exc})", filename) from exc


def _trim_trailing_empty_rows(grid: RawGrid) -> RawGrid:
    end = len(grid)
    while end > 0 and all(cell_text(cell) == "" for cell in grid[end - 1]):
        end -= 1
    return grid[:end]


def cell_text(value: Any) -> str:
    """
    Stringify a raw cell value, untrimmed.

    None becomes "", integral floats drop the ".0", dates render ISO-8601.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)
