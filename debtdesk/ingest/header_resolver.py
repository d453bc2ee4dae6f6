# debtdesk/ingest/header_resolver.py
"""
Header Resolver

Maps the header row of a grid onto canonical fields. For each field the
aliases are tried in declared priority order and the first alias present
anywhere in the header row wins, not the left-most matching column.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from .contract import ACCOUNT_CONTRACT, CanonicalField, FieldContract, FieldSpec
from .errors import MissingColumnsError
from .grid_loader import cell_text

logger = logging.getLogger(__name__)

ColumnIndexMap = Mapping[CanonicalField, int]


@dataclass(frozen=True)
class HeaderResolution:
    """Result of matching a header row against a FieldContract."""

    columns: ColumnIndexMap
    missing: tuple[FieldSpec, ...] = ()
    matched_aliases: Mapping[CanonicalField, str] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def ok(self) -> bool:
        return not self.missing


def normalize_header(cell: Any) -> str:
    """Lower-case and trim a header cell."""
    return cell_text(cell).lower().strip()


def match_headers(
    header_row: Sequence[Any],
    contract: FieldContract = ACCOUNT_CONTRACT,
) -> HeaderResolution:
    """
    Match every contract field against the header row without raising.

    Args:
        header_row: Raw cells of the first grid row
        contract: Field table to resolve against

    Returns:
        HeaderResolution with an immutable column map and unresolved
        required fields
    """
    headers = [normalize_header(cell) for cell in header_row]

    columns: dict[CanonicalField, int] = {}
    matched: dict[CanonicalField, str] = {}
    missing: list[FieldSpec] = []

    for spec in contract:
        for alias in spec.aliases:
            if alias in headers:
                columns[spec.field] = headers.index(alias)
                matched[spec.field] = alias
                break
        else:
            if spec.required:
                missing.append(spec)

    logger.debug(
        "[ingest] Resolved %d/%d columns, missing required: %s",
        len(columns),
        len(contract),
        [spec.field.value for spec in missing],
    )

    return HeaderResolution(
        columns=MappingProxyType(columns),
        missing=tuple(missing),
        matched_aliases=MappingProxyType(matched),
    )


def resolve_columns(
    header_row: Sequence[Any],
    contract: FieldContract = ACCOUNT_CONTRACT,
) -> ColumnIndexMap:
    """
    Resolve the column map, failing when a required field is unresolved.

    Raises:
        MissingColumnsError: Naming every unresolved required field
    """
    resolution = match_headers(header_row, contract)
    if resolution.missing:
        raise MissingColumnsError(resolution.missing)
    return resolution.columns
