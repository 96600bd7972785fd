"""Stage 1: Locate usage tables in section HTML and resolve their columns.

The notebook editor renders usage tables in a handful of layouts. Each layout is
described by a :class:`ColumnMappingStrategy`; the first strategy whose
predicate accepts a table's normalized header set decides its column mapping.
New layouts are supported by appending a strategy to ``COLUMN_MAPPING_STRATEGIES``.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import re
from typing import Callable, Sequence

from bs4 import BeautifulSoup
from bs4.element import Tag

from asr_pipeline.config import LEGACY_AMOUNT_INDEX, LEGACY_MIN_COLUMNS, LEGACY_UNIT_INDEX
from asr_pipeline.normalize import normalize_label

logger = logging.getLogger(__name__)

IDENTITY_HEADER_TOKENS = ("item", "used sample")
AMOUNT_HEADER_TOKENS = ("amount used", "used amount")
EXPLICIT_USED_AMOUNT_TOKEN = "used amount"
UNIT_HEADER_RE = re.compile(r"\bunits?\b")
UNIT_HEADER_LABELS = ("unit", "units")


@dataclass(frozen=True)
class ColumnMapping:
    """Resolved cell indexes for one usage table."""

    identity_index: int
    amount_index: int
    unit_index: int
    strategy: str


@dataclass(frozen=True)
class ColumnMappingStrategy:
    """One known table layout.

    Attributes:
        name: Layout name used in diagnostics.
        applies: Predicate over normalized headers selecting this layout.
        resolve: Returns ``(amount_index, unit_index)`` or ``None`` when the
            layout applies but the table has no usable unit column.
    """

    name: str
    applies: Callable[[Sequence[str]], bool]
    resolve: Callable[[Sequence[str]], tuple[int, int] | None]


@dataclass(frozen=True)
class CandidateTable:
    """Usage table accepted by the locator, with its data rows."""

    position: int
    headers: tuple[str, ...]
    mapping: ColumnMapping
    body_rows: tuple[Tag, ...]


def _first_index(headers: Sequence[str], predicate: Callable[[str], bool]) -> int | None:
    for idx, header in enumerate(headers):
        if predicate(header):
            return idx
    return None


def is_identity_header(header: str) -> bool:
    return any(token in header for token in IDENTITY_HEADER_TOKENS)


def is_amount_header(header: str) -> bool:
    return any(token in header for token in AMOUNT_HEADER_TOKENS)


def is_unit_header(header: str) -> bool:
    return bool(UNIT_HEADER_RE.search(header))


def _has_explicit_used_amount(headers: Sequence[str]) -> bool:
    return any(EXPLICIT_USED_AMOUNT_TOKEN in header for header in headers)


def _resolve_explicit_used_amount(headers: Sequence[str]) -> tuple[int, int] | None:
    amount_index = _first_index(headers, lambda header: EXPLICIT_USED_AMOUNT_TOKEN in header)
    if amount_index is None or amount_index + 1 >= len(headers):
        return None
    return amount_index, amount_index + 1


def _resolve_legacy_fixed_layout(headers: Sequence[str]) -> tuple[int, int] | None:
    return LEGACY_AMOUNT_INDEX, LEGACY_UNIT_INDEX


def _resolve_unit_header(headers: Sequence[str]) -> tuple[int, int] | None:
    """Pick the unit column of a short table.

    A header labelled exactly ``unit``/``units`` wins; otherwise the first
    header mentioning a unit. Identity and amount columns are never taken, so
    ``Amount used (unit)`` stays the amount column.
    """

    amount_index = _first_index(headers, is_amount_header)
    if amount_index is None:
        return None
    taken = {amount_index, _first_index(headers, is_identity_header)}
    candidates = [
        idx for idx, header in enumerate(headers) if idx not in taken and is_unit_header(header)
    ]
    if not candidates:
        return None
    exact = [idx for idx in candidates if headers[idx] in UNIT_HEADER_LABELS]
    return amount_index, (exact or candidates)[0]


COLUMN_MAPPING_STRATEGIES: tuple[ColumnMappingStrategy, ...] = (
    ColumnMappingStrategy(
        name="explicit_used_amount",
        applies=lambda headers: len(headers) >= LEGACY_MIN_COLUMNS
        and _has_explicit_used_amount(headers),
        resolve=_resolve_explicit_used_amount,
    ),
    ColumnMappingStrategy(
        name="legacy_fixed_layout",
        applies=lambda headers: len(headers) >= LEGACY_MIN_COLUMNS,
        resolve=_resolve_legacy_fixed_layout,
    ),
    ColumnMappingStrategy(
        name="unit_header",
        applies=lambda headers: len(headers) < LEGACY_MIN_COLUMNS,
        resolve=_resolve_unit_header,
    ),
)


def parse_document(html_text: str) -> BeautifulSoup:
    """Parse section HTML with the standard library backend."""

    return BeautifulSoup(html_text or "", "html.parser")


def row_cells(row: Tag) -> list[Tag]:
    """Return the direct ``td``/``th`` cells of a table row."""

    return row.find_all(["td", "th"], recursive=False)


def cell_text(cell: Tag) -> str:
    return cell.get_text().strip()


def _own_rows(table: Tag) -> list[Tag]:
    """Rows belonging to ``table`` itself, skipping rows of nested tables."""

    return [row for row in table.find_all("tr") if row.find_parent("table") is table]


def split_header_row(table: Tag) -> tuple[tuple[str, ...], tuple[Tag, ...]]:
    """Split a table into normalized header labels and data rows.

    The header row is the first row inside ``<thead>``, else a first row made of
    ``<th>`` cells only. Without either, the first body row is taken as the
    header and excluded from the data rows.

    Args:
        table: ``<table>`` element.

    Returns:
        ``(headers, body_rows)``; headers are empty for tables without rows.
    """

    rows = _own_rows(table)
    if not rows:
        return (), ()

    header_row: Tag | None = None
    for row in rows:
        thead = row.find_parent("thead")
        if thead is not None and thead.find_parent("table") is table:
            header_row = row
            break
    if header_row is None:
        first_cells = row_cells(rows[0])
        if first_cells and all(cell.name == "th" for cell in first_cells):
            header_row = rows[0]
    if header_row is None:
        header_row = rows[0]

    body_rows = tuple(
        row
        for row in rows
        if row is not header_row and row.find_parent("thead") is None
    )
    headers = tuple(normalize_label(cell.get_text()) for cell in row_cells(header_row))
    return headers, body_rows


def resolve_column_mapping(headers: Sequence[str]) -> ColumnMapping | None:
    """Resolve the column mapping for a normalized header set.

    Args:
        headers: Normalized header labels in column order.

    Returns:
        Mapping from the first applicable strategy, or ``None`` when the table
        is not a usage table or has no resolvable unit column.
    """

    identity_index = _first_index(headers, is_identity_header)
    if identity_index is None or _first_index(headers, is_amount_header) is None:
        return None

    for strategy in COLUMN_MAPPING_STRATEGIES:
        if not strategy.applies(headers):
            continue
        resolved = strategy.resolve(headers)
        if resolved is None:
            logger.warning(
                "Usage table matched layout %s but has no unit column; headers=%s",
                strategy.name,
                list(headers),
            )
            return None
        amount_index, unit_index = resolved
        return ColumnMapping(
            identity_index=identity_index,
            amount_index=amount_index,
            unit_index=unit_index,
            strategy=strategy.name,
        )

    logger.warning("No column mapping strategy applies to headers=%s", list(headers))
    return None


def locate_tables(document: BeautifulSoup | str) -> list[CandidateTable]:
    """Find every usage table in document order.

    Args:
        document: Parsed document or raw HTML text.

    Returns:
        Candidate tables with resolved column mappings; unrelated tables are
        skipped with a debug diagnostic.
    """

    soup = parse_document(document) if isinstance(document, str) else document
    candidates: list[CandidateTable] = []

    for position, table in enumerate(soup.find_all("table")):
        headers, body_rows = split_header_row(table)
        logger.debug("Table %d headers: %s", position, list(headers))
        if not headers:
            continue

        mapping = resolve_column_mapping(headers)
        if mapping is None:
            logger.debug("Table %d is not a usage table", position)
            continue

        logger.info(
            "Table %d accepted as usage table (layout=%s, identity=%d, amount=%d, unit=%d)",
            position,
            mapping.strategy,
            mapping.identity_index,
            mapping.amount_index,
            mapping.unit_index,
        )
        candidates.append(
            CandidateTable(
                position=position,
                headers=headers,
                mapping=mapping,
                body_rows=body_rows,
            )
        )

    if not candidates:
        logger.warning("No usage table found in section HTML")
    return candidates
