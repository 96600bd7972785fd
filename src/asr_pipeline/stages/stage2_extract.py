"""Stage 2: Extract usage rows from located tables.

The editor renders a sample link in two shapes::

    <td><span class="protVar"><span class="protVarSampleField"><span class="sampleFieldContent">
        <a onclick="Experiment.Section.Sample.view(12345)">Glucose</a>
    </span></span></span></td>

    <td><a onclick="Experiment.Section.Sample.view(12345)">
        <span class="protVar protVarSampleField sampleFieldContent">Glucose</span>
    </a></td>

Amount and unit cells use the same ``protVar`` variable markup with varying
depth. Both cell kinds are read through ordered strategy lists; the first
strategy producing a non-empty result wins.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Iterable, Sequence, TypeVar

from bs4.element import Tag

from asr_pipeline.config import SAMPLE_VIEW_ACTION, SAMPLE_VIEW_RE
from asr_pipeline.models import RawRow, UsageRow
from asr_pipeline.normalize import normalize_unit, parse_amount
from asr_pipeline.stages.stage1_locate import CandidateTable, cell_text, row_cells

logger = logging.getLogger(__name__)

T = TypeVar("T")

ACTION_ANCHOR_SELECTOR = f'a[onclick*="{SAMPLE_VIEW_ACTION}"]'


@dataclass(frozen=True)
class SampleReference:
    """Identity and display label read from an identity cell."""

    identity: str
    display_name: str


def first_result(cell: Tag, strategies: Sequence[Callable[[Tag], T | None]]) -> T | None:
    """Apply ``strategies`` in order and return the first truthy result."""

    for strategy in strategies:
        result = strategy(cell)
        if result:
            return result
    return None


def _reference_from_anchor(anchor: Tag, display_name: str) -> SampleReference | None:
    match = SAMPLE_VIEW_RE.search(anchor.get("onclick") or "")
    if not match or not display_name:
        return None
    return SampleReference(identity=match.group(1), display_name=display_name)


def anchor_with_label(cell: Tag) -> SampleReference | None:
    """Action anchor anywhere in the cell, labelled by its inner span if any."""

    anchor = cell.select_one(ACTION_ANCHOR_SELECTOR)
    if anchor is None:
        return None
    label = anchor.find("span")
    display_name = (label if label is not None else anchor).get_text().strip()
    return _reference_from_anchor(anchor, display_name)


def anchor_inside_span(cell: Tag) -> SampleReference | None:
    """Action anchor wrapped by a label span, labelled by the anchor text."""

    anchor = cell.select_one(f"span {ACTION_ANCHOR_SELECTOR}")
    if anchor is None:
        return None
    return _reference_from_anchor(anchor, anchor.get_text().strip())


IDENTITY_STRATEGIES: tuple[Callable[[Tag], SampleReference | None], ...] = (
    anchor_with_label,
    anchor_inside_span,
)


def _selected_text(selector: str) -> Callable[[Tag], str | None]:
    def strategy(cell: Tag) -> str | None:
        element = cell.select_one(selector)
        return element.get_text().strip() if element is not None else None

    strategy.__name__ = f"selected_text({selector!r})"
    return strategy


VALUE_STRATEGIES: tuple[Callable[[Tag], str | None], ...] = (
    _selected_text("span.protVar > span"),
    _selected_text("span.protVar"),
    _selected_text("span"),
    cell_text,
)


def extract_sample_reference(cell: Tag) -> SampleReference | None:
    return first_result(cell, IDENTITY_STRATEGIES)


def extract_cell_value(cell: Tag) -> str:
    """Read the visible value of an amount or unit cell, or ``""`` when blank."""

    return first_result(cell, VALUE_STRATEGIES) or ""


def extract_raw_rows(candidate: CandidateTable) -> list[RawRow]:
    """Extract raw usage rows from one located table.

    Rows without a sample link are skipped quietly since tables routinely hold
    section titles, notes and totals. Rows with a sample but a blank amount or
    unit are dropped with a warning.

    Args:
        candidate: Table accepted by :func:`locate_tables`.

    Returns:
        Raw rows in table order.
    """

    mapping = candidate.mapping
    needed = max(mapping.identity_index, mapping.amount_index, mapping.unit_index) + 1
    rows: list[RawRow] = []

    for row_number, row in enumerate(candidate.body_rows, start=1):
        cells = row_cells(row)
        if len(cells) < needed:
            logger.debug(
                "Table %d row %d has %d cells, %d needed; skipped",
                candidate.position,
                row_number,
                len(cells),
                needed,
            )
            continue

        reference = extract_sample_reference(cells[mapping.identity_index])
        if reference is None:
            logger.debug("Table %d row %d has no sample reference", candidate.position, row_number)
            continue

        raw_amount = extract_cell_value(cells[mapping.amount_index])
        raw_unit = extract_cell_value(cells[mapping.unit_index])
        if not raw_amount or not raw_unit:
            logger.warning(
                "Could not extract complete data from table %d row %d: "
                "sample=%s (ID: %s), amount=%r, unit=%r",
                candidate.position,
                row_number,
                reference.display_name,
                reference.identity,
                raw_amount,
                raw_unit,
            )
            continue

        rows.append(
            RawRow(
                identity=reference.identity,
                display_name=reference.display_name,
                raw_amount=raw_amount,
                raw_unit=raw_unit,
            )
        )

    return rows


def normalize_rows(rows: Iterable[RawRow]) -> list[UsageRow]:
    """Clean amounts and units, dropping rows without a positive amount."""

    usage_rows: list[UsageRow] = []
    for row in rows:
        amount = parse_amount(row.raw_amount)
        unit = normalize_unit(row.raw_unit)
        if amount is None or not unit:
            logger.warning(
                'Item "%s" (ID: %s) has an invalid amount used: %r or missing unit: %r',
                row.display_name,
                row.identity,
                row.raw_amount,
                row.raw_unit,
            )
            continue
        usage_rows.append(
            UsageRow(
                identity=row.identity,
                display_name=row.display_name,
                amount=amount,
                unit=unit,
            )
        )
    return usage_rows
