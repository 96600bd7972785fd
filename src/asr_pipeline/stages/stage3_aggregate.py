"""Stage 3: Aggregate usage rows into one ledger entry per sample identity."""

from __future__ import annotations

from dataclasses import replace
import logging
from types import MappingProxyType
from typing import Iterable, Mapping

from asr_pipeline.models import LedgerEntry, UsageRow
from asr_pipeline.units import DEFAULT_UNIT_REGISTRY, UnitRegistry, round_amount

logger = logging.getLogger(__name__)

Ledger = Mapping[str, LedgerEntry]


def merge_into_entry(
    entry: LedgerEntry,
    row: UsageRow,
    registry: UnitRegistry,
) -> LedgerEntry | None:
    """Add ``row`` to an existing entry, keeping the entry's unit.

    Both amounts are converted to the shared base unit, summed, and the sum is
    converted back into ``entry.unit`` and rounded.

    Args:
        entry: Current ledger entry for the identity.
        row: New sighting of the same identity.
        registry: Unit vocabulary.

    Returns:
        Updated entry, or ``None`` when either unit is unregistered or the two
        units measure different quantity kinds.
    """

    existing_unit = registry.lookup(entry.unit)
    new_unit = registry.lookup(row.unit)
    if existing_unit is None or new_unit is None:
        logger.warning(
            "Cannot combine %s %s with %s %s for sample %s (ID: %s): unknown unit; "
            "occurrence ignored",
            entry.amount,
            entry.unit,
            row.amount,
            row.unit,
            entry.display_name,
            entry.identity,
        )
        return None
    if existing_unit.quantity_kind is not new_unit.quantity_kind:
        logger.warning(
            "Cannot combine %s (%s) with %s (%s) for sample %s (ID: %s); occurrence ignored",
            entry.unit,
            existing_unit.quantity_kind.value,
            row.unit,
            new_unit.quantity_kind.value,
            entry.display_name,
            entry.identity,
        )
        return None

    total_in_base = registry.to_base(entry.amount, entry.unit) + registry.to_base(
        row.amount, row.unit
    )
    total = round_amount(registry.from_base(total_in_base, entry.unit))
    return replace(entry, amount=total)


def aggregate_rows(
    rows: Iterable[UsageRow],
    registry: UnitRegistry = DEFAULT_UNIT_REGISTRY,
) -> Ledger:
    """Build the document ledger from normalized usage rows.

    The first sighting of an identity creates its entry verbatim, including an
    unregistered unit; validation reports that later. Subsequent sightings are
    merged with :func:`merge_into_entry`; occurrences that cannot be merged are
    dropped without failing the document.

    Args:
        rows: Usage rows in document order.
        registry: Unit vocabulary used for conversions.

    Returns:
        Read-only mapping of identity to entry, in first-sighting order.
    """

    entries: dict[str, LedgerEntry] = {}
    for row in rows:
        existing = entries.get(row.identity)
        if existing is None:
            entries[row.identity] = LedgerEntry(
                identity=row.identity,
                display_name=row.display_name,
                amount=row.amount,
                unit=row.unit,
            )
            logger.info(
                'Found sample ID %s ("%s"): %s %s',
                row.identity,
                row.display_name,
                row.amount,
                row.unit,
            )
            continue

        merged = merge_into_entry(existing, row, registry)
        if merged is None:
            continue
        entries[row.identity] = merged
        logger.info(
            'Sample ID %s ("%s") seen again: +%s %s, total %s %s',
            row.identity,
            existing.display_name,
            row.amount,
            row.unit,
            merged.amount,
            merged.unit,
        )

    return MappingProxyType(entries)
