"""Read/write helpers for section exports and ledger artifacts."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from asr_pipeline.models import LedgerEntry, Section
from asr_pipeline.reporting.messages import format_amount

TSV_HEADER = ["identity", "display_name", "amount", "unit"]


def write_ledger_tsv(
    ledger: Mapping[str, LedgerEntry],
    output_path: Path,
    include_header: bool = True,
) -> None:
    """Write ledger entries to a TSV file in first-sighting order.

    Args:
        ledger: Finalized ledger.
        output_path: Destination TSV file path.
        include_header: Whether to include a header row.
    """

    with output_path.open("w", encoding="utf-8") as handle:
        if include_header:
            handle.write("\t".join(TSV_HEADER))
            handle.write("\n")
        for entry in ledger.values():
            handle.write(
                "\t".join(
                    [
                        entry.identity,
                        entry.display_name,
                        format_amount(entry.amount),
                        entry.unit,
                    ]
                )
            )
            handle.write("\n")


def _section_from_json(item: Mapping[str, Any]) -> Section:
    section_id = item.get("expJournalID")
    contents = item.get("contents")
    return Section(
        section_header=str(item.get("sectionHeader") or ""),
        contents=contents if isinstance(contents, str) else None,
        section_id=str(section_id) if section_id is not None else None,
    )


def read_sections_json(path: Path) -> list[Section]:
    """Load notebook sections exported from the experiment sections endpoint.

    Accepts either a bare list of section objects or a ``{"data": [...]}``
    envelope. Only ``sectionHeader``, ``contents`` and ``expJournalID`` are read.

    Args:
        path: JSON export path.

    Returns:
        Sections in export order.

    Raises:
        ValueError: If the document is not a list of section objects.
    """

    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)

    if isinstance(payload, dict):
        payload = payload.get("data")
    if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
        raise ValueError(f"Expected a list of section objects in {path}")
    return [_section_from_json(item) for item in payload]
