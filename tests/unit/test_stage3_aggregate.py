"""Unit tests for Stage 3 ledger aggregation."""

from __future__ import annotations

import logging

import pytest

from asr_pipeline.models import LedgerEntry, QuantityKind, UsageRow
from asr_pipeline.stages.stage3_aggregate import aggregate_rows
from asr_pipeline.units import DEFAULT_UNIT_REGISTRY, UnitRegistry


def test_first_sighting_is_stored_verbatim() -> None:
    ledger = aggregate_rows([UsageRow("42", "Glucose", 12.5, "ml")])

    assert dict(ledger) == {"42": LedgerEntry("42", "Glucose", 12.5, "ml")}


def test_repeated_sighting_is_converted_into_first_unit() -> None:
    ledger = aggregate_rows(
        [
            UsageRow("42", "Glucose", 12.5, "ml"),
            UsageRow("42", "Glucose", 0.0025, "l"),
        ]
    )

    assert ledger["42"].unit == "ml"
    assert ledger["42"].amount == 15.0


@pytest.mark.parametrize(
    ("first", "second"),
    [
        (UsageRow("42", "Glucose", 12.5, "ml"), UsageRow("42", "Glucose", 0.0025, "l")),
        (UsageRow("42", "Glucose", 0.0025, "l"), UsageRow("42", "Glucose", 12.5, "ml")),
    ],
)
def test_total_is_independent_of_row_order(first: UsageRow, second: UsageRow) -> None:
    entry = aggregate_rows([first, second])["42"]

    total_ml = DEFAULT_UNIT_REGISTRY.from_base(
        DEFAULT_UNIT_REGISTRY.to_base(entry.amount, entry.unit), "ml"
    )

    assert total_ml == pytest.approx(15.0, abs=1e-6)


def test_incompatible_or_unknown_occurrences_are_ignored(caplog: pytest.LogCaptureFixture) -> None:
    rows = [
        UsageRow("1", "NaCl", 2, "g"),
        UsageRow("1", "NaCl", 5, "ml"),
        UsageRow("1", "NaCl", 3, "lbs"),
        UsageRow("1", "NaCl", 500, "mg"),
    ]

    with caplog.at_level(logging.WARNING):
        ledger = aggregate_rows(rows)

    assert ledger["1"].amount == 2.5
    assert ledger["1"].unit == "g"
    assert "occurrence ignored" in caplog.text


def test_unknown_first_unit_blocks_later_merges() -> None:
    ledger = aggregate_rows(
        [UsageRow("5", "Resin", 1, "lbs"), UsageRow("5", "Resin", 2, "g")]
    )

    assert ledger["5"] == LedgerEntry("5", "Resin", 1, "lbs")


def test_ledger_keeps_first_sighting_order_and_is_read_only() -> None:
    ledger = aggregate_rows(
        [
            UsageRow("2", "B", 1, "g"),
            UsageRow("1", "A", 1, "g"),
            UsageRow("2", "B", 1, "g"),
        ]
    )

    assert list(ledger) == ["2", "1"]
    assert ledger["2"].amount == 2
    with pytest.raises(TypeError):
        ledger["3"] = LedgerEntry("3", "C", 1, "g")  # type: ignore[index]


def test_injected_registry_is_used_for_merges() -> None:
    registry = UnitRegistry.from_table(
        [("drop", QuantityKind.VOLUME, 0.05), ("ml", QuantityKind.VOLUME, 1)]
    )

    ledger = aggregate_rows(
        [UsageRow("9", "Dye", 1, "ml"), UsageRow("9", "Dye", 10, "drop")],
        registry=registry,
    )

    assert ledger["9"].amount == 1.5
