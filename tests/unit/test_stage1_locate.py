"""Unit tests for Stage 1 usage table location and column mapping."""

from __future__ import annotations

import logging

import pytest

from asr_pipeline.stages.stage1_locate import (
    locate_tables,
    parse_document,
    resolve_column_mapping,
    split_header_row,
)

LEGACY_HEADERS = ["Item", "Qty needed/L", "Unit", "Qty needed", "Unit", "Amount used", "Unit"]


def _table(headers: list[str], rows: list[list[str]], use_thead: bool = True) -> str:
    header_cells = "".join(f"<th>{header}</th>" for header in headers)
    body = "".join("<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>" for row in rows)
    if use_thead:
        return f"<table><thead><tr>{header_cells}</tr></thead><tbody>{body}</tbody></table>"
    first_row = "<tr>" + "".join(f"<td>{header}</td>" for header in headers) + "</tr>"
    return f"<table><tbody>{first_row}{body}</tbody></table>"


def test_legacy_seven_column_table_uses_fixed_positions() -> None:
    mapping = resolve_column_mapping([header.lower() for header in LEGACY_HEADERS])

    assert mapping is not None
    assert (mapping.identity_index, mapping.amount_index, mapping.unit_index) == (0, 5, 6)
    assert mapping.strategy == "legacy_fixed_layout"


def test_explicit_used_amount_column_takes_next_column_as_unit() -> None:
    headers = ["used sample", "lot", "supplier", "used amount", "unit", "notes", "date", "by"]

    mapping = resolve_column_mapping(headers)

    assert mapping is not None
    assert (mapping.identity_index, mapping.amount_index, mapping.unit_index) == (0, 3, 4)
    assert mapping.strategy == "explicit_used_amount"


def test_explicit_used_amount_in_last_column_is_rejected() -> None:
    headers = ["item", "a", "b", "c", "d", "e", "used amount"]

    assert resolve_column_mapping(headers) is None


def test_short_table_resolves_unit_header() -> None:
    mapping = resolve_column_mapping(["item", "amount used", "unit"])

    assert mapping is not None
    assert (mapping.identity_index, mapping.amount_index, mapping.unit_index) == (0, 1, 2)
    assert mapping.strategy == "unit_header"


def test_short_table_unit_column_skips_amount_header_mentioning_unit() -> None:
    mapping = resolve_column_mapping(["item", "amount used (unit)", "unit"])

    assert mapping is not None
    assert (mapping.amount_index, mapping.unit_index) == (1, 2)


def test_short_table_prefers_exact_unit_label() -> None:
    mapping = resolve_column_mapping(["item", "unit price", "amount used", "units"])

    assert mapping is not None
    assert (mapping.amount_index, mapping.unit_index) == (2, 3)


def test_short_table_falls_back_to_partial_unit_label() -> None:
    mapping = resolve_column_mapping(["used sample", "amount used", "unit (ml/g)"])

    assert mapping is not None
    assert mapping.unit_index == 2


def test_short_table_without_unit_header_is_skipped_with_warning(
    caplog: pytest.LogCaptureFixture,
) -> None:
    html = _table(["Item", "Amount used", "Comment"], [["x", "1", "y"]])

    with caplog.at_level(logging.WARNING):
        assert locate_tables(html) == []

    assert "no unit column" in caplog.text


def test_tables_without_identity_or_amount_headers_are_ignored() -> None:
    html = _table(["Step", "Duration"], [["mix", "5 min"]]) + _table(
        ["Item", "Quantity", "Unit"], [["x", "1", "ml"]]
    )

    assert locate_tables(html) == []


def test_candidates_keep_document_order_and_positions() -> None:
    html = (
        _table(["Item", "Amount used", "Unit"], [["a", "1", "ml"]])
        + _table(["Step", "Duration"], [["mix", "5 min"]])
        + _table(LEGACY_HEADERS, [["b", "", "", "", "", "2", "g"]])
    )

    candidates = locate_tables(parse_document(html))

    assert [candidate.position for candidate in candidates] == [0, 2]
    assert [candidate.mapping.strategy for candidate in candidates] == [
        "unit_header",
        "legacy_fixed_layout",
    ]


def test_header_labels_are_normalized() -> None:
    html = _table(["Item:", "Amount used", " UNIT "], [["a", "1", "ml"]])

    candidates = locate_tables(html)

    assert candidates[0].headers == ("item", "amount used", "unit")


def test_first_body_row_is_header_when_thead_missing() -> None:
    html = _table(["Item", "Amount used", "Unit"], [["a", "1", "ml"], ["b", "2", "g"]], use_thead=False)
    table = parse_document(html).find("table")

    headers, body_rows = split_header_row(table)

    assert headers == ("item", "amount used", "unit")
    assert [row.get_text() for row in body_rows] == ["a1ml", "b2g"]


def test_header_row_of_th_cells_without_thead() -> None:
    html = (
        "<table><tr><th>Item</th><th>Amount used</th><th>Unit</th></tr>"
        "<tr><td>a</td><td>1</td><td>ml</td></tr></table>"
    )
    table = parse_document(html).find("table")

    headers, body_rows = split_header_row(table)

    assert headers == ("item", "amount used", "unit")
    assert len(body_rows) == 1


def test_rows_of_nested_tables_are_not_mixed_in() -> None:
    inner = _table(["x", "y"], [["1", "2"]])
    html = (
        "<table><thead><tr><th>Item</th><th>Amount used</th><th>Unit</th></tr></thead>"
        f"<tbody><tr><td>a</td><td>1</td><td>ml{inner}</td></tr></tbody></table>"
    )

    candidates = locate_tables(html)

    assert len(candidates) == 1
    assert len(candidates[0].body_rows) == 1
