"""Unit tests for Stage 2 row extraction and cell value strategies."""

from __future__ import annotations

import logging

import pytest

from asr_pipeline.models import RawRow, UsageRow
from asr_pipeline.stages.stage1_locate import locate_tables, parse_document
from asr_pipeline.stages.stage2_extract import (
    extract_cell_value,
    extract_raw_rows,
    extract_sample_reference,
    normalize_rows,
)

NESTED_SAMPLE = (
    '<span class="protVar"><span class="protVarSampleField"><span class="sampleFieldContent">'
    '<a onclick="Experiment.Section.Sample.view({id})">{name}</a></span></span></span>'
)
WRAPPING_SAMPLE = (
    '<a onclick="Experiment.Section.Sample.view({id})">'
    '<span class="protVar protVarSampleField sampleFieldContent">{name}</span></a>'
)


def _cell(html: str):
    return parse_document(f"<table><tr><td>{html}</td></tr></table>").find("td")


def test_sample_reference_from_anchor_nested_in_spans() -> None:
    reference = extract_sample_reference(_cell(NESTED_SAMPLE.format(id=42, name="Glucose")))

    assert reference is not None
    assert (reference.identity, reference.display_name) == ("42", "Glucose")


def test_sample_reference_from_anchor_wrapping_label_span() -> None:
    reference = extract_sample_reference(_cell(WRAPPING_SAMPLE.format(id=7, name=" Ethanol ")))

    assert reference is not None
    assert (reference.identity, reference.display_name) == ("7", "Ethanol")


def test_empty_label_span_falls_back_to_anchor_text() -> None:
    html = '<span><a onclick="Experiment.Section.Sample.view(9)"><span></span>PBS</a></span>'

    reference = extract_sample_reference(_cell(html))

    assert reference is not None
    assert (reference.identity, reference.display_name) == ("9", "PBS")


def test_cell_without_sample_action_has_no_reference() -> None:
    assert extract_sample_reference(_cell("Glucose")) is None
    assert extract_sample_reference(_cell('<a href="/samples/42">Glucose</a>')) is None
    assert extract_sample_reference(
        _cell('<a onclick="Experiment.Section.Sample.view(42)"></a>')
    ) is None


@pytest.mark.parametrize(
    ("html", "expected"),
    [
        ('<span class="protVar"><span class="protVarValue"> 12.5 </span></span>', "12.5"),
        ('<span class="protVar">ml</span>', "ml"),
        ('<span class="protVar"><span></span>0.5</span>', "0.5"),
        ("<span>g</span>", "g"),
        ("  12.5 ", "12.5"),
        ("", ""),
    ],
)
def test_cell_value_strategies(html: str, expected: str) -> None:
    assert extract_cell_value(_cell(html)) == expected


def test_extract_raw_rows_skips_non_sample_and_incomplete_rows(
    caplog: pytest.LogCaptureFixture,
) -> None:
    html = (
        "<table><thead><tr><th>Item</th><th>Amount used</th><th>Unit</th></tr></thead><tbody>"
        f"<tr><td>{NESTED_SAMPLE.format(id=42, name='Glucose')}</td><td>12.5</td><td>ml</td></tr>"
        "<tr><td>Total</td><td>12.5</td><td>ml</td></tr>"
        f"<tr><td>{WRAPPING_SAMPLE.format(id=7, name='Ethanol')}</td><td>3</td><td> </td></tr>"
        f"<tr><td>{WRAPPING_SAMPLE.format(id=8, name='Water')}</td></tr>"
        "</tbody></table>"
    )
    candidate = locate_tables(html)[0]

    with caplog.at_level(logging.WARNING):
        rows = extract_raw_rows(candidate)

    assert rows == [RawRow("42", "Glucose", "12.5", "ml")]
    assert "Ethanol" in caplog.text


def test_normalize_rows_cleans_amounts_and_drops_invalid() -> None:
    rows = [
        RawRow("1", "A", " 1.2.3 ", " ML "),
        RawRow("2", "B", "0", "ml"),
        RawRow("3", "C", "n/a", "g"),
        RawRow("4", "D", "5", "lbs"),
    ]

    assert normalize_rows(rows) == [
        UsageRow("1", "A", 1.23, "ml"),
        UsageRow("4", "D", 5.0, "lbs"),
    ]
