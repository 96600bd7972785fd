"""Unit tests for amount, unit and label normalization."""

from __future__ import annotations

import pytest

from asr_pipeline.normalize import (
    clean_numeric_string,
    normalize_label,
    normalize_unit,
    parse_amount,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("  12.5 ", "12.5"),
        ("~12.5 ml", "12.5"),
        ("1.2.3", "1.23"),
        ("-4", "4"),
        ("abc", ""),
        ("", ""),
        (None, ""),
    ],
)
def test_clean_numeric_string(raw: str | None, expected: str) -> None:
    assert clean_numeric_string(raw) == expected


def test_parse_amount_rejects_zero_and_non_numeric() -> None:
    assert parse_amount("  12.5 ") == 12.5
    assert parse_amount("0.0025") == 0.0025
    assert parse_amount(".5") == 0.5
    assert parse_amount("0") is None
    assert parse_amount("0.000") is None
    assert parse_amount(".") is None
    assert parse_amount("n/a") is None
    assert parse_amount("") is None


def test_normalize_unit() -> None:
    assert normalize_unit(" mL ") == "ml"
    assert normalize_unit("ΜG") == "µg"
    assert normalize_unit(None) == ""


def test_normalize_label_collapses_whitespace_and_parentheses() -> None:
    assert normalize_label("  Materials  ( Reagents )  :") == "materials (reagents)"
    assert normalize_label("Amount\n\tused") == "amount used"
    assert normalize_label("Used  Sample") == "used sample"


def test_normalize_label_strips_only_one_trailing_colon() -> None:
    assert normalize_label("Item:") == "item"
    assert normalize_label("Item::") == "item:"
    assert normalize_label(None) == ""


def test_normalize_label_treats_nbsp_as_space() -> None:
    assert normalize_label("Materials\u00a0\u00a0( Reagents)") == "materials (reagents)"
