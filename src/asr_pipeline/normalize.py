"""Text normalization helpers for amounts, unit codes and free-text labels."""

from __future__ import annotations

import re

WHITESPACE_RE = re.compile(r"\s+")
OPEN_PAREN_SPACE_RE = re.compile(r"\(\s+")
CLOSE_PAREN_SPACE_RE = re.compile(r"\s+\)")

MICRO_SIGN = "µ"
GREEK_MU = "μ"


def clean_numeric_string(text: str | None) -> str:
    """Keep ASCII digits and the first decimal point of ``text``.

    Table authors type amounts like ``"~12.5 ml"`` or ``"1.2.3"``; everything
    except digits is dropped and only the first ``.`` survives, so the latter
    becomes ``"1.23"``.

    Args:
        text: Raw amount cell text.

    Returns:
        Cleaned numeric string, empty when nothing numeric remains.
    """

    if not text:
        return ""

    kept: list[str] = []
    saw_decimal = False
    for ch in text:
        if ch == ".":
            if saw_decimal:
                continue
            saw_decimal = True
            kept.append(ch)
        elif "0" <= ch <= "9":
            kept.append(ch)
    return "".join(kept)


def parse_amount(text: str | None) -> float | None:
    """Parse a usage amount from raw cell text.

    Args:
        text: Raw amount cell text.

    Returns:
        Positive amount, or ``None`` when the text holds no usable number or
        the number is zero.
    """

    cleaned = clean_numeric_string(text)
    if not cleaned or cleaned == ".":
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if not value > 0:
        return None
    return value


def normalize_unit(text: str | None) -> str:
    """Lower-case and trim a unit code; the micro sign and Greek mu are unified."""

    return (text or "").strip().lower().replace(GREEK_MU, MICRO_SIGN)


def normalize_label(text: str | None) -> str:
    """Normalize a human-authored label for comparison.

    Applied to table headers and section headers, and always to both sides of
    a comparison.

    Args:
        text: Label text, possibly ``None``.

    Returns:
        Label with whitespace runs (including NBSP) collapsed to one space,
        no spaces just inside parentheses, one trailing colon removed, and
        lower-cased.
    """

    label = WHITESPACE_RE.sub(" ", text or "")
    label = OPEN_PAREN_SPACE_RE.sub("(", label)
    label = CLOSE_PAREN_SPACE_RE.sub(")", label)
    label = label.strip()
    if label.endswith(":"):
        label = label[:-1].rstrip()
    return label.lower()
