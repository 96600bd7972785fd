"""User-facing message text for validation, confirmation and execution."""

from __future__ import annotations

from typing import Sequence

from asr_pipeline.models import (
    ExecutionReport,
    InventorySnapshot,
    LedgerEntry,
    PlanItem,
    QuantityKind,
    ValidationError,
)

VALIDATION_HEADER = "Validation failed for the following samples:"
VALIDATION_FOOTER = "Please fix these issues before proceeding with ASR."
CONFIRMATION_HEADER = "Are you sure you want to subtract the following amounts from inventory?"
ALL_SUCCEEDED_MESSAGE = "All sample quantities successfully subtracted."
SOME_FAILED_MESSAGE = (
    "Some sample quantities could not be subtracted despite validation. This is unexpected."
)
NOTHING_FOUND_MESSAGE = "No samples found in the specified section."
CANCELLED_MESSAGE = "Sample quantity reduction cancelled by user."


def format_amount(value: float) -> str:
    """Format an amount without a trailing ``.0`` for whole numbers."""

    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text


def _sample_label(display_name: str, identity: str) -> str:
    return f"{display_name} (ID: {identity})"


def unknown_unit_message(entry: LedgerEntry) -> str:
    return f'Unknown unit "{entry.unit}" for sample {_sample_label(entry.display_name, entry.identity)}'


def kind_mismatch_message(
    entry: LedgerEntry,
    expected: QuantityKind | str,
    got: QuantityKind,
) -> str:
    expected_name = expected.value if isinstance(expected, QuantityKind) else expected
    return (
        f"Quantity type mismatch for sample {_sample_label(entry.display_name, entry.identity)}. "
        f"Expected {expected_name}, got {got.value}"
    )


def insufficient_quantity_message(
    entry: LedgerEntry,
    snapshot: InventorySnapshot,
    requested: float,
) -> str:
    unit = snapshot.base_unit_name
    return (
        f"Insufficient quantity for sample {_sample_label(entry.display_name, entry.identity)}. "
        f"Available: {format_amount(snapshot.available_amount)} {unit}, "
        f"Requested: {format_amount(requested)} {unit}"
    )


def lookup_failure_message(entry: LedgerEntry, error: BaseException) -> str:
    reason = str(error) or type(error).__name__
    return (
        "Error fetching sample settings for sample "
        f"{_sample_label(entry.display_name, entry.identity)}: {reason}"
    )


def build_validation_error_message(errors: Sequence[ValidationError]) -> str:
    """Join validation errors into one dialog text, one error per line."""

    lines = "\n".join(error.message for error in errors)
    return f"{VALIDATION_HEADER}\n\n{lines}\n\n{VALIDATION_FOOTER}"


def build_confirmation_message(plan: Sequence[PlanItem]) -> str:
    """List every planned subtraction with its original table amount and unit."""

    lines = [CONFIRMATION_HEADER]
    for item in plan:
        lines.append(
            f"- {format_amount(item.source_amount)} {item.source_unit} of "
            f"{_sample_label(item.display_name, item.identity)}"
        )
    return "\n".join(lines)


def subtract_success_message(item: PlanItem) -> str:
    return (
        f"Successfully subtracted {format_amount(item.source_amount)} {item.source_unit} "
        f"from {_sample_label(item.display_name, item.identity)}."
    )


def subtract_failure_message(item: PlanItem) -> str:
    return (
        f"Error subtracting {format_amount(item.source_amount)} {item.source_unit} "
        f"for {_sample_label(item.display_name, item.identity)}."
    )


def build_execution_summary(report: ExecutionReport) -> str:
    return ALL_SUCCEEDED_MESSAGE if report.all_succeeded else SOME_FAILED_MESSAGE
