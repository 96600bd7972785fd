"""Markdown report generation for reduction run summaries."""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from asr_pipeline.models import ExecutionReport, LedgerEntry, ValidationOutcome
from asr_pipeline.reporting.messages import format_amount


def _markdown_row(cells: Sequence[str]) -> str:
    return "| " + " | ".join(cell.replace("|", "\\|") for cell in cells) + " |"


def _markdown_table(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    """Render a table with pipes inside cells escaped."""

    lines = [_markdown_row(headers), _markdown_row(["---"] * len(headers))]
    lines.extend(_markdown_row(row) for row in rows)
    return "\n".join(lines)


def build_report_md(
    ledger: Mapping[str, LedgerEntry],
    outcome: ValidationOutcome | None = None,
    execution: ExecutionReport | None = None,
) -> str:
    """Build the markdown report for one reduction run.

    Sections for validation and execution are only emitted when those stages
    ran.

    Args:
        ledger: Extracted ledger.
        outcome: Validation outcome, if validation ran.
        execution: Execution report, if the plan was executed.

    Returns:
        Full markdown content with summary tables.
    """

    ledger_rows = [
        (entry.identity, entry.display_name, format_amount(entry.amount), entry.unit)
        for entry in ledger.values()
    ]
    sections = [
        "# Sample Reduction Report",
        "",
        "## Ledger",
        _markdown_table(["identity", "display_name", "amount", "unit"], ledger_rows),
    ]

    if outcome is not None:
        error_rows = [(error.identity, error.display_name, error.message) for error in outcome.errors]
        plan_rows = [
            (
                item.identity,
                item.display_name,
                f"{format_amount(item.source_amount)} {item.source_unit}",
                f"{format_amount(item.amount_to_subtract)} {item.base_unit_name}",
            )
            for item in outcome.plan
        ]
        sections.extend(
            [
                "",
                "## Validation errors",
                _markdown_table(["identity", "display_name", "message"], error_rows),
                "",
                "## Plan",
                _markdown_table(["identity", "display_name", "used", "subtract"], plan_rows),
            ]
        )

    if execution is not None:
        result_rows = [
            (
                result.item.identity,
                result.item.display_name,
                "ok" if result.succeeded else "failed",
                result.error or "",
            )
            for result in execution.results
        ]
        sections.extend(
            [
                "",
                "## Execution results",
                _markdown_table(["identity", "display_name", "status", "error"], result_rows),
            ]
        )

    return "\n".join(sections) + "\n"
