"""CLI entrypoint for inspecting the sample ledger of a notebook section.

The command is read-only: it extracts and prints the ledger but never contacts
inventory.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from asr_pipeline.io.ledger_io import read_sections_json, write_ledger_tsv
from asr_pipeline.logging_setup import setup_logger
from asr_pipeline.pipeline import extract_ledger
from asr_pipeline.reporting.messages import NOTHING_FOUND_MESSAGE, format_amount
from asr_pipeline.reporting.report_md import build_report_md
from asr_pipeline.sections import find_section


def _format_table(headers: Sequence[str], data_rows: Sequence[Sequence[str]]) -> str:
    """Render ledger rows as aligned monospace columns."""

    widths = [max(len(value) for value in column) for column in zip(headers, *data_rows)]

    def render(values: Sequence[str]) -> str:
        return " | ".join(value.ljust(width) for value, width in zip(values, widths)).rstrip()

    lines = [render(headers), "-+-".join("-" * width for width in widths)]
    lines.extend(render(row) for row in data_rows)
    return "\n".join(lines)


def build_arg_parser() -> argparse.ArgumentParser:
    """Construct CLI argument parser.

    Returns:
        Configured parser for the extraction command.
    """

    parser = argparse.ArgumentParser(
        description="Extract the sample usage ledger from a notebook section."
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--html", type=Path, help="Path to a section HTML file.")
    source.add_argument(
        "--sections",
        type=Path,
        help="Path to an experiment sections JSON export (requires --section-header).",
    )
    parser.add_argument(
        "--section-header",
        default=None,
        help="Header of the section holding the sample table (with --sections).",
    )
    parser.add_argument("--output", type=Path, default=None, help="Optional ledger TSV output path.")
    parser.add_argument("--report", type=Path, default=None, help="Optional markdown report path.")
    parser.add_argument("--no-header", action="store_true", help="Do not write TSV header.")
    parser.add_argument("--log-level", default=None, help="Logging level (default: ASR_LOG_LEVEL or INFO).")
    parser.add_argument("--log-dir", type=Path, default=None, help="Directory for the log file.")
    return parser


def _load_html(args: argparse.Namespace) -> str:
    if args.html is not None:
        if not args.html.exists():
            raise SystemExit(f"HTML file not found: {args.html}")
        return args.html.read_text(encoding="utf-8")

    if not args.section_header:
        raise SystemExit("--section-header is required with --sections")
    if not args.sections.exists():
        raise SystemExit(f"Sections file not found: {args.sections}")
    section = find_section(read_sections_json(args.sections), args.section_header)
    if section is None:
        raise SystemExit(f'Section "{args.section_header}" not found in {args.sections}')
    if not section.contents:
        raise SystemExit(f'Section "{section.section_header}" has no HTML contents in the export')
    return section.contents


def main(argv: Sequence[str] | None = None) -> int:
    """Run CLI workflow from arguments through ledger output.

    Returns:
        Zero when a ledger was extracted, one when no samples were found.
    """

    parser = build_arg_parser()
    args = parser.parse_args(argv)
    setup_logger(args.log_level, args.log_dir)

    ledger = extract_ledger(_load_html(args))
    if not ledger:
        print(NOTHING_FOUND_MESSAGE)
        return 1

    rows = [
        [entry.identity, entry.display_name, format_amount(entry.amount), entry.unit]
        for entry in ledger.values()
    ]
    print(_format_table(["identity", "display_name", "amount", "unit"], rows))

    if args.output is not None:
        write_ledger_tsv(ledger, output_path=args.output, include_header=not args.no_header)
        print(f"Wrote {len(ledger)} ledger entries to {args.output}")
    if args.report is not None:
        args.report.write_text(build_report_md(ledger), encoding="utf-8")
        print(f"Wrote report to {args.report}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
