"""Stage 5: Apply a confirmed plan as sequential subtract calls.

Execution is best-effort: each plan item is submitted on its own and a failure
does not stop the remaining items. Items already submitted cannot be rolled
back.
"""

from __future__ import annotations

import logging
from typing import Sequence

from asr_pipeline.collaborators import InventorySubtractor
from asr_pipeline.errors import SubtractError
from asr_pipeline.models import ExecutionReport, ExecutionResult, PlanItem
from asr_pipeline.reporting.messages import (
    build_execution_summary,
    subtract_failure_message,
    subtract_success_message,
)

logger = logging.getLogger(__name__)


async def execute_plan(
    plan: Sequence[PlanItem],
    subtractor: InventorySubtractor,
) -> ExecutionReport:
    """Submit every plan item in order and collect per-item results.

    Args:
        plan: Plan items from an accepted validation outcome, already confirmed.
        subtractor: Collaborator performing the subtract calls. Raising,
            returning ``False`` or returning an exception marks the item failed.

    Returns:
        One result per plan item in plan order. A failure after successful
        validation means inventory changed underneath the batch, and is logged
        as an error.
    """

    results: list[ExecutionResult] = []
    for item in plan:
        try:
            outcome = await subtractor.subtract_quantity(item.identity, item.amount_to_subtract)
            if isinstance(outcome, Exception):
                raise outcome
            if outcome is False:
                raise SubtractError("Subtract call reported failure")
        except Exception as exc:
            logger.exception(subtract_failure_message(item))
            results.append(
                ExecutionResult(item=item, succeeded=False, error=str(exc) or type(exc).__name__)
            )
            continue

        logger.info(
            "%s (Converted to %s %s)",
            subtract_success_message(item),
            item.amount_to_subtract,
            item.base_unit_name,
        )
        results.append(ExecutionResult(item=item, succeeded=True))

    report = ExecutionReport(results=tuple(results))
    if report.all_succeeded:
        logger.info(build_execution_summary(report))
    else:
        logger.error(
            "%s %d of %d item(s) failed.",
            build_execution_summary(report),
            len(report.failures),
            len(report.results),
        )
    return report
