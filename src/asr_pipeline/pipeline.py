"""Top-level orchestration for automatic sample reduction.

``extract_ledger`` runs the synchronous extraction stages; ``run_reduction``
adds the validate, confirm and execute steps, strictly in that order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from types import MappingProxyType

from asr_pipeline.collaborators import Confirmer, InventoryLookup, InventorySubtractor
from asr_pipeline.models import ExecutionReport, ValidationOutcome
from asr_pipeline.reporting.messages import (
    CANCELLED_MESSAGE,
    NOTHING_FOUND_MESSAGE,
    build_confirmation_message,
    build_execution_summary,
    build_validation_error_message,
)
from asr_pipeline.stages.stage1_locate import locate_tables, parse_document
from asr_pipeline.stages.stage2_extract import extract_raw_rows, normalize_rows
from asr_pipeline.stages.stage3_aggregate import Ledger, aggregate_rows
from asr_pipeline.stages.stage4_validate import validate_ledger
from asr_pipeline.stages.stage5_execute import execute_plan
from asr_pipeline.units import DEFAULT_UNIT_REGISTRY, UnitRegistry

logger = logging.getLogger(__name__)


class ReductionStatus(str, Enum):
    NOTHING_FOUND = "nothing_found"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    COMPLETED_WITH_FAILURES = "completed_with_failures"


@dataclass(frozen=True)
class ReductionResult:
    """Result bundle returned by :func:`run_reduction`.

    Attributes:
        status: Where the run stopped.
        ledger: Extracted ledger (empty when nothing was found).
        validation: Validation outcome, ``None`` when validation did not run.
        execution: Execution report, ``None`` unless the plan was executed.
        message: User-facing text describing the outcome.
    """

    status: ReductionStatus
    ledger: Ledger = field(default_factory=lambda: MappingProxyType({}))
    validation: ValidationOutcome | None = None
    execution: ExecutionReport | None = None
    message: str = ""


def extract_ledger(html_text: str, registry: UnitRegistry = DEFAULT_UNIT_REGISTRY) -> Ledger:
    """Run table location, row extraction and aggregation on section HTML.

    Args:
        html_text: Raw HTML of one notebook section.
        registry: Unit vocabulary used when merging repeated samples.

    Returns:
        Ledger keyed by sample identity; empty when no usable rows exist.
    """

    document = parse_document(html_text)
    usage_rows = []
    for candidate in locate_tables(document):
        raw_rows = extract_raw_rows(candidate)
        usage_rows.extend(normalize_rows(raw_rows))
    return aggregate_rows(usage_rows, registry=registry)


async def run_reduction(
    html_text: str,
    inventory: InventoryLookup,
    subtractor: InventorySubtractor,
    confirmer: Confirmer,
    registry: UnitRegistry = DEFAULT_UNIT_REGISTRY,
) -> ReductionResult:
    """Extract, validate, confirm and execute one section's sample usage.

    Every call validates against fresh inventory; a plan is never reused across
    calls. Inventory is not re-checked between confirmation and execution.

    Args:
        html_text: Raw HTML of one notebook section.
        inventory: Inventory lookup collaborator.
        subtractor: Subtract collaborator.
        confirmer: Confirmation collaborator, asked once after validation.
        registry: Unit vocabulary.

    Returns:
        ``ReductionResult`` describing where the run stopped.
    """

    ledger = extract_ledger(html_text, registry=registry)
    if not ledger:
        logger.warning(NOTHING_FOUND_MESSAGE)
        return ReductionResult(
            status=ReductionStatus.NOTHING_FOUND,
            ledger=ledger,
            message=NOTHING_FOUND_MESSAGE,
        )

    validation = await validate_ledger(ledger, inventory, registry=registry)
    if not validation.accepted:
        return ReductionResult(
            status=ReductionStatus.REJECTED,
            ledger=ledger,
            validation=validation,
            message=build_validation_error_message(validation.errors),
        )

    confirmed = await confirmer.confirm(build_confirmation_message(validation.plan))
    if not confirmed:
        logger.info(CANCELLED_MESSAGE)
        return ReductionResult(
            status=ReductionStatus.CANCELLED,
            ledger=ledger,
            validation=validation,
            message=CANCELLED_MESSAGE,
        )

    logger.info("User confirmed the sample quantity reduction.")
    execution = await execute_plan(validation.plan, subtractor)
    status = (
        ReductionStatus.COMPLETED
        if execution.all_succeeded
        else ReductionStatus.COMPLETED_WITH_FAILURES
    )
    return ReductionResult(
        status=status,
        ledger=ledger,
        validation=validation,
        execution=execution,
        message=build_execution_summary(execution),
    )
