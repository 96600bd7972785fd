"""Stage 4: Validate the ledger against live inventory and build a plan.

Validation is all-or-nothing: every entry is checked, every problem is
collected, and a single error rejects the whole batch. Inventory lookups are
awaited one at a time in ledger order.
"""

from __future__ import annotations

import logging
from typing import Mapping

from asr_pipeline.collaborators import InventoryLookup
from asr_pipeline.models import (
    InventorySnapshot,
    LedgerEntry,
    PlanItem,
    QuantityKind,
    ValidationError,
    ValidationOutcome,
)
from asr_pipeline.reporting.messages import (
    insufficient_quantity_message,
    kind_mismatch_message,
    lookup_failure_message,
    unknown_unit_message,
)
from asr_pipeline.units import DEFAULT_UNIT_REGISTRY, UnitRegistry, round_amount

logger = logging.getLogger(__name__)


def check_entry(
    entry: LedgerEntry,
    snapshot: InventorySnapshot,
    registry: UnitRegistry,
) -> PlanItem | ValidationError:
    """Check one ledger entry against its inventory snapshot.

    Args:
        entry: Finalized ledger entry.
        snapshot: Fresh inventory state for the entry's identity.
        registry: Unit vocabulary.

    Returns:
        A plan item when the subtraction is possible, otherwise the error that
        blocks it.
    """

    definition = registry.lookup(entry.unit)
    if definition is None:
        return ValidationError(entry.identity, entry.display_name, unknown_unit_message(entry))

    try:
        inventory_kind: QuantityKind | str = QuantityKind.parse(snapshot.quantity_kind)
    except ValueError:
        inventory_kind = str(snapshot.quantity_kind)
    if definition.quantity_kind is not inventory_kind:
        return ValidationError(
            entry.identity,
            entry.display_name,
            kind_mismatch_message(entry, expected=inventory_kind, got=definition.quantity_kind),
        )

    requested = round_amount(registry.to_base(entry.amount, entry.unit))
    if snapshot.available_amount < requested:
        return ValidationError(
            entry.identity,
            entry.display_name,
            insufficient_quantity_message(entry, snapshot, requested),
        )

    return PlanItem(
        identity=entry.identity,
        display_name=entry.display_name,
        source_amount=entry.amount,
        source_unit=entry.unit,
        amount_to_subtract=requested,
        base_unit_name=snapshot.base_unit_name,
    )


async def validate_ledger(
    ledger: Mapping[str, LedgerEntry],
    inventory: InventoryLookup,
    registry: UnitRegistry = DEFAULT_UNIT_REGISTRY,
) -> ValidationOutcome:
    """Validate every ledger entry and return a plan or the full error list.

    Args:
        ledger: Finalized ledger from :func:`aggregate_rows`.
        inventory: Collaborator providing fresh snapshots; may raise. A
            snapshot that cannot be checked is recorded like a failed lookup.
        registry: Unit vocabulary.

    Returns:
        ``ValidationOutcome`` with a plan in ledger order and no errors, or
        with every error and an empty plan.
    """

    plan: list[PlanItem] = []
    errors: list[ValidationError] = []

    for entry in ledger.values():
        try:
            snapshot = await inventory.fetch_quantity(entry.identity)
            result = check_entry(entry, snapshot, registry)
        except Exception as exc:
            logger.exception(
                "Error fetching sample settings for sample ID %s (%s)",
                entry.identity,
                entry.display_name,
            )
            errors.append(
                ValidationError(entry.identity, entry.display_name, lookup_failure_message(entry, exc))
            )
            continue

        if isinstance(result, ValidationError):
            logger.warning("Validation error: %s", result.message)
            errors.append(result)
        else:
            logger.info(
                "Sample ID %s validated: subtract %s %s",
                result.identity,
                result.amount_to_subtract,
                result.base_unit_name,
            )
            plan.append(result)

    if errors:
        logger.error("Validation rejected the batch with %d error(s)", len(errors))
        return ValidationOutcome(plan=(), errors=tuple(errors))
    return ValidationOutcome(plan=tuple(plan), errors=())
