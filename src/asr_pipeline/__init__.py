"""Automatic sample reduction pipeline package."""

from .models import LedgerEntry, PlanItem, QuantityKind, RawRow, ValidationError
from .pipeline import ReductionResult, ReductionStatus, extract_ledger, run_reduction
from .units import DEFAULT_UNIT_REGISTRY, UnitRegistry

__all__ = [
    "RawRow",
    "LedgerEntry",
    "PlanItem",
    "QuantityKind",
    "ValidationError",
    "UnitRegistry",
    "DEFAULT_UNIT_REGISTRY",
    "ReductionResult",
    "ReductionStatus",
    "extract_ledger",
    "run_reduction",
]
