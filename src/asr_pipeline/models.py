"""Data models used across extraction and reduction pipeline stages.

This module defines explicit immutable contracts between stages so each stage
has a narrow, testable interface and downstream code can rely on stable fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class QuantityKind(str, Enum):
    """Physical dimension a unit measures; units only convert within one kind."""

    VOLUME = "Volume"
    MASS = "Mass"
    COUNT = "Count"

    @classmethod
    def parse(cls, value: str | QuantityKind) -> QuantityKind:
        """Parse a quantity kind name as reported by the inventory service.

        The inventory reports the count kind as ``Number``; both spellings are
        accepted, case-insensitively.

        Args:
            value: Kind name or an existing ``QuantityKind``.

        Returns:
            Matching enum member.

        Raises:
            ValueError: If the name is not a known quantity kind.
        """

        if isinstance(value, QuantityKind):
            return value
        key = str(value).strip().lower()
        if key == "number":
            return cls.COUNT
        for member in cls:
            if member.value.lower() == key:
                return member
        raise ValueError(f"Unknown quantity kind: {value!r}")


@dataclass(frozen=True)
class UnitDefinition:
    """Registered unit with its quantity kind and factor to the kind's base unit."""

    code: str
    quantity_kind: QuantityKind
    to_base_factor: float


@dataclass(frozen=True)
class RawRow:
    """Stage 2 row exactly as found in a usage table, before number cleaning."""

    identity: str
    display_name: str
    raw_amount: str
    raw_unit: str


@dataclass(frozen=True)
class UsageRow:
    """Normalized usage row with a positive amount and a cleaned unit code."""

    identity: str
    display_name: str
    amount: float
    unit: str


@dataclass(frozen=True)
class LedgerEntry:
    """Aggregate of every sighting of one identity across the document.

    ``unit`` is always the unit of the first sighting; later sightings are
    converted into it before being summed into ``amount``.
    """

    identity: str
    display_name: str
    amount: float
    unit: str


@dataclass(frozen=True)
class InventorySnapshot:
    """Fresh inventory state for one identity, in the inventory's base unit."""

    quantity_kind: QuantityKind
    available_amount: float
    base_unit_name: str


@dataclass(frozen=True)
class PlanItem:
    """Validated subtraction for one identity.

    ``source_amount``/``source_unit`` keep the table values for display while
    ``amount_to_subtract`` is expressed in the inventory base unit.
    """

    identity: str
    display_name: str
    source_amount: float
    source_unit: str
    amount_to_subtract: float
    base_unit_name: str


@dataclass(frozen=True)
class ValidationError:
    """One blocking validation problem for one ledger entry."""

    identity: str
    display_name: str
    message: str


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of one validation pass over a ledger.

    When ``errors`` is non-empty, ``plan`` is always empty: nothing may be
    executed from a rejected batch.
    """

    plan: tuple[PlanItem, ...] = field(default_factory=tuple)
    errors: tuple[ValidationError, ...] = field(default_factory=tuple)

    @property
    def accepted(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of the subtract call for a single plan item."""

    item: PlanItem
    succeeded: bool
    error: str | None = None


@dataclass(frozen=True)
class ExecutionReport:
    """Per-item execution results in plan order."""

    results: tuple[ExecutionResult, ...] = field(default_factory=tuple)

    @property
    def all_succeeded(self) -> bool:
        return all(result.succeeded for result in self.results)

    @property
    def failures(self) -> tuple[ExecutionResult, ...]:
        return tuple(result for result in self.results if not result.succeeded)


@dataclass(frozen=True)
class Section:
    """One notebook section as returned by the section store."""

    section_header: str
    contents: str | None = None
    section_id: str | None = None
