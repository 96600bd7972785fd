"""Unit registry mapping unit codes to quantity kinds and base-unit factors."""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Iterable

from asr_pipeline.config import AMOUNT_PRECISION
from asr_pipeline.errors import UnknownUnitError
from asr_pipeline.models import QuantityKind, UnitDefinition
from asr_pipeline.normalize import normalize_unit


def round_amount(value: float) -> float:
    """Round a converted amount to the configured precision.

    Conversions go through binary floating point (``12.5 ml`` is
    ``0.0125000000000000007 L``), so every converted amount is rounded before it
    is stored or compared.
    """

    return round(value, AMOUNT_PRECISION)


@dataclass(frozen=True)
class UnitRegistry:
    """Immutable unit vocabulary injected into aggregation and validation.

    Codes are stored lower-cased; lookups apply :func:`normalize_unit` so table
    text like ``" mL "`` resolves to ``ml``. The registry rejects duplicate
    codes and non-positive factors at construction time.
    """

    definitions: tuple[UnitDefinition, ...]

    def __post_init__(self) -> None:
        errors: list[str] = []
        seen: set[str] = set()
        for definition in self.definitions:
            code = normalize_unit(definition.code)
            if not code:
                errors.append("empty unit code")
            elif code in seen:
                errors.append(f"duplicate unit code '{code}'")
            seen.add(code)
            if not definition.to_base_factor > 0:
                errors.append(
                    f"unit '{definition.code}' has non-positive factor {definition.to_base_factor}"
                )
        if errors:
            raise ValueError("Invalid unit registry: " + "; ".join(errors))

    @classmethod
    def from_table(cls, table: Iterable[tuple[str, QuantityKind, float]]) -> UnitRegistry:
        """Build a registry from ``(code, kind, factor)`` triples."""

        return cls(
            tuple(
                UnitDefinition(code=normalize_unit(code), quantity_kind=kind, to_base_factor=factor)
                for code, kind, factor in table
            )
        )

    @cached_property
    def by_code(self) -> dict[str, UnitDefinition]:
        """Build and cache the normalized code index."""

        return {normalize_unit(definition.code): definition for definition in self.definitions}

    @property
    def codes(self) -> tuple[str, ...]:
        return tuple(self.by_code)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and normalize_unit(code) in self.by_code

    def lookup(self, code: str) -> UnitDefinition | None:
        """Return the definition for ``code`` or ``None`` when unregistered."""

        return self.by_code.get(normalize_unit(code))

    def get(self, code: str) -> UnitDefinition:
        """Return the definition for ``code``.

        Raises:
            UnknownUnitError: If ``code`` is not registered.
        """

        definition = self.lookup(code)
        if definition is None:
            raise UnknownUnitError(code)
        return definition

    def to_base(self, amount: float, code: str) -> float:
        """Express ``amount`` of ``code`` in its quantity kind's base unit."""

        return amount * self.get(code).to_base_factor

    def from_base(self, amount: float, code: str) -> float:
        """Express a base-unit ``amount`` in ``code``."""

        return amount / self.get(code).to_base_factor


# Volume base unit is litres, mass base unit is grams, count base unit is pieces.
DEFAULT_UNIT_REGISTRY = UnitRegistry.from_table(
    [
        ("l", QuantityKind.VOLUME, 1),
        ("ml", QuantityKind.VOLUME, 0.001),
        ("µl", QuantityKind.VOLUME, 0.000001),
        ("ul", QuantityKind.VOLUME, 0.000001),
        ("kg", QuantityKind.MASS, 1000),
        ("g", QuantityKind.MASS, 1),
        ("mg", QuantityKind.MASS, 0.001),
        ("µg", QuantityKind.MASS, 0.000001),
        ("ug", QuantityKind.MASS, 0.000001),
        ("pcs", QuantityKind.COUNT, 1),
    ]
)
