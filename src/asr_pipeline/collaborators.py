"""Interfaces of the external collaborators driven by the reduction pipeline.

The pipeline never talks to the inventory service or the user directly; the
host application supplies objects implementing these protocols. All calls are
awaited one at a time.
"""

from __future__ import annotations

from typing import Protocol

from asr_pipeline.models import InventorySnapshot


class InventoryLookup(Protocol):
    """Reads the current stock of a sample."""

    async def fetch_quantity(self, identity: str) -> InventorySnapshot:
        """Return a fresh inventory snapshot for ``identity``.

        Implementations raise (preferably ``InventoryLookupError``) when the
        quantity cannot be read; the validator records the failure for that
        identity and moves on.
        """
        ...


class InventorySubtractor(Protocol):
    """Removes used stock from a sample."""

    async def subtract_quantity(self, identity: str, amount: float) -> bool | Exception | None:
        """Subtract ``amount`` (inventory base unit) from ``identity``.

        Failure is signalled by raising (preferably ``SubtractError``),
        returning ``False`` or returning the error. ``None`` and ``True`` mean
        the subtraction was applied.
        """
        ...


class Confirmer(Protocol):
    """Asks the user to approve a validated plan."""

    async def confirm(self, summary_text: str) -> bool:
        ...
