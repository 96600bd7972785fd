"""Exception hierarchy for the ASR pipeline."""

from __future__ import annotations


class AsrError(Exception):
    """Base class for errors raised by the ASR pipeline."""


class UnknownUnitError(AsrError, KeyError):
    """A unit code is not present in the unit registry."""

    def __init__(self, code: str) -> None:
        super().__init__(code)
        self.code = code

    def __str__(self) -> str:
        return f"Unknown unit: {self.code!r}"


class InventoryLookupError(AsrError):
    """An inventory collaborator could not report a quantity."""


class SubtractError(AsrError):
    """An inventory collaborator rejected a subtract call."""


class SectionNotFoundError(AsrError, LookupError):
    """No notebook section matches the requested header."""
