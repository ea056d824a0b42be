"""Exception types shared across the simulation."""

from __future__ import annotations


class SimulationError(Exception):
    """Base exception for the balance simulation."""


class ConfigError(SimulationError):
    """Raised when a run, persona or system configuration is invalid."""


class CatalogError(SimulationError):
    """Base exception for catalog problems."""


class CatalogFormatError(CatalogError):
    """Raised when a catalog field cannot be parsed."""


class CatalogLookupError(CatalogError, KeyError):
    """Raised when an id has no catalog definition."""


class CatalogCycleError(CatalogError):
    """Raised when prerequisites form a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__("prerequisite cycle: " + " -> ".join(cycle))


class ResourceInsufficient(SimulationError):
    """Raised when spending would take a resource below zero."""

    def __init__(self, resource: str, needed: float, available: float) -> None:
        self.resource = resource
        self.needed = needed
        self.available = available
        super().__init__(f"{resource}: need {needed:g}, have {available:g}")


class InvariantViolation(SimulationError):
    """Raised when state would become inconsistent after validation passed."""


class UnknownActionError(SimulationError):
    """Raised when a system receives an action type it does not handle."""
