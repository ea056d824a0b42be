"""Lifecycle contract shared by every long-running activity."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from balance_sim.simulation.events import GameEvent
from balance_sim.state.resources import StateDelta
from balance_sim.validation.result import ValidationResult


@dataclass
class InitResult:
    """Outcome of starting a process."""

    success: bool
    handle: Optional[str] = None
    payload: Any = None
    reason: str = ""
    events: list[GameEvent] = field(default_factory=list)


@dataclass
class ProcessUpdate:
    """What one update step wants merged into the shared state."""

    delta: StateDelta = field(default_factory=StateDelta)
    events: list[GameEvent] = field(default_factory=list)
    is_complete: bool = False


@dataclass
class CompletionEffects:
    """Rewards granted when a process finishes."""

    delta: StateDelta = field(default_factory=StateDelta)
    events: list[GameEvent] = field(default_factory=list)
    description: str = ""


class ProcessHandler:
    """Base class for one process category.

    Subclasses set `category` and implement the five lifecycle hooks. The
    handler may mutate its own record's payload directly; every change to
    shared resources goes back through a StateDelta.
    """

    category: str = ""

    def can_start(self, data: Any, state: "GameState") -> ValidationResult:  # noqa: F821
        return ValidationResult.ok()

    def initialize(self, handle: str, data: Any, state: "GameState") -> InitResult:  # noqa: F821
        raise NotImplementedError

    def update(
        self,
        record: "ProcessRecord",  # noqa: F821
        dt: float,
        state: "GameState",  # noqa: F821
        catalog: "Catalog",  # noqa: F821
    ) -> ProcessUpdate:
        raise NotImplementedError

    def complete(self, record: "ProcessRecord", state: "GameState") -> CompletionEffects:  # noqa: F821
        return CompletionEffects()

    def cancel(self, record: "ProcessRecord", state: "GameState") -> None:  # noqa: F821
        """Release anything the process reserved. Default: nothing reserved."""

    def event(
        self,
        state: "GameState",  # noqa: F821
        event_type: str,
        description: str,
        importance: str = "info",
        **data,
    ) -> GameEvent:
        """Build (but do not log) an event stamped with the current minute."""
        return GameEvent(
            event_type=event_type,
            description=description,
            tick=state.minutes,
            importance=importance,
            data={"category": self.category, **data},
        )
