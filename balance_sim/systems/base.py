"""Shared shape of every game system: propose, execute, tick."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from balance_sim.core.actions import Action
from balance_sim.core.errors import ConfigError, UnknownActionError
from balance_sim.processes.registry import ProcessRegistry
from balance_sim.simulation.events import GameEvent
from balance_sim.state.catalog import Catalog
from balance_sim.state.game_state import GameState
from balance_sim.validation.requirements import ActionRequirements, requirements_for
from balance_sim.validation.validator import Validator


@dataclass
class ActionResult:
    """Outcome of executing one action."""

    success: bool
    description: str = ""
    events: list[GameEvent] = field(default_factory=list)
    handle: Optional[str] = None


@dataclass
class SystemTickResult:
    """Passive effects a system produced this tick. Events are logged by the engine."""

    events: list[GameEvent] = field(default_factory=list)


def require_non_negative(owner: str, **values: float) -> None:
    """Raise ConfigError for any negative field. Used by config __post_init__."""
    for name, value in values.items():
        if value < 0:
            raise ConfigError(f"{owner}.{name} must be >= 0, got {value}")


def require_fraction(owner: str, **values: float) -> None:
    for name, value in values.items():
        if not 0.0 <= value <= 1.0:
            raise ConfigError(f"{owner}.{name} must be within [0, 1], got {value}")


class GameSystem:
    """Base class for a domain system.

    Subclasses set `name`, register one executor per action type they own in
    `_executors`, and override `evaluate_actions` and `tick` as needed.
    Proposals are filtered through the shared validator so a system never
    offers an action the engine would then refuse.
    """

    name: str = ""

    def __init__(self, catalog: Catalog, registry: ProcessRegistry) -> None:
        self.catalog = catalog
        self.registry = registry
        self.validator = Validator(catalog, registry)
        self._executors: dict[type, Callable[[Action, ActionRequirements, GameState], ActionResult]] = {}

    @property
    def action_types(self) -> tuple[type, ...]:
        return tuple(self._executors)

    def handles(self, action: Action) -> bool:
        return type(action) in self._executors

    def evaluate_actions(self, state: GameState) -> list[Action]:
        return []

    def execute(self, action: Action, state: GameState) -> ActionResult:
        executor = self._executors.get(type(action))
        if executor is None:
            raise UnknownActionError(f"{self.name} does not handle {type(action).__name__}")
        req = requirements_for(action, state, self.catalog)
        state.move_to(action.screen, action.describe())
        return executor(action, req, state)

    def tick(self, dt: float, state: GameState) -> SystemTickResult:
        return SystemTickResult()

    # ------------------------------------------------------------------

    def _legal(self, state: GameState, candidates: list[Action]) -> list[Action]:
        return [a for a in candidates if self.validator.can_perform(a, state)]

    def _start_process(self, req: ActionRequirements, data, state: GameState, label: str) -> ActionResult:
        result = self.registry.start(req.category, data, state)
        if not result.success:
            return ActionResult(False, f"could not start {label}: {result.reason}")
        return ActionResult(True, f"started {label}", handle=result.handle)

    def event(self, state: GameState, event_type: str, description: str, importance: str = "info", **data) -> GameEvent:
        """Build (but do not log) an event stamped with the current minute."""
        return GameEvent(
            event_type=event_type,
            description=description,
            tick=state.minutes,
            importance=importance,
            data={"system": self.name, **data},
        )
