"""Main simulation loop: the per-minute tick pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np
from numpy.random import Generator

from balance_sim.agents.decision import DecisionEngine
from balance_sim.agents.persona import Persona, get_persona
from balance_sim.agents.strategy import CheckInSchedule
from balance_sim.core.actions import Action
from balance_sim.core.errors import CatalogLookupError, InvariantViolation, ResourceInsufficient
from balance_sim.processes.adventure import AdventureHandler
from balance_sim.processes.crafting import CraftingHandler
from balance_sim.processes.growth import CropGrowthHandler
from balance_sim.processes.manager import ProcessManager
from balance_sim.processes.mining import MiningHandler
from balance_sim.processes.registry import ProcessRegistry
from balance_sim.processes.seed_catching import SeedCatchingHandler
from balance_sim.processes.training import TrainingHandler
from balance_sim.simulation.metrics import MetricsCollector
from balance_sim.simulation.run_config import RunConfig
from balance_sim.state.catalog import Catalog
from balance_sim.state.game_state import GameState
from balance_sim.systems.adventure import AdventureSystem
from balance_sim.systems.base import GameSystem
from balance_sim.systems.farm import FarmSystem
from balance_sim.systems.forge import ForgeSystem
from balance_sim.systems.helpers import HelperSystem
from balance_sim.systems.mine import MineSystem
from balance_sim.systems.tower import TowerConfig, TowerSystem
from balance_sim.systems.town import TownSystem
from balance_sim.viz.logger import SimLogger

OUTCOMES: tuple[str, ...] = ("victory", "stuck", "max_days", "aborted")


@dataclass
class RunResult:
    """Outcome of one complete run."""

    outcome: str
    days: int
    final_state: dict
    events: list[dict] = field(default_factory=list)
    persona: str = ""
    seed: int = 0
    checkins: int = 0
    actions_taken: int = 0
    actions_blocked: int = 0


class SimulationEngine:
    """Orchestrates one persona playing one run against a catalog."""

    def __init__(
        self,
        catalog: Catalog,
        persona: "str | Persona" = "balanced",
        run_config: Optional[RunConfig] = None,
        logger: Optional[SimLogger] = None,
    ) -> None:
        self.catalog = catalog
        self.persona = get_persona(persona)
        self.run_config = run_config or RunConfig()
        self.rng: Generator = np.random.default_rng(self.run_config.seed)

        # State
        self.state = GameState.from_run_config(self.run_config, catalog, self.rng)

        # Processes
        self.registry = ProcessRegistry()
        for handler in (
            CropGrowthHandler(),
            CraftingHandler(),
            MiningHandler(),
            AdventureHandler(),
            TrainingHandler(),
            SeedCatchingHandler(),
        ):
            self.registry.register(handler)
        self.process_manager = ProcessManager(self.registry, catalog)

        # Systems, in tick order
        self.systems: list[GameSystem] = [
            FarmSystem(catalog, self.registry),
            TownSystem(catalog, self.registry),
            AdventureSystem(catalog, self.registry),
            MineSystem(catalog, self.registry),
            ForgeSystem(catalog, self.registry),
            HelperSystem(catalog, self.registry),
            TowerSystem(catalog, self.registry, TowerConfig(catch_skill=self.persona.catch_skill)),
        ]
        self._system_by_name: dict[str, GameSystem] = {s.name: s for s in self.systems}

        # Decision making
        self.decision_engine = DecisionEngine(self.persona, self.systems, catalog)
        self.schedule = CheckInSchedule(self.persona)

        # Observation
        self.metrics = MetricsCollector()
        self.logger = logger or SimLogger(verbosity=0, stdout=False)
        for event in self.state.events:
            self.logger.log_event(event)
        self.state.events.subscribe(self.logger.log_event)

        # Run bookkeeping
        self.outcome: Optional[str] = None
        self.days_completed: int = 0
        self.actions_taken: int = 0
        self.actions_blocked: int = 0
        self._started = False
        self._last_fingerprint: Optional[tuple] = None
        self._unchanged_days: int = 0

        # Dashboard callback
        self._dashboard_callback: Optional[Callable] = None

    def set_dashboard_callback(self, callback: Callable[[int, MetricsCollector], None]) -> None:
        self._dashboard_callback = callback

    @property
    def finished(self) -> bool:
        return self.outcome is not None

    def run(self) -> RunResult:
        """Tick until victory, stuck, the day limit or a fatal error."""
        while not self.finished:
            try:
                self.tick()
            except InvariantViolation as exc:
                self.state.emit("fatal", f"Run aborted: {exc}", importance="fatal", error=type(exc).__name__)
                self._finish("aborted")
        self.logger.flush_day(self.state.day)
        return self.result()

    def tick(self) -> None:
        """One simulated tick, in five steps."""
        if self.finished:
            return
        state = self.state
        dt = self.run_config.tick_minutes

        # 0. GAME START: the opening check-in happens at minute 0
        if not self._started:
            self._started = True
            self._maybe_check_in()

        # 1. TIME
        day_before = state.day
        state.advance_time(dt)

        # 2. SYSTEMS: passive effects, each system isolated from the others.
        # A system that fails keeps whatever it changed before the error.
        for system in self.systems:
            try:
                result = system.tick(dt, state)
            except InvariantViolation:
                raise
            except ResourceInsufficient as exc:
                raise InvariantViolation(f"{system.name} tick overdrew {exc}") from exc
            except Exception as exc:
                state.emit(
                    "system_error",
                    f"{system.name} tick failed: {exc}",
                    importance="high",
                    system=system.name,
                    error=type(exc).__name__,
                )
                continue
            state.events.extend(result.events)

        # 3. PROCESSES
        self.process_manager.update_all(state, dt)

        # 4. CHECK-IN: decide, re-validate, execute
        self._maybe_check_in()

        # 5. CLEANUP: clamp, then close the day if one ended
        state.clamp_all()
        if state.day != day_before:
            self._end_of_day(day_before)

    # ------------------------------------------------------------------
    # Check-ins
    # ------------------------------------------------------------------

    def _maybe_check_in(self) -> None:
        state = self.state
        if not self.schedule.should_check_in(state):
            return
        self.schedule.record(state)
        self.metrics.record_checkin()

        chosen = self.decision_engine.decide(state)
        decision = self.decision_engine.last_decision
        state.emit(
            "checkin",
            f"Check-in #{self.schedule.total}: {decision.proposed} proposed, "
            f"{decision.kept} kept, bottleneck {decision.bottleneck or 'none'}",
            importance="low",
            persona=self.persona.name,
            proposed=decision.proposed,
            kept=decision.kept,
            bottleneck=decision.bottleneck,
            chosen=[a.describe() for a in chosen],
        )
        for action in chosen:
            self._perform(action)
        self.decision_engine.reset()

    def _perform(self, action: Action) -> None:
        """Re-validate one chosen action against the current state and run it."""
        state = self.state
        system = self._system_by_name[action.system]

        check = system.validator.can_perform(action, state)
        if check.catalog_miss:
            self._catalog_miss(action, check.summary())
            return
        if not check:
            self.actions_blocked += 1
            self.metrics.record_blocked()
            state.emit(
                "action_blocked",
                f"Skipped {action.describe()}: {check.summary()}",
                importance="info",
                action=action.kind,
                reasons=list(check.reasons),
            )
            return

        try:
            result = system.execute(action, state)
        except CatalogLookupError as exc:
            self._catalog_miss(action, f"unknown catalog id {exc.args[0]!r}")
            return
        except ResourceInsufficient as exc:
            # validation passed, so the state and the check disagree
            raise InvariantViolation(f"{action.describe()} overdrew {exc}") from exc

        state.events.extend(result.events)
        if not result.success:
            state.emit(
                "action_failed",
                f"{action.describe()} failed after validation: {result.description}",
                importance="warning",
                action=action.kind,
            )
            return

        self.actions_taken += 1
        self.metrics.record_action(action.kind)
        state.emit(
            "action",
            result.description or action.describe(),
            importance="info",
            action=action.kind,
            system=system.name,
            handle=result.handle,
        )

    def _catalog_miss(self, action: Action, reason: str) -> None:
        self.state.emit(
            "catalog_miss",
            f"Dropped {action.describe()}: {reason}",
            importance="warning",
            action=action.kind,
        )

    # ------------------------------------------------------------------
    # Day boundary and termination
    # ------------------------------------------------------------------

    def _end_of_day(self, day: int) -> None:
        """Snapshot the finished day, then test victory, stuck and the day limit."""
        state = self.state
        self.days_completed = day
        self.metrics.collect_daily(day, state)
        if self._dashboard_callback:
            self._dashboard_callback(day, self.metrics)

        fingerprint = state.fingerprint()
        if fingerprint == self._last_fingerprint:
            self._unchanged_days += 1
        else:
            self._unchanged_days = 0
        self._last_fingerprint = fingerprint

        config = self.run_config
        if config.mode == "first_victory" and config.victory_reached(state):
            self._finish("victory")
        elif config.stop_if_stuck and self._unchanged_days >= config.stuck_days:
            self._finish("stuck")
        elif day >= config.max_days:
            if config.mode == "fixed_days" and config.victory_reached(state):
                self._finish("victory")
            else:
                self._finish("max_days")

        self.logger.flush_day(day)

    def _finish(self, outcome: str) -> None:
        self.outcome = outcome
        self.state.emit(
            "run_finished",
            f"{self.persona.name} run ended in {outcome} after {self.days_completed} days",
            importance="critical" if outcome == "aborted" else "medium",
            outcome=outcome,
            days=self.days_completed,
        )

    def result(self) -> RunResult:
        return RunResult(
            outcome=self.outcome or "max_days",
            days=self.days_completed,
            final_state=self.state.snapshot(),
            events=self.state.events.as_dicts(),
            persona=self.persona.name,
            seed=self.run_config.seed,
            checkins=self.schedule.total,
            actions_taken=self.actions_taken,
            actions_blocked=self.actions_blocked,
        )
