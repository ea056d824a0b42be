"""Tower: manual seed catching and passive auto catchers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from balance_sim.core.actions import Action, CatchSeeds
from balance_sim.core.config import (
    CATCH_SCORE,
    CATCH_SHORTAGE_BONUS,
    NET_EFFICIENCY_NONE,
    SEED_CATCH_MINUTES,
    SEED_TARGET_MIN,
    SEED_TARGET_PER_PLOT,
    WIND_LEVELS,
)
from balance_sim.processes.registry import ProcessRegistry
from balance_sim.processes.seed_catching import SeedCatchData
from balance_sim.state.catalog import Catalog
from balance_sim.state.game_state import GameState
from balance_sim.systems.base import ActionResult, GameSystem, SystemTickResult, require_non_negative
from balance_sim.validation.requirements import ActionRequirements


@dataclass
class TowerConfig:
    catch_minutes: float = SEED_CATCH_MINUTES
    catch_skill: float = 1.0
    target_per_plot: int = SEED_TARGET_PER_PLOT
    target_min: int = SEED_TARGET_MIN

    def __post_init__(self) -> None:
        require_non_negative(
            "TowerConfig",
            catch_minutes=self.catch_minutes,
            catch_skill=self.catch_skill,
            target_per_plot=self.target_per_plot,
            target_min=self.target_min,
        )


def seed_target(state: GameState, per_plot: int = SEED_TARGET_PER_PLOT, minimum: int = SEED_TARGET_MIN) -> int:
    return max(per_plot * len(state.plots), minimum)


def net_efficiency(state: GameState, catalog: Catalog) -> float:
    net = state.inventory.equipped("net")
    if net is None:
        return NET_EFFICIENCY_NONE
    return catalog.get(net.item_id).stat("efficiency", NET_EFFICIENCY_NONE)


class TowerSystem(GameSystem):
    name = "tower"

    def __init__(self, catalog: Catalog, registry: ProcessRegistry, config: Optional[TowerConfig] = None) -> None:
        super().__init__(catalog, registry)
        self.config = config or TowerConfig()
        self._executors = {CatchSeeds: self._catch}

    def evaluate_actions(self, state: GameState) -> list[Action]:
        seeds = state.total_seeds()
        if seeds >= seed_target(state, self.config.target_per_plot, self.config.target_min):
            return []
        priority = CATCH_SCORE
        if seeds < len(state.plots):
            priority += CATCH_SHORTAGE_BONUS
        action = CatchSeeds(
            state.progression.wind_level, priority=priority, resolves=frozenset({"seed_shortage"}),
        )
        return self._legal(state, [action])

    def tick(self, dt: float, state: GameState) -> SystemTickResult:
        result = SystemTickResult()
        rate = sum(
            item.stat("rate")
            for item in self.catalog.by_kind("auto_catcher")
            if item.id in state.progression.unlocked
        )
        if rate <= 0:
            return result
        state.tower_progress += rate * dt
        whole = int(state.tower_progress)
        if whole:
            state.tower_progress -= whole
            _, pool = WIND_LEVELS[state.progression.wind_level]
            for _ in range(whole):
                seed = pool[int(state.rng.integers(len(pool)))]
                state.gain_seeds(seed, 1, source="auto catcher")
            result.events.append(self.event(
                state, "auto_catch", f"Auto catchers caught {whole} seeds", importance="low", count=whole,
            ))
        return result

    def _catch(self, action: CatchSeeds, req: ActionRequirements, state: GameState) -> ActionResult:
        difficulty, pool = WIND_LEVELS[action.wind_level]
        data = SeedCatchData(
            wind_level=action.wind_level,
            difficulty=difficulty,
            pool=list(pool),
            net_efficiency=net_efficiency(state, self.catalog),
            skill=self.config.catch_skill,
            duration=self.config.catch_minutes,
        )
        return self._start_process(req, data, state, f"seed catching at wind level {action.wind_level}")
