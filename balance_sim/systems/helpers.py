"""Helpers: hiring, assigning and training gnomes, and their hourly work."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from balance_sim.core.actions import Action, AssignHelper, HireHelper, TrainHelper
from balance_sim.core.config import (
    ASSIGN_SCORE,
    HELPER_ROLE_SCALING,
    HELPER_WORK_INTERVAL,
    HIRE_SCORE,
    RAW_MATERIAL_PREFIX,
    TRAIN_SCORE,
    TRAINING_MINUTES_PER_LEVEL,
    WIND_LEVELS,
)
from balance_sim.core.errors import ConfigError
from balance_sim.processes.growth import growing_crops
from balance_sim.processes.registry import ProcessRegistry
from balance_sim.processes.training import TrainingData, find_helper
from balance_sim.state.catalog import Catalog
from balance_sim.state.game_state import GameState, Helper
from balance_sim.systems.base import ActionResult, GameSystem, SystemTickResult, require_non_negative
from balance_sim.systems.farm import best_crop, harvest, plant, water
from balance_sim.validation.requirements import ActionRequirements

# roles the automation pass acts on; miners_friend and adventure_fighter are read
# directly by the mining handler and the hero loadout
ACTIVE_ROLES: tuple[str, ...] = (
    "harvester", "waterer", "sower", "pump_operator", "forager", "refiner", "seed_catcher",
)


@dataclass
class HelperConfig:
    work_interval: float = HELPER_WORK_INTERVAL
    training_minutes_per_level: float = TRAINING_MINUTES_PER_LEVEL

    def __post_init__(self) -> None:
        require_non_negative("HelperConfig", training_minutes_per_level=self.training_minutes_per_level)
        if self.work_interval <= 0:
            raise ConfigError("HelperConfig.work_interval must be positive")


def role_effect(role: str, level: int) -> float:
    base, per_level = HELPER_ROLE_SCALING[role]
    return base + per_level * level


def wanted_role(state: GameState) -> str:
    """The most useful role nobody covers yet."""
    covered = {h.role for h in state.helpers if h.role}
    needs = []
    if state.seeds and any(p.status == "empty" for p in state.plots):
        needs.append("sower")
    if growing_crops(state):
        needs.append("waterer")
    needs += ["harvester", "pump_operator", "forager"]
    if state.progression.max_depth > 0:
        needs.append("miners_friend")
    if state.inventory.has_slot("weapon"):
        needs.append("adventure_fighter")
    needs += ["seed_catcher", "refiner"]
    for role in needs:
        if role not in covered:
            return role
    return "waterer"


class HelperSystem(GameSystem):
    name = "helpers"

    def __init__(self, catalog: Catalog, registry: ProcessRegistry, config: Optional[HelperConfig] = None) -> None:
        super().__init__(catalog, registry)
        self.config = config or HelperConfig()
        self._executors = {
            HireHelper: self._hire,
            AssignHelper: self._assign,
            TrainHelper: self._train,
        }

    def evaluate_actions(self, state: GameState) -> list[Action]:
        candidates: list[Action] = [HireHelper(item.id, priority=HIRE_SCORE) for item in self.catalog.by_kind("hire")]
        for helper in state.helpers:
            if helper.role is None:
                candidates.append(AssignHelper(helper.helper_id, wanted_role(state), priority=ASSIGN_SCORE))
            else:
                candidates.append(TrainHelper(helper.helper_id, priority=TRAIN_SCORE - 10 * helper.level))
        return self._legal(state, candidates)

    def tick(self, dt: float, state: GameState) -> SystemTickResult:
        result = SystemTickResult()
        if not state.helpers:
            return result
        state.helper_timer += dt
        while state.helper_timer >= self.config.work_interval - 1e-9:
            state.helper_timer -= self.config.work_interval
            for helper in state.helpers:
                if helper.role in ACTIVE_ROLES and not helper.training:
                    summary = self._work(helper, state)
                    if summary:
                        result.events.append(self.event(
                            state, "helper_work", f"{helper.helper_id} ({helper.role}): {summary}",
                            importance="low", helper=helper.helper_id, role=helper.role,
                        ))
        return result

    def _work(self, helper: Helper, state: GameState) -> str:
        """One automation pass for one helper. Returns a summary, empty if idle."""
        amount = role_effect(helper.role, helper.level)
        role = helper.role
        if role == "harvester":
            count, energy = harvest(state, self.catalog, int(amount))
            return f"harvested {count} plots (+{energy:g} energy)" if count else ""
        if role == "waterer":
            count, spent = water(state, int(amount))
            return f"watered {count} plots with {spent} water" if count else ""
        if role == "sower":
            return self._sow(state, int(amount))
        if role == "pump_operator":
            gained = state.gain("water", amount, source=helper.helper_id)
            return f"pumped {gained:g} water" if gained else ""
        if role == "forager":
            gained = state.gain_material("wood", int(amount), source=helper.helper_id)
            return f"gathered {gained} wood" if gained else ""
        if role == "refiner":
            return self._refine(state, amount)
        if role == "seed_catcher":
            return self._catch(state, amount)
        return ""

    def _sow(self, state: GameState, limit: int) -> str:
        planted = 0
        for plot in state.plots:
            if planted >= limit:
                break
            if plot.status != "empty":
                continue
            crop = best_crop(state, self.catalog)
            if crop is None:
                break
            if plant(state, self.registry, crop, plot.index) is not None:
                planted += 1
        return f"planted {planted} plots" if planted else ""

    def _refine(self, state: GameState, fraction: float) -> str:
        refined = []
        for material in sorted(state.materials):
            qty = state.materials[material]
            if not material.startswith(RAW_MATERIAL_PREFIX) or qty <= 0:
                continue
            batch = max(1, int(qty * fraction))
            state.spend_material(material, batch)
            product = material[len(RAW_MATERIAL_PREFIX):]
            kept = state.gain_material(product, batch, source="refiner")
            refined.append(f"{kept} {product}")
        return "refined " + ", ".join(refined) if refined else ""

    def _catch(self, state: GameState, chance: float) -> str:
        _, pool = WIND_LEVELS[state.progression.wind_level]
        caught = 0
        for _ in range(int(self.config.work_interval)):
            if state.rng.random() < chance:
                seed = pool[int(state.rng.integers(len(pool)))]
                caught += state.gain_seeds(seed, 1, source="seed catcher")
        return f"caught {caught} seeds" if caught else ""

    # ------------------------------------------------------------------

    def _hire(self, action: HireHelper, req: ActionRequirements, state: GameState) -> ActionResult:
        state.pay(req.cost)
        helper = Helper(helper_id=state.next_helper_id())
        state.helpers.append(helper)
        return ActionResult(True, f"Hired {helper.helper_id}")

    def _assign(self, action: AssignHelper, req: ActionRequirements, state: GameState) -> ActionResult:
        helper = find_helper(state, action.helper_id)
        helper.role = action.role
        return ActionResult(True, f"{helper.helper_id} now works as {action.role}")

    def _train(self, action: TrainHelper, req: ActionRequirements, state: GameState) -> ActionResult:
        helper = find_helper(state, action.helper_id)
        data = TrainingData(
            helper_id=helper.helper_id,
            duration=self.config.training_minutes_per_level * helper.level,
            cost=req.cost,
        )
        return self._start_process(req, data, state, f"training {helper.helper_id}")
