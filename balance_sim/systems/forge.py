"""Forge: stoking heat and running crafting jobs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from balance_sim.core.actions import Action, StartCraft, StokeForge
from balance_sim.core.config import (
    CRAFT_SCORE,
    FORGE_COOLING_PER_MINUTE,
    FORGE_HEAT_PER_WOOD,
    FORGE_MAX_HEAT,
    FORGE_STOKE_THRESHOLD,
    STOKE_SCORE,
)
from balance_sim.core.errors import ConfigError
from balance_sim.processes.crafting import CraftingData
from balance_sim.processes.registry import ProcessRegistry
from balance_sim.state.catalog import Catalog
from balance_sim.state.game_state import GameState
from balance_sim.systems.base import ActionResult, GameSystem, SystemTickResult, require_non_negative
from balance_sim.systems.town import TOOL_SLOTS, is_upgrade_over_equipped
from balance_sim.validation.requirements import ActionRequirements


@dataclass
class ForgeConfig:
    cooling_per_minute: float = FORGE_COOLING_PER_MINUTE
    heat_per_wood: float = FORGE_HEAT_PER_WOOD
    stoke_threshold: float = FORGE_STOKE_THRESHOLD
    max_heat: float = FORGE_MAX_HEAT

    def __post_init__(self) -> None:
        require_non_negative(
            "ForgeConfig",
            cooling_per_minute=self.cooling_per_minute,
            heat_per_wood=self.heat_per_wood,
            stoke_threshold=self.stoke_threshold,
        )
        if self.stoke_threshold > self.max_heat:
            raise ConfigError("ForgeConfig.stoke_threshold exceeds max_heat")


class ForgeSystem(GameSystem):
    name = "forge"

    def __init__(self, catalog: Catalog, registry: ProcessRegistry, config: Optional[ForgeConfig] = None) -> None:
        super().__init__(catalog, registry)
        self.config = config or ForgeConfig()
        self._executors = {
            StartCraft: self._craft,
            StokeForge: self._stoke,
        }

    def evaluate_actions(self, state: GameState) -> list[Action]:
        candidates: list[Action] = []
        if state.forge_heat < self.config.stoke_threshold:
            candidates.append(StokeForge(priority=STOKE_SCORE))

        for recipe in self.catalog.by_kind("recipe"):
            output = self.catalog.find(recipe.output_item)
            resolves: frozenset[str] = frozenset()
            level = 0
            if output is not None:
                if not is_upgrade_over_equipped(state, output):
                    continue
                level = output.level
                if output.slot in TOOL_SLOTS:
                    resolves = frozenset({"missing_tool"})
            candidates.append(StartCraft(recipe.id, priority=CRAFT_SCORE + 10 * level, resolves=resolves))
        return self._legal(state, candidates)

    def tick(self, dt: float, state: GameState) -> SystemTickResult:
        if state.forge_heat > 0:
            state.forge_heat = max(0.0, state.forge_heat - self.config.cooling_per_minute * dt)
        return SystemTickResult()

    def _craft(self, action: StartCraft, req: ActionRequirements, state: GameState) -> ActionResult:
        recipe = req.item
        output = self.catalog.find(recipe.output_item)
        data = CraftingData(
            recipe_id=recipe.id,
            duration=recipe.duration,
            cost=req.cost,
            output_item=output.id if output else None,
            output_slot=output.slot if output else None,
            output_level=output.level if output else 1,
            materials_gain=dict(recipe.materials_gain),
            one_shot=recipe.is_one_shot,
        )
        return self._start_process(req, data, state, f"crafting {recipe.name}")

    def _stoke(self, action: StokeForge, req: ActionRequirements, state: GameState) -> ActionResult:
        state.pay(req.cost)
        wood = req.cost.materials["wood"]
        state.forge_heat = min(self.config.max_heat, state.forge_heat + self.config.heat_per_wood * wood)
        return ActionResult(True, f"Stoked the forge to {state.forge_heat:.0f} heat with {wood} wood")
