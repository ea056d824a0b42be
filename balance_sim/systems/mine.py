"""Mine: start, sharpen and stop mining sessions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from balance_sim.core.actions import Action, SharpenTool, StartMining, StopMining
from balance_sim.core.config import (
    MINING_ENERGY_SCORE,
    MINING_RISK,
    MINING_SCORE,
    MINING_STOP_FRACTION,
    SHARPEN_MINUTES,
    SHARPEN_SCORE,
    STOP_MINING_SCORE,
)
from balance_sim.processes.mining import MiningData
from balance_sim.processes.registry import ProcessRegistry
from balance_sim.state.catalog import Catalog
from balance_sim.state.game_state import GameState
from balance_sim.state.inventory import OwnedItem
from balance_sim.systems.base import ActionResult, GameSystem, require_fraction, require_non_negative
from balance_sim.validation.requirements import ActionRequirements, active_mining


@dataclass
class MineConfig:
    sharpen_minutes: float = SHARPEN_MINUTES
    stop_fraction: float = MINING_STOP_FRACTION
    risk: float = MINING_RISK

    def __post_init__(self) -> None:
        require_non_negative("MineConfig", sharpen_minutes=self.sharpen_minutes)
        require_fraction("MineConfig", stop_fraction=self.stop_fraction, risk=self.risk)


def best_pickaxe(state: GameState) -> Optional[OwnedItem]:
    picks = state.inventory.in_slot("pickaxe")
    return max(picks, key=lambda p: p.level) if picks else None


class MineSystem(GameSystem):
    name = "mine"

    def __init__(self, catalog: Catalog, registry: ProcessRegistry, config: Optional[MineConfig] = None) -> None:
        super().__init__(catalog, registry)
        self.config = config or MineConfig()
        self._executors = {
            StartMining: self._start,
            SharpenTool: self._sharpen,
            StopMining: self._stop,
        }

    def evaluate_actions(self, state: GameState) -> list[Action]:
        if active_mining(state) is None:
            pick = best_pickaxe(state)
            level = pick.level if pick else 0
            priority = MINING_SCORE + 10 * level + MINING_ENERGY_SCORE * state.resources["energy"].fraction
            candidates: list[Action] = [StartMining(priority=priority, risk=self.config.risk)]
        elif active_mining(state).data.stop_requested:
            candidates = []
        else:
            candidates = [SharpenTool(priority=SHARPEN_SCORE)]
            if state.resources["energy"].fraction < self.config.stop_fraction:
                candidates.append(StopMining(priority=STOP_MINING_SCORE))
        return self._legal(state, candidates)

    def _start(self, action: StartMining, req: ActionRequirements, state: GameState) -> ActionResult:
        pick = best_pickaxe(state)
        state.inventory.equip(pick.item_id)
        item = self.catalog.get(pick.item_id)
        data = MiningData(
            pickaxe_id=pick.item_id,
            efficiency=item.stat("efficiency"),
            material_bonus=item.stat("material_bonus"),
            double_obsidian=item.stat("double_obsidian") > 0,
        )
        return self._start_process(req, data, state, f"mining with {item.name}")

    def _sharpen(self, action: SharpenTool, req: ActionRequirements, state: GameState) -> ActionResult:
        state.pay(req.cost)
        active_mining(state).data.sharpen_remaining = self.config.sharpen_minutes
        return ActionResult(True, f"Sharpened pickaxe for {self.config.sharpen_minutes:g} minutes")

    def _stop(self, action: StopMining, req: ActionRequirements, state: GameState) -> ActionResult:
        # the session completes with its haul on the next update
        session = active_mining(state).data
        session.stop_requested = True
        return ActionResult(True, f"Stopping mining at {session.depth:.0f}m")
