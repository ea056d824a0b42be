"""Forge crafting jobs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from balance_sim.core.config import CRAFT_BASE_SUCCESS, CRAFT_HEAT_SUCCESS_WEIGHT, FORGE_MAX_HEAT
from balance_sim.processes.base import CompletionEffects, InitResult, ProcessHandler, ProcessUpdate
from balance_sim.state.game_state import GameState, ProcessRecord
from balance_sim.state.resources import Cost, StateDelta

_DONE = 1.0 - 1e-9


@dataclass
class CraftingData:
    """Payload for one crafting job. The cost is paid when the job starts."""

    recipe_id: str
    duration: float
    cost: Cost
    output_item: Optional[str] = None
    output_slot: Optional[str] = None
    output_level: int = 1
    materials_gain: dict[str, int] = field(default_factory=dict)
    one_shot: bool = True
    progress: float = 0.0


def craft_success_chance(heat: float) -> float:
    return min(1.0, CRAFT_BASE_SUCCESS + (heat / FORGE_MAX_HEAT) * CRAFT_HEAT_SUCCESS_WEIGHT)


class CraftingHandler(ProcessHandler):
    category = "crafting"

    def initialize(self, handle: str, data: CraftingData, state: GameState) -> InitResult:
        state.pay(data.cost)
        return InitResult(success=True, payload=data)

    def update(self, record: ProcessRecord, dt: float, state: GameState, catalog) -> ProcessUpdate:
        job: CraftingData = record.data
        if job.duration <= 0:
            job.progress = 1.0
        else:
            job.progress = min(1.0, job.progress + dt / job.duration)
        return ProcessUpdate(is_complete=job.progress >= _DONE)

    def complete(self, record: ProcessRecord, state: GameState) -> CompletionEffects:
        job: CraftingData = record.data
        chance = craft_success_chance(state.forge_heat)
        roll = float(state.rng.random())
        if roll >= chance:
            return CompletionEffects(
                events=[self.event(
                    state, "craft_failed",
                    f"Crafting {job.recipe_id} failed (heat {state.forge_heat:.0f}, chance {chance:.0%})",
                    importance="medium", recipe=job.recipe_id,
                )],
                description=f"{job.recipe_id} job ended without a product",
            )

        delta = StateDelta()
        for material, qty in job.materials_gain.items():
            delta.add_material(material, qty)
        if job.one_shot:
            delta.completed.add(job.recipe_id)
        if job.output_item is not None and job.output_slot is not None:
            state.inventory.add(job.output_item, job.output_slot, job.output_level)
        made = job.output_item or ", ".join(f"{q} {m}" for m, q in job.materials_gain.items())
        return CompletionEffects(delta=delta, description=f"Crafted {made}")

    def cancel(self, record: ProcessRecord, state: GameState) -> None:
        job: CraftingData = record.data
        state.refund(job.cost, source=f"cancel {record.handle}")
