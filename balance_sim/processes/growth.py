"""Crop growth: one process per planted plot."""

from __future__ import annotations

import math
from dataclasses import dataclass

from balance_sim.core.config import (
    GROWTH_DRY_RATE,
    GROWTH_WATER_THRESHOLD,
    PLOT_WATER_DRAIN_PER_HOUR,
    WATER_RETENTION_UPGRADES,
)
from balance_sim.processes.base import CompletionEffects, InitResult, ProcessHandler, ProcessUpdate
from balance_sim.state.game_state import GameState, ProcessRecord
from balance_sim.validation.result import ValidationResult

_DONE = 1.0 - 1e-9


@dataclass
class GrowthData:
    """Payload for a growing crop."""

    plot_index: int
    crop_id: str
    growth_minutes: float
    energy_value: float
    stages: int = 3
    progress: float = 0.0
    water_level: float = 0.0
    stage: int = 0


def water_retention(state: GameState) -> float:
    """Highest unlocked retention multiplier, 1.0 without upgrades."""
    retention = 1.0
    for upgrade_id, value in WATER_RETENTION_UPGRADES:
        if upgrade_id in state.progression.unlocked:
            retention = value
    return retention


def growing_crops(state: GameState) -> list[GrowthData]:
    """Payloads of every growing plot, in plot order."""
    crops = []
    for plot in state.plots:
        if plot.process_handle is None:
            continue
        record = state.processes.get(plot.process_handle)
        if record is not None:
            crops.append(record.data)
    return crops


def watering_plan(state: GameState, max_plots: int | None = None) -> tuple[list[tuple[GrowthData, float]], int]:
    """Which crops get how much water, and the whole-unit water cost.

    Each plot is filled toward 1.0 in plot order; one water unit per unit of
    plot water, limited by the water on hand.
    """
    thirsty = [c for c in growing_crops(state) if c.water_level < _DONE]
    if max_plots is not None:
        thirsty = thirsty[:max_plots]
    deficit = sum(1.0 - c.water_level for c in thirsty)
    if deficit <= 0:
        return [], 0

    cost = min(math.ceil(deficit - 1e-9), int(math.floor(state.amount("water") + 1e-9)))
    budget = float(cost)
    plan: list[tuple[GrowthData, float]] = []
    for crop in thirsty:
        if budget <= 0:
            break
        amount = min(1.0 - crop.water_level, budget)
        plan.append((crop, amount))
        budget -= amount
    return plan, cost


class CropGrowthHandler(ProcessHandler):
    """Advances growth, drains plot water and marks the plot ready when done."""

    category = "growth"

    def can_start(self, data: GrowthData, state: GameState) -> ValidationResult:
        if not 0 <= data.plot_index < len(state.plots):
            return ValidationResult.blocked(f"plot {data.plot_index} does not exist")
        if state.plots[data.plot_index].status != "empty":
            return ValidationResult.blocked(f"plot {data.plot_index} is not empty")
        return ValidationResult.ok()

    def initialize(self, handle: str, data: GrowthData, state: GameState) -> InitResult:
        state.plots[data.plot_index].process_handle = handle
        return InitResult(success=True, payload=data)

    def update(self, record: ProcessRecord, dt: float, state: GameState, catalog) -> ProcessUpdate:
        crop: GrowthData = record.data
        update = ProcessUpdate()

        rate = 1.0 if crop.water_level > GROWTH_WATER_THRESHOLD else GROWTH_DRY_RATE
        if crop.growth_minutes <= 0:
            crop.progress = 1.0
        else:
            crop.progress = min(1.0, crop.progress + dt / crop.growth_minutes * rate)
        drain = PLOT_WATER_DRAIN_PER_HOUR / water_retention(state) * dt / 60.0
        crop.water_level = max(0.0, crop.water_level - drain)

        stage = min(crop.stages - 1, int(crop.progress * crop.stages))
        if stage != crop.stage:
            crop.stage = stage
            update.events.append(self.event(
                state, "crop_stage", f"{crop.crop_id} in plot {crop.plot_index} reached stage {stage}",
                importance="low", plot=crop.plot_index, stage=stage,
            ))

        update.is_complete = crop.progress >= _DONE
        return update

    def complete(self, record: ProcessRecord, state: GameState) -> CompletionEffects:
        crop: GrowthData = record.data
        plot = state.plots[crop.plot_index]
        plot.process_handle = None
        plot.ready_crop = crop.crop_id
        return CompletionEffects(description=f"{crop.crop_id} in plot {crop.plot_index} is ready to harvest")

    def cancel(self, record: ProcessRecord, state: GameState) -> None:
        crop: GrowthData = record.data
        plot = state.plots[crop.plot_index]
        if plot.process_handle == record.handle:
            plot.process_handle = None
