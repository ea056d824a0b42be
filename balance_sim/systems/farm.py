"""Farm: planting, watering, harvesting, pumping and clearing new land."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from balance_sim.core.actions import Action, ClearArea, HarvestCrops, PlantCrop, PumpWater, WaterCrops
from balance_sim.core.config import (
    CLEARING_BASE_SCORE,
    CLEARING_PER_PLOT,
    DEFAULT_GROWTH_STAGES,
    HARVEST_BASE_SCORE,
    HARVEST_GOLD_PER_CROP,
    HARVEST_PER_READY_PLOT,
    PLANT_BASE_SCORE,
    PLANT_PER_FREE_PLOT,
    PLOT_DRY_THRESHOLD,
    PUMP_AMOUNT,
    PUMP_SCORE,
    PUMP_THRESHOLD,
    PUMP_UPGRADES,
    WATER_BASE_SCORE,
    WATER_PER_DRY_PLOT,
)
from balance_sim.processes.growth import GrowthData, growing_crops, watering_plan
from balance_sim.processes.registry import ProcessRegistry
from balance_sim.state.catalog import Catalog, CatalogItem
from balance_sim.state.game_state import GameState
from balance_sim.state.resources import Cost
from balance_sim.systems.base import (
    ActionResult,
    GameSystem,
    SystemTickResult,
    require_fraction,
    require_non_negative,
)
from balance_sim.validation.requirements import ActionRequirements


@dataclass
class FarmConfig:
    pump_amount: float = PUMP_AMOUNT
    pump_threshold: float = PUMP_THRESHOLD
    dry_threshold: float = PLOT_DRY_THRESHOLD
    growth_stages: int = DEFAULT_GROWTH_STAGES

    def __post_init__(self) -> None:
        require_non_negative("FarmConfig", pump_amount=self.pump_amount)
        require_fraction(
            "FarmConfig", pump_threshold=self.pump_threshold, dry_threshold=self.dry_threshold,
        )
        require_non_negative("FarmConfig", growth_stages=self.growth_stages - 1)


# =============================================================================
# Farm operations shared with helper automation
# =============================================================================

def best_crop(state: GameState, catalog: Catalog, seeds: Optional[dict[str, int]] = None) -> Optional[CatalogItem]:
    """The plantable crop with seeds on hand and the highest energy value."""
    seeds = state.seeds if seeds is None else seeds
    best = None
    for crop in catalog.by_kind("crop"):
        if seeds.get(crop.id, 0) <= 0:
            continue
        if not all(state.satisfies(p) for p in crop.prerequisites):
            continue
        if best is None or crop.energy_value > best.energy_value:
            best = crop
    return best


def plant(
    state: GameState,
    registry: ProcessRegistry,
    crop: CatalogItem,
    plot_index: int,
    stages: int = DEFAULT_GROWTH_STAGES,
) -> Optional[str]:
    """Spend one seed and start a growth process. Returns the handle, or None if refused."""
    cost = Cost(seeds={crop.id: 1})
    state.pay(cost)
    data = GrowthData(
        plot_index=plot_index,
        crop_id=crop.id,
        growth_minutes=crop.duration,
        energy_value=crop.energy_value,
        stages=int(crop.stat("stages", stages)),
    )
    result = registry.start("growth", data, state)
    if not result.success:
        state.refund(cost, source="plant refused")
        return None
    return result.handle


def water(state: GameState, max_plots: Optional[int] = None) -> tuple[int, int]:
    """Water thirsty crops in plot order. Returns (plots watered, water spent)."""
    plan, cost = watering_plan(state, max_plots)
    if cost <= 0:
        return 0, 0
    state.spend("water", cost)
    for crop, amount in plan:
        crop.water_level = min(1.0, crop.water_level + amount)
    return len(plan), cost


def harvest(state: GameState, catalog: Catalog, max_plots: Optional[int] = None) -> tuple[int, float]:
    """Collect ready plots in order. Returns (plots harvested, energy gained).

    Every crop also sells for a flat amount of gold.
    """
    harvested = 0
    energy = 0.0
    for plot in state.plots:
        if max_plots is not None and harvested >= max_plots:
            break
        if plot.ready_crop is None:
            continue
        value = catalog.get(plot.ready_crop).energy_value
        energy += state.gain("energy", value, source=f"harvest {plot.ready_crop}")
        state.gain("gold", HARVEST_GOLD_PER_CROP, source=f"harvest {plot.ready_crop}")
        plot.ready_crop = None
        harvested += 1
    return harvested, energy


def pump_amount(state: GameState, base: float = PUMP_AMOUNT) -> float:
    amount = base
    for upgrade_id, value in PUMP_UPGRADES:
        if upgrade_id in state.progression.unlocked:
            amount = value
    return amount


class FarmSystem(GameSystem):
    name = "farm"

    def __init__(self, catalog: Catalog, registry: ProcessRegistry, config: Optional[FarmConfig] = None) -> None:
        super().__init__(catalog, registry)
        self.config = config or FarmConfig()
        self._executors = {
            PlantCrop: self._plant,
            WaterCrops: self._water,
            HarvestCrops: self._harvest,
            PumpWater: self._pump,
            ClearArea: self._clear,
        }

    def evaluate_actions(self, state: GameState) -> list[Action]:
        candidates: list[Action] = []
        plots = state.plots

        ready = sum(1 for p in plots if p.status == "ready")
        if ready:
            candidates.append(HarvestCrops(priority=HARVEST_BASE_SCORE + HARVEST_PER_READY_PLOT * ready))

        dry = sum(1 for c in growing_crops(state) if c.water_level < self.config.dry_threshold)
        if dry:
            candidates.append(WaterCrops(priority=WATER_BASE_SCORE + WATER_PER_DRY_PLOT * dry))

        # one plant proposal per empty plot, drawing down a copy of the seed stock
        empty = [p.index for p in plots if p.status == "empty"]
        seeds = dict(state.seeds)
        for index in empty:
            crop = best_crop(state, self.catalog, seeds)
            if crop is None:
                break
            seeds[crop.id] -= 1
            candidates.append(PlantCrop(
                crop.id, index, priority=PLANT_BASE_SCORE + PLANT_PER_FREE_PLOT * len(empty),
            ))

        if state.resources["water"].fraction < self.config.pump_threshold:
            candidates.append(PumpWater(priority=PUMP_SCORE, resolves=frozenset({"water_shortage"})))

        for item in self.catalog.by_kind("cleanup"):
            if item.id in state.progression.completed:
                continue
            candidates.append(ClearArea(
                item.id,
                priority=CLEARING_BASE_SCORE + CLEARING_PER_PLOT * item.plots_added,
                resolves=frozenset({"near_full_plots"}) if item.plots_added else frozenset(),
            ))

        return self._legal(state, candidates)

    def tick(self, dt: float, state: GameState) -> SystemTickResult:
        # wells and rain barrels
        regen = sum(
            item.stat("water_regen")
            for item in self.catalog.by_kind("upgrade")
            if item.id in state.progression.unlocked
        )
        if regen > 0:
            state.gain("water", regen * dt, source="water regen")
        return SystemTickResult()

    # ------------------------------------------------------------------

    def _plant(self, action: PlantCrop, req: ActionRequirements, state: GameState) -> ActionResult:
        handle = plant(state, self.registry, req.item, action.plot_index, self.config.growth_stages)
        if handle is None:
            return ActionResult(False, f"could not plant {action.crop_id}")
        return ActionResult(True, f"Planted {action.crop_id} in plot {action.plot_index}", handle=handle)

    def _water(self, action: WaterCrops, req: ActionRequirements, state: GameState) -> ActionResult:
        watered, spent = water(state)
        return ActionResult(True, f"Watered {watered} plots using {spent} water")

    def _harvest(self, action: HarvestCrops, req: ActionRequirements, state: GameState) -> ActionResult:
        count, energy = harvest(state, self.catalog)
        gold = count * HARVEST_GOLD_PER_CROP
        return ActionResult(True, f"Harvested {count} plots for {energy:g} energy and {gold:g} gold")

    def _pump(self, action: PumpWater, req: ActionRequirements, state: GameState) -> ActionResult:
        gained = state.gain("water", pump_amount(state, self.config.pump_amount), source="pump")
        return ActionResult(True, f"Pumped {gained:g} water")

    def _clear(self, action: ClearArea, req: ActionRequirements, state: GameState) -> ActionResult:
        item = req.item
        state.pay(req.cost)
        if item.is_one_shot:
            state.mark_completed(item.id)
        state.add_plots(item.plots_added)
        for material, qty in item.materials_gain.items():
            state.gain_material(material, qty, source=item.id)
        return ActionResult(True, f"Cleared {item.name}, +{item.plots_added} plots")
