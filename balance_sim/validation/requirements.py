"""What each action needs: prerequisites, tool, cost, process slot, availability.

This is the only place action requirements are computed. The validator reads
them to answer can_perform, and the systems read the same object when they
execute, so the two can never disagree about cost or legality.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from balance_sim.core.actions import (
    Action,
    AssignHelper,
    BuyItem,
    CatchSeeds,
    ClearArea,
    HarvestCrops,
    HireHelper,
    PlantCrop,
    PumpWater,
    SellMaterial,
    SharpenTool,
    StartAdventure,
    StartCraft,
    StartMining,
    StokeForge,
    StopMining,
    TrainHelper,
    WaterCrops,
)
from balance_sim.core.config import (
    DEFAULT_HEAT_REQUIREMENT,
    FORGE_MAX_HEAT,
    FORGE_WOOD_PER_STOKE,
    HELPER_MAX_LEVEL,
    HELPER_ROLES,
    MINING_MIN_ENERGY,
    ROUTE_ENERGY_MULTIPLIER,
    ROUTE_LENGTHS,
    SHARPEN_ENERGY_COST,
    TRAINING_GOLD_PER_LEVEL,
    WIND_LEVELS,
)
from balance_sim.core.errors import UnknownActionError
from balance_sim.processes.growth import growing_crops, watering_plan
from balance_sim.processes.training import find_helper
from balance_sim.state.catalog import Catalog, CatalogItem, Prerequisite
from balance_sim.state.game_state import GameState
from balance_sim.state.resources import Cost

EQUIPMENT_KINDS: tuple[str, ...] = ("tool", "weapon", "armor", "net")


@dataclass
class ActionRequirements:
    """Everything validation checks and execution consumes for one action."""

    prerequisites: list[Prerequisite] = field(default_factory=list)
    tool: Optional[str] = None
    cost: Cost = field(default_factory=Cost)
    minimums: dict[str, float] = field(default_factory=dict)   # held, not spent
    category: Optional[str] = None                             # process slot needed
    blockers: list[str] = field(default_factory=list)
    item: Optional[CatalogItem] = None


def item_cost(item: CatalogItem) -> Cost:
    return Cost(energy=item.energy_cost, gold=item.gold_cost, materials=dict(item.materials_cost))


def housing_capacity(state: GameState, catalog: Catalog) -> int:
    """Helper slots from every unlocked housing upgrade."""
    return int(sum(
        item.stat("housing") for item in catalog.by_kind("housing")
        if item.id in state.progression.unlocked
    ))


def active_mining(state: GameState):
    records = state.active_processes("mining")
    return records[0] if records else None


def requirements_for(action: Action, state: GameState, catalog: Catalog) -> ActionRequirements:
    """Dispatch on the action variant. Raises CatalogLookupError for unknown ids."""
    builder = _BUILDERS.get(type(action))
    if builder is None:
        raise UnknownActionError(type(action).__name__)
    return builder(action, state, catalog)


# =============================================================================
# Farm
# =============================================================================

def _plant(action: PlantCrop, state: GameState, catalog: Catalog) -> ActionRequirements:
    crop = catalog.get(action.crop_id)
    req = ActionRequirements(
        prerequisites=list(crop.prerequisites),
        cost=Cost(seeds={action.crop_id: 1}),
        category="growth",
        item=crop,
    )
    if crop.kind != "crop":
        req.blockers.append(f"{action.crop_id} is not a crop")
    if not 0 <= action.plot_index < len(state.plots):
        req.blockers.append(f"plot {action.plot_index} does not exist")
    elif state.plots[action.plot_index].status != "empty":
        req.blockers.append(f"plot {action.plot_index} is not empty")
    return req


def _water(action: WaterCrops, state: GameState, catalog: Catalog) -> ActionRequirements:
    plan, cost = watering_plan(state)
    req = ActionRequirements(cost=Cost(water=cost))
    if not any(c.water_level < 1.0 for c in growing_crops(state)):
        req.blockers.append("no crops need water")
    elif cost < 1:
        req.minimums["water"] = 1.0
    return req


def _harvest(action: HarvestCrops, state: GameState, catalog: Catalog) -> ActionRequirements:
    req = ActionRequirements()
    if not any(p.status == "ready" for p in state.plots):
        req.blockers.append("no crops ready")
    return req


def _pump(action: PumpWater, state: GameState, catalog: Catalog) -> ActionRequirements:
    req = ActionRequirements()
    if state.amount("water") >= state.capacity("water"):
        req.blockers.append("water is full")
    return req


def _clear(action: ClearArea, state: GameState, catalog: Catalog) -> ActionRequirements:
    item = catalog.get(action.cleanup_id)
    req = ActionRequirements(
        prerequisites=list(item.prerequisites),
        tool=item.tool_required,
        cost=item_cost(item),
        item=item,
    )
    if item.kind != "cleanup":
        req.blockers.append(f"{item.id} is not a cleanup")
    if item.is_one_shot and item.id in state.progression.completed:
        req.blockers.append(f"{item.id} already cleared")
    return req


# =============================================================================
# Town
# =============================================================================

def _buy(action: BuyItem, state: GameState, catalog: Catalog) -> ActionRequirements:
    item = catalog.get(action.purchase_id)
    req = ActionRequirements(
        prerequisites=list(item.prerequisites),
        tool=item.tool_required,
        cost=item_cost(item),
        item=item,
    )
    if item.system != "town":
        req.blockers.append(f"{item.id} is not sold in town")
    if item.kind in EQUIPMENT_KINDS:
        if item.slot is None:
            req.blockers.append(f"{item.id} has no equipment slot")
        elif state.inventory.owns(item.id):
            req.blockers.append(f"{item.id} already owned")
    elif not item.repeatable and item.id in state.progression.unlocked:
        req.blockers.append(f"{item.id} already unlocked")
    return req


def _sell(action: SellMaterial, state: GameState, catalog: Catalog) -> ActionRequirements:
    req = ActionRequirements(cost=Cost(materials={action.material: action.quantity}))
    if action.quantity <= 0:
        req.blockers.append("nothing to sell")
    return req


# =============================================================================
# Adventure
# =============================================================================

def _adventure(action: StartAdventure, state: GameState, catalog: Catalog) -> ActionRequirements:
    route = catalog.get(action.route_id)
    req = ActionRequirements(
        prerequisites=list(route.prerequisites),
        tool=route.tool_required or "weapon",
        category="adventure",
        item=route,
    )
    if route.kind != "route":
        req.blockers.append(f"{route.id} is not an adventure route")
    if action.length not in ROUTE_LENGTHS:
        req.blockers.append(f"unknown route length {action.length}")
    else:
        req.cost = Cost(
            energy=route.energy_cost * ROUTE_ENERGY_MULTIPLIER[action.length],
            gold=route.gold_cost,
        )
    return req


# =============================================================================
# Mine
# =============================================================================

def _mine(action: StartMining, state: GameState, catalog: Catalog) -> ActionRequirements:
    return ActionRequirements(
        tool="pickaxe",
        minimums={"energy": MINING_MIN_ENERGY},
        category="mining",
    )


def _sharpen(action: SharpenTool, state: GameState, catalog: Catalog) -> ActionRequirements:
    req = ActionRequirements(tool="pickaxe", cost=Cost(energy=SHARPEN_ENERGY_COST))
    record = active_mining(state)
    if record is None:
        req.blockers.append("not mining")
    elif record.data.sharpen_remaining > 0:
        req.blockers.append("pickaxe already sharpened")
    return req


def _stop_mining(action: StopMining, state: GameState, catalog: Catalog) -> ActionRequirements:
    req = ActionRequirements()
    record = active_mining(state)
    if record is None:
        req.blockers.append("not mining")
    elif record.data.stop_requested:
        req.blockers.append("mining already stopping")
    return req


# =============================================================================
# Forge
# =============================================================================

def _craft(action: StartCraft, state: GameState, catalog: Catalog) -> ActionRequirements:
    recipe = catalog.get(action.recipe_id)
    req = ActionRequirements(
        prerequisites=list(recipe.prerequisites),
        tool=recipe.tool_required,
        cost=item_cost(recipe),
        category="crafting",
        item=recipe,
    )
    if recipe.kind != "recipe":
        req.blockers.append(f"{recipe.id} is not a recipe")
    heat = recipe.stat("heat", DEFAULT_HEAT_REQUIREMENT)
    if state.forge_heat < heat:
        req.blockers.append(f"forge needs {heat:g} heat, has {state.forge_heat:.0f}")
    if recipe.output_item is not None:
        output = catalog.get(recipe.output_item)
        if output.slot is None:
            req.blockers.append(f"{output.id} has no equipment slot")
        if state.inventory.owns(output.id):
            req.blockers.append(f"{output.id} already owned")
    if recipe.is_one_shot and recipe.id in state.progression.completed:
        req.blockers.append(f"{recipe.id} already crafted")
    return req


def _stoke(action: StokeForge, state: GameState, catalog: Catalog) -> ActionRequirements:
    req = ActionRequirements(cost=Cost(materials={"wood": FORGE_WOOD_PER_STOKE}))
    if state.forge_heat >= FORGE_MAX_HEAT:
        req.blockers.append("forge is at full heat")
    return req


# =============================================================================
# Helpers
# =============================================================================

def _hire(action: HireHelper, state: GameState, catalog: Catalog) -> ActionRequirements:
    item = catalog.get(action.hire_id)
    req = ActionRequirements(
        prerequisites=list(item.prerequisites),
        cost=item_cost(item),
        item=item,
    )
    if item.kind != "hire":
        req.blockers.append(f"{item.id} does not hire a helper")
    if len(state.helpers) >= housing_capacity(state, catalog):
        req.blockers.append("no free helper housing")
    return req


def _assign(action: AssignHelper, state: GameState, catalog: Catalog) -> ActionRequirements:
    req = ActionRequirements()
    helper = find_helper(state, action.helper_id)
    if action.role not in HELPER_ROLES:
        req.blockers.append(f"unknown helper role {action.role}")
    if helper is None:
        req.blockers.append(f"no helper {action.helper_id}")
    elif helper.training:
        req.blockers.append(f"{action.helper_id} is training")
    elif helper.role == action.role:
        req.blockers.append(f"{action.helper_id} already works as {action.role}")
    return req


def _train(action: TrainHelper, state: GameState, catalog: Catalog) -> ActionRequirements:
    helper = find_helper(state, action.helper_id)
    req = ActionRequirements(category="training")
    if helper is None:
        req.blockers.append(f"no helper {action.helper_id}")
        return req
    req.cost = Cost(gold=TRAINING_GOLD_PER_LEVEL * helper.level)
    if helper.training:
        req.blockers.append(f"{action.helper_id} is already training")
    if helper.level >= HELPER_MAX_LEVEL:
        req.blockers.append(f"{action.helper_id} is at max level")
    return req


# =============================================================================
# Tower
# =============================================================================

def _catch(action: CatchSeeds, state: GameState, catalog: Catalog) -> ActionRequirements:
    req = ActionRequirements(category="seed_catching")
    if action.wind_level not in WIND_LEVELS:
        req.blockers.append(f"no wind level {action.wind_level}")
    elif action.wind_level > state.progression.wind_level:
        req.blockers.append(f"wind level {action.wind_level} not reached")
    return req


_BUILDERS = {
    PlantCrop: _plant,
    WaterCrops: _water,
    HarvestCrops: _harvest,
    PumpWater: _pump,
    ClearArea: _clear,
    BuyItem: _buy,
    SellMaterial: _sell,
    StartAdventure: _adventure,
    StartMining: _mine,
    SharpenTool: _sharpen,
    StopMining: _stop_mining,
    StartCraft: _craft,
    StokeForge: _stoke,
    HireHelper: _hire,
    AssignHelper: _assign,
    TrainHelper: _train,
    CatchSeeds: _catch,
}
