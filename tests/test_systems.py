import pytest

from balance_sim.core.actions import (
    AssignHelper,
    BuyItem,
    CatchSeeds,
    ClearArea,
    HarvestCrops,
    HireHelper,
    PlantCrop,
    SellMaterial,
    StartMining,
    StokeForge,
    StopMining,
    TrainHelper,
)
from balance_sim.core.config import ADVENTURE_ENERGY_SCORE, HARVEST_GOLD_PER_CROP, MINING_ENERGY_SCORE
from balance_sim.core.errors import ConfigError, UnknownActionError
from balance_sim.systems.adventure import AdventureSystem
from balance_sim.systems.farm import FarmConfig, FarmSystem
from balance_sim.systems.forge import ForgeSystem
from balance_sim.systems.helpers import HelperSystem
from balance_sim.systems.mine import MineSystem
from balance_sim.systems.tower import TowerSystem
from balance_sim.systems.town import TownSystem, sell_price
from tests.helpers.builders import advance, build_engine, build_manager, build_registry, build_state, default_catalog


def test_clearing_adds_plots_and_materials_once() -> None:
    farm = FarmSystem(default_catalog(), build_registry())
    state = build_state(starting_energy=10)

    result = farm.execute(ClearArea("clear_weeds_1"), state)

    assert result.success
    assert state.progression.plots == 4
    assert state.materials["wood"] == 1
    assert state.amount("energy") == pytest.approx(9)
    again = farm.validator.can_perform(ClearArea("clear_weeds_1"), state)
    assert not again
    assert "clear_weeds_1 already cleared" in again.reasons


def test_validation_reports_every_blocking_reason() -> None:
    farm = FarmSystem(default_catalog(), build_registry())
    state = build_state(starting_energy=0)

    check = farm.validator.can_perform(ClearArea("till_soil"), state)

    assert not check
    assert check.missing_prerequisites == ["clear_weeds_2"]
    assert "requires hoe" in check.reasons
    assert check.resource_shortfalls["energy"] == pytest.approx(3)


def test_unknown_catalog_id_is_a_catalog_miss() -> None:
    farm = FarmSystem(default_catalog(), build_registry())
    state = build_state()

    check = farm.validator.can_perform(PlantCrop("moonflower", 0), state)

    assert not check
    assert check.catalog_miss


def test_system_refuses_actions_it_does_not_own() -> None:
    farm = FarmSystem(default_catalog(), build_registry())

    with pytest.raises(UnknownActionError):
        farm.execute(StokeForge(), build_state())


def test_buying_equipment_adds_and_equips_it() -> None:
    town = TownSystem(default_catalog(), build_registry())
    state = build_state(starting_gold=75)

    assert town.execute(BuyItem("hoe"), state).success

    assert state.amount("gold") == pytest.approx(50)
    assert state.inventory.equipped("hoe").item_id == "hoe"
    assert "hoe already owned" in town.validator.can_perform(BuyItem("hoe"), state).reasons


def test_buying_an_upgrade_unlocks_it_and_raises_capacity() -> None:
    town = TownSystem(default_catalog(), build_registry())
    state = build_state(starting_gold=200)

    town.execute(BuyItem("water_tank_i"), state)

    assert "water_tank_i" in state.progression.unlocked
    assert state.capacity("water") == 80
    assert not town.validator.can_perform(BuyItem("water_tank_i"), state)


def test_selling_raw_ore_pays_less_than_refined() -> None:
    town = TownSystem(default_catalog(), build_registry())
    state = build_state(starting_gold=0, starting_materials={"raw_copper": 10})

    assert sell_price("raw_copper") < sell_price("copper")
    assert town.execute(SellMaterial("raw_copper", 10), state).success
    assert state.amount("gold") == pytest.approx(10 * sell_price("raw_copper"))
    assert state.materials["raw_copper"] == 0


def test_stoking_and_cooling_the_forge() -> None:
    forge = ForgeSystem(default_catalog(), build_registry())
    state = build_state(starting_materials={"wood": 12})

    forge.execute(StokeForge(), state)
    assert state.forge_heat == pytest.approx(50)
    assert state.materials["wood"] == 7

    forge.tick(10.0, state)
    assert state.forge_heat == pytest.approx(40)


def test_stop_mining_ends_the_session_with_its_haul() -> None:
    catalog = default_catalog()
    registry = build_registry()
    manager = build_manager(registry)
    mine = MineSystem(catalog, registry)
    state = build_state(starting_energy=100, starting_tools=["pickaxe_1"])

    assert [a.kind for a in mine.evaluate_actions(state)] == ["mine"]
    mine.execute(StartMining(), state)
    advance(state, manager, minutes=3)

    assert mine.execute(StopMining(), state).success
    assert "mining already stopping" in mine.validator.can_perform(StopMining(), state).reasons
    assert mine.evaluate_actions(state) == []

    advance(state, manager, minutes=1)
    assert not state.active_processes("mining")
    assert state.progression.max_depth == pytest.approx(30)
    assert state.amount("energy") == pytest.approx(97)
    assert state.processes_completed["mining"] == 1
    assert not state.events.of_type("process_cancelled")


def test_hiring_needs_housing() -> None:
    helpers = HelperSystem(default_catalog(), build_registry())
    state = build_state(starting_gold=500)

    blocked = helpers.validator.can_perform(HireHelper("hire_gnome"), state)
    assert "no free helper housing" in blocked.reasons

    state.unlock("gnome_hut")
    assert helpers.execute(HireHelper("hire_gnome"), state).success
    assert [h.helper_id for h in state.helpers] == ["gnome-1"]
    assert not helpers.validator.can_perform(HireHelper("hire_gnome"), state)


def test_assigned_forager_gathers_wood_every_hour() -> None:
    helpers = HelperSystem(default_catalog(), build_registry())
    state = build_state(starting_gold=500, starting_upgrades=["gnome_hut"])
    helpers.execute(HireHelper("hire_gnome"), state)
    helpers.execute(AssignHelper("gnome-1", "forager"), state)

    helpers.tick(59.0, state)
    assert state.materials.get("wood", 0) == 0

    result = helpers.tick(1.0, state)
    assert state.materials["wood"] == 7
    assert [e.event_type for e in result.events] == ["helper_work"]


def test_training_takes_the_helper_off_work_then_levels_it() -> None:
    catalog = default_catalog()
    registry = build_registry()
    manager = build_manager(registry)
    helpers = HelperSystem(catalog, registry)
    state = build_state(starting_gold=500, starting_upgrades=["gnome_hut"])
    helpers.execute(HireHelper("hire_gnome"), state)
    helpers.execute(AssignHelper("gnome-1", "forager"), state)

    assert helpers.execute(TrainHelper("gnome-1"), state).success
    assert state.helpers[0].training
    assert state.amount("gold") == pytest.approx(500 - 100 - 50)

    advance(state, manager, minutes=30)
    assert not state.helpers[0].training
    assert state.helpers[0].level == 2


def test_seed_catching_is_limited_to_reached_wind_levels() -> None:
    catalog = default_catalog()
    registry = build_registry()
    manager = build_manager(registry)
    tower = TowerSystem(catalog, registry)
    state = build_state(starting_seeds={})

    assert "wind level 3 not reached" in tower.validator.can_perform(CatchSeeds(3), state).reasons

    assert tower.execute(CatchSeeds(1), state).success
    advance(state, manager, minutes=10)
    assert state.processes_completed["seed_catching"] == 1


def test_system_configs_validate_at_construction() -> None:
    with pytest.raises(ConfigError):
        FarmConfig(pump_threshold=1.5)
    with pytest.raises(ConfigError):
        FarmConfig(pump_amount=-1)


def test_every_proposal_validates_and_executes() -> None:
    engine = build_engine(
        starting_energy=60,
        starting_gold=400,
        starting_seeds={"carrot": 4, "radish": 2},
        starting_materials={"wood": 20, "raw_copper": 6},
        starting_tools=["pickaxe_1", "spear"],
    )
    state = engine.state
    executed = 0

    for system in engine.systems:
        for action in system.evaluate_actions(state):
            # earlier actions may have used up what a later proposal needed
            if not system.validator.can_perform(action, state):
                continue
            result = system.execute(action, state)
            assert result.success, action.describe()
            executed += 1

    assert executed > 0


def test_harvest_pays_energy_and_gold_per_crop() -> None:
    farm = FarmSystem(default_catalog(), build_registry())
    state = build_state(starting_energy=0, starting_gold=0)
    state.plots[0].ready_crop = "carrot"
    state.plots[2].ready_crop = "turnip"

    result = farm.execute(HarvestCrops(), state)

    assert result.success
    assert state.amount("energy") == pytest.approx(3)
    assert state.amount("gold") == pytest.approx(2 * HARVEST_GOLD_PER_CROP)
    assert [p.status for p in state.plots] == ["empty", "empty", "empty"]
    assert result.description == "Harvested 2 plots for 3 energy and 10 gold"


def test_stored_energy_raises_mining_and_adventure_priority() -> None:
    catalog = default_catalog()
    registry = build_registry()
    mine = MineSystem(catalog, registry)
    adventure = AdventureSystem(catalog, registry)
    low = build_state(starting_energy=20, starting_tools=["pickaxe_1", "spear"])
    full = build_state(starting_energy=100, starting_tools=["pickaxe_1", "spear"])

    low_mine, full_mine = mine.evaluate_actions(low)[0], mine.evaluate_actions(full)[0]
    assert full_mine.priority - low_mine.priority == pytest.approx(0.8 * MINING_ENERGY_SCORE)

    low_runs = {a.describe(): a.priority for a in adventure.evaluate_actions(low)}
    full_runs = {a.describe(): a.priority for a in adventure.evaluate_actions(full)}
    assert low_runs
    for run, priority in low_runs.items():
        assert full_runs[run] - priority == pytest.approx(0.8 * ADVENTURE_ENERGY_SCORE)
