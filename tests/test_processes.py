import pytest

from balance_sim.core.actions import StartCraft
from balance_sim.core.config import FORGE_MAX_HEAT
from balance_sim.core.errors import ConfigError, InvariantViolation
from balance_sim.processes.base import InitResult, ProcessHandler
from balance_sim.processes.growth import CropGrowthHandler, growing_crops
from balance_sim.processes.registry import ProcessRegistry
from balance_sim.systems.farm import plant, water
from balance_sim.systems.forge import ForgeSystem
from tests.helpers.builders import advance, build_manager, build_registry, build_state, default_catalog


class _BrokenHandler(ProcessHandler):
    category = "broken"

    def initialize(self, handle, data, state) -> InitResult:
        return InitResult(success=True, payload=data)

    def update(self, record, dt, state, catalog):
        raise ValueError("corrupt payload")


class _OverdrawingHandler(_BrokenHandler):
    category = "overdrawing"

    def update(self, record, dt, state, catalog):
        state.spend("energy", state.amount("energy") + 5)


def test_registry_rejects_duplicate_handlers_and_bad_limits() -> None:
    registry = ProcessRegistry()
    registry.register(CropGrowthHandler())

    with pytest.raises(ConfigError):
        registry.register(CropGrowthHandler())
    with pytest.raises(ConfigError):
        ProcessRegistry(limits={"crafting": 0})


def test_unregistered_category_cannot_start() -> None:
    check = ProcessRegistry().can_start("growth", build_state())

    assert not check
    assert "no handler registered for growth" in check.reasons


def test_growth_is_unlimited_per_category() -> None:
    catalog = default_catalog()
    registry = build_registry()
    state = build_state(starting_seeds={"carrot": 3})
    carrot = catalog.get("carrot")

    handles = [plant(state, registry, carrot, i) for i in range(3)]

    assert all(handles)
    assert len(state.active_processes("growth")) == 3
    assert registry.limit("growth") is None


def test_dry_crops_grow_slowly() -> None:
    catalog = default_catalog()
    registry = build_registry()
    manager = build_manager(registry)
    state = build_state(starting_seeds={"carrot": 2})
    carrot = catalog.get("carrot")
    plant(state, registry, carrot, 0)
    plant(state, registry, carrot, 1)
    # water only the first plot
    crops = growing_crops(state)
    crops[0].water_level = 1.0

    advance(state, manager, minutes=6)

    assert state.plots[0].status == "ready"
    assert state.plots[1].status == "growing"

    advance(state, manager, minutes=18)
    assert state.plots[1].status == "ready"


def test_watering_spends_whole_units_in_plot_order() -> None:
    catalog = default_catalog()
    registry = build_registry()
    state = build_state(starting_seeds={"carrot": 2}, starting_water=1)
    carrot = catalog.get("carrot")
    plant(state, registry, carrot, 0)
    plant(state, registry, carrot, 1)

    watered, spent = water(state)

    assert (watered, spent) == (1, 1)
    assert [c.water_level for c in growing_crops(state)] == [1.0, 0.0]
    assert state.amount("water") == 0


def test_failing_process_is_cancelled_and_reported() -> None:
    registry = build_registry()
    registry.register(_BrokenHandler())
    manager = build_manager(registry)
    state = build_state()
    started = registry.start("broken", object(), state)

    advance(state, manager, minutes=1)

    assert started.handle not in state.processes
    assert state.events.of_type("process_error")
    assert state.events.of_type("process_cancelled")


def test_process_overdraw_is_an_invariant_violation() -> None:
    registry = build_registry()
    registry.register(_OverdrawingHandler())
    manager = build_manager(registry)
    state = build_state(starting_energy=3)
    started = registry.start("overdrawing", object(), state)

    with pytest.raises(InvariantViolation, match="overdrawing process"):
        advance(state, manager, minutes=1)

    assert started.handle in state.processes
    assert not state.events.of_type("process_error")
    assert state.amount("energy") == 3


def test_cancelled_craft_refunds_its_materials() -> None:
    catalog = default_catalog()
    registry = build_registry()
    forge = ForgeSystem(catalog, registry)
    state = build_state(starting_materials={"raw_copper": 10})

    result = forge.execute(StartCraft("refine_copper"), state)
    assert state.materials["raw_copper"] == 8

    assert registry.cancel(result.handle, state)
    assert state.materials["raw_copper"] == 10
    assert not registry.cancel(result.handle, state)


def test_craft_completes_after_its_duration() -> None:
    catalog = default_catalog()
    registry = build_registry()
    manager = build_manager(registry)
    forge = ForgeSystem(catalog, registry)
    state = build_state(starting_materials={"raw_copper": 2})
    recipe = catalog.get("refine_copper")
    # full heat makes success certain
    state.forge_heat = FORGE_MAX_HEAT

    forge.execute(StartCraft("refine_copper"), state)
    advance(state, manager, minutes=int(recipe.duration))

    assert state.materials.get("copper", 0) == 1
    assert state.processes_completed["crafting"] == 1
