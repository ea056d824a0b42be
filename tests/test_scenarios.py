import pytest

from balance_sim.agents.persona import get_persona
from balance_sim.agents.strategy import CheckInSchedule, emergency
from balance_sim.core.actions import HarvestCrops, PlantCrop, StartCraft, StartMining, WaterCrops
from balance_sim.core.config import FORGE_MAX_HEAT
from balance_sim.processes.mining import base_drain
from balance_sim.systems.farm import FarmSystem
from balance_sim.systems.forge import ForgeSystem
from balance_sim.systems.mine import MineSystem
from balance_sim.validation.result import CONCURRENCY_REASON
from tests.helpers.builders import advance, build_manager, build_registry, build_state, default_catalog


def test_carrot_cycle_adds_exactly_its_energy_value() -> None:
    catalog = default_catalog()
    registry = build_registry()
    manager = build_manager(registry)
    farm = FarmSystem(catalog, registry)
    state = build_state(
        starting_energy=3,
        starting_gold=75,
        starting_seeds={"carrot": 1, "radish": 1},
        starting_plots=3,
    )
    assert state.capacity("energy") == 100

    for action in (PlantCrop("carrot", 0), WaterCrops()):
        assert farm.validator.can_perform(action, state)
        assert farm.execute(action, state).success
    assert state.plots[0].status == "growing"
    assert state.seeds["carrot"] == 0

    advance(state, manager, minutes=6)
    assert state.plots[0].status == "ready"

    harvest = HarvestCrops()
    assert farm.validator.can_perform(harvest, state)
    assert farm.execute(harvest, state).success

    assert state.amount("energy") == pytest.approx(4)
    assert state.plots[0].status == "empty"
    assert state.processes_completed["growth"] == 1


def test_mining_ten_minutes_at_tier_one() -> None:
    catalog = default_catalog()
    registry = build_registry()
    manager = build_manager(registry)
    mine = MineSystem(catalog, registry)
    state = build_state(starting_energy=100, starting_tools=["pickaxe_1"])

    start = StartMining()
    assert mine.validator.can_perform(start, state)
    result = mine.execute(start, state)
    assert result.success

    advance(state, manager, minutes=10)

    session = state.processes[result.handle].data
    assert session.depth == pytest.approx(100)
    assert state.progression.max_depth == pytest.approx(100)
    assert state.amount("energy") == pytest.approx(100 - 10 * base_drain(1))
    assert any(m.startswith("raw_") or m == "stone" for m in state.materials)


def test_mining_requires_a_pickaxe() -> None:
    catalog = default_catalog()
    registry = build_registry()
    mine = MineSystem(catalog, registry)
    state = build_state(starting_energy=100)

    check = mine.validator.can_perform(StartMining(), state)

    assert not check
    assert "requires pickaxe" in check.reasons


def test_checkin_intervals_diverge_after_the_opening_check_in() -> None:
    # five carrots for three plots, half a water tank: nothing urgent
    state = build_state(starting_seeds={"carrot": 5}, starting_energy=3)
    assert emergency(state) is None

    fast = CheckInSchedule(get_persona("balanced").with_overrides(name="fast", checkin_interval=5))
    slow = CheckInSchedule(get_persona("balanced").with_overrides(name="slow", checkin_interval=15))
    first_after_start: dict[str, float] = {}

    for minute in range(0, 31):
        if minute:
            state.advance_time(1.0)
        for schedule in (fast, slow):
            if schedule.should_check_in(state):
                if schedule.total == 1:
                    first_after_start.setdefault(schedule.persona.name, state.minutes)
                schedule.record(state)

    assert fast.total > slow.total >= 1
    assert first_after_start == {"fast": 5.0, "slow": 15.0}


def test_second_crafting_job_is_blocked_by_concurrency_limit() -> None:
    catalog = default_catalog()
    registry = build_registry()
    forge = ForgeSystem(catalog, registry)
    state = build_state(starting_materials={"raw_copper": 10})
    state.forge_heat = FORGE_MAX_HEAT

    first = StartCraft("refine_copper")
    assert forge.validator.can_perform(first, state)
    assert forge.execute(first, state).success
    assert len(state.active_processes("crafting")) == 1

    second = forge.validator.can_perform(StartCraft("refine_copper"), state)

    assert not second
    assert any(CONCURRENCY_REASON in reason for reason in second.reasons)
    assert state.materials["raw_copper"] == 8
    assert len(state.active_processes("crafting")) == 1


def test_crafting_needs_the_recipe_heat() -> None:
    catalog = default_catalog()
    forge = ForgeSystem(catalog, build_registry())
    state = build_state(starting_materials={"raw_copper": 10})
    craft = StartCraft("refine_copper")

    cold = forge.validator.can_perform(craft, state)
    assert not cold
    assert "forge needs 30 heat, has 0" in cold.reasons
    assert "craft" not in [a.kind for a in forge.evaluate_actions(state)]

    state.forge_heat = 30
    assert forge.validator.can_perform(craft, state)
    assert "craft" in [a.kind for a in forge.evaluate_actions(state)]
