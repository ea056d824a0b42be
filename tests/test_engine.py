import pytest

from balance_sim.core.config import PROCESS_LIMITS
from balance_sim.core.errors import InvariantViolation, ResourceInsufficient
from balance_sim.state.resources import BOUNDED_RESOURCES, storage_cap
from balance_sim.systems.base import GameSystem, SystemTickResult
from tests.helpers.builders import build_engine, default_catalog, idle_persona


class _ExplodingSystem(GameSystem):
    name = "exploding"

    def __init__(self, error: Exception) -> None:
        super().__init__(default_catalog(), None)
        self.error = error

    def tick(self, dt, state) -> SystemTickResult:
        raise self.error


def _overdraw(action, req, state):
    state.spend("gold", state.amount("gold") + 1)


class _HalfDoneSystem(GameSystem):
    name = "half_done"

    def __init__(self) -> None:
        super().__init__(default_catalog(), None)

    def tick(self, dt, state) -> SystemTickResult:
        state.gain("gold", 5, source=self.name)
        raise RuntimeError("crashed midway")


def test_run_stops_at_day_limit() -> None:
    engine = build_engine(idle_persona(), mode="fixed_days", max_days=1, victory=["plots>=99"])

    result = engine.run()

    assert result.outcome == "max_days"
    assert result.days == 1
    assert result.final_state["day"] == 2


def test_first_victory_ends_the_run_at_the_day_boundary() -> None:
    engine = build_engine(idle_persona(), victory=["plots>=3"], max_days=5)

    result = engine.run()

    assert result.outcome == "victory"
    assert result.days == 1
    finished = [e for e in result.events if e["type"] == "run_finished"]
    assert len(finished) == 1
    assert finished[0]["data"]["outcome"] == "victory"


def test_fixed_days_reports_victory_only_at_the_end() -> None:
    engine = build_engine(idle_persona(), mode="fixed_days", max_days=2, victory=["plots>=3"], stop_if_stuck=False)

    result = engine.run()

    assert result.outcome == "victory"
    assert result.days == 2


def test_idle_player_gets_stuck() -> None:
    engine = build_engine(idle_persona(), stuck_days=2, max_days=10, victory=["plots>=99"])

    result = engine.run()

    assert result.outcome == "stuck"
    assert result.days == 3
    assert result.actions_taken == 0


def test_invariant_violation_aborts_the_run() -> None:
    engine = build_engine(idle_persona(), max_days=3)
    engine.systems.append(_ExplodingSystem(InvariantViolation("energy went negative")))

    result = engine.run()

    assert result.outcome == "aborted"
    fatal = [e for e in result.events if e["type"] == "fatal"]
    assert len(fatal) == 1
    assert "energy went negative" in fatal[0]["description"]


def test_system_tick_overdraw_aborts_the_run() -> None:
    engine = build_engine(idle_persona(), max_days=3)
    engine.systems.append(_ExplodingSystem(ResourceInsufficient("water", 5, 0)))

    result = engine.run()

    assert result.outcome == "aborted"
    fatal = [e for e in result.events if e["type"] == "fatal"]
    assert len(fatal) == 1
    assert "exploding tick overdrew water" in fatal[0]["description"]
    assert not [e for e in result.events if e["type"] == "system_error"]


def test_action_overdraw_after_validation_aborts_the_run() -> None:
    engine = build_engine("balanced", max_days=2)
    farm = engine._system_by_name["farm"]
    for action_type in farm.action_types:
        farm._executors[action_type] = _overdraw

    result = engine.run()

    assert result.outcome == "aborted"
    assert result.days == 0
    fatal = [e for e in result.events if e["type"] == "fatal"]
    assert len(fatal) == 1
    assert "overdrew gold" in fatal[0]["description"]
    assert fatal[0]["data"]["error"] == "InvariantViolation"


def test_failing_system_is_isolated() -> None:
    engine = build_engine(idle_persona(), mode="fixed_days", max_days=1, victory=["plots>=99"])
    engine.systems.append(_ExplodingSystem(RuntimeError("boom")))

    result = engine.run()

    assert result.outcome == "max_days"
    errors = [e for e in result.events if e["type"] == "system_error"]
    assert errors
    assert errors[0]["data"]["system"] == "exploding"


def test_failed_system_tick_keeps_earlier_changes_and_later_systems_run() -> None:
    engine = build_engine(idle_persona(), starting_gold=0, max_days=1)
    engine.systems.insert(0, _HalfDoneSystem())
    engine.state.forge_heat = 10

    engine.tick()

    assert engine.state.amount("gold") == 5
    assert engine.state.forge_heat == pytest.approx(9)
    errors = engine.state.events.of_type("system_error")
    assert [e.data["system"] for e in errors] == ["half_done"]


def test_opening_check_in_happens_at_minute_zero() -> None:
    engine = build_engine("balanced", max_days=1)

    engine.tick()

    checkins = engine.state.events.of_type("checkin")
    assert checkins[0].tick == 0
    assert engine.schedule.total >= 1


def test_same_seed_same_run() -> None:
    first = build_engine("balanced", seed=5, mode="fixed_days", max_days=2).run()
    second = build_engine("balanced", seed=5, mode="fixed_days", max_days=2).run()

    assert first.events == second.events
    assert first.final_state == second.final_state
    assert first.outcome == second.outcome


def test_balanced_player_makes_progress() -> None:
    result = build_engine("balanced", seed=3, mode="fixed_days", max_days=2).run()

    assert result.actions_taken > 0
    assert result.checkins > 0
    assert result.final_state["processes_completed"].get("growth", 0) > 0


def test_dashboard_callback_sees_every_day() -> None:
    engine = build_engine(idle_persona(), mode="fixed_days", max_days=2, stop_if_stuck=False)
    seen = []
    engine.set_dashboard_callback(lambda day, metrics: seen.append((day, len(metrics.snapshots))))

    engine.run()

    assert seen == [(1, 1), (2, 2)]


def _assert_consistent(state) -> None:
    unlocked = state.progression.unlocked
    for name in BOUNDED_RESOURCES:
        assert 0 <= state.amount(name) <= state.capacity(name), name
    for material, qty in state.materials.items():
        assert 0 <= qty <= storage_cap(material, unlocked), material
    assert all(qty >= 0 for qty in state.seeds.values())
    assert state.total_seeds() <= storage_cap("seeds", unlocked)
    assert len(state.plots) == state.progression.plots
    for category, limit in PROCESS_LIMITS.items():
        if limit is not None:
            assert len(state.active_processes(category)) <= limit, category


# persona -> process categories its run must finish at least once
_FINISHED = {
    "balanced": ("growth", "seed_catching"),
    "speedrunner": ("growth", "seed_catching", "adventure", "mining"),
    "risk-taker": ("growth", "adventure", "mining"),
}


@pytest.mark.parametrize("persona", sorted(_FINISHED))
def test_full_run_stays_consistent_every_tick(persona) -> None:
    engine = build_engine(
        persona, seed=11, mode="fixed_days", max_days=10, stop_if_stuck=False, victory=["hero_level>=99"],
    )
    state = engine.state
    plots = state.progression.plots

    while not engine.finished:
        engine.tick()
        _assert_consistent(state)
        assert state.progression.plots >= plots
        plots = state.progression.plots

    assert engine.outcome == "max_days"
    for event_type in ("fatal", "system_error", "process_error", "catalog_miss"):
        assert not state.events.of_type(event_type), event_type
    for category in _FINISHED[persona]:
        assert state.processes_completed.get(category, 0) >= 1, category
