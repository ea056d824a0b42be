import pytest

from balance_sim.agents.persona import PERSONAS, Persona, get_persona
from balance_sim.agents.strategy import CheckInSchedule, emergency
from balance_sim.core.clock import GameClock
from balance_sim.core.config import EMERGENCY_INTERVALS
from balance_sim.core.errors import ConfigError
from tests.helpers.builders import build_state


def test_presets_are_registered_by_name() -> None:
    for name, persona in PERSONAS.items():
        assert persona.name == name
        assert get_persona(name) is persona
    assert get_persona(PERSONAS["casual"]) is PERSONAS["casual"]


def test_unknown_persona_raises_config_error() -> None:
    with pytest.raises(ConfigError, match="unknown persona"):
        get_persona("min-maxer")


@pytest.mark.parametrize(
    "fields",
    [
        {"efficiency": 1.5},
        {"risk_tolerance": -0.1},
        {"checkin_interval": 0},
        {"actions_per_checkin": 0},
        {"weekday_sessions": -1},
        {"preferences": {"knitting": 1.0}},
        {"preferences": {"farming": -1.0}},
    ],
)
def test_invalid_persona_values_are_rejected(fields: dict) -> None:
    with pytest.raises(ConfigError):
        Persona(name="broken", **fields)


def test_daily_checkin_budget_depends_on_weekend() -> None:
    balanced = get_persona("balanced")

    assert balanced.daily_checkin_budget(weekend=False) == 3 * (25 // 10 + 1)
    assert balanced.daily_checkin_budget(weekend=True) == 5 * (25 // 10 + 1)


def test_weekend_warrior_day_multipliers() -> None:
    warrior = get_persona("weekend-warrior")

    assert warrior.day_multiplier(weekend=True) > warrior.day_multiplier(weekend=False)


@pytest.mark.parametrize(
    "overrides, expected",
    [
        ({"starting_seeds": {}}, "seed_shortage"),
        ({"starting_seeds": {"carrot": 5}, "starting_water": 2}, "low_water"),
        ({"starting_seeds": {"carrot": 5}, "starting_energy": 95}, "energy_full"),
        ({"starting_seeds": {"carrot": 5}}, None),
    ],
)
def test_emergency_reasons(overrides: dict, expected) -> None:
    assert emergency(build_state(**overrides)) == expected


def test_emergency_shortens_interval_by_persona_factor() -> None:
    state = build_state(starting_seeds={})
    casual = CheckInSchedule(get_persona("casual"))

    assert casual.interval(state) == pytest.approx(EMERGENCY_INTERVALS["seed_shortage"] * 1.5)


def test_schedule_opens_with_a_check_in_and_respects_night() -> None:
    state = build_state(starting_seeds={"carrot": 5})
    schedule = CheckInSchedule(get_persona("speedrunner"))

    assert schedule.should_check_in(state)
    schedule.record(state)
    assert not schedule.should_check_in(state)

    # 23:00 on day 1 is past the opening grace period
    state.advance_time(23 * 60)
    assert state.clock.is_night()
    assert not schedule.should_check_in(state)


def test_schedule_stops_at_daily_budget() -> None:
    state = build_state(starting_seeds={"carrot": 5})
    persona = get_persona("balanced").with_overrides(weekday_sessions=1, session_minutes=10)
    schedule = CheckInSchedule(persona)
    budget = persona.daily_checkin_budget(weekend=False)

    taken = 0
    for _ in range(120):
        if schedule.should_check_in(state):
            schedule.record(state)
            taken += 1
        state.advance_time(1.0)

    assert taken == budget == 2
    assert schedule.checkins_today(state) == budget


def test_clock_days_and_weekends() -> None:
    clock = GameClock()
    assert clock.day == 1
    assert not clock.is_weekend

    clock.advance(5 * 1440)
    assert clock.day == 6
    assert clock.is_weekend
    assert clock.stamp() == "Day 6 00:00"

    with pytest.raises(ValueError):
        clock.advance(0)
