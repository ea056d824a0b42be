import pytest

from balance_sim.core.config import DEFAULT_VICTORY, FIXED_MODE_VICTORY
from balance_sim.core.errors import ConfigError
from balance_sim.simulation.run_config import RunConfig, VictoryCondition
from tests.helpers.builders import build_state


def test_default_victory_depends_on_mode() -> None:
    assert RunConfig().victory == DEFAULT_VICTORY
    assert RunConfig(mode="fixed_days").victory == FIXED_MODE_VICTORY


def test_explicit_victory_conditions_are_parsed() -> None:
    config = RunConfig(victory=["plots>=5", "hero_level >= 3"])

    assert [str(c) for c in config.conditions] == ["plots>=5", "hero_level>=3"]


@pytest.mark.parametrize(
    "fields",
    [
        {"mode": "endless"},
        {"max_days": 0},
        {"tick_minutes": 0},
        {"stuck_days": 0},
        {"starting_plots": -1},
        {"starting_gold": -5},
        {"starting_capacity": {"mana": 10}},
        {"starting_capacity": {"water": 0}},
        {"starting_seeds": {"carrot": -1}},
        {"victory": ["plots > 5"]},
        {"victory": ["charisma>=2"]},
    ],
)
def test_invalid_run_config_is_rejected(fields: dict) -> None:
    with pytest.raises(ConfigError):
        RunConfig(**fields)


def test_victory_condition_holds_on_state_metric() -> None:
    state = build_state(starting_plots=4)

    assert VictoryCondition.parse("plots>=4").holds(state)
    assert not VictoryCondition.parse("plots>=5").holds(state)


def test_victory_needs_every_condition() -> None:
    state = build_state(starting_plots=4)

    assert RunConfig(victory=["plots>=4", "day>=1"]).victory_reached(state)
    assert not RunConfig(victory=["plots>=4", "hero_level>=2"]).victory_reached(state)


def test_starting_capacity_overrides_base() -> None:
    state = build_state(starting_capacity={"water": 60}, starting_water=55)

    assert state.capacity("water") == 60
    assert state.amount("water") == 55
