import pytest

from balance_sim.agents.decision import DecisionEngine
from balance_sim.agents.filter import filter_actions
from balance_sim.agents.persona import get_persona
from balance_sim.agents.scorer import detect_bottleneck, rank_actions, score_action
from balance_sim.core.actions import BuyItem, HarvestCrops, PumpWater, StartAdventure, StartMining, WaterCrops
from balance_sim.core.config import BOTTLENECK_BONUS
from tests.helpers.builders import build_state, default_catalog


class _FixedSystem:
    """Stands in for a game system that always proposes the same actions."""

    def __init__(self, actions) -> None:
        self.actions = actions

    def evaluate_actions(self, state):
        return list(self.actions)


def test_equal_scores_fall_back_to_catalog_order() -> None:
    catalog = default_catalog()
    state = build_state()
    persona = get_persona("balanced")
    actions = [BuyItem("net_i", priority=40), BuyItem("hoe", priority=40)]

    ranked = rank_actions(actions, persona, state, catalog)

    assert [s.action.purchase_id for s in ranked] == ["hoe", "net_i"]


def test_bottleneck_bonus_can_overtake_a_higher_priority() -> None:
    catalog = default_catalog()
    state = build_state()
    persona = get_persona("balanced")
    pump = PumpWater(priority=10, resolves=frozenset({"water_shortage"}))
    harvest = HarvestCrops(priority=15)

    without = rank_actions([harvest, pump], persona, state, catalog)
    with_bonus = rank_actions([harvest, pump], persona, state, catalog, bottleneck="water_shortage")

    assert without[0].action is harvest
    assert with_bonus[0].action is pump
    assert with_bonus[0].bottleneck_bonus
    plain = score_action(pump, persona, weekend=False, bottleneck=None)
    boosted = score_action(pump, persona, weekend=False, bottleneck="water_shortage")
    assert boosted.score == pytest.approx(plain.score * BOTTLENECK_BONUS)


def test_risk_scaling_favours_risk_takers() -> None:
    mine = StartMining(priority=50)
    cautious = score_action(mine, get_persona("completionist"), weekend=False, bottleneck=None)
    bold = score_action(mine, get_persona("risk-taker"), weekend=False, bottleneck=None)

    cautious_per_eff = cautious.score / get_persona("completionist").efficiency
    bold_per_eff = bold.score / get_persona("risk-taker").efficiency
    assert bold_per_eff > cautious_per_eff


def test_filter_drops_risky_and_unwanted_domains() -> None:
    persona = get_persona("balanced").with_overrides(
        risk_tolerance=0.5,
        preferences={"farming": 1.0, "mining": 1.0, "adventuring": 0.0},
    )
    water = WaterCrops(priority=10)
    risky_mine = StartMining(priority=50, risk=0.6)
    adventure = StartAdventure("meadow_path", "short", priority=30)

    kept = filter_actions([water, risky_mine, adventure], persona)

    assert kept == [water]


def test_filter_preserves_proposal_order() -> None:
    persona = get_persona("balanced")
    actions = [WaterCrops(priority=1), HarvestCrops(priority=99), PumpWater(priority=5)]

    assert filter_actions(actions, persona) == actions


@pytest.mark.parametrize(
    "overrides, expected",
    [
        ({"starting_water": 0}, "water_shortage"),
        ({"starting_seeds": {}}, "seed_shortage"),
        ({"starting_seeds": {"carrot": 5}}, None),
    ],
)
def test_detect_bottleneck(overrides: dict, expected) -> None:
    state = build_state(**overrides)

    assert detect_bottleneck(state, default_catalog()) == expected


def test_decide_returns_top_actions_and_walks_phases() -> None:
    catalog = default_catalog()
    state = build_state(starting_seeds={"carrot": 5})
    persona = get_persona("balanced").with_overrides(actions_per_checkin=2)
    proposals = [WaterCrops(priority=5), HarvestCrops(priority=30), PumpWater(priority=12)]
    engine = DecisionEngine(persona, [_FixedSystem(proposals)], catalog)
    assert engine.phase == "idle"

    chosen = engine.decide(state)

    assert [a.kind for a in chosen] == ["harvest", "pump"]
    assert engine.phase == "dispatched"
    decision = engine.last_decision
    assert decision.proposed == 3
    assert decision.kept == 3
    assert len(decision.ranked) == 3

    engine.reset()
    assert engine.phase == "idle"


def test_decide_with_nothing_proposed_chooses_nothing() -> None:
    engine = DecisionEngine(get_persona("casual"), [_FixedSystem([])], default_catalog())

    assert engine.decide(build_state()) == []
    assert engine.last_decision.proposed == 0
