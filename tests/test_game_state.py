import pytest

from balance_sim.core.errors import InvariantViolation, ResourceInsufficient
from balance_sim.state.resources import BoundedResource, Cost, StateDelta, material_cap, storage_cap
from tests.helpers.builders import build_state


def test_gain_clamps_at_capacity_and_logs_overflow() -> None:
    state = build_state(starting_energy=95)

    applied = state.gain("energy", 20, source="test")

    assert applied == pytest.approx(5)
    assert state.amount("energy") == state.capacity("energy") == 100
    overflow = state.events.of_type("overflow")
    assert len(overflow) == 1
    assert overflow[0].data["overflow"] == pytest.approx(15)


def test_spend_below_zero_raises_and_leaves_value() -> None:
    state = build_state(starting_gold=10)

    with pytest.raises(ResourceInsufficient):
        state.spend("gold", 11)
    assert state.amount("gold") == 10


def test_pay_is_all_or_nothing() -> None:
    state = build_state(starting_gold=50, starting_materials={"wood": 2})

    with pytest.raises(ResourceInsufficient):
        state.pay(Cost(gold=20, materials={"wood": 5}))

    assert state.amount("gold") == 50
    assert state.materials["wood"] == 2


def test_pay_reports_needed_and_on_hand_amounts() -> None:
    state = build_state(starting_gold=50, starting_materials={"wood": 2})

    with pytest.raises(ResourceInsufficient) as info:
        state.pay(Cost(materials={"wood": 5}))

    assert info.value.resource == "wood"
    assert info.value.needed == 5
    assert info.value.available == 2
    assert str(info.value) == "wood: need 5, have 2"


def test_clamp_all_records_each_correction() -> None:
    state = build_state()
    state.resources["water"].current = state.capacity("water") + 7
    state.resources["energy"].current = -1

    clamped = state.clamp_all()

    assert {name for name, _, _ in clamped} == {"water", "energy"}
    assert state.amount("water") == state.capacity("water")
    assert state.amount("energy") == 0
    assert len(state.events.of_type("clamp")) == 2


def test_bounded_resource_add_rejects_negative_amounts() -> None:
    res = BoundedResource("water", 5, 10)

    with pytest.raises(ValueError):
        res.add(-1)
    assert res.add(8) == pytest.approx(3)
    assert res.current == 10


def test_material_storage_caps_and_raw_ore_shares_refined_cap() -> None:
    state = build_state()

    kept = state.gain_material("wood", 70)
    raw = state.gain_material("raw_copper", 40)

    assert kept == 50
    assert raw == material_cap("copper", set()) == 25
    assert state.materials["wood"] == 50
    assert len(state.events.of_type("overflow")) == 2


def test_storage_upgrade_raises_material_cap() -> None:
    state = build_state(starting_upgrades=["material_crate_i"])

    assert state.material_cap("wood") == 100


def test_special_materials_are_unlimited() -> None:
    state = build_state()

    assert state.gain_material("lava_heart", 5000) == 5000


def test_seed_storage_is_shared_across_crops() -> None:
    state = build_state(starting_seeds={"carrot": 25})

    added = state.gain_seeds("radish", 10)

    assert added == 5
    assert state.total_seeds() == state.seed_cap() == 30


def test_capacity_upgrade_takes_highest_tier() -> None:
    state = build_state()
    base = state.capacity("energy")

    state.unlock("energy_storage_i")
    state.unlock("energy_storage_ii")

    assert base == 100
    assert state.capacity("energy") == 250


def test_plots_never_decrease() -> None:
    state = build_state(starting_plots=3)

    with pytest.raises(InvariantViolation):
        state.add_plots(-1)

    state.apply_delta(StateDelta(plots=2))
    assert state.progression.plots == 3

    state.apply_delta(StateDelta(plots=5))
    assert state.progression.plots == 5
    assert len(state.plots) == 5


def test_apply_delta_that_overdraws_is_an_invariant_violation() -> None:
    state = build_state(starting_energy=4)
    delta = StateDelta()
    delta.add_bounded("energy", -10)

    with pytest.raises(InvariantViolation):
        state.apply_delta(delta, source="test")


def test_delta_merge_adds_counters_and_keeps_max_thresholds() -> None:
    first = StateDelta(max_depth=40, plots=4, hero_xp=10)
    first.add_material("wood", 2)
    second = StateDelta(max_depth=25, plots=6, hero_xp=5, unlocked={"well"})
    second.add_material("wood", 3)

    first.merge(second)

    assert first.materials == {"wood": 5}
    assert first.max_depth == 40
    assert first.plots == 6
    assert first.hero_xp == 15
    assert first.unlocked == {"well"}


def test_grant_xp_levels_up_and_logs() -> None:
    state = build_state()

    gained = state.grant_xp(100)

    assert gained == 1
    assert state.progression.hero_level == 2
    assert state.events.of_type("level_up")


def test_snapshot_and_fingerprint_reflect_state() -> None:
    state = build_state(starting_seeds={"carrot": 2})
    before = state.fingerprint()

    state.gain_seeds("carrot", 1)

    assert state.fingerprint() != before
    snap = state.snapshot()
    assert snap["seeds"] == {"carrot": 3}
    assert snap["progression"]["plots"] == 3
    assert snap["resources"]["energy"]["capacity"] == 100


@pytest.mark.parametrize(
    "key, unlocked, expected",
    [
        ("water", set(), 40),
        ("water", {"water_tank_i", "water_tower"}, 300),
        ("seeds", {"seed_pouch"}, 60),
        ("raw_copper", set(), 25),
        ("mystery_goo", {"material_crate_i"}, 50),
    ],
)
def test_storage_cap_covers_every_key(key: str, unlocked: set, expected: float) -> None:
    assert storage_cap(key, unlocked) == expected
