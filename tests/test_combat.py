import numpy as np
import pytest

from balance_sim.core.config import ADVANTAGE_MULTIPLIER, ARMOR_REDUCTION_CAP, NEUTRAL_MULTIPLIER, RESISTED_MULTIPLIER
from balance_sim.core.errors import CatalogLookupError
from balance_sim.processes.adventure import AdventureRequest
from balance_sim.state.catalog import Catalog
from balance_sim.state.resources import Cost
from balance_sim.systems.combat import (
    EnemyStats,
    HeroLoadout,
    armor_reduction,
    boss_damage,
    build_route_profile,
    damage_multiplier,
    enemy_stats,
    expected_damage,
    resolve_run,
    route_waves,
)
from tests.helpers.builders import advance, build_manager, build_registry, build_state, default_catalog


def _hero(weapon_type: str | None = "sword", damage: float = 10.0, level: int = 1, **fields) -> HeroLoadout:
    return HeroLoadout(level=level, weapon_type=weapon_type, weapon_damage=damage, weapon_speed=1.0, **fields)


def test_weapon_multipliers_follow_the_advantage_pentagon() -> None:
    assert damage_multiplier("spear", "armored_insects") == ADVANTAGE_MULTIPLIER
    assert damage_multiplier("spear", "living_plants") == RESISTED_MULTIPLIER
    assert damage_multiplier("spear", "slimes") == NEUTRAL_MULTIPLIER
    assert damage_multiplier(None, "armored_insects") == NEUTRAL_MULTIPLIER


def test_armor_reduction_is_capped() -> None:
    assert armor_reduction(20) == pytest.approx(0.2)
    assert armor_reduction(500) == ARMOR_REDUCTION_CAP
    assert armor_reduction(-5) == 0.0


def test_catalog_enemy_stats_win_over_fallback_tables() -> None:
    catalog = default_catalog()

    from_catalog = enemy_stats(catalog, "slimes")
    fallback = enemy_stats(Catalog([]), "slimes")

    assert from_catalog.hp == 15
    assert fallback.hp == 20
    with pytest.raises(CatalogLookupError):
        enemy_stats(Catalog([]), "dragons")


def test_route_waves_read_from_catalog_stats() -> None:
    route = default_catalog().get("meadow_path")

    assert [route_waves(route, length) for length in ("short", "medium", "long")] == [3, 5, 8]
    with pytest.raises(ValueError):
        route_waves(route, "epic")


def test_boss_counter_weapon_shortens_the_fight() -> None:
    boss = EnemyStats("beetle_lord", 200, 10, 0.4)

    with_spear = boss_damage(_hero("spear"), "beetle_lord", boss)
    with_sword = boss_damage(_hero("sword"), "beetle_lord", boss)

    assert with_spear < with_sword


def test_giant_slime_fight_lasts_half_again_as_long() -> None:
    hero = _hero("sword", damage=10)
    slime = EnemyStats("giant_slime", 60, 4, 0.5)
    plain = EnemyStats("plain_boss", 60, 4, 0.5)

    assert boss_damage(hero, "plain_boss", plain) == pytest.approx(12)
    assert boss_damage(hero, "giant_slime", slime) == pytest.approx(18)


def test_level_one_spear_can_survive_every_meadow_length() -> None:
    catalog = default_catalog()
    hero = HeroLoadout(level=1, weapon_type="spear", weapon_damage=10, weapon_speed=1.2)

    for length in ("short", "medium", "long"):
        profile = build_route_profile(catalog, catalog.get("meadow_path"), length)
        assert expected_damage(profile, hero) < 0.75 * hero.max_hp


def test_same_seed_resolves_the_same_run() -> None:
    catalog = default_catalog()
    profile = build_route_profile(catalog, catalog.get("pine_vale"), "medium")
    hero = _hero("spear", damage=12, level=3)

    first = resolve_run(profile, hero, np.random.default_rng(11))
    second = resolve_run(profile, hero, np.random.default_rng(11))

    assert first == second


def test_losing_run_grants_nothing() -> None:
    catalog = default_catalog()
    profile = build_route_profile(catalog, catalog.get("volcano_core"), "long")

    outcome = resolve_run(profile, _hero(None, damage=1), np.random.default_rng(3))

    assert not outcome.success
    assert outcome.gold == 0
    assert outcome.xp == 0
    assert outcome.loot == {}


def test_failed_adventure_keeps_its_cost_and_pays_no_reward() -> None:
    catalog = default_catalog()
    registry = build_registry()
    manager = build_manager(registry)
    state = build_state(starting_energy=50, starting_gold=0)
    request = AdventureRequest(
        route=build_route_profile(catalog, catalog.get("volcano_core"), "short"),
        hero=_hero(None, damage=1),
        duration=5,
        cost=Cost(energy=30),
    )

    started = registry.start("adventure", request, state)
    assert started.success
    assert state.amount("energy") == pytest.approx(20)

    advance(state, manager, minutes=5)

    assert not state.active_processes("adventure")
    assert state.amount("gold") == 0
    assert state.progression.hero_xp == 0
    assert state.events.of_type("adventure_failed")


def test_winning_adventure_pays_gold_and_xp_on_completion() -> None:
    catalog = default_catalog()
    registry = build_registry()
    manager = build_manager(registry)
    state = build_state(starting_energy=50, starting_gold=0)
    request = AdventureRequest(
        route=build_route_profile(catalog, catalog.get("meadow_path"), "short"),
        hero=_hero("sword", damage=500, level=5),
        duration=3,
        cost=Cost(energy=5),
    )

    registry.start("adventure", request, state)
    advance(state, manager, minutes=2)
    assert state.amount("gold") == 0

    advance(state, manager, minutes=1)
    assert state.amount("gold") > 0
    assert state.progression.hero_xp > 0
    assert "defeated_giant_slime" in state.progression.completed
