"""Deterministic combat resolution for adventure runs.

A run is a sequence of waves followed by a boss. Each fight is resolved by
formula: time-to-kill from weapon damage, attack speed and the weapon/enemy
advantage pentagon, then damage taken over that time after armor. The only
randomness is wave sizes, enemy picks, gold and loot rolls, all drawn from the
run RNG so a seed reproduces a run exactly.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from numpy.random import Generator

from balance_sim.core.config import (
    ADVANTAGE_MULTIPLIER,
    ARMOR_REDUCTION_CAP,
    BOSS_GOLD,
    BOSS_STATS,
    BOSS_XP,
    DEFAULT_WAVE_BASE,
    ENEMY_GOLD_RANGE,
    ENEMY_STATS,
    ENEMY_XP,
    EVASION_DAMAGE_FACTOR,
    GOLD_MAGNET_MULTIPLIER,
    HERO_BASE_HP,
    HERO_HP_PER_LEVEL,
    MAX_WAVE_SIZE,
    NEUTRAL_MULTIPLIER,
    REFLECTION_TIME_FACTOR,
    REGENERATION_HP_PER_WAVE,
    RESISTED_MULTIPLIER,
    ROUTE_LENGTHS,
    ROUTE_WAVES,
    VAMPIRIC_HP_PER_KILL,
    VAMPIRIC_MAX_PER_WAVE,
    WEAPON_ADVANTAGES,
    WEAPON_RESISTANCES,
)
from balance_sim.core.errors import CatalogLookupError
from balance_sim.state.catalog import Catalog, CatalogItem, LootEntry


@dataclass(frozen=True)
class EnemyStats:
    """Hit points, damage per hit and hits per time unit."""

    name: str
    hp: float
    damage: float
    attack_speed: float


@dataclass(frozen=True)
class BossQuirk:
    """Per-boss special case applied on top of the normal fight formula.

    Penalties are skipped when the hero brings the counter weapon type or the
    counter armor effect. Bonus damage always applies.
    """

    weakness: Optional[str] = None
    bonus_damage_fraction: float = 0.0   # x hero max hp
    unavoidable_fraction: float = 0.0    # x hero max hp, not reduced by armor
    duration_multiplier: float = 1.0
    counter_weapon: Optional[str] = None
    counter_effect: Optional[str] = None


BOSS_QUIRKS: dict[str, BossQuirk] = {
    # half again as much health to chew through
    "giant_slime": BossQuirk(duration_multiplier=1.5),
    # the shell halves damage dealt, so the fight takes twice as long
    "beetle_lord": BossQuirk(weakness="spear", duration_multiplier=2.0, counter_weapon="spear"),
    "alpha_wolf": BossQuirk(weakness="sword", bonus_damage_fraction=0.3),
    "sky_serpent": BossQuirk(weakness="bow", unavoidable_fraction=0.2, counter_weapon="bow"),
    "crystal_spider": BossQuirk(weakness="crossbow", duration_multiplier=1.15),
    "frost_wyrm": BossQuirk(weakness="wand", duration_multiplier=1.5, counter_weapon="wand"),
    "lava_titan": BossQuirk(weakness="wand", unavoidable_fraction=0.1, counter_effect="regeneration"),
}


@dataclass
class HeroLoadout:
    """What the hero brings into a run."""

    level: int
    weapon_type: Optional[str]
    weapon_damage: float
    weapon_speed: float
    defense: float = 0.0
    armor_effect: Optional[str] = None
    bonus_damage: float = 0.0            # adventure_fighter helpers

    @property
    def max_hp(self) -> int:
        return HERO_BASE_HP + HERO_HP_PER_LEVEL * self.level


@dataclass
class RouteProfile:
    """A route at one length, with every number resolved."""

    route_id: str
    length: str
    waves: int
    wave_base: int
    enemy_types: list[str]
    enemies: dict[str, EnemyStats]
    boss_id: Optional[str] = None
    boss: Optional[EnemyStats] = None
    gold_reward: int = 0
    xp_reward: int = 0
    loot: list[LootEntry] = field(default_factory=list)


@dataclass
class CombatOutcome:
    """Result of one run. A failed run grants nothing."""

    success: bool
    hp_remaining: int
    max_hp: int
    gold: int = 0
    xp: int = 0
    loot: dict[str, int] = field(default_factory=dict)
    waves_cleared: int = 0
    enemies_defeated: int = 0
    boss_defeated: bool = False


# =============================================================================
# Formulas
# =============================================================================

def damage_multiplier(weapon_type: Optional[str], enemy_type: str) -> float:
    if weapon_type is None:
        return NEUTRAL_MULTIPLIER
    if WEAPON_ADVANTAGES.get(weapon_type) == enemy_type:
        return ADVANTAGE_MULTIPLIER
    if WEAPON_RESISTANCES.get(weapon_type) == enemy_type:
        return RESISTED_MULTIPLIER
    return NEUTRAL_MULTIPLIER


def armor_reduction(defense: float) -> float:
    return min(ARMOR_REDUCTION_CAP, max(0.0, defense) / 100.0)


def wave_size_cap(wave_base: int, wave: int) -> int:
    """Largest enemy group for a 1-based wave index."""
    return max(1, min(MAX_WAVE_SIZE, wave_base + wave // 3))


def fight(hero: HeroLoadout, enemy: EnemyStats, multiplier: float, time_factor: float = 1.0) -> tuple[float, float]:
    """Return (time to kill, damage taken before armor effects other than reduction)."""
    dps = max(0.1, (hero.weapon_damage + hero.bonus_damage) * hero.weapon_speed * multiplier)
    time_to_kill = enemy.hp / dps * time_factor
    if hero.armor_effect == "reflection":
        time_to_kill *= REFLECTION_TIME_FACTOR
    taken = enemy.damage * enemy.attack_speed * time_to_kill * (1.0 - armor_reduction(hero.defense))
    if hero.armor_effect == "evasion":
        taken *= EVASION_DAMAGE_FACTOR
    return time_to_kill, taken


def boss_damage(hero: HeroLoadout, boss_id: str, boss: EnemyStats) -> float:
    quirk = BOSS_QUIRKS.get(boss_id, BossQuirk())
    countered = (
        (quirk.counter_weapon is not None and hero.weapon_type == quirk.counter_weapon)
        or (quirk.counter_effect is not None and hero.armor_effect == quirk.counter_effect)
    )
    multiplier = ADVANTAGE_MULTIPLIER if quirk.weakness and hero.weapon_type == quirk.weakness else NEUTRAL_MULTIPLIER
    time_factor = 1.0 if countered else quirk.duration_multiplier

    _, taken = fight(hero, boss, multiplier, time_factor)
    taken += quirk.bonus_damage_fraction * hero.max_hp
    if not countered:
        taken += quirk.unavoidable_fraction * hero.max_hp
    return taken


def resolve_run(route: RouteProfile, hero: HeroLoadout, rng: Generator) -> CombatOutcome:
    """Fight every wave, then the boss. Stops at the first lethal hit."""
    max_hp = hero.max_hp
    hp = max_hp
    gold = 0
    xp = 0
    defeated = 0
    waves_cleared = 0

    for wave in range(1, route.waves + 1):
        size = int(rng.integers(1, wave_size_cap(route.wave_base, wave) + 1))
        healed = 0
        for _ in range(size):
            enemy_type = route.enemy_types[int(rng.integers(len(route.enemy_types)))]
            enemy = route.enemies[enemy_type]
            _, taken = fight(hero, enemy, damage_multiplier(hero.weapon_type, enemy_type))
            hp -= math.ceil(taken)
            if hp <= 0:
                return CombatOutcome(False, 0, max_hp, waves_cleared=waves_cleared, enemies_defeated=defeated)
            defeated += 1
            gold += int(rng.integers(ENEMY_GOLD_RANGE[0], ENEMY_GOLD_RANGE[1] + 1))
            xp += ENEMY_XP
            if hero.armor_effect == "vampiric" and healed < VAMPIRIC_MAX_PER_WAVE:
                gain = min(VAMPIRIC_HP_PER_KILL, VAMPIRIC_MAX_PER_WAVE - healed, max_hp - hp)
                hp += gain
                healed += gain
        waves_cleared += 1
        if hero.armor_effect == "regeneration":
            hp = min(max_hp, hp + REGENERATION_HP_PER_WAVE)

    boss_defeated = False
    if route.boss is not None and route.boss_id is not None:
        hp -= math.ceil(boss_damage(hero, route.boss_id, route.boss))
        if hp <= 0:
            return CombatOutcome(False, 0, max_hp, waves_cleared=waves_cleared, enemies_defeated=defeated)
        boss_defeated = True
        gold += BOSS_GOLD
        xp += BOSS_XP

    gold += route.gold_reward
    xp += route.xp_reward
    if hero.armor_effect == "gold_magnet":
        gold = int(gold * GOLD_MAGNET_MULTIPLIER)

    loot: dict[str, int] = {}
    for entry in route.loot:
        if rng.random() < entry.chance:
            qty = int(rng.integers(entry.min_qty, entry.max_qty + 1))
            if qty > 0:
                loot[entry.material] = loot.get(entry.material, 0) + qty

    return CombatOutcome(
        success=True,
        hp_remaining=hp,
        max_hp=max_hp,
        gold=gold,
        xp=xp,
        loot=loot,
        waves_cleared=waves_cleared,
        enemies_defeated=defeated,
        boss_defeated=boss_defeated,
    )


def expected_damage(route: RouteProfile, hero: HeroLoadout) -> float:
    """Mean damage over a run, without touching the RNG. Used for risk estimates."""
    total = 0.0
    for wave in range(1, route.waves + 1):
        mean_size = (1 + wave_size_cap(route.wave_base, wave)) / 2
        per_enemy = sum(
            fight(hero, route.enemies[t], damage_multiplier(hero.weapon_type, t))[1]
            for t in route.enemy_types
        ) / len(route.enemy_types)
        total += mean_size * per_enemy
    if route.boss is not None and route.boss_id is not None:
        total += boss_damage(hero, route.boss_id, route.boss)
    return total


# =============================================================================
# Catalog lookups (catalog first, config tables as fallback)
# =============================================================================

def enemy_stats(catalog: Catalog, enemy_id: str, kind: str = "enemy") -> EnemyStats:
    item = catalog.find(enemy_id)
    if item is not None and item.kind == kind:
        return EnemyStats(item.id, item.stat("hp"), item.damage, item.attack_speed)
    table = BOSS_STATS if kind == "boss" else ENEMY_STATS
    if enemy_id not in table:
        raise CatalogLookupError(enemy_id)
    hp, dmg, speed = table[enemy_id]
    return EnemyStats(enemy_id, float(hp), float(dmg), float(speed))


def route_waves(route: CatalogItem, length: str) -> int:
    if length not in ROUTE_LENGTHS:
        raise ValueError(f"unknown route length {length!r}")
    key = f"waves_{length}"
    if key in route.stats:
        return int(route.stats[key])
    if route.id not in ROUTE_WAVES:
        raise CatalogLookupError(f"{route.id}.{key}")
    return ROUTE_WAVES[route.id][ROUTE_LENGTHS.index(length)]


def build_route_profile(catalog: Catalog, route: CatalogItem, length: str) -> RouteProfile:
    if not route.enemy_types:
        raise CatalogLookupError(f"{route.id}.enemy_types")
    enemies = {t: enemy_stats(catalog, t) for t in route.enemy_types}
    boss = enemy_stats(catalog, route.boss, kind="boss") if route.boss else None
    return RouteProfile(
        route_id=route.id,
        length=length,
        waves=route_waves(route, length),
        wave_base=int(route.stat("wave_base", DEFAULT_WAVE_BASE)),
        enemy_types=list(route.enemy_types),
        enemies=enemies,
        boss_id=route.boss,
        boss=boss,
        gold_reward=int(route.stat("gold_reward")),
        xp_reward=int(route.stat("xp_reward")),
        loot=list(route.loot),
    )
