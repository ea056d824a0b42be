"""Bounded counters, storage caps, costs and state deltas."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from balance_sim.core.config import (
    BASE_CAPACITY,
    CAPACITY_UPGRADES,
    DEFAULT_MATERIAL_CAP,
    MATERIAL_STORAGE,
    MATERIAL_STORAGE_UPGRADES,
    RAW_MATERIAL_PREFIX,
    SEED_STORAGE_BASE,
    SEED_STORAGE_UPGRADES,
    SPECIAL_MATERIALS,
    UNLIMITED_STORAGE,
)
from balance_sim.core.errors import ResourceInsufficient

BOUNDED_RESOURCES: tuple[str, ...] = ("energy", "water", "gold")


@dataclass
class BoundedResource:
    """A counter that must stay within [0, capacity]."""

    name: str
    current: float
    capacity: float

    def add(self, amount: float) -> float:
        """Add amount, clamping at capacity. Returns the overflow discarded."""
        if amount < 0:
            raise ValueError(f"use spend() to reduce {self.name}")
        total = self.current + amount
        if total > self.capacity:
            self.current = self.capacity
            return total - self.capacity
        self.current = total
        return 0.0

    def spend(self, amount: float) -> None:
        if amount < 0:
            raise ValueError(f"cannot spend a negative amount of {self.name}")
        if amount > self.current + 1e-9:
            raise ResourceInsufficient(self.name, amount, self.current)
        self.current = max(0.0, self.current - amount)

    def clamp(self) -> tuple[float, float] | None:
        """Force the value into range. Returns (before, after) when it moved."""
        before = self.current
        self.current = min(max(self.current, 0.0), self.capacity)
        if self.current != before:
            return before, self.current
        return None

    @property
    def fraction(self) -> float:
        return self.current / self.capacity if self.capacity > 0 else 0.0


# =============================================================================
# Cap lookup: the single source of truth for every system
# =============================================================================

def _highest_unlocked(tiers: Iterable[tuple[str, float]], unlocked: set[str], base: float) -> float:
    value = base
    for upgrade_id, cap in tiers:
        if upgrade_id in unlocked:
            value = cap
    return value


def bounded_capacity(resource: str, unlocked: set[str]) -> float:
    """Capacity of energy/water/gold given unlocked upgrades (highest tier wins)."""
    return _highest_unlocked(CAPACITY_UPGRADES.get(resource, []), unlocked, BASE_CAPACITY[resource])


def material_cap(material: str, unlocked: set[str]) -> int:
    """Storage cap for a material key. Raw ores share the cap of their refined form."""
    key = material[len(RAW_MATERIAL_PREFIX):] if material.startswith(RAW_MATERIAL_PREFIX) else material
    if key in SPECIAL_MATERIALS:
        return UNLIMITED_STORAGE
    if key not in MATERIAL_STORAGE:
        return DEFAULT_MATERIAL_CAP

    base, tiers = MATERIAL_STORAGE[key]
    cap = base
    for upgrade_id, tier_cap in zip(MATERIAL_STORAGE_UPGRADES, tiers):
        if upgrade_id in unlocked:
            cap = tier_cap
    return cap


def seed_cap(unlocked: set[str]) -> int:
    return int(_highest_unlocked(SEED_STORAGE_UPGRADES, unlocked, SEED_STORAGE_BASE))


def storage_cap(key: str, unlocked: set[str]) -> float:
    """Cap for any stored key: a bounded resource, ``"seeds"`` (shared) or a material."""
    if key in BOUNDED_RESOURCES:
        return bounded_capacity(key, unlocked)
    if key == "seeds":
        return seed_cap(unlocked)
    return material_cap(key, unlocked)


# =============================================================================
# Costs and deltas
# =============================================================================

@dataclass
class Cost:
    """Everything an action or process consumes up front."""

    energy: float = 0.0
    gold: float = 0.0
    water: float = 0.0
    materials: dict[str, int] = field(default_factory=dict)
    seeds: dict[str, int] = field(default_factory=dict)

    def bounded(self) -> dict[str, float]:
        return {"energy": self.energy, "gold": self.gold, "water": self.water}

    def is_free(self) -> bool:
        return (
            not any(self.bounded().values())
            and not any(self.materials.values())
            and not any(self.seeds.values())
        )

    def scaled(self, factor: float) -> "Cost":
        return Cost(
            energy=self.energy * factor,
            gold=self.gold * factor,
            water=self.water * factor,
            materials={k: int(v * factor) for k, v in self.materials.items()},
            seeds={k: int(v * factor) for k, v in self.seeds.items()},
        )


@dataclass
class StateDelta:
    """Changes a process or system wants merged into the shared state.

    Merge rules: counters are additive, id sets are unioned, progression
    thresholds take the max. Nothing is overwritten.
    """

    bounded: dict[str, float] = field(default_factory=dict)
    materials: dict[str, int] = field(default_factory=dict)
    seeds: dict[str, int] = field(default_factory=dict)
    hero_xp: int = 0
    unlocked: set[str] = field(default_factory=set)
    completed: set[str] = field(default_factory=set)
    plots: int = 0                      # target total, merged with max
    max_depth: float = 0.0              # merged with max

    def add_bounded(self, resource: str, amount: float) -> None:
        self.bounded[resource] = self.bounded.get(resource, 0.0) + amount

    def add_material(self, material: str, qty: int) -> None:
        self.materials[material] = self.materials.get(material, 0) + qty

    def add_seeds(self, crop: str, qty: int) -> None:
        self.seeds[crop] = self.seeds.get(crop, 0) + qty

    def merge(self, other: "StateDelta") -> None:
        for k, v in other.bounded.items():
            self.add_bounded(k, v)
        for k, q in other.materials.items():
            self.add_material(k, q)
        for k, q in other.seeds.items():
            self.add_seeds(k, q)
        self.hero_xp += other.hero_xp
        self.unlocked |= other.unlocked
        self.completed |= other.completed
        self.plots = max(self.plots, other.plots)
        self.max_depth = max(self.max_depth, other.max_depth)

    def is_empty(self) -> bool:
        return not (
            any(self.bounded.values()) or any(self.materials.values()) or any(self.seeds.values())
            or self.hero_xp or self.unlocked or self.completed or self.plots or self.max_depth
        )
