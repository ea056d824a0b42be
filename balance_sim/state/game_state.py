"""The canonical mutable snapshot of one simulated playthrough.

A GameState is created once per run, owned by the SimulationEngine and passed
by reference into every system and process handler call. All resource changes
go through the methods here so that the bounded-resource invariant
(0 <= current <= capacity) holds and every clamp is recorded as an event.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional

from numpy.random import Generator

from balance_sim.core.clock import GameClock
from balance_sim.core.config import HERO_XP_PER_LEVEL
from balance_sim.core.errors import InvariantViolation, ResourceInsufficient
from balance_sim.simulation.events import EventLog, GameEvent
from balance_sim.state.catalog import Prerequisite
from balance_sim.state.inventory import Inventory
from balance_sim.state.resources import (
    BOUNDED_RESOURCES,
    BoundedResource,
    Cost,
    StateDelta,
    storage_cap,
)

TOWER_REACH_PREFIX = "tower_reach_"


@dataclass
class Plot:
    """A farm plot: empty, growing (owns a growth process) or ready to harvest."""

    index: int
    process_handle: Optional[str] = None
    ready_crop: Optional[str] = None

    @property
    def status(self) -> str:
        if self.ready_crop is not None:
            return "ready"
        if self.process_handle is not None:
            return "growing"
        return "empty"


@dataclass
class Helper:
    """A hired gnome helper."""

    helper_id: str
    role: Optional[str] = None
    level: int = 1
    training: bool = False


@dataclass
class Progression:
    """Append-only and non-decreasing progress markers."""

    unlocked: set[str] = field(default_factory=set)
    completed: set[str] = field(default_factory=set)
    plots: int = 0
    hero_level: int = 1
    hero_xp: int = 0
    max_depth: float = 0.0
    wind_level: int = 1


@dataclass
class Location:
    """Where the player currently is. Observability only."""

    screen: str = "farm"
    minutes_on_screen: float = 0.0
    reason: str = "game start"


class ProcessStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class ProcessRecord:
    """One long-running activity owned by exactly one handler category."""

    handle: str
    category: str
    data: Any
    started_at: float
    status: ProcessStatus = ProcessStatus.PENDING
    finished_at: Optional[float] = None


def xp_for_level(level: int) -> int:
    """Cumulative xp needed to reach level (level 1 needs 0)."""
    return HERO_XP_PER_LEVEL * level * (level - 1) // 2


class GameState:
    """Mutable state of one run."""

    def __init__(self, rng: Generator, clock: Optional[GameClock] = None) -> None:
        self.rng = rng
        self.clock = clock or GameClock()

        self.progression = Progression()
        self.resources: dict[str, BoundedResource] = {
            name: BoundedResource(name, 0.0, storage_cap(name, set()))
            for name in BOUNDED_RESOURCES
        }
        self.seeds: dict[str, int] = {}
        self.materials: dict[str, int] = {}

        self.plots: list[Plot] = []
        self.inventory = Inventory()
        self.helpers: list[Helper] = []
        self.forge_heat: float = 0.0
        self.tower_progress: float = 0.0
        self.helper_timer: float = 0.0

        self.processes: dict[str, ProcessRecord] = {}
        self.processes_completed: dict[str, int] = {}
        self._process_counter: int = 0
        self._helper_counter: int = 0

        self.location = Location()
        self.events = EventLog()

    @classmethod
    def from_run_config(
        cls,
        config: "RunConfig",  # noqa: F821
        catalog: "Catalog",  # noqa: F821
        rng: Generator,
    ) -> "GameState":
        """Build the starting state from a run configuration bundle."""
        state = cls(rng)
        for upgrade_id in config.starting_upgrades:
            state.unlock(upgrade_id)
        for name, capacity in config.starting_capacity.items():
            state.resources[name].capacity = capacity
        state.resources["energy"].current = config.starting_energy
        state.resources["water"].current = config.starting_water
        state.resources["gold"].current = config.starting_gold
        state.seeds = dict(config.starting_seeds)
        state.materials = dict(config.starting_materials)
        state.add_plots(config.starting_plots)
        for tool_id in config.starting_tools:
            item = catalog.get(tool_id)
            state.inventory.add(tool_id, item.slot or item.kind, item.level)
        state.clamp_all()
        return state

    # ------------------------------------------------------------------
    # Time and location
    # ------------------------------------------------------------------

    @property
    def minutes(self) -> float:
        return self.clock.minutes

    @property
    def day(self) -> int:
        return self.clock.day

    def advance_time(self, dt: float) -> None:
        self.clock.advance(dt)
        self.location.minutes_on_screen += dt

    def move_to(self, screen: str, reason: str) -> None:
        if screen != self.location.screen:
            self.location = Location(screen=screen, minutes_on_screen=0.0, reason=reason)
        else:
            self.location.reason = reason

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def emit(self, event_type: str, description: str, importance: str = "info", **data) -> GameEvent:
        event = GameEvent(
            event_type=event_type,
            description=description,
            tick=self.clock.minutes,
            importance=importance,
            data=data,
        )
        return self.events.append(event)

    # ------------------------------------------------------------------
    # Bounded resources
    # ------------------------------------------------------------------

    def amount(self, resource: str) -> float:
        return self.resources[resource].current

    def capacity(self, resource: str) -> float:
        return self.resources[resource].capacity

    def gain(self, resource: str, amount: float, source: str = "") -> float:
        """Add to a bounded resource. Overflow is clamped and logged."""
        if amount <= 0:
            return 0.0
        overflow = self.resources[resource].add(amount)
        if overflow > 0:
            self.emit(
                "overflow",
                f"{resource} capped at {self.capacity(resource):g}, {overflow:g} discarded",
                importance="warning",
                resource=resource,
                overflow=overflow,
                source=source,
            )
        return amount - overflow

    def spend(self, resource: str, amount: float) -> None:
        if amount > 0:
            self.resources[resource].spend(amount)

    def refresh_capacities(self) -> None:
        """Re-derive capacities after unlocks. Never lowers a capacity set at start."""
        unlocked = self.progression.unlocked
        for name, res in self.resources.items():
            res.capacity = max(res.capacity, storage_cap(name, unlocked))

    def clamp_all(self) -> list[tuple[str, float, float]]:
        """Clamp every bounded resource into range, logging each correction."""
        clamped = []
        for name, res in self.resources.items():
            moved = res.clamp()
            if moved is not None:
                before, after = moved
                clamped.append((name, before, after))
                self.emit(
                    "clamp",
                    f"{name} clamped from {before:g} to {after:g}",
                    importance="warning",
                    resource=name,
                    before=before,
                    after=after,
                )
        return clamped

    # ------------------------------------------------------------------
    # Keyed stock
    # ------------------------------------------------------------------

    def material_cap(self, material: str) -> int:
        return int(storage_cap(material, self.progression.unlocked))

    def seed_cap(self) -> int:
        return int(storage_cap("seeds", self.progression.unlocked))

    def gain_material(self, material: str, qty: int, source: str = "") -> int:
        if qty <= 0:
            return 0
        cap = self.material_cap(material)
        have = self.materials.get(material, 0)
        applied = max(0, min(qty, cap - have))
        if applied:
            self.materials[material] = have + applied
        if applied < qty:
            self.emit(
                "overflow",
                f"{material} storage full at {cap}, {qty - applied} discarded",
                importance="warning",
                resource=material,
                overflow=qty - applied,
                source=source,
            )
        return applied

    def spend_material(self, material: str, qty: int) -> None:
        have = self.materials.get(material, 0)
        if qty > have:
            raise ResourceInsufficient(material, qty, have)
        self.materials[material] = have - qty

    def total_seeds(self) -> int:
        return sum(self.seeds.values())

    def gain_seeds(self, crop: str, qty: int, source: str = "") -> int:
        if qty <= 0:
            return 0
        room = max(0, self.seed_cap() - self.total_seeds())
        applied = min(qty, room)
        if applied:
            self.seeds[crop] = self.seeds.get(crop, 0) + applied
        if applied < qty:
            self.emit(
                "overflow",
                f"seed storage full, {qty - applied} {crop} seeds discarded",
                importance="warning",
                resource=f"seed:{crop}",
                overflow=qty - applied,
                source=source,
            )
        return applied

    def spend_seeds(self, crop: str, qty: int) -> None:
        have = self.seeds.get(crop, 0)
        if qty > have:
            raise ResourceInsufficient(f"{crop} seeds", qty, have)
        self.seeds[crop] = have - qty

    # ------------------------------------------------------------------
    # Costs
    # ------------------------------------------------------------------

    def _holdings(self, cost: Cost) -> Iterator[tuple[str, float, float]]:
        """(key, needed, on hand) for every non-zero cost component."""
        for name, needed in cost.bounded().items():
            if needed > 0:
                yield name, needed, self.amount(name)
        for material, needed in cost.materials.items():
            if needed > 0:
                yield material, needed, self.materials.get(material, 0)
        for crop, needed in cost.seeds.items():
            if needed > 0:
                yield f"{crop}_seeds", needed, self.seeds.get(crop, 0)

    def shortfalls(self, cost: Cost) -> dict[str, float]:
        """Missing amount per cost component. Empty when affordable."""
        return {key: needed - have for key, needed, have in self._holdings(cost) if needed > have + 1e-9}

    def pay(self, cost: Cost) -> None:
        """Spend a whole cost or nothing."""
        for key, needed, have in self._holdings(cost):
            if needed > have + 1e-9:
                raise ResourceInsufficient(key, needed, have)
        for name, amount in cost.bounded().items():
            self.spend(name, amount)
        for material, qty in cost.materials.items():
            self.spend_material(material, qty)
        for crop, qty in cost.seeds.items():
            self.spend_seeds(crop, qty)

    def refund(self, cost: Cost, source: str = "refund") -> None:
        for name, amount in cost.bounded().items():
            self.gain(name, amount, source)
        for material, qty in cost.materials.items():
            self.gain_material(material, qty, source)
        for crop, qty in cost.seeds.items():
            self.gain_seeds(crop, qty, source)

    # ------------------------------------------------------------------
    # Progression
    # ------------------------------------------------------------------

    def unlock(self, upgrade_id: str) -> None:
        self.progression.unlocked.add(upgrade_id)
        if upgrade_id.startswith(TOWER_REACH_PREFIX):
            level = int(upgrade_id[len(TOWER_REACH_PREFIX):])
            self.progression.wind_level = max(self.progression.wind_level, level)
        self.refresh_capacities()

    def mark_completed(self, item_id: str) -> None:
        self.progression.completed.add(item_id)

    def add_plots(self, count: int) -> None:
        if count < 0:
            raise InvariantViolation("plot count may not decrease")
        for _ in range(count):
            self.plots.append(Plot(index=len(self.plots)))
        self.progression.plots = len(self.plots)

    def grant_xp(self, xp: int) -> int:
        """Add hero xp and return the number of levels gained."""
        if xp <= 0:
            return 0
        prog = self.progression
        prog.hero_xp += xp
        gained = 0
        while prog.hero_xp >= xp_for_level(prog.hero_level + 1):
            prog.hero_level += 1
            gained += 1
        if gained:
            self.emit(
                "level_up",
                f"Hero reached level {prog.hero_level}",
                importance="medium",
                level=prog.hero_level,
            )
        return gained

    def metric(self, name: str) -> float:
        """Numeric progression metric used by threshold prerequisites and victory conditions."""
        prog = self.progression
        if name == "hero_level":
            return prog.hero_level
        if name == "plots":
            return prog.plots
        if name == "day":
            return self.day
        if name == "max_depth":
            return prog.max_depth
        if name == "helpers":
            return len(self.helpers)
        if name == "wind_level":
            return prog.wind_level
        raise KeyError(name)

    def satisfies(self, prereq: Prerequisite) -> bool:
        if prereq.metric is not None:
            return self.metric(prereq.metric) >= prereq.minimum
        item_id = prereq.item_id
        return (
            item_id in self.progression.unlocked
            or item_id in self.progression.completed
            or self.inventory.owns(item_id)
        )

    def owns_or_unlocked(self, item_id: str) -> bool:
        return (
            item_id in self.progression.unlocked
            or item_id in self.progression.completed
            or self.inventory.owns(item_id)
        )

    # ------------------------------------------------------------------
    # Delta merge
    # ------------------------------------------------------------------

    def apply_delta(self, delta: StateDelta, source: str = "") -> None:
        """Merge a handler's delta: additive counters, unioned sets, max thresholds."""
        for name, amount in delta.bounded.items():
            if amount >= 0:
                self.gain(name, amount, source)
                continue
            if -amount > self.amount(name) + 1e-9:
                raise InvariantViolation(
                    f"{source or 'delta'} would take {name} below zero "
                    f"({self.amount(name):g} {amount:+g})"
                )
            self.spend(name, -amount)
        for material, qty in delta.materials.items():
            if qty >= 0:
                self.gain_material(material, qty, source)
            elif -qty > self.materials.get(material, 0):
                raise InvariantViolation(f"{source or 'delta'} would take {material} below zero")
            else:
                self.spend_material(material, -qty)
        for crop, qty in delta.seeds.items():
            if qty >= 0:
                self.gain_seeds(crop, qty, source)
            elif -qty > self.seeds.get(crop, 0):
                raise InvariantViolation(f"{source or 'delta'} would take {crop} seeds below zero")
            else:
                self.spend_seeds(crop, -qty)
        for upgrade_id in sorted(delta.unlocked):
            self.unlock(upgrade_id)
        self.progression.completed |= delta.completed
        if delta.plots > self.progression.plots:
            self.add_plots(delta.plots - self.progression.plots)
        self.progression.max_depth = max(self.progression.max_depth, delta.max_depth)
        self.grant_xp(delta.hero_xp)

    # ------------------------------------------------------------------
    # Processes and helpers
    # ------------------------------------------------------------------

    def next_handle(self, category: str) -> str:
        self._process_counter += 1
        return f"{category}-{self._process_counter}"

    def next_helper_id(self) -> str:
        self._helper_counter += 1
        return f"gnome-{self._helper_counter}"

    def active_processes(self, category: Optional[str] = None) -> list[ProcessRecord]:
        return [
            r for r in self.processes.values()
            if (category is None or r.category == category)
            and r.status in (ProcessStatus.PENDING, ProcessStatus.RUNNING)
        ]

    def helpers_with_role(self, role: str) -> list[Helper]:
        return [h for h in self.helpers if h.role == role and not h.training]

    def role_strength(self, role: str, base: float, per_level: float) -> float:
        """Summed effect of every working helper in a role."""
        return sum(base + per_level * h.level for h in self.helpers_with_role(role))

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def fingerprint(self) -> tuple:
        """Coarse view used for stuck detection."""
        return (
            tuple(round(r.current, 3) for r in self.resources.values()),
            tuple(sorted(self.seeds.items())),
            tuple(sorted(self.materials.items())),
            len(self.progression.completed),
            len(self.progression.unlocked),
            self.progression.hero_level,
            self.progression.plots,
            len(self.inventory),
            len(self.helpers),
        )

    def snapshot(self) -> dict:
        prog = self.progression
        return {
            "minute": self.minutes,
            "day": self.day,
            "resources": {
                name: {"current": round(r.current, 6), "capacity": r.capacity}
                for name, r in self.resources.items()
            },
            "seeds": dict(sorted(self.seeds.items())),
            "materials": dict(sorted(self.materials.items())),
            "progression": {
                "unlocked": sorted(prog.unlocked),
                "completed": sorted(prog.completed),
                "plots": prog.plots,
                "hero_level": prog.hero_level,
                "hero_xp": prog.hero_xp,
                "max_depth": prog.max_depth,
                "wind_level": prog.wind_level,
            },
            "plots": [p.status for p in self.plots],
            "inventory": self.inventory.snapshot(),
            "helpers": [
                {"id": h.helper_id, "role": h.role, "level": h.level} for h in self.helpers
            ],
            "forge_heat": round(self.forge_heat, 6),
            "processes": {
                handle: {"category": r.category, "status": r.status.value}
                for handle, r in self.processes.items()
            },
            "processes_completed": dict(sorted(self.processes_completed.items())),
            "location": {
                "screen": self.location.screen,
                "minutes_on_screen": self.location.minutes_on_screen,
                "reason": self.location.reason,
            },
            "events": len(self.events),
        }
