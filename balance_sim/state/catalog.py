"""Typed item catalog: records, prerequisites and cycle checking.

The catalog is the authoritative source for every cost, duration and balance
number an action uses. Records are parsed once here; systems and processes
read the typed fields and never the raw strings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from balance_sim.core.errors import CatalogCycleError, CatalogError, CatalogFormatError, CatalogLookupError
from balance_sim.state.parsing import normalize_material_name, parse_cost, parse_duration

THRESHOLD_METRICS: tuple[str, ...] = ("hero_level", "plots", "day", "max_depth", "helpers", "wind_level")

_THRESHOLD = re.compile(r"^([a-z_]+)\s*>=\s*(\d+(?:\.\d+)?)$")


@dataclass(frozen=True)
class Prerequisite:
    """Either a plain id (upgrade, one-shot or owned item) or a metric threshold."""

    item_id: Optional[str] = None
    metric: Optional[str] = None
    minimum: float = 0.0

    @property
    def is_threshold(self) -> bool:
        return self.metric is not None

    def __str__(self) -> str:
        if self.metric is not None:
            return f"{self.metric}>={self.minimum:g}"
        return self.item_id or ""


def parse_prerequisite(text: str) -> Prerequisite:
    value = text.strip()
    match = _THRESHOLD.match(value)
    if match:
        metric = match.group(1)
        if metric not in THRESHOLD_METRICS:
            raise CatalogFormatError(f"unknown prerequisite metric {metric!r}")
        return Prerequisite(metric=metric, minimum=float(match.group(2)))
    if not value:
        raise CatalogFormatError("empty prerequisite id")
    return Prerequisite(item_id=value)


@dataclass(frozen=True)
class LootEntry:
    """One loot table row: material, quantity range, drop chance."""

    material: str
    min_qty: int
    max_qty: int
    chance: float


@dataclass
class CatalogItem:
    """A typed catalog record."""

    id: str
    name: str
    kind: str                            # crop, cleanup, tool, weapon, armor, net, upgrade, recipe, route, ...
    system: str                          # farm, town, adventure, mine, forge, helpers, tower
    prerequisites: list[Prerequisite] = field(default_factory=list)

    # Costs and gains
    gold_cost: float = 0.0
    energy_cost: float = 0.0
    materials_cost: dict[str, int] = field(default_factory=dict)
    materials_gain: dict[str, int] = field(default_factory=dict)
    duration: float = 0.0                # minutes

    # Common properties
    tool_required: Optional[str] = None  # item id or equipment slot
    repeatable: bool = False
    slot: Optional[str] = None
    level: int = 1
    output_item: Optional[str] = None    # recipes that produce equipment

    # Domain fields
    energy_value: float = 0.0            # crops
    plots_added: int = 0                 # cleanups
    weapon_type: Optional[str] = None
    damage: float = 0.0
    attack_speed: float = 1.0
    defense: float = 0.0
    effect: Optional[str] = None
    enemy_types: list[str] = field(default_factory=list)
    boss: Optional[str] = None
    loot: list[LootEntry] = field(default_factory=list)
    stats: dict[str, float] = field(default_factory=dict)

    def stat(self, key: str, default: float = 0.0) -> float:
        return self.stats.get(key, default)

    @property
    def is_one_shot(self) -> bool:
        return not self.repeatable

    @classmethod
    def from_record(cls, record: dict) -> "CatalogItem":
        """Build an item from a loosely-typed record (strings for costs and durations)."""
        try:
            item_id = record["id"]
            kind = record["kind"]
            system = record["system"]
        except KeyError as exc:
            raise CatalogFormatError(f"record missing field {exc.args[0]!r}: {record!r}") from exc

        prereqs = record.get("prerequisites", [])
        if isinstance(prereqs, str):
            prereqs = [p for p in prereqs.split(";") if p.strip()]

        loot = [
            LootEntry(normalize_material_name(row[0]), int(row[1]), int(row[2]), float(row[3]))
            for row in record.get("loot", [])
        ]

        return cls(
            id=item_id,
            name=record.get("name", item_id.replace("_", " ").title()),
            kind=kind,
            system=system,
            prerequisites=[parse_prerequisite(p) for p in prereqs],
            gold_cost=float(record.get("gold_cost", 0)),
            energy_cost=float(record.get("energy_cost", 0)),
            materials_cost=parse_cost(record.get("materials_cost")),
            materials_gain=parse_cost(record.get("materials_gain")),
            duration=parse_duration(record.get("duration")),
            tool_required=record.get("tool_required"),
            repeatable=bool(record.get("repeatable", False)),
            slot=record.get("slot"),
            level=int(record.get("level", 1)),
            output_item=record.get("output_item"),
            energy_value=float(record.get("energy_value", 0)),
            plots_added=int(record.get("plots_added", 0)),
            weapon_type=record.get("weapon_type"),
            damage=float(record.get("damage", 0)),
            attack_speed=float(record.get("attack_speed", 1.0)),
            defense=float(record.get("defense", 0)),
            effect=record.get("effect"),
            enemy_types=list(record.get("enemy_types", [])),
            boss=record.get("boss"),
            loot=loot,
            stats={k: float(v) for k, v in record.get("stats", {}).items()},
        )


class Catalog:
    """Queryable, insertion-ordered collection of CatalogItems.

    Construction rejects duplicate ids and prerequisite cycles, so queries
    never need to guard against either.
    """

    def __init__(self, items: Iterable[CatalogItem]) -> None:
        self._items: dict[str, CatalogItem] = {}
        for item in items:
            if item.id in self._items:
                raise CatalogError(f"duplicate catalog id {item.id!r}")
            self._items[item.id] = item
        self._order: dict[str, int] = {item_id: i for i, item_id in enumerate(self._items)}

        cycle = self.find_cycle()
        if cycle is not None:
            raise CatalogCycleError(cycle)

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "Catalog":
        return cls(CatalogItem.from_record(r) for r in records)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[CatalogItem]:
        return iter(self._items.values())

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def get(self, item_id: str) -> CatalogItem:
        try:
            return self._items[item_id]
        except KeyError:
            raise CatalogLookupError(item_id) from None

    def find(self, item_id: Optional[str]) -> Optional[CatalogItem]:
        if item_id is None:
            return None
        return self._items.get(item_id)

    def order(self, item_id: Optional[str]) -> int:
        """Insertion index; unknown ids sort last."""
        if item_id is None:
            return len(self._order)
        return self._order.get(item_id, len(self._order))

    def by_kind(self, *kinds: str) -> list[CatalogItem]:
        return [item for item in self._items.values() if item.kind in kinds]

    def by_system(self, system: str) -> list[CatalogItem]:
        return [item for item in self._items.values() if item.system == system]

    def find_cycle(self) -> Optional[list[str]]:
        """Return one prerequisite cycle as a path, or None if the graph is acyclic.

        Iterative three-colour DFS; prerequisites that are thresholds or that
        point outside the catalog are leaves.
        """
        white, grey, black = 0, 1, 2
        colour: dict[str, int] = {item_id: white for item_id in self._items}

        for root in self._items:
            if colour[root] != white:
                continue
            stack: list[tuple[str, Iterator[str]]] = [(root, iter(self._edges(root)))]
            path: list[str] = [root]
            colour[root] = grey
            while stack:
                node, children = stack[-1]
                advanced = False
                for child in children:
                    state = colour.get(child)
                    if state == grey:
                        start = path.index(child)
                        return path[start:] + [child]
                    if state == white:
                        colour[child] = grey
                        stack.append((child, iter(self._edges(child))))
                        path.append(child)
                        advanced = True
                        break
                if not advanced:
                    colour[node] = black
                    stack.pop()
                    path.pop()
        return None

    def _edges(self, item_id: str) -> list[str]:
        return [
            p.item_id for p in self._items[item_id].prerequisites
            if p.item_id is not None and p.item_id in self._items
        ]
