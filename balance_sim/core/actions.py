"""Closed set of player actions.

Each action type is a small dataclass carrying only the fields its system
needs. Systems tag proposals with a priority, the persona domain they belong
to, a risk estimate and the bottlenecks they resolve; those tags do not take
part in equality so re-proposed actions compare equal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Optional, Union


@dataclass
class _ActionBase:
    priority: float = field(default=0.0, compare=False, kw_only=True)
    risk: float = field(default=0.0, compare=False, kw_only=True)
    resolves: frozenset[str] = field(default_factory=frozenset, compare=False, kw_only=True)

    kind: ClassVar[str] = ""
    system: ClassVar[str] = ""
    domain: ClassVar[str] = ""
    screen: ClassVar[str] = ""

    @property
    def item_id(self) -> Optional[str]:
        """Catalog id whose prerequisites and costs govern this action, if any."""
        return None

    def describe(self) -> str:
        return self.kind.replace("_", " ")


# =============================================================================
# Farm
# =============================================================================

@dataclass
class PlantCrop(_ActionBase):
    crop_id: str
    plot_index: int

    kind: ClassVar[str] = "plant"
    system: ClassVar[str] = "farm"
    domain: ClassVar[str] = "farming"
    screen: ClassVar[str] = "farm"

    @property
    def item_id(self) -> Optional[str]:
        return self.crop_id

    def describe(self) -> str:
        return f"plant {self.crop_id} in plot {self.plot_index}"


@dataclass
class WaterCrops(_ActionBase):
    kind: ClassVar[str] = "water"
    system: ClassVar[str] = "farm"
    domain: ClassVar[str] = "farming"
    screen: ClassVar[str] = "farm"


@dataclass
class HarvestCrops(_ActionBase):
    kind: ClassVar[str] = "harvest"
    system: ClassVar[str] = "farm"
    domain: ClassVar[str] = "farming"
    screen: ClassVar[str] = "farm"


@dataclass
class PumpWater(_ActionBase):
    kind: ClassVar[str] = "pump"
    system: ClassVar[str] = "farm"
    domain: ClassVar[str] = "farming"
    screen: ClassVar[str] = "farm"


@dataclass
class ClearArea(_ActionBase):
    cleanup_id: str

    kind: ClassVar[str] = "clear"
    system: ClassVar[str] = "farm"
    domain: ClassVar[str] = "farming"
    screen: ClassVar[str] = "farm"

    @property
    def item_id(self) -> Optional[str]:
        return self.cleanup_id

    def describe(self) -> str:
        return f"clear {self.cleanup_id}"


# =============================================================================
# Town
# =============================================================================

@dataclass
class BuyItem(_ActionBase):
    purchase_id: str

    kind: ClassVar[str] = "buy"
    system: ClassVar[str] = "town"
    domain: ClassVar[str] = "commerce"
    screen: ClassVar[str] = "town"

    @property
    def item_id(self) -> Optional[str]:
        return self.purchase_id

    def describe(self) -> str:
        return f"buy {self.purchase_id}"


@dataclass
class SellMaterial(_ActionBase):
    material: str
    quantity: int

    kind: ClassVar[str] = "sell"
    system: ClassVar[str] = "town"
    domain: ClassVar[str] = "commerce"
    screen: ClassVar[str] = "town"

    def describe(self) -> str:
        return f"sell {self.quantity} {self.material}"


# =============================================================================
# Adventure
# =============================================================================

@dataclass
class StartAdventure(_ActionBase):
    route_id: str
    length: str

    kind: ClassVar[str] = "adventure"
    system: ClassVar[str] = "adventure"
    domain: ClassVar[str] = "adventuring"
    screen: ClassVar[str] = "adventure"

    @property
    def item_id(self) -> Optional[str]:
        return self.route_id

    def describe(self) -> str:
        return f"adventure {self.route_id} ({self.length})"


# =============================================================================
# Mine
# =============================================================================

@dataclass
class StartMining(_ActionBase):
    kind: ClassVar[str] = "mine"
    system: ClassVar[str] = "mine"
    domain: ClassVar[str] = "mining"
    screen: ClassVar[str] = "mine"


@dataclass
class SharpenTool(_ActionBase):
    kind: ClassVar[str] = "sharpen"
    system: ClassVar[str] = "mine"
    domain: ClassVar[str] = "mining"
    screen: ClassVar[str] = "mine"


@dataclass
class StopMining(_ActionBase):
    kind: ClassVar[str] = "stop_mining"
    system: ClassVar[str] = "mine"
    domain: ClassVar[str] = "mining"
    screen: ClassVar[str] = "mine"


# =============================================================================
# Forge
# =============================================================================

@dataclass
class StartCraft(_ActionBase):
    recipe_id: str

    kind: ClassVar[str] = "craft"
    system: ClassVar[str] = "forge"
    domain: ClassVar[str] = "crafting"
    screen: ClassVar[str] = "forge"

    @property
    def item_id(self) -> Optional[str]:
        return self.recipe_id

    def describe(self) -> str:
        return f"craft {self.recipe_id}"


@dataclass
class StokeForge(_ActionBase):
    kind: ClassVar[str] = "stoke"
    system: ClassVar[str] = "forge"
    domain: ClassVar[str] = "crafting"
    screen: ClassVar[str] = "forge"


# =============================================================================
# Helpers
# =============================================================================

@dataclass
class HireHelper(_ActionBase):
    hire_id: str

    kind: ClassVar[str] = "hire"
    system: ClassVar[str] = "helpers"
    domain: ClassVar[str] = "helpers"
    screen: ClassVar[str] = "town"

    @property
    def item_id(self) -> Optional[str]:
        return self.hire_id


@dataclass
class AssignHelper(_ActionBase):
    helper_id: str
    role: str

    kind: ClassVar[str] = "assign"
    system: ClassVar[str] = "helpers"
    domain: ClassVar[str] = "helpers"
    screen: ClassVar[str] = "farm"

    def describe(self) -> str:
        return f"assign {self.helper_id} as {self.role}"


@dataclass
class TrainHelper(_ActionBase):
    helper_id: str

    kind: ClassVar[str] = "train"
    system: ClassVar[str] = "helpers"
    domain: ClassVar[str] = "helpers"
    screen: ClassVar[str] = "town"

    def describe(self) -> str:
        return f"train {self.helper_id}"


# =============================================================================
# Tower
# =============================================================================

@dataclass
class CatchSeeds(_ActionBase):
    wind_level: int

    kind: ClassVar[str] = "catch_seeds"
    system: ClassVar[str] = "tower"
    domain: ClassVar[str] = "seeds"
    screen: ClassVar[str] = "tower"

    def describe(self) -> str:
        return f"catch seeds at wind level {self.wind_level}"


Action = Union[
    PlantCrop, WaterCrops, HarvestCrops, PumpWater, ClearArea,
    BuyItem, SellMaterial,
    StartAdventure,
    StartMining, SharpenTool, StopMining,
    StartCraft, StokeForge,
    HireHelper, AssignHelper, TrainHelper,
    CatchSeeds,
]

ACTION_TYPES: tuple[type, ...] = Action.__args__
