"""Town: buying equipment and upgrades, selling surplus materials."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from balance_sim.core.actions import Action, BuyItem, SellMaterial
from balance_sim.core.config import (
    BUY_SCORES,
    MATERIAL_SELL_PRICES,
    RAW_MATERIAL_PREFIX,
    RAW_SELL_FACTOR,
    SELL_FULL_FRACTION,
    SELL_SCORE,
    UNLIMITED_STORAGE,
)
from balance_sim.processes.registry import ProcessRegistry
from balance_sim.state.catalog import Catalog, CatalogItem
from balance_sim.state.game_state import GameState
from balance_sim.systems.base import ActionResult, GameSystem, require_fraction, require_non_negative
from balance_sim.validation.requirements import EQUIPMENT_KINDS, ActionRequirements

TOOL_SLOTS: frozenset[str] = frozenset({"hoe", "hammer", "axe", "pickaxe"})


@dataclass
class TownConfig:
    buy_scores: dict[str, float] = field(default_factory=lambda: dict(BUY_SCORES))
    sell_full_fraction: float = SELL_FULL_FRACTION
    sell_score: float = SELL_SCORE
    raw_sell_factor: float = RAW_SELL_FACTOR

    def __post_init__(self) -> None:
        require_fraction(
            "TownConfig",
            sell_full_fraction=self.sell_full_fraction,
            raw_sell_factor=self.raw_sell_factor,
        )
        require_non_negative("TownConfig", sell_score=self.sell_score, **self.buy_scores)


def sell_price(material: str, raw_factor: float = RAW_SELL_FACTOR) -> float:
    """Gold per unit. Unpriced materials (monster drops) are not sold."""
    if material.startswith(RAW_MATERIAL_PREFIX):
        base = MATERIAL_SELL_PRICES.get(material[len(RAW_MATERIAL_PREFIX):], 0.0)
        return base * raw_factor
    return MATERIAL_SELL_PRICES.get(material, 0.0)


def is_upgrade_over_equipped(state: GameState, item: CatalogItem) -> bool:
    """True when the item beats whatever is equipped in its slot."""
    current = state.inventory.equipped(item.slot) if item.slot else None
    return current is None or item.level > current.level


class TownSystem(GameSystem):
    name = "town"

    def __init__(self, catalog: Catalog, registry: ProcessRegistry, config: Optional[TownConfig] = None) -> None:
        super().__init__(catalog, registry)
        self.config = config or TownConfig()
        self._executors = {
            BuyItem: self._buy,
            SellMaterial: self._sell,
        }

    def evaluate_actions(self, state: GameState) -> list[Action]:
        purchases: list[Action] = []
        gold_gap = 0.0
        for item in self.catalog.by_system("town"):
            score = self.config.buy_scores.get(item.kind)
            if score is None:
                continue
            if item.kind in EQUIPMENT_KINDS and not is_upgrade_over_equipped(state, item):
                continue
            action = BuyItem(item.id, priority=score + item.level, resolves=self._resolves(item))
            check = self.validator.can_perform(action, state)
            if check:
                purchases.append(action)
            elif set(check.resource_shortfalls) == {"gold"} and not check.missing_prerequisites:
                # wanted and blocked on gold alone: remember the smallest gap
                gap = check.resource_shortfalls["gold"]
                gold_gap = gap if gold_gap == 0 else min(gold_gap, gap)

        return purchases + self._legal(state, self._sales(state, gold_gap))

    def _resolves(self, item: CatalogItem) -> frozenset[str]:
        tags = set()
        if item.slot in TOOL_SLOTS:
            tags.add("missing_tool")
        if item.stat("water_regen") > 0 or item.id.startswith("water_"):
            tags.add("water_shortage")
        if item.kind == "auto_catcher":
            tags.add("seed_shortage")
        return frozenset(tags)

    def _sales(self, state: GameState, gold_gap: float) -> list[Action]:
        sales: list[Action] = []
        for material, qty in sorted(state.materials.items()):
            price = sell_price(material, self.config.raw_sell_factor)
            if qty <= 0 or price <= 0:
                continue
            cap = state.material_cap(material)
            if cap < UNLIMITED_STORAGE and qty > self.config.sell_full_fraction * cap:
                surplus = qty - int(cap / 2)
                sales.append(SellMaterial(material, surplus, priority=self.config.sell_score))
            elif gold_gap > 0:
                needed = min(qty, int(gold_gap / price) + 1)
                sales.append(SellMaterial(material, needed, priority=self.config.sell_score))
                gold_gap -= needed * price
        return sales

    # ------------------------------------------------------------------

    def _buy(self, action: BuyItem, req: ActionRequirements, state: GameState) -> ActionResult:
        item = req.item
        state.pay(req.cost)
        if item.kind in EQUIPMENT_KINDS:
            upgrade = is_upgrade_over_equipped(state, item)
            state.inventory.add(item.id, item.slot, item.level)
            if upgrade:
                state.inventory.equip(item.id)
        else:
            state.unlock(item.id)
            if item.plots_added:
                state.add_plots(item.plots_added)
        return ActionResult(True, f"Bought {item.name} for {item.gold_cost:g} gold")

    def _sell(self, action: SellMaterial, req: ActionRequirements, state: GameState) -> ActionResult:
        state.pay(req.cost)
        earned = state.gain(
            "gold", action.quantity * sell_price(action.material, self.config.raw_sell_factor), source="sale",
        )
        return ActionResult(True, f"Sold {action.quantity} {action.material} for {earned:g} gold")
