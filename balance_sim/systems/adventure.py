"""Adventure: picks routes, builds the hero loadout and starts runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from balance_sim.core.actions import Action, StartAdventure
from balance_sim.core.config import (
    ADVENTURE_BASE_SCORE,
    ADVENTURE_ENERGY_SCORE,
    ADVENTURE_PER_LEVEL,
    ADVENTURE_SAFE_HP_FRACTION,
    HELPER_ROLE_SCALING,
    ROUTE_LENGTHS,
    ROUTE_MINUTES,
)
from balance_sim.core.errors import CatalogLookupError
from balance_sim.processes.adventure import AdventureRequest
from balance_sim.processes.registry import ProcessRegistry
from balance_sim.state.catalog import Catalog
from balance_sim.state.game_state import GameState
from balance_sim.systems.base import ActionResult, GameSystem, require_fraction, require_non_negative
from balance_sim.systems.combat import HeroLoadout, build_route_profile, expected_damage
from balance_sim.validation.requirements import ActionRequirements


@dataclass
class AdventureConfig:
    base_score: float = ADVENTURE_BASE_SCORE
    per_level: float = ADVENTURE_PER_LEVEL
    energy_score: float = ADVENTURE_ENERGY_SCORE
    safe_hp_fraction: float = ADVENTURE_SAFE_HP_FRACTION

    def __post_init__(self) -> None:
        require_non_negative(
            "AdventureConfig", base_score=self.base_score, per_level=self.per_level, energy_score=self.energy_score,
        )
        require_fraction("AdventureConfig", safe_hp_fraction=self.safe_hp_fraction)


def hero_loadout(state: GameState, catalog: Catalog) -> HeroLoadout:
    """Equipped weapon and armor plus passive helper damage."""
    weapon = state.inventory.equipped("weapon")
    armor = state.inventory.equipped("armor")
    weapon_item = catalog.get(weapon.item_id) if weapon else None
    armor_item = catalog.get(armor.item_id) if armor else None
    base, per_level = HELPER_ROLE_SCALING["adventure_fighter"]
    return HeroLoadout(
        level=state.progression.hero_level,
        weapon_type=weapon_item.weapon_type if weapon_item else None,
        weapon_damage=weapon_item.damage if weapon_item else 1.0,
        weapon_speed=weapon_item.attack_speed if weapon_item else 1.0,
        defense=armor_item.defense if armor_item else 0.0,
        armor_effect=armor_item.effect if armor_item else None,
        bonus_damage=state.role_strength("adventure_fighter", base, per_level),
    )


class AdventureSystem(GameSystem):
    name = "adventure"

    def __init__(self, catalog: Catalog, registry: ProcessRegistry, config: Optional[AdventureConfig] = None) -> None:
        super().__init__(catalog, registry)
        self.config = config or AdventureConfig()
        self._executors = {StartAdventure: self._start}

    def evaluate_actions(self, state: GameState) -> list[Action]:
        candidates: list[Action] = []
        if not state.inventory.has_slot("weapon"):
            return candidates
        hero = hero_loadout(state, self.catalog)
        # stored energy makes runs more attractive
        surplus = self.config.energy_score * state.resources["energy"].fraction
        for route in self.catalog.by_kind("route"):
            for rank, length in enumerate(ROUTE_LENGTHS):
                try:
                    profile = build_route_profile(self.catalog, route, length)
                except CatalogLookupError:
                    # routes with incomplete combat data are never proposed
                    continue
                damage = expected_damage(profile, hero)
                if damage >= hero.max_hp:
                    continue
                risk = min(1.0, damage / hero.max_hp)
                if 1.0 - risk < self.config.safe_hp_fraction:
                    risk = 1.0
                candidates.append(StartAdventure(
                    route.id,
                    length,
                    priority=self.config.base_score + self.config.per_level * (route.level + rank) + surplus,
                    risk=risk,
                ))
        return self._legal(state, candidates)

    def _start(self, action: StartAdventure, req: ActionRequirements, state: GameState) -> ActionResult:
        route = req.item
        profile = build_route_profile(self.catalog, route, action.length)
        request = AdventureRequest(
            route=profile,
            hero=hero_loadout(state, self.catalog),
            duration=route.stat(f"minutes_{action.length}", ROUTE_MINUTES[action.length]),
            cost=req.cost,
        )
        return self._start_process(req, request, state, f"{route.id} ({action.length}) run")
