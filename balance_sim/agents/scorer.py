"""Scoring of candidate actions and bottleneck detection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from balance_sim.agents.persona import Persona
from balance_sim.core.actions import Action
from balance_sim.core.config import BOTTLENECK_BONUS, NEAR_FULL_PLOTS_FRACTION, WATER_SHORTAGE_FRACTION
from balance_sim.state.catalog import Catalog
from balance_sim.state.game_state import GameState

BOTTLENECKS: tuple[str, ...] = ("water_shortage", "missing_tool", "seed_shortage", "near_full_plots")

OPTIMIZATION_KINDS: frozenset[str] = frozenset({"plant", "clear"})
RISK_KINDS: frozenset[str] = frozenset({"adventure", "mine"})


@dataclass
class ScoredAction:
    action: Action
    score: float
    bottleneck_bonus: bool = False


def missing_tool(state: GameState, catalog: Catalog) -> Optional[str]:
    """A tool that blocks an otherwise reachable cleanup, if any."""
    for item in catalog.by_kind("cleanup"):
        if item.tool_required is None or item.id in state.progression.completed:
            continue
        if not all(state.satisfies(p) for p in item.prerequisites):
            continue
        if not state.inventory.satisfies(item.tool_required):
            return item.tool_required
    return None


def detect_bottleneck(state: GameState, catalog: Catalog) -> Optional[str]:
    """First bottleneck found, checked in priority order."""
    if state.resources["water"].fraction < WATER_SHORTAGE_FRACTION:
        return "water_shortage"
    if missing_tool(state, catalog) is not None:
        return "missing_tool"
    if state.total_seeds() < len(state.plots):
        return "seed_shortage"
    if state.plots:
        used = sum(1 for p in state.plots if p.status != "empty")
        if used / len(state.plots) >= NEAR_FULL_PLOTS_FRACTION:
            return "near_full_plots"
    return None


def efficiency_multiplier(action: Action, persona: Persona, weekend: bool) -> float:
    factor = 1.0
    if action.kind in OPTIMIZATION_KINDS:
        factor = 0.5 + 0.5 * persona.optimization
    elif action.kind in RISK_KINDS:
        factor = 0.3 + 0.7 * persona.risk_tolerance
    return persona.efficiency * factor * persona.day_multiplier(weekend)


def score_action(action: Action, persona: Persona, weekend: bool, bottleneck: Optional[str]) -> ScoredAction:
    score = action.priority * efficiency_multiplier(action, persona, weekend) * persona.preference(action.domain)
    bonus = bottleneck is not None and bottleneck in action.resolves
    if bonus:
        score *= BOTTLENECK_BONUS
    return ScoredAction(action=action, score=score, bottleneck_bonus=bonus)


def rank_actions(
    actions: list[Action],
    persona: Persona,
    state: GameState,
    catalog: Catalog,
    bottleneck: Optional[str] = None,
) -> list[ScoredAction]:
    """Descending score; ties by catalog order, then proposal order."""
    weekend = state.clock.is_weekend
    scored = [score_action(a, persona, weekend, bottleneck) for a in actions]
    keyed = [
        (-s.score, catalog.order(s.action.item_id), i, s)
        for i, s in enumerate(scored)
    ]
    keyed.sort(key=lambda k: k[:3])
    return [k[3] for k in keyed]
