"""Check-in decision pipeline: evaluate, filter, score, dispatch."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from balance_sim.agents.filter import filter_actions
from balance_sim.agents.persona import Persona
from balance_sim.agents.scorer import ScoredAction, detect_bottleneck, rank_actions
from balance_sim.core.actions import Action
from balance_sim.state.catalog import Catalog
from balance_sim.state.game_state import GameState

PHASES: tuple[str, ...] = ("idle", "evaluating", "filtered", "scored", "dispatched")


@dataclass
class Decision:
    """What one check-in looked at and what it chose."""

    minute: float
    proposed: int = 0
    kept: int = 0
    bottleneck: Optional[str] = None
    ranked: list[ScoredAction] = field(default_factory=list)
    chosen: list[Action] = field(default_factory=list)


class DecisionEngine:
    """Turns system proposals into an ordered shortlist for one persona.

    Process:
    1. Ask every system for its legal proposals (evaluating)
    2. Drop what the persona would never do (filtered)
    3. Score with persona multipliers and the bottleneck bonus (scored)
    4. Return the top N (dispatched)
    """

    def __init__(self, persona: Persona, systems: list["GameSystem"], catalog: Catalog) -> None:  # noqa: F821
        self.persona = persona
        self.systems = systems
        self.catalog = catalog
        self.phase = "idle"
        self.last_decision: Optional[Decision] = None

    def decide(self, state: GameState) -> list[Action]:
        decision = Decision(minute=state.minutes)

        self.phase = "evaluating"
        proposals: list[Action] = []
        for system in self.systems:
            proposals.extend(system.evaluate_actions(state))
        decision.proposed = len(proposals)

        kept = filter_actions(proposals, self.persona)
        decision.kept = len(kept)
        self.phase = "filtered"

        decision.bottleneck = detect_bottleneck(state, self.catalog)
        decision.ranked = rank_actions(kept, self.persona, state, self.catalog, decision.bottleneck)
        self.phase = "scored"

        decision.chosen = [s.action for s in decision.ranked[: self.persona.actions_per_checkin]]
        self.phase = "dispatched"

        self.last_decision = decision
        return decision.chosen

    def reset(self) -> None:
        self.phase = "idle"
