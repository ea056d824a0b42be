"""Persona-level filtering of proposed actions."""

from __future__ import annotations

from balance_sim.agents.persona import Persona
from balance_sim.core.actions import Action


def filter_actions(actions: list[Action], persona: Persona) -> list[Action]:
    """Drop actions that are too risky or in a domain the persona ignores.

    Order is preserved.
    """
    return [
        a for a in actions
        if a.risk <= persona.risk_tolerance and persona.preference(a.domain) > 0
    ]
