"""When a persona checks in on the game."""

from __future__ import annotations

from typing import Optional

from balance_sim.agents.persona import Persona
from balance_sim.core.config import EMERGENCY_INTERVALS, ENERGY_FULL_FRACTION, WATER_SHORTAGE_FRACTION
from balance_sim.state.game_state import GameState


def emergency(state: GameState) -> Optional[str]:
    """The first emergency that calls for a quicker check-in, if any."""
    if state.total_seeds() < len(state.plots):
        return "seed_shortage"
    if state.resources["water"].fraction < WATER_SHORTAGE_FRACTION:
        return "low_water"
    if state.resources["energy"].fraction > ENERGY_FULL_FRACTION:
        return "energy_full"
    if any(p.status == "ready" for p in state.plots):
        return "crops_ready"
    return None


class CheckInSchedule:
    """Tracks one persona's check-ins and decides when the next one is due."""

    def __init__(self, persona: Persona) -> None:
        self.persona = persona
        self.last_checkin: Optional[float] = None
        self.total = 0
        self._day = 0
        self._today = 0

    def interval(self, state: GameState) -> float:
        base = float(self.persona.checkin_interval)
        reason = emergency(state)
        if reason is None:
            return base
        return min(base, EMERGENCY_INTERVALS[reason] * self.persona.emergency_factor)

    def checkins_today(self, state: GameState) -> int:
        return self._today if self._day == state.day else 0

    def should_check_in(self, state: GameState) -> bool:
        # game start: always look at the farm once
        if self.last_checkin is None:
            return True
        clock = state.clock
        if clock.is_night():
            return False
        if self.checkins_today(state) >= self.persona.daily_checkin_budget(clock.is_weekend):
            return False
        return state.minutes - self.last_checkin >= self.interval(state) - 1e-9

    def record(self, state: GameState) -> None:
        if self._day != state.day:
            self._day = state.day
            self._today = 0
        self._today += 1
        self.total += 1
        self.last_checkin = state.minutes
