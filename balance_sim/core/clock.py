"""Time system for the simulation: minutes, days, hours, weekends."""

from __future__ import annotations

from balance_sim.core.config import (
    DAYS_PER_WEEK,
    MINUTES_PER_DAY,
    MINUTES_PER_HOUR,
    NIGHT_END_HOUR,
    NIGHT_RULE_GRACE_MINUTES,
    NIGHT_START_HOUR,
    WEEKEND_DAYS,
)


class GameClock:
    """Manages simulated time. Day 1 starts at minute 0 (midnight)."""

    def __init__(self, minutes: float = 0.0) -> None:
        self.minutes: float = minutes

    @property
    def day(self) -> int:
        return int(self.minutes // MINUTES_PER_DAY) + 1

    @property
    def minute_of_day(self) -> float:
        return self.minutes % MINUTES_PER_DAY

    @property
    def hour(self) -> int:
        return int(self.minute_of_day // MINUTES_PER_HOUR)

    @property
    def day_of_week(self) -> int:
        return (self.day - 1) % DAYS_PER_WEEK

    @property
    def is_weekend(self) -> bool:
        return self.day_of_week in WEEKEND_DAYS

    def is_night(self) -> bool:
        """Night hours, ignored during the opening grace period."""
        if self.minutes < NIGHT_RULE_GRACE_MINUTES:
            return False
        return self.hour < NIGHT_END_HOUR or self.hour >= NIGHT_START_HOUR

    def advance(self, dt: float) -> None:
        """Advance the clock by dt minutes."""
        if dt <= 0:
            raise ValueError(f"time must move forward, got dt={dt}")
        self.minutes += dt

    def stamp(self) -> str:
        return f"Day {self.day} {self.hour:02d}:{int(self.minute_of_day % MINUTES_PER_HOUR):02d}"
