"""Player personas: fixed behavioural parameter bundles."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from balance_sim.core.config import DEFAULT_ACTIONS_PER_CHECKIN
from balance_sim.core.errors import ConfigError

DOMAINS: tuple[str, ...] = (
    "farming", "adventuring", "crafting", "mining", "helpers", "commerce", "seeds",
)


def _even_preferences(**overrides: float) -> dict[str, float]:
    prefs = {domain: 1.0 for domain in DOMAINS}
    prefs.update(overrides)
    return prefs


@dataclass(frozen=True)
class Persona:
    """How a class of real player plays.

    Probabilities and multipliers are on a 0-1 scale except the day
    multipliers and preference weights, which scale scores directly.
    """

    name: str
    efficiency: float = 0.75
    risk_tolerance: float = 0.5
    optimization: float = 0.7

    # Schedule
    weekday_sessions: int = 3
    weekend_sessions: int = 5
    checkin_interval: int = 10           # minutes between check-ins inside a session
    session_minutes: int = 25
    emergency_factor: float = 1.0        # >1 reacts to emergencies more slowly

    # Scoring
    preferences: dict[str, float] = field(default_factory=_even_preferences)
    weekday_multiplier: float = 1.0
    weekend_multiplier: float = 1.0
    catch_skill: float = 1.0
    actions_per_checkin: int = DEFAULT_ACTIONS_PER_CHECKIN

    def __post_init__(self) -> None:
        for name in ("efficiency", "risk_tolerance", "optimization"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigError(f"persona {self.name!r}: {name} must be within [0, 1], got {value}")
        if self.checkin_interval < 1:
            raise ConfigError(f"persona {self.name!r}: checkin_interval must be >= 1")
        if self.weekday_sessions < 0 or self.weekend_sessions < 0:
            raise ConfigError(f"persona {self.name!r}: session counts must be >= 0")
        if self.actions_per_checkin < 1:
            raise ConfigError(f"persona {self.name!r}: actions_per_checkin must be >= 1")
        unknown = set(self.preferences) - set(DOMAINS)
        if unknown:
            raise ConfigError(f"persona {self.name!r}: unknown preference domains {sorted(unknown)}")
        if any(w < 0 for w in self.preferences.values()):
            raise ConfigError(f"persona {self.name!r}: preference weights must be >= 0")

    def sessions(self, weekend: bool) -> int:
        return self.weekend_sessions if weekend else self.weekday_sessions

    def daily_checkin_budget(self, weekend: bool) -> int:
        return self.sessions(weekend) * (self.session_minutes // self.checkin_interval + 1)

    def day_multiplier(self, weekend: bool) -> float:
        return self.weekend_multiplier if weekend else self.weekday_multiplier

    def preference(self, domain: str) -> float:
        return self.preferences.get(domain, 1.0)

    def with_overrides(self, **changes) -> "Persona":
        return replace(self, **changes)


# =============================================================================
# Presets
# =============================================================================

PERSONAS: dict[str, Persona] = {
    "speedrunner": Persona(
        name="speedrunner",
        efficiency=0.95,
        risk_tolerance=0.8,
        optimization=1.0,
        weekday_sessions=10,
        weekend_sessions=10,
        checkin_interval=5,
        session_minutes=30,
        preferences=_even_preferences(commerce=1.2, helpers=1.2),
        catch_skill=1.2,
    ),
    "casual": Persona(
        name="casual",
        efficiency=0.7,
        risk_tolerance=0.3,
        optimization=0.6,
        weekday_sessions=2,
        weekend_sessions=2,
        checkin_interval=10,
        session_minutes=15,
        emergency_factor=1.5,
        preferences=_even_preferences(farming=1.1, adventuring=1.2, helpers=0.8, commerce=0.8),
        catch_skill=0.8,
        actions_per_checkin=2,
    ),
    "weekend-warrior": Persona(
        name="weekend-warrior",
        efficiency=0.8,
        risk_tolerance=0.4,
        optimization=0.8,
        weekday_sessions=1,
        weekend_sessions=8,
        checkin_interval=15,
        session_minutes=45,
        weekday_multiplier=0.7,
        weekend_multiplier=1.2,
    ),
    "balanced": Persona(
        name="balanced",
        weekday_sessions=3,
        weekend_sessions=5,
        checkin_interval=10,
        session_minutes=25,
    ),
    "completionist": Persona(
        name="completionist",
        efficiency=0.85,
        risk_tolerance=0.2,
        optimization=0.9,
        weekday_sessions=5,
        weekend_sessions=8,
        checkin_interval=8,
        session_minutes=40,
        preferences=_even_preferences(crafting=1.2, seeds=1.1),
    ),
    "risk-taker": Persona(
        name="risk-taker",
        efficiency=0.65,
        risk_tolerance=0.9,
        optimization=0.5,
        weekday_sessions=4,
        weekend_sessions=6,
        checkin_interval=10,
        session_minutes=20,
        preferences=_even_preferences(adventuring=1.4, mining=1.3, farming=0.8),
    ),
}


def get_persona(name_or_persona: "str | Persona") -> Persona:
    if isinstance(name_or_persona, Persona):
        return name_or_persona
    try:
        return PERSONAS[name_or_persona]
    except KeyError:
        raise ConfigError(
            f"unknown persona {name_or_persona!r}; choose from {', '.join(PERSONAS)}"
        ) from None
