"""Run configuration: termination rules and the starting bundle."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from balance_sim.core.config import (
    DEFAULT_MAX_DAYS,
    DEFAULT_SEED,
    DEFAULT_STUCK_DAYS,
    DEFAULT_TICK_MINUTES,
    DEFAULT_VICTORY,
    FIXED_MODE_VICTORY,
    STARTING_ENERGY,
    STARTING_GOLD,
    STARTING_MATERIALS,
    STARTING_PLOTS,
    STARTING_SEEDS,
    STARTING_TOOLS,
    STARTING_WATER,
)
from balance_sim.core.errors import ConfigError
from balance_sim.state.resources import BOUNDED_RESOURCES

MODES: tuple[str, ...] = ("first_victory", "fixed_days")
METRICS: tuple[str, ...] = ("hero_level", "plots", "day", "max_depth", "helpers", "wind_level")

_CONDITION = re.compile(r"^\s*([a-z_]+)\s*>=\s*(\d+(?:\.\d+)?)\s*$")


@dataclass(frozen=True)
class VictoryCondition:
    """A `metric>=N` threshold on a GameState metric."""

    metric: str
    minimum: float

    @classmethod
    def parse(cls, text: str) -> "VictoryCondition":
        match = _CONDITION.match(text)
        if match is None:
            raise ConfigError(f"victory condition must look like metric>=N, got {text!r}")
        if match.group(1) not in METRICS:
            raise ConfigError(f"unknown victory metric {match.group(1)!r}, expected one of {METRICS}")
        return cls(match.group(1), float(match.group(2)))

    def holds(self, state: "GameState") -> bool:  # noqa: F821
        return state.metric(self.metric) >= self.minimum

    def __str__(self) -> str:
        return f"{self.metric}>={self.minimum:g}"


@dataclass
class RunConfig:
    """Everything needed to start and stop one run."""

    mode: str = "first_victory"
    max_days: int = DEFAULT_MAX_DAYS
    victory: list[str] = field(default_factory=list)
    seed: int = DEFAULT_SEED
    tick_minutes: float = DEFAULT_TICK_MINUTES
    stuck_days: int = DEFAULT_STUCK_DAYS
    stop_if_stuck: bool = True

    # Starting bundle
    starting_energy: float = STARTING_ENERGY
    starting_water: float = STARTING_WATER
    starting_gold: float = STARTING_GOLD
    starting_capacity: dict[str, float] = field(default_factory=dict)
    starting_seeds: dict[str, int] = field(default_factory=lambda: dict(STARTING_SEEDS))
    starting_materials: dict[str, int] = field(default_factory=lambda: dict(STARTING_MATERIALS))
    starting_plots: int = STARTING_PLOTS
    starting_tools: list[str] = field(default_factory=lambda: list(STARTING_TOOLS))
    starting_upgrades: list[str] = field(default_factory=list)

    conditions: list[VictoryCondition] = field(init=False, default_factory=list, repr=False)

    def __post_init__(self) -> None:
        if self.mode not in MODES:
            raise ConfigError(f"mode must be one of {MODES}, got {self.mode!r}")
        if self.max_days < 1:
            raise ConfigError(f"max_days must be >= 1, got {self.max_days}")
        if self.tick_minutes <= 0:
            raise ConfigError(f"tick_minutes must be positive, got {self.tick_minutes}")
        if self.stuck_days < 1:
            raise ConfigError(f"stuck_days must be >= 1, got {self.stuck_days}")
        if self.starting_plots < 0:
            raise ConfigError(f"starting_plots must be >= 0, got {self.starting_plots}")
        for name, value in (
            ("starting_energy", self.starting_energy),
            ("starting_water", self.starting_water),
            ("starting_gold", self.starting_gold),
        ):
            if value < 0:
                raise ConfigError(f"{name} must be >= 0, got {value}")
        for name, capacity in self.starting_capacity.items():
            if name not in BOUNDED_RESOURCES:
                raise ConfigError(f"unknown bounded resource {name!r} in starting_capacity")
            if capacity <= 0:
                raise ConfigError(f"capacity for {name} must be positive, got {capacity}")
        if any(qty < 0 for qty in self.starting_seeds.values()):
            raise ConfigError("starting seed counts must be >= 0")
        if any(qty < 0 for qty in self.starting_materials.values()):
            raise ConfigError("starting material counts must be >= 0")

        if not self.victory:
            self.victory = list(FIXED_MODE_VICTORY if self.mode == "fixed_days" else DEFAULT_VICTORY)
        self.conditions = [VictoryCondition.parse(v) for v in self.victory]

    def victory_reached(self, state: "GameState") -> bool:  # noqa: F821
        return all(c.holds(state) for c in self.conditions)
