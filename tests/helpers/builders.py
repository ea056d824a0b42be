"""Shared construction helpers for balance simulation tests."""

from __future__ import annotations

from typing import Optional

import numpy as np

from balance_sim.agents.persona import DOMAINS, Persona, get_persona
from balance_sim.data.default_catalog import load_default_catalog
from balance_sim.processes.adventure import AdventureHandler
from balance_sim.processes.crafting import CraftingHandler
from balance_sim.processes.growth import CropGrowthHandler
from balance_sim.processes.manager import ProcessManager
from balance_sim.processes.mining import MiningHandler
from balance_sim.processes.registry import ProcessRegistry
from balance_sim.processes.seed_catching import SeedCatchingHandler
from balance_sim.processes.training import TrainingHandler
from balance_sim.simulation.engine import SimulationEngine
from balance_sim.simulation.run_config import RunConfig
from balance_sim.state.catalog import Catalog
from balance_sim.state.game_state import GameState

_CATALOG: Optional[Catalog] = None


def default_catalog() -> Catalog:
    """The built-in catalog, parsed once per test session."""
    global _CATALOG
    if _CATALOG is None:
        _CATALOG = load_default_catalog()
    return _CATALOG


def build_state(catalog: Optional[Catalog] = None, seed: int = 7, **config) -> GameState:
    """A fresh starting state. Keyword arguments go to RunConfig."""
    catalog = catalog or default_catalog()
    run_config = RunConfig(seed=seed, **config)
    return GameState.from_run_config(run_config, catalog, np.random.default_rng(seed))


def build_registry() -> ProcessRegistry:
    registry = ProcessRegistry()
    for handler in (
        CropGrowthHandler(),
        CraftingHandler(),
        MiningHandler(),
        AdventureHandler(),
        TrainingHandler(),
        SeedCatchingHandler(),
    ):
        registry.register(handler)
    return registry


def build_manager(registry: ProcessRegistry, catalog: Optional[Catalog] = None) -> ProcessManager:
    return ProcessManager(registry, catalog or default_catalog())


def advance(state: GameState, manager: ProcessManager, minutes: int, dt: float = 1.0) -> None:
    """Move the clock and update every process, one step at a time."""
    for _ in range(minutes):
        state.advance_time(dt)
        manager.update_all(state, dt)


def idle_persona(name: str = "idle") -> Persona:
    """A persona that never wants to do anything."""
    return Persona(name=name, preferences={domain: 0.0 for domain in DOMAINS})


def build_engine(persona: "str | Persona" = "balanced", catalog: Optional[Catalog] = None, **config) -> SimulationEngine:
    return SimulationEngine(catalog or default_catalog(), get_persona(persona), RunConfig(**config))
