"""Manual seed catching at the tower."""

from __future__ import annotations

from dataclasses import dataclass, field

from balance_sim.processes.base import CompletionEffects, InitResult, ProcessHandler, ProcessUpdate
from balance_sim.state.game_state import GameState, ProcessRecord


@dataclass
class SeedCatchData:
    wind_level: int
    difficulty: float
    pool: list[str]
    net_efficiency: float
    skill: float
    duration: float
    elapsed: float = 0.0
    roll_timer: float = 0.0
    caught: dict[str, int] = field(default_factory=dict)

    @property
    def catch_chance(self) -> float:
        return min(1.0, (1.0 / self.difficulty) * self.net_efficiency * self.skill)


class SeedCatchingHandler(ProcessHandler):
    """One catch roll per minute for the length of the session."""

    category = "seed_catching"

    def initialize(self, handle: str, data: SeedCatchData, state: GameState) -> InitResult:
        return InitResult(success=True, payload=data)

    def update(self, record: ProcessRecord, dt: float, state: GameState, catalog) -> ProcessUpdate:
        session: SeedCatchData = record.data
        update = ProcessUpdate()
        step = min(dt, session.duration - session.elapsed)
        session.elapsed += step
        session.roll_timer += step
        while session.roll_timer >= 1.0 - 1e-9:
            session.roll_timer -= 1.0
            if state.rng.random() < session.catch_chance:
                seed = session.pool[int(state.rng.integers(len(session.pool)))]
                update.delta.add_seeds(seed, 1)
                session.caught[seed] = session.caught.get(seed, 0) + 1
        update.is_complete = session.elapsed >= session.duration - 1e-9
        return update

    def complete(self, record: ProcessRecord, state: GameState) -> CompletionEffects:
        session: SeedCatchData = record.data
        total = sum(session.caught.values())
        detail = ", ".join(f"{q} {s}" for s, q in sorted(session.caught.items())) or "nothing"
        return CompletionEffects(
            description=f"Caught {total} seeds at wind level {session.wind_level}: {detail}",
        )
