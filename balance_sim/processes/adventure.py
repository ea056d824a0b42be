"""Adventure runs: combat is resolved at start, rewards arrive when the run ends."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from balance_sim.processes.base import CompletionEffects, InitResult, ProcessHandler, ProcessUpdate
from balance_sim.state.game_state import GameState, ProcessRecord
from balance_sim.state.resources import Cost, StateDelta
from balance_sim.systems.combat import CombatOutcome, HeroLoadout, RouteProfile, resolve_run

_DONE = 1e-9


@dataclass
class AdventureRequest:
    """Everything needed to start a run."""

    route: RouteProfile
    hero: HeroLoadout
    duration: float
    cost: Cost


@dataclass
class AdventureData:
    """Payload for a run in progress."""

    route_id: str
    length: str
    duration: float
    cost: Cost
    outcome: CombatOutcome
    elapsed: float = 0.0
    boss_id: Optional[str] = None


class AdventureHandler(ProcessHandler):
    category = "adventure"

    def initialize(self, handle: str, data: AdventureRequest, state: GameState) -> InitResult:
        state.pay(data.cost)
        outcome = resolve_run(data.route, data.hero, state.rng)
        payload = AdventureData(
            route_id=data.route.route_id,
            length=data.route.length,
            duration=data.duration,
            cost=data.cost,
            outcome=outcome,
            boss_id=data.route.boss_id,
        )
        return InitResult(success=True, payload=payload)

    def update(self, record: ProcessRecord, dt: float, state: GameState, catalog) -> ProcessUpdate:
        run: AdventureData = record.data
        run.elapsed += dt
        return ProcessUpdate(is_complete=run.elapsed >= run.duration - _DONE)

    def complete(self, record: ProcessRecord, state: GameState) -> CompletionEffects:
        run: AdventureData = record.data
        outcome = run.outcome
        if not outcome.success:
            return CompletionEffects(
                events=[self.event(
                    state, "adventure_failed",
                    f"Defeated on {run.route_id} ({run.length}) after {outcome.waves_cleared} waves",
                    importance="medium", route=run.route_id, length=run.length,
                    waves_cleared=outcome.waves_cleared,
                )],
                description=f"{run.route_id} run failed",
            )

        delta = StateDelta()
        delta.add_bounded("gold", outcome.gold)
        delta.hero_xp = outcome.xp
        for material, qty in outcome.loot.items():
            delta.add_material(material, qty)
        delta.completed.add(f"{run.route_id}_{run.length}")
        if outcome.boss_defeated and run.boss_id:
            delta.completed.add(f"defeated_{run.boss_id}")
        loot = ", ".join(f"{q} {m}" for m, q in sorted(outcome.loot.items())) or "no loot"
        return CompletionEffects(
            delta=delta,
            description=(
                f"Cleared {run.route_id} ({run.length}) with {outcome.hp_remaining}/{outcome.max_hp} HP: "
                f"{outcome.gold} gold, {outcome.xp} xp, {loot}"
            ),
        )

    def cancel(self, record: ProcessRecord, state: GameState) -> None:
        run: AdventureData = record.data
        state.refund(run.cost, source=f"cancel {record.handle}")
