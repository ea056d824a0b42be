"""Mining descent: depth grows, energy drains exponentially by tier, ore drops."""

from __future__ import annotations

from dataclasses import dataclass, field

from balance_sim.core.config import (
    HELPER_ROLE_SCALING,
    MINING_DEPTH_PER_MINUTE,
    MINING_DROP_INTERVAL,
    MINING_MAX_TIER,
    MINING_MIN_ENERGY,
    MINING_TIER_DEPTH,
    MINING_TIER_MATERIALS,
    MINING_TIER_NAMES,
    SHARPEN_BONUS,
)
from balance_sim.processes.base import CompletionEffects, InitResult, ProcessHandler, ProcessUpdate
from balance_sim.state.game_state import GameState, ProcessRecord
from balance_sim.validation.result import ValidationResult

# metals and gems come up as ore; stone is usable as mined
RAW_ORES: frozenset[str] = frozenset({"copper", "iron", "silver", "crystal", "mythril", "obsidian"})
MINERS_FRIEND_CAP: float = 0.9


@dataclass
class MiningData:
    """Payload for one mining session."""

    pickaxe_id: str
    efficiency: float = 0.0
    material_bonus: float = 0.0
    double_obsidian: bool = False
    depth: float = 0.0
    sharpen_remaining: float = 0.0
    drop_timer: float = 0.0
    energy_spent: float = 0.0
    haul: dict[str, int] = field(default_factory=dict)
    stop_requested: bool = False


def depth_tier(depth: float) -> int:
    return min(MINING_MAX_TIER, int(depth // MINING_TIER_DEPTH) + 1)


def tier_name(tier: int) -> str:
    return MINING_TIER_NAMES[tier - 1]


def base_drain(tier: int) -> float:
    """Energy per minute at a tier before any modifiers."""
    return float(2 ** (tier - 1))


def drop_key(material: str) -> str:
    return f"raw_{material}" if material in RAW_ORES else material


class MiningHandler(ProcessHandler):
    """Runs until energy is exhausted or the session is stopped."""

    category = "mining"

    def can_start(self, data: MiningData, state: GameState) -> ValidationResult:
        if state.amount("energy") < MINING_MIN_ENERGY:
            result = ValidationResult.blocked(f"need at least {MINING_MIN_ENERGY:g} energy to mine")
            result.resource_shortfalls["energy"] = MINING_MIN_ENERGY - state.amount("energy")
            return result
        return ValidationResult.ok()

    def initialize(self, handle: str, data: MiningData, state: GameState) -> InitResult:
        return InitResult(success=True, payload=data)

    def update(self, record: ProcessRecord, dt: float, state: GameState, catalog) -> ProcessUpdate:
        session: MiningData = record.data
        if session.stop_requested:
            return ProcessUpdate(is_complete=True)
        update = ProcessUpdate()

        tier = depth_tier(session.depth)
        drain = base_drain(tier) * (1.0 - session.efficiency) * dt
        if session.sharpen_remaining > 0:
            drain *= 1.0 - SHARPEN_BONUS
            session.sharpen_remaining = max(0.0, session.sharpen_remaining - dt)
        base, per_level = HELPER_ROLE_SCALING["miners_friend"]
        friend = min(MINERS_FRIEND_CAP, state.role_strength("miners_friend", base, per_level))
        drain *= 1.0 - friend

        energy = state.amount("energy")
        drain = min(drain, energy)
        update.delta.add_bounded("energy", -drain)
        session.energy_spent += drain

        session.depth += MINING_DEPTH_PER_MINUTE * dt
        update.delta.max_depth = session.depth
        new_tier = depth_tier(session.depth)
        if new_tier != tier:
            update.events.append(self.event(
                state, "mining_tier", f"Reached {tier_name(new_tier)} at {session.depth:.0f}m",
                importance="low", tier=new_tier, depth=session.depth,
            ))

        session.drop_timer += dt
        while session.drop_timer >= MINING_DROP_INTERVAL - 1e-9:
            session.drop_timer -= MINING_DROP_INTERVAL
            material, qty = self._roll_drop(session, tier, state)
            update.delta.add_material(material, qty)
            session.haul[material] = session.haul.get(material, 0) + qty

        update.is_complete = energy - drain <= 1e-9
        return update

    def _roll_drop(self, session: MiningData, tier: int, state: GameState) -> tuple[str, int]:
        pool = MINING_TIER_MATERIALS[tier - 1]
        material = pool[int(state.rng.integers(len(pool)))]
        qty = int(state.rng.integers(1, 4)) + tier // 2
        qty = int(qty * (1.0 + session.material_bonus))
        if material == "obsidian" and session.double_obsidian:
            qty *= 2
        return drop_key(material), qty

    def complete(self, record: ProcessRecord, state: GameState) -> CompletionEffects:
        session: MiningData = record.data
        haul = ", ".join(f"{q} {m}" for m, q in sorted(session.haul.items())) or "nothing"
        reason = "stopped" if session.stop_requested else "out of energy"
        return CompletionEffects(
            description=(
                f"Mining {reason} at {session.depth:.0f}m ({tier_name(depth_tier(session.depth))}), "
                f"spent {session.energy_spent:.1f} energy, hauled {haul}"
            ),
        )
