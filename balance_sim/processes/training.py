"""Helper training: a helper is unavailable while it trains, then gains a level."""

from __future__ import annotations

from dataclasses import dataclass

from balance_sim.processes.base import CompletionEffects, InitResult, ProcessHandler, ProcessUpdate
from balance_sim.state.game_state import GameState, Helper, ProcessRecord
from balance_sim.state.resources import Cost
from balance_sim.validation.result import ValidationResult


@dataclass
class TrainingData:
    helper_id: str
    duration: float
    cost: Cost
    elapsed: float = 0.0


def find_helper(state: GameState, helper_id: str) -> Helper | None:
    for helper in state.helpers:
        if helper.helper_id == helper_id:
            return helper
    return None


class TrainingHandler(ProcessHandler):
    category = "training"

    def can_start(self, data: TrainingData, state: GameState) -> ValidationResult:
        helper = find_helper(state, data.helper_id)
        if helper is None:
            return ValidationResult.blocked(f"no helper {data.helper_id}")
        if helper.training:
            return ValidationResult.blocked(f"{data.helper_id} is already training")
        return ValidationResult.ok()

    def initialize(self, handle: str, data: TrainingData, state: GameState) -> InitResult:
        state.pay(data.cost)
        find_helper(state, data.helper_id).training = True
        return InitResult(success=True, payload=data)

    def update(self, record: ProcessRecord, dt: float, state: GameState, catalog) -> ProcessUpdate:
        job: TrainingData = record.data
        job.elapsed += dt
        return ProcessUpdate(is_complete=job.elapsed >= job.duration - 1e-9)

    def complete(self, record: ProcessRecord, state: GameState) -> CompletionEffects:
        job: TrainingData = record.data
        helper = find_helper(state, job.helper_id)
        helper.training = False
        helper.level += 1
        return CompletionEffects(description=f"{helper.helper_id} trained to level {helper.level}")

    def cancel(self, record: ProcessRecord, state: GameState) -> None:
        job: TrainingData = record.data
        helper = find_helper(state, job.helper_id)
        if helper is not None:
            helper.training = False
        state.refund(job.cost, source=f"cancel {record.handle}")
