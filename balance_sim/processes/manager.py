"""Per-tick update pass over every active process."""

from __future__ import annotations

from balance_sim.core.errors import InvariantViolation, ResourceInsufficient
from balance_sim.processes.registry import ProcessRegistry
from balance_sim.state.game_state import GameState, ProcessStatus


class ProcessManager:
    """Advances processes in insertion order and merges their deltas."""

    def __init__(self, registry: ProcessRegistry, catalog: "Catalog") -> None:  # noqa: F821
        self.registry = registry
        self.catalog = catalog

    def update_all(self, state: GameState, dt: float) -> list[str]:
        """Update every running process once. Returns the handles that completed."""
        completed: list[str] = []
        for handle in list(state.processes):
            record = state.processes.get(handle)
            if record is None or record.status != ProcessStatus.RUNNING:
                continue
            handler = self.registry.handler(record.category)
            try:
                update = handler.update(record, dt, state, self.catalog)
                state.apply_delta(update.delta, source=handle)
                state.events.extend(update.events)

                if update.is_complete:
                    effects = handler.complete(record, state)
                    state.apply_delta(effects.delta, source=handle)
                    state.events.extend(effects.events)
                    record.status = ProcessStatus.COMPLETED
                    record.finished_at = state.minutes
                    del state.processes[handle]
                    state.processes_completed[record.category] = (
                        state.processes_completed.get(record.category, 0) + 1
                    )
                    state.emit(
                        "process_completed",
                        effects.description or f"{record.category} process {handle} finished",
                        importance="medium",
                        handle=handle,
                        category=record.category,
                    )
                    completed.append(handle)
            except InvariantViolation:
                raise
            except ResourceInsufficient as exc:
                raise InvariantViolation(f"{record.category} process {handle} overdrew {exc}") from exc
            except Exception as exc:
                state.emit(
                    "process_error",
                    f"{record.category} process {handle} failed: {exc}",
                    importance="high",
                    handle=handle,
                    category=record.category,
                    error=type(exc).__name__,
                )
                self.registry.cancel(handle, state, reason="error")
        return completed
