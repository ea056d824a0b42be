"""Process registry: handler lookup and per-category concurrency limits."""

from __future__ import annotations

from typing import Any, Optional

from balance_sim.core.config import PROCESS_LIMITS
from balance_sim.core.errors import ConfigError
from balance_sim.processes.base import InitResult, ProcessHandler
from balance_sim.state.game_state import GameState, ProcessRecord, ProcessStatus
from balance_sim.validation.result import CONCURRENCY_REASON, ValidationResult


class ProcessRegistry:
    """Tracks handlers by category and refuses starts that would exceed a limit."""

    def __init__(self, limits: Optional[dict[str, Optional[int]]] = None) -> None:
        self._handlers: dict[str, ProcessHandler] = {}
        self._limits: dict[str, Optional[int]] = dict(PROCESS_LIMITS)
        if limits:
            self._limits.update(limits)
        for category, limit in self._limits.items():
            if limit is not None and limit < 1:
                raise ConfigError(f"process limit for {category!r} must be >= 1 or None")

    def register(self, handler: ProcessHandler) -> None:
        if not handler.category:
            raise ConfigError(f"{type(handler).__name__} has no category")
        if handler.category in self._handlers:
            raise ConfigError(f"handler for {handler.category!r} already registered")
        self._handlers[handler.category] = handler
        self._limits.setdefault(handler.category, None)

    def handler(self, category: str) -> ProcessHandler:
        return self._handlers[category]

    @property
    def categories(self) -> list[str]:
        return list(self._handlers)

    def limit(self, category: str) -> Optional[int]:
        return self._limits.get(category)

    def active_count(self, state: GameState, category: str) -> int:
        return len(state.active_processes(category))

    def can_start(self, category: str, state: GameState, data: Any = None) -> ValidationResult:
        """Concurrency check plus the handler's own start conditions."""
        if category not in self._handlers:
            return ValidationResult.blocked(f"no handler registered for {category}")

        result = ValidationResult.ok()
        limit = self._limits.get(category)
        active = self.active_count(state, category)
        if limit is not None and active >= limit:
            result.block(f"{CONCURRENCY_REASON} reached for {category} ({active}/{limit} active)")
        if data is not None:
            result.absorb(self._handlers[category].can_start(data, state))
        return result

    def start(self, category: str, data: Any, state: GameState) -> InitResult:
        """Validate, initialize and record a new process."""
        check = self.can_start(category, state, data)
        if not check:
            return InitResult(success=False, reason=check.summary())

        handler = self._handlers[category]
        handle = state.next_handle(category)
        result = handler.initialize(handle, data, state)
        if not result.success:
            return result

        record = ProcessRecord(
            handle=handle,
            category=category,
            data=result.payload,
            started_at=state.minutes,
        )
        record.status = ProcessStatus.RUNNING
        state.processes[handle] = record
        result.handle = handle
        state.events.extend(result.events)
        state.emit(
            "process_started",
            f"Started {category} process {handle}",
            importance="low",
            handle=handle,
            category=category,
        )
        return result

    def cancel(self, handle: str, state: GameState, reason: str = "cancelled") -> bool:
        record = state.processes.get(handle)
        if record is None or record.status not in (ProcessStatus.PENDING, ProcessStatus.RUNNING):
            return False
        self._handlers[record.category].cancel(record, state)
        record.status = ProcessStatus.CANCELLED
        record.finished_at = state.minutes
        del state.processes[handle]
        state.emit(
            "process_cancelled",
            f"Cancelled {record.category} process {handle}: {reason}",
            importance="medium",
            handle=handle,
            category=record.category,
        )
        return True
