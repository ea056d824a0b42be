"""Structured game events and the append-only event log."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator

IMPORTANCE_LEVELS: tuple[str, ...] = ("low", "info", "medium", "warning", "high", "critical", "fatal")
_RANK: dict[str, int] = {name: i for i, name in enumerate(IMPORTANCE_LEVELS)}


@dataclass(frozen=True)
class GameEvent:
    """A simulation event."""

    event_type: str      # "action", "action_blocked", "process_completed", "overflow", ...
    description: str
    tick: float          # simulated minute
    importance: str = "info"
    data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "type": self.event_type,
            "description": self.description,
            "tick": self.tick,
            "importance": self.importance,
            "data": dict(self.data),
        }


def importance_rank(importance: str) -> int:
    return _RANK[importance]


class EventLog:
    """Append-only, time-ordered event sequence with optional subscribers."""

    def __init__(self) -> None:
        self._events: list[GameEvent] = []
        self._subscribers: list[Callable[[GameEvent], None]] = []

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[GameEvent]:
        return iter(self._events)

    def __getitem__(self, index: int) -> GameEvent:
        return self._events[index]

    def subscribe(self, callback: Callable[[GameEvent], None]) -> None:
        self._subscribers.append(callback)

    def append(self, event: GameEvent) -> GameEvent:
        if event.importance not in _RANK:
            raise ValueError(f"unknown importance {event.importance!r}")
        if self._events and event.tick < self._events[-1].tick:
            raise ValueError(
                f"event at minute {event.tick} is older than the last logged minute {self._events[-1].tick}"
            )
        self._events.append(event)
        for callback in self._subscribers:
            callback(event)
        return event

    def extend(self, events: list[GameEvent]) -> None:
        for event in events:
            self.append(event)

    def of_type(self, *event_types: str) -> list[GameEvent]:
        return [e for e in self._events if e.event_type in event_types]

    def at_least(self, importance: str) -> list[GameEvent]:
        floor = _RANK[importance]
        return [e for e in self._events if _RANK[e.importance] >= floor]

    def since(self, tick: float) -> list[GameEvent]:
        return [e for e in self._events if e.tick >= tick]

    def as_dicts(self) -> list[dict]:
        return [e.to_dict() for e in self._events]
