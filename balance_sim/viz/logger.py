"""Run log: game events mirrored into per-day, verbosity-filtered lines."""

from __future__ import annotations

import json
import os
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Optional, TextIO

from balance_sim.core.config import MINUTES_PER_DAY


@dataclass
class LogEntry:
    day: int
    minute: float
    category: str
    message: str
    data: dict = field(default_factory=dict)

    @property
    def clock(self) -> str:
        minute_of_day = int(self.minute % MINUTES_PER_DAY)
        return f"{minute_of_day // 60:02d}:{minute_of_day % 60:02d}"


def _ensure_parent(path: str) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)


class SimLogger:
    """Buffers entries for the current day and writes them out at day end."""

    ACTION = "ACTION"
    PROCESS = "PROCESS"
    SYSTEM = "SYSTEM"
    RESOURCE = "RESOURCE"
    DECISION = "DECISION"
    OUTCOME = "OUTCOME"
    ERROR = "ERROR"

    # minimum verbosity at which a category is printed
    _VERBOSITY_MAP = {
        OUTCOME: 0,
        ERROR: 0,
        ACTION: 1,
        PROCESS: 1,
        SYSTEM: 2,
        RESOURCE: 2,
        DECISION: 3,
    }

    # game event type -> category; unlisted types are SYSTEM
    EVENT_CATEGORIES = {
        "action": ACTION,
        "action_blocked": ACTION,
        "checkin": DECISION,
        "process_started": PROCESS,
        "process_completed": PROCESS,
        "process_cancelled": PROCESS,
        "overflow": RESOURCE,
        "clamp": RESOURCE,
        "level_up": OUTCOME,
        "run_finished": OUTCOME,
        "action_failed": ERROR,
        "process_error": ERROR,
        "system_error": ERROR,
        "catalog_miss": ERROR,
        "fatal": ERROR,
    }

    def __init__(
        self,
        verbosity: int = 1,
        log_file: Optional[str] = None,
        stdout: bool = True,
    ) -> None:
        """
        verbosity levels:
            0 = run outcome, level-ups and errors
            1 = + executed actions and process lifecycle
            2 = + helper/forge/system work and resource overflow
            3 = + every check-in decision
        """
        self.verbosity = verbosity
        self._pending: list[LogEntry] = []
        self._written: list[LogEntry] = []
        self._stdout = stdout
        self._file: Optional[TextIO] = None
        if log_file:
            _ensure_parent(log_file)
            self._file = open(log_file, "w", encoding="utf-8")

    @classmethod
    def category_for(cls, event_type: str) -> str:
        return cls.EVENT_CATEGORIES.get(event_type, cls.SYSTEM)

    def log(
        self,
        category: str,
        message: str,
        day: int = 0,
        minute: float = 0.0,
        **data,
    ) -> None:
        self._pending.append(LogEntry(day=day, minute=minute, category=category, message=message, data=data))

    def log_event(self, event) -> None:
        """Mirror a ``GameEvent`` using its tick for the day and time stamp."""
        self.log(
            self.category_for(event.event_type),
            event.description,
            day=int(event.tick // MINUTES_PER_DAY) + 1,
            minute=event.tick,
            event_type=event.event_type,
            importance=event.importance,
        )

    def visible(self, entry: LogEntry) -> bool:
        return self._VERBOSITY_MAP.get(entry.category, 1) <= self.verbosity

    def flush_day(self, day: int) -> None:
        """Write the buffered entries that pass the verbosity filter."""
        for entry in self._pending:
            if not self.visible(entry):
                continue
            line = f"[Day {entry.day:>3} {entry.clock}] [{entry.category:<8}] {entry.message}"
            if self._stdout:
                print(line)
            if self._file:
                self._file.write(line + "\n")

        self._written.extend(self._pending)
        self._pending.clear()
        if self._file:
            self._file.flush()

    @property
    def entries(self) -> list[LogEntry]:
        return self._written + self._pending

    def category_counts(self, day: Optional[int] = None) -> Counter:
        return Counter(e.category for e in self.entries if day is None or e.day == day)

    def get_narrative(self, day: int) -> str:
        """Readable account of one day, followed by a per-category tally."""
        day_entries = [e for e in self.entries if e.day == day]
        if not day_entries:
            return f"Day {day}: Nothing notable happened."

        lines = [f"=== Day {day} ==="]
        lines.extend(f"  {e.clock} [{e.category}] {e.message}" for e in day_entries)
        tally = ", ".join(f"{cat.lower()} {n}" for cat, n in sorted(self.category_counts(day).items()))
        lines.append(f"  ({tally})")
        return "\n".join(lines)

    def export_json(self, filepath: str) -> None:
        _ensure_parent(filepath)
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump([asdict(e) for e in self.entries], f, indent=2, default=str)

    def close(self) -> None:
        if self._file:
            self._file.close()
            self._file = None
