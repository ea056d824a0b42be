"""Validation outcome shared by the validator, the registry and process handlers."""

from __future__ import annotations

from dataclasses import dataclass, field

CONCURRENCY_REASON = "concurrency limit"


@dataclass
class ValidationResult:
    """Whether an action is legal right now, and every reason it is not."""

    can_perform: bool = True
    reasons: list[str] = field(default_factory=list)
    missing_prerequisites: list[str] = field(default_factory=list)
    resource_shortfalls: dict[str, float] = field(default_factory=dict)
    catalog_miss: bool = False

    def __bool__(self) -> bool:
        return self.can_perform

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls()

    @classmethod
    def blocked(cls, reason: str) -> "ValidationResult":
        return cls(can_perform=False, reasons=[reason])

    def block(self, reason: str) -> None:
        self.can_perform = False
        self.reasons.append(reason)

    def absorb(self, other: "ValidationResult") -> None:
        if not other.can_perform:
            self.can_perform = False
        self.reasons.extend(other.reasons)
        self.missing_prerequisites.extend(other.missing_prerequisites)
        for key, amount in other.resource_shortfalls.items():
            self.resource_shortfalls[key] = max(self.resource_shortfalls.get(key, 0.0), amount)
        self.catalog_miss = self.catalog_miss or other.catalog_miss

    def summary(self) -> str:
        return "; ".join(self.reasons) if self.reasons else "ok"
