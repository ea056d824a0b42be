"""Single source of truth for whether an action is legal right now."""

from __future__ import annotations

from balance_sim.core.actions import Action
from balance_sim.core.errors import CatalogLookupError
from balance_sim.processes.registry import ProcessRegistry
from balance_sim.state.catalog import Catalog
from balance_sim.state.game_state import GameState
from balance_sim.validation.requirements import requirements_for
from balance_sim.validation.result import ValidationResult


class Validator:
    """Checks prerequisites, tool, resources, concurrency and availability.

    Every failing check adds a reason, so one result explains all the ways
    an action is blocked. The validator never mutates state.
    """

    def __init__(self, catalog: Catalog, registry: ProcessRegistry) -> None:
        self.catalog = catalog
        self.registry = registry

    def can_perform(self, action: Action, state: GameState) -> ValidationResult:
        try:
            req = requirements_for(action, state, self.catalog)
        except CatalogLookupError as exc:
            result = ValidationResult.blocked(f"unknown catalog id {exc.args[0]!r}")
            result.catalog_miss = True
            return result

        result = ValidationResult.ok()

        # 1. Prerequisites
        for prereq in req.prerequisites:
            if not state.satisfies(prereq):
                result.missing_prerequisites.append(str(prereq))
        if result.missing_prerequisites:
            result.block("missing prerequisites: " + ", ".join(result.missing_prerequisites))

        # 2. Tool
        if req.tool is not None and not state.inventory.satisfies(req.tool):
            result.block(f"requires {req.tool}")

        # 3. Resources, spent and held
        shortfalls = state.shortfalls(req.cost)
        for resource, needed in req.minimums.items():
            have = state.amount(resource)
            if needed > have + 1e-9:
                shortfalls[resource] = max(shortfalls.get(resource, 0.0), needed - have)
        if shortfalls:
            result.resource_shortfalls.update(shortfalls)
            result.block("insufficient " + ", ".join(
                f"{name} (short {amount:g})" for name, amount in shortfalls.items()
            ))

        # 4. Concurrency
        if req.category is not None:
            result.absorb(self.registry.can_start(req.category, state))

        # 5. Availability
        for reason in req.blockers:
            result.block(reason)

        return result
