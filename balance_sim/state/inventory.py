"""Owned equipment with one equipped item per slot."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

EQUIPMENT_SLOTS: tuple[str, ...] = ("hoe", "hammer", "axe", "pickaxe", "net", "weapon", "armor")


@dataclass
class OwnedItem:
    """A tool, weapon, armor piece or net the player owns."""

    item_id: str
    slot: str
    level: int = 1
    durability: float = 100.0
    equipped: bool = False


class Inventory:
    """Equipment store. Items are kept in acquisition order."""

    def __init__(self) -> None:
        self._items: dict[str, OwnedItem] = {}

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self._items.values())

    def add(self, item_id: str, slot: str, level: int = 1) -> OwnedItem:
        """Add an item. Re-adding an owned item raises its level instead."""
        if slot not in EQUIPMENT_SLOTS:
            raise ValueError(f"unknown equipment slot {slot!r}")
        existing = self._items.get(item_id)
        if existing is not None:
            existing.level = max(existing.level, level)
            return existing
        owned = OwnedItem(item_id=item_id, slot=slot, level=level)
        self._items[item_id] = owned
        if self.equipped(slot) is None:
            owned.equipped = True
        return owned

    def owns(self, item_id: str) -> bool:
        return item_id in self._items

    def get(self, item_id: str) -> Optional[OwnedItem]:
        return self._items.get(item_id)

    def in_slot(self, slot: str) -> list[OwnedItem]:
        return [item for item in self._items.values() if item.slot == slot]

    def has_slot(self, slot: str) -> bool:
        return any(item.slot == slot for item in self._items.values())

    def satisfies(self, requirement: str) -> bool:
        """A tool requirement names either a specific item or a slot."""
        return self.owns(requirement) or self.has_slot(requirement)

    def equipped(self, slot: str) -> Optional[OwnedItem]:
        for item in self._items.values():
            if item.slot == slot and item.equipped:
                return item
        return None

    def equip(self, item_id: str) -> OwnedItem:
        """Equip an owned item, unequipping whatever shared its slot."""
        target = self._items[item_id]
        for item in self._items.values():
            if item.slot == target.slot:
                item.equipped = False
        target.equipped = True
        return target

    def snapshot(self) -> list[dict]:
        return [
            {"id": i.item_id, "slot": i.slot, "level": i.level, "equipped": i.equipped}
            for i in self._items.values()
        ]
