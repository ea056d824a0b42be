"""Parsers for catalog cost and duration strings.

These run once, when records are turned into a Catalog. Everything downstream
works with the parsed dicts and minute values.
"""

from __future__ import annotations

import re
from typing import Optional

from balance_sim.core.errors import CatalogFormatError

_COST_TOKEN = re.compile(r"^(.+?)\s+x(\d+)$")
_HOURS = re.compile(r"(\d+(?:\.\d+)?)\s*(?:h|hr|hrs|hour|hours)\b")
_MINUTES = re.compile(r"(\d+(?:\.\d+)?)\s*(?:m|min|mins|minute|minutes)\b")
_SECONDS = re.compile(r"(\d+(?:\.\d+)?)\s*(?:s|sec|secs|second|seconds)\b")
_BARE_NUMBER = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*$")


def normalize_material_name(name: str) -> str:
    """'Copper Ore' -> 'copper_ore'."""
    key = name.strip().lower()
    key = re.sub(r"\s+", "_", key)
    key = re.sub(r"[^a-z0-9_]", "", key)
    key = re.sub(r"_+", "_", key)
    return key.strip("_")


def parse_cost(text: Optional[str]) -> dict[str, int]:
    """Parse 'Name xN;Name xN' into {normalized_name: quantity}.

    Quantities for a repeated name are summed.
    """
    result: dict[str, int] = {}
    if not text:
        return result

    for raw in text.split(";"):
        token = raw.strip()
        if not token:
            continue
        match = _COST_TOKEN.match(token)
        if match is None:
            raise CatalogFormatError(f"malformed cost token {token!r} in {text!r}")
        key = normalize_material_name(match.group(1))
        if not key:
            raise CatalogFormatError(f"empty material name in {text!r}")
        result[key] = result.get(key, 0) + int(match.group(2))
    return result


def parse_duration(text: Optional[str | float | int]) -> float:
    """Parse '<N> min' / '<N> hour' / '1 hour 30 min' into minutes.

    A bare number is read as minutes. Empty and 'instant' are zero.
    """
    if text is None:
        return 0.0
    if isinstance(text, (int, float)):
        return float(text)

    value = text.strip().lower()
    if not value or value == "instant":
        return 0.0

    bare = _BARE_NUMBER.match(value)
    if bare:
        return float(bare.group(1))

    total = 0.0
    found = False
    for pattern, factor in ((_HOURS, 60.0), (_MINUTES, 1.0), (_SECONDS, 1.0 / 60.0)):
        for match in pattern.finditer(value):
            total += float(match.group(1)) * factor
            found = True
    if not found:
        raise CatalogFormatError(f"unrecognized duration {text!r}")
    return total
