import pytest

from balance_sim.core.errors import CatalogCycleError, CatalogError, CatalogFormatError, CatalogLookupError
from balance_sim.state.catalog import Catalog, parse_prerequisite
from tests.helpers.builders import default_catalog


def _record(item_id: str, prerequisites: str = "", **fields) -> dict:
    record = {"id": item_id, "kind": "upgrade", "system": "town", "prerequisites": prerequisites}
    record.update(fields)
    return record


def test_from_records_parses_costs_and_durations_once() -> None:
    catalog = Catalog.from_records([
        _record("forge_kit", materials_cost="Iron Bar x2;Wood x5", duration="1 hour", gold_cost="30"),
    ])

    item = catalog.get("forge_kit")
    assert item.materials_cost == {"iron_bar": 2, "wood": 5}
    assert item.duration == 60.0
    assert item.gold_cost == 30.0
    assert item.name == "Forge Kit"


def test_prerequisite_cycle_is_rejected() -> None:
    with pytest.raises(CatalogCycleError) as excinfo:
        Catalog.from_records([
            _record("a", "c"),
            _record("b", "a"),
            _record("c", "b"),
            _record("d"),
        ])

    cycle = excinfo.value.cycle
    assert cycle[0] == cycle[-1]
    assert set(cycle) == {"a", "b", "c"}


def test_self_prerequisite_is_a_cycle() -> None:
    with pytest.raises(CatalogCycleError):
        Catalog.from_records([_record("loop", "loop")])


def test_threshold_and_external_prerequisites_are_not_edges() -> None:
    catalog = Catalog.from_records([
        _record("a", "hero_level>=3;quest_from_elsewhere"),
        _record("b", "a;plots>=5"),
    ])

    assert catalog.find_cycle() is None
    assert [str(p) for p in catalog.get("b").prerequisites] == ["a", "plots>=5"]


def test_duplicate_ids_are_rejected() -> None:
    with pytest.raises(CatalogError):
        Catalog.from_records([_record("a"), _record("a")])


def test_missing_required_field_is_a_format_error() -> None:
    with pytest.raises(CatalogFormatError):
        Catalog.from_records([{"id": "nameless"}])


def test_unknown_threshold_metric_is_rejected() -> None:
    with pytest.raises(CatalogFormatError):
        parse_prerequisite("charisma>=4")


def test_lookup_of_unknown_id_raises_and_find_returns_none() -> None:
    catalog = Catalog.from_records([_record("a")])

    with pytest.raises(CatalogLookupError):
        catalog.get("missing")
    assert catalog.find("missing") is None
    assert catalog.order("missing") == len(catalog)


def test_default_catalog_loads_with_expected_records() -> None:
    catalog = default_catalog()

    carrot = catalog.get("carrot")
    assert carrot.duration == 6.0
    assert carrot.energy_value == 1.0
    assert catalog.find_cycle() is None
    assert {item.system for item in catalog} >= {"farm", "town", "adventure", "forge", "helpers"}
    assert all(route.boss for route in catalog.by_kind("route"))
    assert catalog.get("pickaxe_1").slot == "pickaxe"
