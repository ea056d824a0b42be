import pytest

from balance_sim.core.errors import CatalogFormatError
from balance_sim.state.parsing import normalize_material_name, parse_cost, parse_duration


def test_parse_cost_normalizes_names_and_sums_repeats() -> None:
    cost = parse_cost("Copper Ore x2; Wood x3;Copper Ore x1")

    assert cost == {"copper_ore": 3, "wood": 3}


def test_parse_cost_empty_text_is_free() -> None:
    assert parse_cost("") == {}
    assert parse_cost(None) == {}
    assert parse_cost(" ; ") == {}


@pytest.mark.parametrize("text", ["Wood", "Wood x", "x3", "Wood xthree"])
def test_parse_cost_rejects_malformed_tokens(text: str) -> None:
    with pytest.raises(CatalogFormatError):
        parse_cost(text)


def test_normalize_material_name_strips_punctuation() -> None:
    assert normalize_material_name("  Lava Heart ") == "lava_heart"
    assert normalize_material_name("Spider-Silk") == "spidersilk"
    assert normalize_material_name("Raw  Copper") == "raw_copper"


@pytest.mark.parametrize(
    ("text", "minutes"),
    [
        ("6 min", 6.0),
        ("2 hours", 120.0),
        ("1 hour 30 min", 90.0),
        ("45", 45.0),
        ("30 sec", 0.5),
        ("instant", 0.0),
        ("", 0.0),
        (None, 0.0),
        (12, 12.0),
    ],
)
def test_parse_duration(text, minutes: float) -> None:
    assert parse_duration(text) == pytest.approx(minutes)


def test_parse_duration_rejects_unknown_units() -> None:
    with pytest.raises(CatalogFormatError):
        parse_duration("three fortnights")
