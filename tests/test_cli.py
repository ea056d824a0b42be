from balance_sim.agents.persona import get_persona
from balance_sim.main import blocked_reasons, build_parser, describe_persona


def test_parser_defaults() -> None:
    args = build_parser().parse_args([])

    assert args.persona == "balanced"
    assert args.mode == "first_victory"
    assert args.victory is None


def test_blocked_reasons_counts_first_reason_only() -> None:
    events = [
        {"type": "action_blocked", "data": {"reasons": ["not enough energy", "requires hoe"]}},
        {"type": "action_blocked", "data": {"reasons": ["not enough energy"]}},
        {"type": "action_blocked", "data": {"reasons": ["requires hoe"]}},
        {"type": "action", "data": {}},
    ]

    assert blocked_reasons(events) == [("not enough energy", 2), ("requires hoe", 1)]


def test_describe_persona_names_the_preset() -> None:
    line = describe_persona(get_persona("risk-taker"))

    assert line.startswith("risk-taker")
    assert "risk=0.90" in line
    assert "prefers adventuring, mining" in line
