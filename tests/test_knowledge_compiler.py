"""Tests for compiling sections into the agent-facing text."""

from datetime import datetime

from app.schemas.knowledge import CustomSection, empty_builtins
from app.services.knowledge_compiler import compile_to_raw_text
from app.services.knowledge_parser import parse_from_raw
from app.services.knowledge_sanitizer import normalize_sections

FIXED_NOW = datetime(2026, 3, 4, 15, 5, 9)


def test_compile_layout():
    builtins = empty_builtins()
    builtins["services"] = "  Haircuts $30 "
    builtins["misc"] = "Cash only"
    customs = [CustomSection(id="sec_1", title="Parking", content="Free lot in rear")]

    text = compile_to_raw_text("Main Knowledge Base", builtins, customs, now=FIXED_NOW)

    assert text == (
        "# Main Knowledge Base\n"
        "Last updated: 3/4/2026, 3:05:09 PM\n"
        "\n"
        "## Services\n"
        "Haircuts $30\n"
        "\n"
        "## Anything Else\n"
        "Cash only\n"
        "\n"
        "## Parking\n"
        "Free lot in rear"
    )


def test_blank_title_and_empty_sections():
    text = compile_to_raw_text("   ", empty_builtins(), [], now=FIXED_NOW)
    assert text == "# Knowledge Base\nLast updated: 3/4/2026, 3:05:09 PM"


def test_custom_edge_cases():
    customs = [
        {"id": "a", "title": "", "content": ""},
        {"id": "b", "title": "", "content": "Body without title"},
        {"id": "c", "title": "Heading only", "content": ""},
    ]
    text = compile_to_raw_text("KB", empty_builtins(), customs, now=FIXED_NOW)
    assert "## Untitled Section\nBody without title" in text
    assert text.endswith("## Heading only")
    assert text.count("## ") == 2


def test_builtins_follow_canonical_order():
    builtins = empty_builtins()
    builtins["misc"] = "last"
    builtins["services"] = "first"
    builtins["hours"] = "middle"
    text = compile_to_raw_text("KB", builtins, [], now=FIXED_NOW)
    assert text.index("## Services") < text.index("## Hours & Location") < text.index("## Anything Else")


def test_compile_parse_round_trip():
    sections = normalize_sections({
        "builtins": {
            "services": "Haircuts $30",
            "pricing": "Kids cuts $20\nSeniors $25",
            "policies": "24h cancellation",
            "hours": "Tue-Sat 9-7",
            "faq": "Walk-ins welcome",
            "intake": "Ask for name and phone",
            "misc": "Cash and card",
        },
        "customs": [
            {"title": "Parking", "content": "Free lot in rear"},
            {"title": "Gift Cards", "content": "Sold at front desk"},
            {"title": "Team", "content": "Three stylists"},
        ],
    })
    text = compile_to_raw_text("Main Knowledge Base", sections.builtins, sections.customs)
    parsed = parse_from_raw(text)

    assert parsed.builtins == sections.builtins
    assert [(c.title, c.content) for c in parsed.customs] == [
        (c.title, c.content) for c in sections.customs
    ]


def test_round_trip_ignores_timestamp():
    builtins = empty_builtins()
    builtins["services"] = "Haircuts $30"
    customs = [CustomSection(id="sec_1", title="Parking", content="Free lot in rear")]

    first = parse_from_raw(compile_to_raw_text("Main Knowledge Base", builtins, customs, now=FIXED_NOW))
    second = parse_from_raw(compile_to_raw_text("Main Knowledge Base", builtins, customs, now=datetime(2030, 1, 1)))

    assert first.builtins == second.builtins == builtins
    assert [(c.title, c.content) for c in first.customs] == [("Parking", "Free lot in rear")]
    assert [(c.title, c.content) for c in second.customs] == [("Parking", "Free lot in rear")]


def test_timestamp_is_not_zero_padded():
    text = compile_to_raw_text("KB", empty_builtins(), [], now=datetime(2026, 11, 12, 0, 7, 3))
    assert text.splitlines()[1] == "Last updated: 11/12/2026, 12:07:03 AM"
