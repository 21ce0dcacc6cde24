"""Normalize untrusted knowledge base input into the canonical section shape.

Everything the editor sends goes through here before it is compiled or
stored. Nothing in this module raises on bad input: missing fields, wrong
types and oversized strings are coerced, defaulted or truncated so the
result always has all seven builtins and only non-empty custom sections.
"""

import secrets
from typing import Any, NamedTuple, Optional

from app.schemas.knowledge import (
    BUILTIN_SECTIONS,
    DEFAULT_KB_TITLE,
    CustomSection,
    KnowledgeBaseSections,
)

MAX_TITLE_CHARS = 200
MAX_BUILTIN_CHARS = 50_000
MAX_CUSTOM_ID_CHARS = 120
MAX_CUSTOM_TITLE_CHARS = 160
MAX_CUSTOM_CONTENT_CHARS = 80_000

UNTITLED_CUSTOM = "Untitled"


class FieldRule(NamedTuple):
    """How one custom section field is decoded: length cap and empty default."""
    name: str
    max_chars: int
    default: Optional[str]  # None means "generate a fresh id"


CUSTOM_SECTION_FIELDS: tuple[FieldRule, ...] = (
    FieldRule("id", MAX_CUSTOM_ID_CHARS, None),
    FieldRule("title", MAX_CUSTOM_TITLE_CHARS, UNTITLED_CUSTOM),
    FieldRule("content", MAX_CUSTOM_CONTENT_CHARS, ""),
)


def new_section_id() -> str:
    """Opaque, stable id for a custom section."""
    return f"sec_{secrets.token_hex(6)}"


def to_text(value: Any) -> str:
    """Coerce a JSON scalar to text. Containers and unknown objects become ''."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def clean_str(value: Any, max_chars: int) -> str:
    return to_text(value).strip()[:max_chars]


def normalize_title(value: Any) -> str:
    """Knowledge base title: trimmed, capped, defaulted."""
    return clean_str(value, MAX_TITLE_CHARS) or DEFAULT_KB_TITLE


def _decode_custom(item: Any) -> Optional[CustomSection]:
    """Decode one custom section, or None if it carries no title and no content."""
    if not isinstance(item, dict):
        return None

    raw = {rule.name: clean_str(item.get(rule.name), rule.max_chars) for rule in CUSTOM_SECTION_FIELDS}
    if not raw["title"] and not raw["content"]:
        return None

    decoded = {}
    for rule in CUSTOM_SECTION_FIELDS:
        value = raw[rule.name]
        if not value:
            value = new_section_id() if rule.default is None else rule.default
        decoded[rule.name] = value
    return CustomSection(**decoded)


def normalize_sections(data: Any) -> KnowledgeBaseSections:
    """Turn any payload into a well-formed KnowledgeBaseSections."""
    if isinstance(data, KnowledgeBaseSections):
        data = data.model_dump()
    if not isinstance(data, dict):
        data = {}

    builtins_in = data.get("builtins")
    if not isinstance(builtins_in, dict):
        builtins_in = {}

    builtins = {
        key.value: clean_str(builtins_in.get(key.value), MAX_BUILTIN_CHARS)
        for key, _ in BUILTIN_SECTIONS
    }

    customs_in = data.get("customs")
    if not isinstance(customs_in, list):
        customs_in = []

    customs = [section for section in map(_decode_custom, customs_in) if section is not None]

    return KnowledgeBaseSections(builtins=builtins, customs=customs)
