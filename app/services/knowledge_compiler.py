"""Compile knowledge base sections into the flat text the voice agent reads."""

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any, Optional

from app.schemas.knowledge import BUILTIN_SECTIONS, CustomSection

FALLBACK_TITLE = "Knowledge Base"
UNTITLED_SECTION = "Untitled Section"


def format_timestamp(moment: datetime) -> str:
    """US locale style without zero padding, e.g. "3/4/2026, 3:05:09 PM"."""
    hour = moment.hour % 12 or 12
    return f"{moment.month}/{moment.day}/{moment.year}, {hour}:{moment:%M:%S %p}"


def _field(section: Any, name: str) -> str:
    if isinstance(section, CustomSection):
        value = getattr(section, name)
    elif isinstance(section, Mapping):
        value = section.get(name)
    else:
        value = None
    return (value or "").strip() if isinstance(value, str) else ""


def compile_to_raw_text(
    title: str,
    builtins: Mapping[str, str],
    customs: Iterable[CustomSection | Mapping[str, Any]],
    now: Optional[datetime] = None,
) -> str:
    """Render title, builtins (canonical order) and customs (given order).

    The "Last updated" line uses local time and is the only part of the
    output that changes between two compilations of the same sections.
    Empty builtins and fully empty custom sections are left out.
    """
    stamp = format_timestamp(now or datetime.now())

    parts = [
        f"# {(title or '').strip() or FALLBACK_TITLE}",
        f"Last updated: {stamp}",
        "",
    ]

    for key, label in BUILTIN_SECTIONS:
        value = ((builtins or {}).get(key.value) or "").strip()
        if not value:
            continue
        parts += [f"## {label}", value, ""]

    for section in customs or []:
        heading = _field(section, "title")
        body = _field(section, "content")
        if not heading and not body:
            continue
        parts.append(f"## {heading or UNTITLED_SECTION}")
        if body:
            parts.append(body)
        parts.append("")

    return "\n".join(parts).strip()
