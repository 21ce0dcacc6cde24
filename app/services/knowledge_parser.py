"""Parse legacy flat knowledge base text back into sections.

Older records only stored the compiled prose. Each `## Label` heading opens
a section; labels that match a builtin (case-insensitive) fill that slot,
anything else becomes a custom section in document order. A document with
no headings at all lands in the "Anything Else" slot so nothing is dropped.
"""

import logging
import re

from app.schemas.knowledge import (
    BUILTIN_SECTIONS,
    BuiltinSectionKey,
    CustomSection,
    KnowledgeBaseSections,
    empty_builtins,
)
from app.services.knowledge_compiler import UNTITLED_SECTION
from app.services.knowledge_sanitizer import new_section_id

logger = logging.getLogger(__name__)

HEADING_RE = re.compile(r"^##[ \t]+(.+?)[ \t]*$", re.MULTILINE)
LEADING_BLANK_LINE_RE = re.compile(r"^[ \t]*\n")

_BUILTIN_BY_LABEL: dict[str, BuiltinSectionKey] = {
    label.lower(): key for key, label in BUILTIN_SECTIONS
}


def match_builtin(label: str) -> BuiltinSectionKey | None:
    """Builtin key whose label equals `label`, ignoring case."""
    return _BUILTIN_BY_LABEL.get(label.strip().lower())


def parse_from_raw(raw_text: str | None) -> KnowledgeBaseSections:
    text = (raw_text or "").replace("\r\n", "\n").replace("\r", "\n")
    builtins = empty_builtins()
    customs: list[CustomSection] = []

    headings = list(HEADING_RE.finditer(text))
    if not headings:
        body = text.strip()
        if body:
            builtins[BuiltinSectionKey.MISC.value] = body
        return KnowledgeBaseSections(builtins=builtins, customs=customs)

    # Text above the first heading is the compiled "# title" and "Last updated"
    # preamble; it is regenerated on compile and not kept as section content.
    for i, heading in enumerate(headings):
        label = heading.group(1).strip()
        end = headings[i + 1].start() if i + 1 < len(headings) else len(text)
        span = text[heading.end():end]
        # Drop the newline that ends the heading line itself.
        if span.startswith("\n"):
            span = span[1:]
        content = LEADING_BLANK_LINE_RE.sub("", span, count=1).strip()

        key = match_builtin(label)
        if key is None:
            customs.append(
                CustomSection(id=new_section_id(), title=label or UNTITLED_SECTION, content=content)
            )
            continue

        if builtins[key.value]:
            logger.debug("Duplicate '%s' heading, keeping the later section", label)
        builtins[key.value] = content

    return KnowledgeBaseSections(builtins=builtins, customs=customs)
