"""Pydantic schemas for the knowledge base.

The section table below is the single source of the builtin keys and their
display labels. Both the compiler (rendering) and the parser (heading
matching) read it, so a label changed here changes both directions.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


DEFAULT_KB_TITLE = "Main Knowledge Base"


class BuiltinSectionKey(str, Enum):
    """Fixed content slots every knowledge base has."""
    SERVICES = "services"
    PRICING = "pricing"
    POLICIES = "policies"
    HOURS = "hours"
    FAQ = "faq"
    INTAKE = "intake"
    MISC = "misc"


# Canonical order and labels. Never grows at runtime.
BUILTIN_SECTIONS: tuple[tuple[BuiltinSectionKey, str], ...] = (
    (BuiltinSectionKey.SERVICES, "Services"),
    (BuiltinSectionKey.PRICING, "Pricing"),
    (BuiltinSectionKey.POLICIES, "Policies"),
    (BuiltinSectionKey.HOURS, "Hours & Location"),
    (BuiltinSectionKey.FAQ, "FAQ"),
    (BuiltinSectionKey.INTAKE, "Call Handling & Intake"),
    (BuiltinSectionKey.MISC, "Anything Else"),
)


def empty_builtins() -> dict[str, str]:
    return {key.value: "" for key, _ in BUILTIN_SECTIONS}


class CustomSection(BaseModel):
    """Operator-defined section outside the builtin set."""
    id: str
    title: str
    content: str = ""


class KnowledgeBaseSections(BaseModel):
    """Canonical structured shape: all seven builtins plus ordered customs."""
    builtins: dict[str, str] = Field(default_factory=empty_builtins)
    customs: list[CustomSection] = Field(default_factory=list)


class KnowledgeBaseOut(BaseModel):
    """Knowledge base as returned by both the read and the write endpoint."""
    id: UUID | None = None
    business_id: UUID
    title: str = DEFAULT_KB_TITLE
    sections: KnowledgeBaseSections
    raw_text: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel
