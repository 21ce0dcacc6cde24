"""Knowledge base model.

One document per business, consulted by the voice agent when answering callers.
`sections` is the structured form the editor works on; `raw_text` is the
compiled prose derived from it. Legacy rows carry only `raw_text`.
"""

from sqlalchemy import Column, String, DateTime, Text, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.types import JSON
import uuid
from datetime import datetime
from app.core.database import Base


class KnowledgeBase(Base):
    __tablename__ = "knowledge_bases"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(
        UUID(as_uuid=True), ForeignKey("businesses.id"), unique=True, index=True, nullable=False
    )
    title = Column(String, nullable=False, default="Main Knowledge Base")
    sections = Column(JSON(none_as_null=True), nullable=True)  # {"builtins": {...}, "customs": [...]}, NULL on legacy rows
    raw_text = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
