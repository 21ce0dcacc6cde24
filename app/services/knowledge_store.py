"""Load and save a business's knowledge base.

Reads never write: a business without a record gets an in-memory default,
and a legacy record (compiled text only) is parsed into sections for the
response while the stored row stays as it is. Writes normalize, compile and
upsert in a single statement keyed on business_id, so a business never has
more than one record and created_at is only set on first insert.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.knowledge import KnowledgeBase
from app.schemas.knowledge import DEFAULT_KB_TITLE, KnowledgeBaseOut, KnowledgeBaseSections
from app.services.knowledge_compiler import compile_to_raw_text
from app.services.knowledge_parser import parse_from_raw
from app.services.knowledge_sanitizer import normalize_sections, normalize_title

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class KnowledgeBaseStoreError(Exception):
    """Raised when the knowledge base could not be read from or written to the store."""


class KnowledgeBaseStore:
    """Repository for the `knowledge_bases` table, one row per business."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_one(self, business_id: UUID) -> Optional[KnowledgeBase]:
        result = await self.db.execute(
            select(KnowledgeBase)
            .where(KnowledgeBase.business_id == business_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def upsert(self, business_id: UUID, fields: dict[str, Any], now: datetime) -> None:
        """Insert or update the business's row in one statement."""
        dialect = self.db.get_bind().dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)
        if insert is None:
            raise KnowledgeBaseStoreError(f"Upsert not supported for dialect '{dialect}'")

        table = KnowledgeBase.__table__
        stmt = insert(table).values(
            id=uuid.uuid4(),
            business_id=business_id,
            created_at=now,
            **fields,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.business_id],
            set_=fields,
        )
        await self.db.execute(stmt)

    async def load_or_default(self, business_id: UUID) -> KnowledgeBaseOut:
        """Return the business's knowledge base, or an unsaved empty one."""
        try:
            kb = await self.find_one(business_id)
        except SQLAlchemyError as e:
            logger.error("Knowledge base lookup failed for business %s: %s", business_id, e)
            raise KnowledgeBaseStoreError("Failed to load knowledge base.") from e

        if kb is None:
            now = datetime.utcnow()
            return KnowledgeBaseOut(
                business_id=business_id,
                title=DEFAULT_KB_TITLE,
                sections=KnowledgeBaseSections(),
                raw_text="",
                created_at=now,
                updated_at=now,
            )

        title = kb.title or DEFAULT_KB_TITLE
        if kb.sections is None:
            logger.info("Parsing legacy knowledge base text for business %s", business_id)
            sections = parse_from_raw(kb.raw_text)
        else:
            sections = normalize_sections(kb.sections)

        return KnowledgeBaseOut(
            id=kb.id,
            business_id=kb.business_id,
            title=title,
            sections=sections,
            raw_text=compile_to_raw_text(title, sections.builtins, sections.customs),
            created_at=kb.created_at,
            updated_at=kb.updated_at,
        )

    async def save(self, business_id: UUID, title: Any, raw_sections: Any) -> KnowledgeBaseOut:
        """Normalize, compile and upsert; return exactly what was persisted."""
        clean_title = normalize_title(title)
        sections = normalize_sections(raw_sections)
        raw_text = compile_to_raw_text(clean_title, sections.builtins, sections.customs)
        now = datetime.utcnow()

        fields = {
            "title": clean_title,
            "sections": sections.model_dump(),
            "raw_text": raw_text,
            "updated_at": now,
        }

        try:
            await self.upsert(business_id, fields, now)
            await self.db.commit()
            kb = await self.find_one(business_id)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Knowledge base save failed for business %s: %s", business_id, e)
            raise KnowledgeBaseStoreError("Failed to save knowledge base.") from e

        if kb is None:
            raise KnowledgeBaseStoreError("Failed to save knowledge base.")

        logger.info(
            "Knowledge base saved for business %s: %d builtins filled, %d custom sections, %d chars",
            business_id,
            sum(1 for v in sections.builtins.values() if v),
            len(sections.customs),
            len(raw_text),
        )
        return KnowledgeBaseOut(
            id=kb.id,
            business_id=kb.business_id,
            title=kb.title,
            sections=KnowledgeBaseSections.model_validate(kb.sections),
            raw_text=kb.raw_text or "",
            created_at=kb.created_at,
            updated_at=kb.updated_at,
        )

    async def compiled_text(self, business_id: UUID) -> str:
        """Flat text handed to the voice agent."""
        kb = await self.load_or_default(business_id)
        return kb.raw_text
