"""Knowledge base endpoints.

- GET /api/v1/knowledge/ → the caller's knowledge base (sections + compiled text)
- PUT /api/v1/knowledge/ → save sections; POST is accepted for older clients
- GET /api/v1/knowledge/compiled → compiled text only, as the voice agent reads it
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import get_active_business_id
from app.schemas.knowledge import KnowledgeBaseOut
from app.services.knowledge_parser import parse_from_raw
from app.services.knowledge_store import KnowledgeBaseStore, KnowledgeBaseStoreError

router = APIRouter()
logger = logging.getLogger(__name__)


async def _read_payload(request: Request) -> dict:
    """Request body as a dict; unreadable or non-object bodies count as empty."""
    try:
        payload = await request.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


@router.get("/", response_model=KnowledgeBaseOut)
async def get_knowledge_base(
    business_id: UUID = Depends(get_active_business_id),
    db: AsyncSession = Depends(get_db),
):
    """Return the knowledge base, or an unsaved empty one if none exists yet."""
    try:
        return await KnowledgeBaseStore(db).load_or_default(business_id)
    except KnowledgeBaseStoreError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/", response_model=KnowledgeBaseOut)
@router.post("/", response_model=KnowledgeBaseOut, include_in_schema=False)
async def save_knowledge_base(
    request: Request,
    business_id: UUID = Depends(get_active_business_id),
    db: AsyncSession = Depends(get_db),
):
    """Save title and sections. Every field is optional and gets normalized.

    Clients that predate the section editor send `rawText` instead of
    `sections`; that text is parsed into sections before saving.
    """
    payload = await _read_payload(request)
    sections = payload.get("sections")
    raw_text = payload.get("rawText")
    if sections is None and isinstance(raw_text, str):
        logger.info("Knowledge base for business %s submitted as raw text", business_id)
        sections = parse_from_raw(raw_text)

    try:
        return await KnowledgeBaseStore(db).save(business_id, payload.get("title"), sections)
    except KnowledgeBaseStoreError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/compiled", response_class=PlainTextResponse)
async def get_compiled_knowledge(
    business_id: UUID = Depends(get_active_business_id),
    db: AsyncSession = Depends(get_db),
):
    """Compiled knowledge base text for the voice agent prompt."""
    try:
        return await KnowledgeBaseStore(db).compiled_text(business_id)
    except KnowledgeBaseStoreError as e:
        raise HTTPException(status_code=500, detail=str(e))
