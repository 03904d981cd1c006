"""Static choices for the console pickers."""

from __future__ import annotations

from fastapi import APIRouter

from hqdesk.api.models import CatalogResponse, CollectionInfo
from hqdesk.config import get_settings
from hqdesk.schema.records import RecordKind

router = APIRouter()


@router.get("", response_model=CatalogResponse)
async def get_catalog() -> CatalogResponse:
  settings = get_settings()
  collections = [CollectionInfo(kind=RecordKind.KNOWLEDGE_CARD, tab=settings.knowledge_card_tab), CollectionInfo(kind=RecordKind.LESSON_PLAN, tab=settings.lesson_plan_tab)]
  return CatalogResponse(brands=list(settings.brands), domains=list(settings.domains), collections=collections, poll_seconds=settings.connection_poll_seconds, default_reviewer=settings.default_reviewer)
