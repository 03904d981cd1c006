"""Generation client: drafts and self-audits through a structured-output model."""

from __future__ import annotations

import json
import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from hqdesk.ai.errors import AuditError, GenerationClientError, GenerationError, classify
from hqdesk.ai.json_parser import parse_json_with_fallback
from hqdesk.ai.prompts import render_knowledge_card_audit, render_knowledge_card_draft, render_lesson_plan_audit, render_lesson_plan_draft
from hqdesk.ai.providers.base import AIModel
from hqdesk.ai.providers.gemini import GeminiProvider
from hqdesk.config import Settings
from hqdesk.schema.records import Draft, KnowledgeCardAudit, LessonPlanAudit, Record, RecordKind
from hqdesk.schema.service import response_schema
from hqdesk.schema.validate_record import MetaJsonError, normalize_meta_json, validate_record_structure

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class GenerationClient:
  """Wraps the four generation operations; every failure raises, nothing is substituted."""

  def __init__(self, model: AIModel | None, *, settings: Settings) -> None:
    self._model = model
    self._settings = settings

  @property
  def model_name(self) -> str:
    return getattr(self._model, "name", "unconfigured")

  async def draft_knowledge_card(self, *, brand: str, domain: str, topic_name: str, source_text: str) -> Draft:
    """Draft a 13-section knowledge card from raw source text."""
    prompt = render_knowledge_card_draft(brand=brand, domain=domain, tab=self._settings.knowledge_card_tab, topic_name=topic_name, source_text=source_text)
    draft = await self._call("knowledge_card_draft", prompt, Draft, GenerationError)
    return self._finalize_draft(draft, RecordKind.KNOWLEDGE_CARD, GenerationError)

  async def draft_lesson_plan(self, *, brand: str, domain: str, topic_name: str, source_text: str, related_topic_id: str | None = None) -> Draft:
    """Draft a 60/90-minute lesson plan pair from source text."""
    prompt = render_lesson_plan_draft(brand=brand, domain=domain, tab=self._settings.lesson_plan_tab, topic_name=topic_name, source_text=source_text, related_topic_id=related_topic_id)
    draft = await self._call("lesson_plan_draft", prompt, Draft, GenerationError)
    return self._finalize_draft(draft, RecordKind.LESSON_PLAN, GenerationError)

  async def audit_knowledge_card(self, record: Record) -> KnowledgeCardAudit:
    """Run rules R01-R08 over a card and return the report plus a corrected card."""
    prompt = render_knowledge_card_audit(record)
    audit = await self._call("knowledge_card_audit", prompt, KnowledgeCardAudit, AuditError)
    if audit.corrected_json is not None:
      audit.corrected_json = self._finalize_draft(audit.corrected_json, RecordKind.KNOWLEDGE_CARD, AuditError)
    return audit

  async def audit_lesson_plan(self, *, content: str, meta_json: str) -> LessonPlanAudit:
    """Produce the HQ review card (verdict, checklist, must-fix list) for a lesson plan."""
    prompt = render_lesson_plan_audit(content=content, meta_json=meta_json)
    return await self._call("lesson_plan_audit", prompt, LessonPlanAudit, AuditError)

  async def _call(self, operation: str, prompt: str, output_model: type[ModelT], error_cls: type[GenerationClientError]) -> ModelT:
    payload = self._dummy_payload(operation, error_cls)
    if payload is None:
      payload = await self._generate(operation, prompt, output_model, error_cls)

    try:
      return output_model.model_validate(payload)
    except ValidationError as exc:
      logger.error("%s returned output missing required fields: %s", operation, exc)
      raise error_cls(f"The model output failed validation: {_summarize_validation(exc)}", category="output") from exc

  async def _generate(self, operation: str, prompt: str, output_model: type[BaseModel], error_cls: type[GenerationClientError]) -> dict[str, Any]:
    if self._model is None:
      raise error_cls("The generation service is not configured (missing GEMINI_API_KEY).", category="provider")

    logger.info("Calling %s for %s", self.model_name, operation)
    try:
      response = await self._model.generate_structured(prompt, response_schema(output_model))
    except Exception as exc:  # noqa: BLE001
      category = classify(exc)
      logger.error("%s failed category=%s error=%s", operation, category, exc)
      raise error_cls(f"{operation} failed: {exc}", category=category) from exc
    return response.content

  def _dummy_payload(self, operation: str, error_cls: type[GenerationClientError]) -> dict[str, Any] | None:
    try:
      dummy = AIModel.load_dummy_response(operation)
    except RuntimeError as exc:
      raise error_cls(str(exc), category="provider") from exc
    if dummy is None:
      return None
    logger.info("Using deterministic dummy output for %s", operation)
    try:
      parsed = parse_json_with_fallback(AIModel.strip_json_fences(dummy))
    except json.JSONDecodeError as exc:
      raise error_cls(f"Dummy output for {operation} is not valid JSON: {exc}", category="output") from exc
    if not isinstance(parsed, dict):
      raise error_cls(f"Dummy output for {operation} must be a JSON object.", category="output")
    return parsed

  def _finalize_draft(self, draft: Draft, kind: RecordKind, error_cls: type[GenerationClientError]) -> Draft:
    """Reject empty or malformed drafts and collapse meta_json onto one line."""
    if not draft.content.strip():
      raise error_cls("The model returned an empty content body.", category="output")

    try:
      meta_json = normalize_meta_json(draft.meta_json)
    except MetaJsonError as exc:
      raise error_cls(f"The model returned an unparseable meta_json: {exc}", category="output") from exc

    if self._settings.enforce_structure:
      problems = validate_record_structure(kind, draft.content, meta_json)
      if problems:
        logger.warning("Draft failed structural checks kind=%s problems=%s", kind.value, problems)
        raise error_cls("The model output broke the record skeleton: " + " ".join(problems), category="structure")

    return draft.model_copy(update={"meta_json": meta_json})


def _summarize_validation(exc: ValidationError) -> str:
  parts = []
  for error in exc.errors()[:5]:
    location = ".".join(str(item) for item in error.get("loc", ())) or "payload"
    parts.append(f"{location}: {error.get('msg')}")
  return "; ".join(parts)


def build_generation_client(settings: Settings) -> GenerationClient:
  """Build the client for the configured Gemini model; a missing key defers failure to call time."""
  try:
    model = GeminiProvider(api_key=settings.gemini_api_key).get_model(settings.generation_model)
  except ValueError as exc:
    logger.warning("Generation model unavailable: %s", exc)
    model = None
  return GenerationClient(model, settings=settings)
