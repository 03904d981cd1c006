"""Prompt templates for draft generation and self-audit calls."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

from hqdesk.schema.records import INSUFFICIENT_SOURCE_PLACEHOLDER, MAX_MUST_FIX_ITEMS, NO_MEDIA_PLACEHOLDER, Record
from hqdesk.utils.ids import brand_code

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


@lru_cache(maxsize=8)
def _load_prompt(name: str) -> str:
  """Read a Markdown prompt template from the templates directory."""
  return (TEMPLATES_DIR / name).read_text(encoding="utf-8")


def _replace_placeholders(template: str, values: dict[str, str]) -> str:
  """Substitute {{PLACEHOLDER}} markers with request values."""
  rendered = template
  for key, value in values.items():
    rendered = rendered.replace(f"{{{{{key}}}}}", value)
  return rendered


def _normalize_optional_text(value: str | None) -> str:
  if value is None or value.strip() == "":
    return "-"
  return value.strip()


def render_knowledge_card_draft(*, brand: str, domain: str, tab: str, topic_name: str, source_text: str) -> str:
  values = {"BRAND": brand, "DOMAIN": domain, "TAB": tab, "TOPIC_NAME": topic_name.strip(), "SOURCE_TEXT": source_text.strip(), "PLACEHOLDER": INSUFFICIENT_SOURCE_PLACEHOLDER}
  return _replace_placeholders(_load_prompt("knowledge_card_draft.md"), values)


def render_lesson_plan_draft(*, brand: str, domain: str, tab: str, topic_name: str, source_text: str, related_topic_id: str | None) -> str:
  values = {
    "BRAND": brand,
    "BRAND_CODE": brand_code(brand),
    "DOMAIN": domain,
    "TAB": tab,
    "TOPIC_NAME": topic_name.strip(),
    "TOPIC_ID": _normalize_optional_text(related_topic_id),
    "SOURCE_TEXT": source_text.strip(),
    "PLACEHOLDER": INSUFFICIENT_SOURCE_PLACEHOLDER,
    "NO_MEDIA": NO_MEDIA_PLACEHOLDER,
  }
  return _replace_placeholders(_load_prompt("lesson_plan_draft.md"), values)


def render_knowledge_card_audit(record: Record) -> str:
  """Render the audit prompt with the card serialized in the draft output shape."""
  card = {
    "id": record.id,
    "topic_name": record.topic_name,
    "brand": record.brand,
    "domain": record.domain,
    "content": record.content,
    "summary": record.summary,
    "keywords": record.keywords_text(),
    "meta_json": record.meta_json,
  }
  values = {"CARD_JSON": json.dumps(card, ensure_ascii=False), "PLACEHOLDER": INSUFFICIENT_SOURCE_PLACEHOLDER}
  return _replace_placeholders(_load_prompt("knowledge_card_audit.md"), values)


def render_lesson_plan_audit(*, content: str, meta_json: str) -> str:
  values = {"CONTENT": content, "META_JSON": _normalize_optional_text(meta_json), "MAX_MUST_FIX": str(MAX_MUST_FIX_ITEMS), "PLACEHOLDER": INSUFFICIENT_SOURCE_PLACEHOLDER}
  return _replace_placeholders(_load_prompt("lesson_plan_audit.md"), values)
