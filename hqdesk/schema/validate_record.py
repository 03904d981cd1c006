"""Structural checks for record content skeletons and meta_json blobs."""

from __future__ import annotations

import json
import re
from typing import Any

from hqdesk.schema.records import RecordKind

KNOWLEDGE_CARD_SECTIONS = 13
LESSON_PLAN_SECTIONS = 9
LESSON_PLAN_VARIANTS = 2
LESSON_CHECKLIST_SECTION = 8
LESSON_CHECKLIST_ITEMS = 5
LESSON_MEDIA_SECTION = 9

KNOWLEDGE_CARD_META_KEYS: frozenset[str] = frozenset({"brand", "domain", "tab", "topic_name", "topic_type", "system_location", "target_audience", "status", "media_ids"})
LESSON_PLAN_META_KEYS: frozenset[str] = frozenset({"brand", "domain", "tab", "topic_id", "topic_name", "lesson_version", "lesson_type", "status", "media_ids", "keyword_policy"})
KEYWORD_POLICY_KEYS: frozenset[str] = frozenset({"allow_empty", "ai_autofill_when_empty", "max_keywords", "source"})

_NUMERALS = {"一": 1, "二": 2, "三": 3, "四": 4, "五": 5, "六": 6, "七": 7, "八": 8, "九": 9, "十": 10}
_HEADING_RE = re.compile(r"^#{2,6}\s*([一二三四五六七八九十]{1,3})\s*、(.*)$", re.MULTILINE)
_CHECKLIST_RE = re.compile(r"^\s*[-*]\s*\[[ xX]\]", re.MULTILINE)
_VARIANT_SPLIT_RE = re.compile(r"^\s*---\s*$", re.MULTILINE)
_FILE_REF_RE = re.compile(r"file_url|https?://|www\.|\.(?:png|jpe?g|gif|webp|svg|mp4|mov|avi|pdf|mp3|wav)\b", re.IGNORECASE)


class MetaJsonError(ValueError):
  """Raised when a meta_json blob cannot be parsed into a JSON object."""


def chinese_numeral(text: str) -> int | None:
  """Convert a Chinese numeral between 一 and 十九 into an int."""
  if not text:
    return None
  if len(text) == 1:
    return _NUMERALS.get(text)
  if text[0] == "十" and len(text) == 2:
    unit = _NUMERALS.get(text[1])
    return 10 + unit if unit and unit < 10 else None
  return None


def section_headings(content: str) -> list[tuple[int | None, str]]:
  """Return (number, heading line) pairs in document order."""
  return [(chinese_numeral(match.group(1)), match.group(0).strip()) for match in _HEADING_RE.finditer(content or "")]


def split_lesson_variants(content: str) -> list[str]:
  """Split lesson-plan content into its scheduled variants on `---` separator lines."""
  parts = _VARIANT_SPLIT_RE.split(content or "")
  # Separators inside a variant (no headings on one side) are not variant boundaries.
  return [part for part in parts if _HEADING_RE.search(part)]


def section_body(content: str, number: int) -> str | None:
  """Return the text under heading `number`, up to the next heading."""
  matches = list(_HEADING_RE.finditer(content or ""))
  for index, match in enumerate(matches):
    if chinese_numeral(match.group(1)) != number:
      continue
    end = matches[index + 1].start() if index + 1 < len(matches) else len(content)
    return content[match.end() : end]
  return None


def _check_sequence(content: str, expected: int, *, label: str) -> list[str]:
  numbers = [number for number, _ in section_headings(content)]
  if numbers == list(range(1, expected + 1)):
    return []
  return [f"{label}: expected sections 1-{expected} in order, found {numbers or 'none'}."]


def validate_knowledge_card_content(content: str) -> list[str]:
  """Check the 13-section skeleton of a knowledge card."""
  if not (content or "").strip():
    return ["content: empty."]
  return _check_sequence(content, KNOWLEDGE_CARD_SECTIONS, label="content")


def validate_lesson_plan_content(content: str) -> list[str]:
  """Check the two-variant, nine-section skeleton of a lesson plan."""
  if not (content or "").strip():
    return ["content: empty."]

  variants = split_lesson_variants(content)
  if len(variants) != LESSON_PLAN_VARIANTS:
    return [f"content: expected {LESSON_PLAN_VARIANTS} lesson variants separated by '---', found {len(variants)}."]

  errors: list[str] = []
  for index, variant in enumerate(variants, start=1):
    label = f"variant {index}"
    sequence_errors = _check_sequence(variant, LESSON_PLAN_SECTIONS, label=label)
    errors.extend(sequence_errors)
    if sequence_errors:
      continue

    checklist = section_body(variant, LESSON_CHECKLIST_SECTION) or ""
    items = len(_CHECKLIST_RE.findall(checklist))
    if items != LESSON_CHECKLIST_ITEMS:
      errors.append(f"{label}: section {LESSON_CHECKLIST_SECTION} must have exactly {LESSON_CHECKLIST_ITEMS} checklist items, found {items}.")

    media = section_body(variant, LESSON_MEDIA_SECTION) or ""
    if _FILE_REF_RE.search(media):
      errors.append(f"{label}: section {LESSON_MEDIA_SECTION} must reference media ids only, not files or URLs.")
  return errors


def parse_meta_json(raw: str) -> dict[str, Any]:
  """Parse a meta_json blob, requiring a JSON object."""
  try:
    parsed = json.loads(raw)
  except (TypeError, json.JSONDecodeError) as exc:
    raise MetaJsonError(f"meta_json is not valid JSON: {exc}") from exc
  if not isinstance(parsed, dict):
    raise MetaJsonError("meta_json must be a JSON object.")
  return parsed


def normalize_meta_json(raw: str) -> str:
  """Return the blob as a single line, re-serializing only when it spans lines."""
  text = (raw or "").strip()
  parsed = parse_meta_json(text)
  if "\n" not in text and "\r" not in text:
    return text
  return json.dumps(parsed, ensure_ascii=False, separators=(", ", ": "))


def validate_meta(kind: RecordKind, raw: str) -> list[str]:
  """Check a meta_json blob against the key set for its record kind."""
  if "\n" in (raw or "") or "\r" in (raw or ""):
    return ["meta_json: must be a single line."]
  try:
    meta = parse_meta_json(raw)
  except MetaJsonError as exc:
    return [str(exc)]

  expected = LESSON_PLAN_META_KEYS if kind is RecordKind.LESSON_PLAN else KNOWLEDGE_CARD_META_KEYS
  errors = _key_errors("meta_json", set(meta), expected)
  if kind is RecordKind.LESSON_PLAN and "keyword_policy" in meta:
    policy = meta["keyword_policy"]
    if not isinstance(policy, dict):
      errors.append("meta_json.keyword_policy: must be an object.")
    else:
      errors.extend(_key_errors("meta_json.keyword_policy", set(policy), KEYWORD_POLICY_KEYS))
  return errors


def _key_errors(label: str, found: set[str], expected: frozenset[str]) -> list[str]:
  errors: list[str] = []
  missing = sorted(expected - found)
  extra = sorted(found - expected)
  if missing:
    errors.append(f"{label}: missing keys {', '.join(missing)}.")
  if extra:
    errors.append(f"{label}: unexpected keys {', '.join(extra)}.")
  return errors


def validate_record_structure(kind: RecordKind, content: str, meta_json: str) -> list[str]:
  """Run the content and meta checks for a record kind."""
  if kind is RecordKind.LESSON_PLAN:
    errors = validate_lesson_plan_content(content)
  else:
    errors = validate_knowledge_card_content(content)
  return errors + validate_meta(kind, meta_json)


def headings_preserved(before: str, after: str) -> bool:
  """True when an edit kept every section heading, in the same order."""
  return [heading for _, heading in section_headings(before)] == [heading for _, heading in section_headings(after)]
