from __future__ import annotations

import pytest

from hqdesk.schema.records import Record, RecordKind, split_keywords
from hqdesk.schema.validate_record import MetaJsonError, headings_preserved, normalize_meta_json, validate_meta, validate_record_structure
from tests.helpers import load_fixture


def test_bundled_drafts_satisfy_their_skeletons() -> None:
  card = load_fixture("knowledge_card_draft")
  lesson = load_fixture("lesson_plan_draft")
  assert validate_record_structure(RecordKind.KNOWLEDGE_CARD, card["content"], card["meta_json"]) == []
  assert validate_record_structure(RecordKind.LESSON_PLAN, lesson["content"], lesson["meta_json"]) == []


def test_missing_knowledge_card_section_is_reported() -> None:
  card = load_fixture("knowledge_card_draft")
  content = card["content"].replace("#### 十三、備註", "#### 備註")
  problems = validate_record_structure(RecordKind.KNOWLEDGE_CARD, content, card["meta_json"])
  assert problems and "1-13" in problems[0]


def test_lesson_plan_needs_both_variants() -> None:
  lesson = load_fixture("lesson_plan_draft")
  first_variant = lesson["content"].split("\n---\n")[0]
  problems = validate_record_structure(RecordKind.LESSON_PLAN, first_variant, lesson["meta_json"])
  assert any("2 lesson variants" in problem for problem in problems)


def test_lesson_plan_checklist_needs_exactly_five_items() -> None:
  lesson = load_fixture("lesson_plan_draft")
  content = lesson["content"].replace("- [ ]", "-", 1)
  problems = validate_record_structure(RecordKind.LESSON_PLAN, content, lesson["meta_json"])
  assert any("exactly 5 checklist items" in problem for problem in problems)


def test_lesson_plan_media_section_rejects_file_references() -> None:
  lesson = load_fixture("lesson_plan_draft")
  content = lesson["content"] + "\nfile_url: https://example.com/clip.mp4"
  problems = validate_record_structure(RecordKind.LESSON_PLAN, content, lesson["meta_json"])
  assert any("media ids only" in problem for problem in problems)


def test_meta_key_set_is_checked_per_kind() -> None:
  card = load_fixture("knowledge_card_draft")
  assert validate_meta(RecordKind.KNOWLEDGE_CARD, card["meta_json"]) == []
  problems = validate_meta(RecordKind.LESSON_PLAN, card["meta_json"])
  assert any("missing keys" in problem for problem in problems)


def test_multiline_meta_is_collapsed_and_invalid_meta_raises() -> None:
  assert normalize_meta_json('{\n  "a": 1\n}') == '{"a": 1}'
  assert normalize_meta_json('{"a":1}') == '{"a":1}'
  with pytest.raises(MetaJsonError):
    normalize_meta_json("{broken")
  with pytest.raises(MetaJsonError):
    normalize_meta_json("[1, 2]")


def test_headings_preserved_detects_renumbering() -> None:
  before = "#### 一、定義\n內容\n#### 二、對象\n內容"
  assert headings_preserved(before, "#### 一、定義\n新內容\n#### 二、對象\n內容")
  assert not headings_preserved(before, "#### 二、對象\n內容\n#### 一、定義\n內容")
  assert not headings_preserved(before, "#### 一、定義\n內容\n#### 三、對象\n內容")


def test_keywords_are_split_stripped_and_deduplicated() -> None:
  assert split_keywords("自由式, 換氣，自由式 ,, 節奏") == ["自由式", "換氣", "節奏"]
  record = Record(id="YYS-TOPIC-001", kind=RecordKind.KNOWLEDGE_CARD, keywords="a, b, a")
  assert record.keywords == ["a", "b"]
  assert record.keywords_text() == "a, b"
