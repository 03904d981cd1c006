from __future__ import annotations

from hqdesk.schema.records import RecordKind
from hqdesk.utils.ids import brand_code, next_sequential_id, sequence_suffix


def test_empty_collection_starts_at_001() -> None:
  assert next_sequential_id("ACME", RecordKind.KNOWLEDGE_CARD, []) == "ACME-TOPIC-001"


def test_next_id_follows_the_highest_suffix_without_filling_gaps() -> None:
  assert next_sequential_id("ACME", RecordKind.KNOWLEDGE_CARD, ["ACME-TOPIC-001", "ACME-TOPIC-003"]) == "ACME-TOPIC-004"


def test_other_brands_and_kinds_do_not_count() -> None:
  existing = ["ACME-LESSON-009", "OTHER-TOPIC-050", "ACME-TOPIC-002"]
  assert next_sequential_id("ACME", RecordKind.KNOWLEDGE_CARD, existing) == "ACME-TOPIC-003"
  assert next_sequential_id("ACME", RecordKind.LESSON_PLAN, existing) == "ACME-LESSON-010"


def test_brand_label_is_reduced_to_its_code() -> None:
  assert brand_code("YYS | 燿宇的游泳學校") == "YYS"
  assert brand_code(" leader |鐵人") == "LEADER"
  assert next_sequential_id("YYS | 燿宇的游泳學校", RecordKind.LESSON_PLAN, ["yys-lesson-007"]) == "YYS-LESSON-008"


def test_non_numeric_suffixes_are_ignored() -> None:
  assert sequence_suffix("ACME-TOPIC-DRAFT") is None
  assert next_sequential_id("ACME", RecordKind.KNOWLEDGE_CARD, ["ACME-TOPIC-DRAFT", "", "ACME-TOPIC-012"]) == "ACME-TOPIC-013"


def test_suffix_beyond_padding_width_keeps_counting() -> None:
  assert next_sequential_id("ACME", RecordKind.KNOWLEDGE_CARD, ["ACME-TOPIC-999"]) == "ACME-TOPIC-1000"


def test_digit_like_characters_that_int_rejects_are_ignored() -> None:
  assert sequence_suffix("ACME-TOPIC-²") is None
  assert sequence_suffix("ACME-TOPIC-٣") is None
  assert next_sequential_id("ACME", RecordKind.KNOWLEDGE_CARD, ["ACME-TOPIC-²", "ACME-TOPIC-004"]) == "ACME-TOPIC-005"
