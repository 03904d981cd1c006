from __future__ import annotations

from hqdesk.schema.records import Record, RecordKind, RecordStatus
from hqdesk.services.finder import FinderFilter, brand_matches, domain_matches, matches_filter, merge_results


def _record(record_id: str, **fields) -> Record:
  values = {"id": record_id, "kind": RecordKind.from_id(record_id) or RecordKind.KNOWLEDGE_CARD, "topic_name": "自由式換氣", "brand": "YYS", "domain": "游泳"}
  values.update(fields)
  return Record(**values)


def test_brand_matches_in_either_direction_ignoring_case() -> None:
  assert brand_matches("yys", "YYS | 燿宇的游泳學校")
  assert brand_matches("YYS | 燿宇的游泳學校", "YYS | 燿宇的游泳學校")
  assert brand_matches("Y", "YYS | 燿宇的游泳學校")
  assert not brand_matches("LEADER", "YYS | 燿宇的游泳學校")


def test_blank_brand_filter_matches_everything() -> None:
  assert brand_matches("LEADER", "")


def test_domain_matches_chinese_label_or_english_name() -> None:
  selected = "游泳 (Swimming)"
  assert domain_matches("游泳", selected)
  assert domain_matches("swimming", selected)
  assert domain_matches("Swimming basics", selected)
  assert not domain_matches("體能", selected)


def test_text_filter_matches_topic_name_or_id() -> None:
  record = _record("YYS-TOPIC-004", topic_name="蛙式蹬腿")
  assert matches_filter(record, FinderFilter(search_text="蹬腿"))
  assert matches_filter(record, FinderFilter(search_text="topic-004"))
  assert not matches_filter(record, FinderFilter(search_text="仰式"))


def test_kind_filter_uses_the_record_kind() -> None:
  lesson = _record("YYS-LESSON-001")
  assert matches_filter(lesson, FinderFilter(kind=RecordKind.LESSON_PLAN))
  assert not matches_filter(lesson, FinderFilter(kind=RecordKind.KNOWLEDGE_CARD))


def test_merge_keeps_one_entry_per_id_with_local_values() -> None:
  local = [_record("YYS-TOPIC-001", summary="local edit")]
  remote = [_record("YYS-TOPIC-001", summary="sheet copy", status=RecordStatus.APPROVED, origin="remote"), _record("YYS-TOPIC-002", origin="remote")]

  merged = merge_results(local, remote, FinderFilter(brand="YYS | 燿宇的游泳學校"))

  assert [record.id for record in merged] == ["YYS-TOPIC-001", "YYS-TOPIC-002"]
  assert merged[0].summary == "local edit"
  assert merged[0].origin == "local"


def test_local_record_filtered_out_does_not_hide_remote_match() -> None:
  local = [_record("YYS-TOPIC-001", topic_name="舊標題")]
  remote = [_record("YYS-TOPIC-001", topic_name="自由式換氣", origin="remote")]

  merged = merge_results(local, remote, FinderFilter(search_text="換氣"))

  assert len(merged) == 1
  assert merged[0].origin == "remote"
