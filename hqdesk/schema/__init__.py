"""Schema package exports."""

from .records import Draft, KnowledgeCardAudit, LessonPlanAudit, Record, RecordKind, RecordStatus, split_keywords
from .service import response_schema
from .validate_record import MetaJsonError, headings_preserved, normalize_meta_json, validate_meta, validate_record_structure

__all__ = [
  "Draft",
  "KnowledgeCardAudit",
  "LessonPlanAudit",
  "MetaJsonError",
  "Record",
  "RecordKind",
  "RecordStatus",
  "headings_preserved",
  "normalize_meta_json",
  "response_schema",
  "split_keywords",
  "validate_meta",
  "validate_record_structure",
]
