"""Record models shared by the workflow controller, store client and generation client."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

INSUFFICIENT_SOURCE_PLACEHOLDER = "目前內文資料不足，可日後補充"
NO_MEDIA_PLACEHOLDER = "目前尚未設定影像素材"
MAX_MUST_FIX_ITEMS = 7


class RecordKind(str, Enum):
  """Kind of authored record; each kind maps to one store collection."""

  KNOWLEDGE_CARD = "KNOWLEDGE_CARD"
  LESSON_PLAN = "LESSON_PLAN"

  @property
  def id_tag(self) -> str:
    """Tag embedded in record ids for this kind."""
    return "LESSON" if self is RecordKind.LESSON_PLAN else "TOPIC"

  @classmethod
  def from_id(cls, record_id: str) -> RecordKind | None:
    """Infer a kind from the legacy id tag convention (`-TOPIC-` / `-LESSON-`)."""
    upper = (record_id or "").upper()
    if "-LESSON-" in upper:
      return cls.LESSON_PLAN
    if "-TOPIC-" in upper:
      return cls.KNOWLEDGE_CARD
    return None


class RecordStatus(str, Enum):
  """Lifecycle status of a record; only draft -> approved is allowed."""

  DRAFT = "draft"
  APPROVED = "approved"


class Record(BaseModel):
  """A knowledge card or lesson plan held by the controller or fetched from the store."""

  id: StrictStr = Field(min_length=1)
  kind: RecordKind
  topic_name: StrictStr = ""
  brand: StrictStr = ""
  domain: StrictStr = ""
  content: StrictStr = ""
  summary: StrictStr = ""
  keywords: list[StrictStr] = Field(default_factory=list)
  meta_json: StrictStr = ""
  status: RecordStatus = RecordStatus.DRAFT
  approved_by: StrictStr | None = None
  approved_at: StrictStr | None = None
  updated_at: StrictStr | None = None
  origin: Literal["local", "remote"] = "local"

  model_config = ConfigDict(extra="forbid")

  @field_validator("keywords", mode="before")
  @classmethod
  def normalize_keywords(cls, value: object) -> object:
    """Accept comma-joined text and drop blanks and duplicates while keeping order."""
    if isinstance(value, str):
      return split_keywords(value)
    if isinstance(value, list):
      return split_keywords(",".join(str(item) for item in value))
    return value

  @property
  def is_approved(self) -> bool:
    return self.status is RecordStatus.APPROVED

  def keywords_text(self) -> str:
    """Render keywords the way the edit buffer and the store expect them."""
    return ", ".join(self.keywords)


def split_keywords(raw: str) -> list[str]:
  """Split comma-joined keywords, stripping blanks and suppressing duplicates."""
  seen: set[str] = set()
  ordered: list[str] = []
  # Full-width commas appear in hand-edited sheets.
  for item in raw.replace("，", ",").split(","):
    keyword = item.strip()
    if not keyword or keyword in seen:
      continue
    seen.add(keyword)
    ordered.append(keyword)
  return ordered


class Draft(BaseModel):
  """Structured output of a draft generation call."""

  id: StrictStr
  topic_name: StrictStr
  brand: StrictStr
  domain: StrictStr
  content: StrictStr = Field(description="Markdown body following the fixed section skeleton.")
  summary: StrictStr = Field(description="One or two paragraph synopsis.")
  keywords: StrictStr = Field(description="Comma-joined keywords.")
  meta_json: StrictStr = Field(description="Single-line JSON metadata blob.")
  approved_by: StrictStr
  approved_at: StrictStr

  model_config = ConfigDict(extra="ignore")


class KnowledgeCardAudit(BaseModel):
  """Self-audit result for a knowledge card: a report and a corrected draft."""

  report: StrictStr = Field(description="Human-readable findings for rules R01-R08.")
  corrected_json: Draft | None = Field(default=None, description="Corrected version of the audited card.")

  model_config = ConfigDict(extra="ignore")


class AuditCheck(BaseModel):
  """One line of an itemized audit checklist."""

  rule: StrictStr
  passed: bool
  note: StrictStr = ""

  model_config = ConfigDict(extra="ignore")


class ApprovedFields(BaseModel):
  approved_by: StrictStr | None = None
  approved_at: StrictStr | None = None

  model_config = ConfigDict(extra="ignore")


class LessonPlanAudit(BaseModel):
  """HQ review card for a lesson plan."""

  result: Literal["pass", "needs_fix", "fail"] = Field(description="pass, needs_fix or fail.")
  checklist: list[AuditCheck] = Field(default_factory=list, description="Itemized rule results.")
  must_fix: list[StrictStr] = Field(default_factory=list, max_length=MAX_MUST_FIX_ITEMS, description="Imperative fix instructions, at most 7.")
  quick_notes: StrictStr = Field(default="", description="One-sentence reason.")
  approved_fields: ApprovedFields = Field(default_factory=ApprovedFields)

  model_config = ConfigDict(extra="ignore")

  @field_validator("result", mode="before")
  @classmethod
  def normalize_verdict(cls, value: object) -> object:
    """Map the review card's emoji verdicts onto the enum values."""
    if not isinstance(value, str):
      return value
    mapping = {"✅": "pass", "🔁": "needs_fix", "❌": "fail", "need_fix": "needs_fix", "needs fix": "needs_fix"}
    stripped = value.strip()
    return mapping.get(stripped, stripped.lower())

  @field_validator("must_fix", mode="before")
  @classmethod
  def clamp_must_fix(cls, value: object) -> object:
    if isinstance(value, list):
      return [item for item in value if isinstance(item, str) and item.strip()][:MAX_MUST_FIX_ITEMS]
    return value

  def render_report(self) -> str:
    """Render the review card as plain text for display beside the record."""
    lines = [f"result: {self.result}"]
    if self.quick_notes:
      lines.append(f"notes: {self.quick_notes}")
    for check in self.checklist:
      mark = "x" if check.passed else " "
      suffix = f" ({check.note})" if check.note else ""
      lines.append(f"- [{mark}] {check.rule}{suffix}")
    if self.must_fix:
      lines.append("must_fix:")
      lines.extend(f"{index}. {item}" for index, item in enumerate(self.must_fix, start=1))
    return "\n".join(lines)
