"""Record workflow controller: generate, edit, self-audit and approve records."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

from hqdesk.ai.errors import AuditError, GenerationError
from hqdesk.ai.generation import GenerationClient
from hqdesk.config import Settings
from hqdesk.schema.records import Draft, LessonPlanAudit, Record, RecordKind, RecordStatus, split_keywords
from hqdesk.schema.validate_record import MetaJsonError, headings_preserved, normalize_meta_json
from hqdesk.services.errors import (
  AuditFailedError,
  EditRejectedError,
  GenerationFailedError,
  InputValidationError,
  NoCurrentRecordError,
  OperationInProgressError,
  PersistenceFailedError,
  RecordLockedError,
  RecordNotFoundError,
  StoreUnavailableError,
  WorkflowError,
)
from hqdesk.services.finder import FinderFilter, merge_results
from hqdesk.services.store_client import QueryResult, QueryStatus, RemoteStoreClient
from hqdesk.utils.ids import next_sequential_id

logger = logging.getLogger(__name__)

Operation = Literal["generate", "audit", "approve", "search"]
NoticeLevel = Literal["info", "success", "error"]

MAX_NOTICES = 50


@dataclass
class EditBuffer:
  """Scratch copy of the editable fields; keywords are held as comma-joined text."""

  record_id: str
  content: str
  summary: str
  keywords: str
  meta_json: str

  @classmethod
  def from_record(cls, record: Record) -> EditBuffer:
    return cls(record_id=record.id, content=record.content, summary=record.summary, keywords=record.keywords_text(), meta_json=record.meta_json)


@dataclass(frozen=True)
class AuditOutcome:
  """Latest self-audit result, kept beside the record and never merged into content."""

  record_id: str
  kind: RecordKind
  report: str
  corrected: bool = False
  lesson_audit: LessonPlanAudit | None = None


@dataclass(frozen=True)
class Notice:
  level: NoticeLevel
  message: str
  code: str | None = None
  created_at: str = field(default_factory=lambda: _utc_now())


def _utc_now() -> str:
  return _format_utc(datetime.now(timezone.utc))


def _format_utc(moment: datetime) -> str:
  return moment.astimezone(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def _normalize_timestamp(value: str | None) -> str | None:
  """Return an ISO-8601 UTC string for a model-supplied timestamp, or None if it does not parse."""
  if not value or not value.strip():
    return None
  try:
    moment = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
  except ValueError:
    return None
  if moment.tzinfo is None:
    moment = moment.replace(tzinfo=timezone.utc)
  return _format_utc(moment)


class RecordWorkflowController:
  """Owns the in-memory record set and drives every user-triggered operation.

  Failures raise a `WorkflowError` subclass after being recorded as a notice;
  the in-memory state is left exactly as it was before the operation started.
  """

  def __init__(self, *, settings: Settings, generation: GenerationClient, store: RemoteStoreClient, clock: Callable[[], str] = _utc_now) -> None:
    self._settings = settings
    self._generation = generation
    self._store = store
    self._clock = clock
    self._records: list[Record] = []
    self._remote: list[Record] = []
    self._last_query: QueryResult | None = None
    self._current_id: str | None = None
    self._edit: EditBuffer | None = None
    self._audit: AuditOutcome | None = None
    self._busy: set[str] = set()
    self._notices: deque[Notice] = deque(maxlen=MAX_NOTICES)

  # State accessors

  @property
  def records(self) -> list[Record]:
    return list(self._records)

  @property
  def remote_records(self) -> list[Record]:
    return list(self._remote)

  @property
  def current_record(self) -> Record | None:
    if self._current_id is None:
      return None
    return self._find_local(self._current_id)

  @property
  def edit_buffer(self) -> EditBuffer | None:
    return self._edit

  @property
  def is_editing(self) -> bool:
    return self._edit is not None

  @property
  def audit_outcome(self) -> AuditOutcome | None:
    return self._audit

  @property
  def busy(self) -> dict[str, bool]:
    return {name: name in self._busy for name in ("generate", "audit", "approve", "search")}

  @property
  def notices(self) -> list[Notice]:
    return list(self._notices)

  def collection_for(self, kind: RecordKind) -> str:
    return self._settings.lesson_plan_tab if kind is RecordKind.LESSON_PLAN else self._settings.knowledge_card_tab

  # Operations

  async def generate(self, *, kind: RecordKind, brand: str, domain: str, topic_name: str, source_text: str, related_topic_id: str | None = None) -> Record:
    """Draft a new record and make it current.

    The id comes from the brand/kind sequence over the latest store rows plus
    the local set; an id proposed by the model is ignored.
    """
    missing = [name for name, value in (("brand", brand), ("domain", domain), ("topic_name", topic_name), ("source_text", source_text)) if not (value or "").strip()]
    if missing:
      raise self._surface(InputValidationError(f"Required fields are empty: {', '.join(missing)}."))

    with self._operation("generate"):
      collection = self.collection_for(kind)
      latest = await self._store.query(collection, kind, brand=brand)
      if latest.status is QueryStatus.ERROR:
        raise StoreUnavailableError(f"Could not read the latest {collection} ids, so a unique id cannot be assigned: {latest.error}")

      known_ids = [record.id for record in latest.records] + [record.id for record in self._records]
      record_id = next_sequential_id(brand, kind, known_ids)

      try:
        if kind is RecordKind.LESSON_PLAN:
          draft = await self._generation.draft_lesson_plan(brand=brand, domain=domain, topic_name=topic_name, source_text=source_text, related_topic_id=related_topic_id)
        else:
          draft = await self._generation.draft_knowledge_card(brand=brand, domain=domain, topic_name=topic_name, source_text=source_text)
      except GenerationError as exc:
        raise GenerationFailedError(f"Generation failed ({exc.category}): {exc.reason}") from exc

      record = self._draft_to_record(draft, record_id=record_id, kind=kind, brand=brand, domain=domain, topic_name=topic_name)
      self._records.insert(0, record)
      self._current_id = record.id
      self._edit = None
      self._audit = None
      logger.info("Generated %s id=%s", kind.value, record.id)
      self._notify("success", f"Draft {record.id} generated.")
      return record

  def select(self, record_id: str) -> Record:
    """Make a record current, copying a remote-only record into the local set.

    Switching away from a record in edit mode commits its scratch buffer first;
    a rejected commit keeps both the edit and the current record.
    """
    record = self._find_local(record_id)
    remote = None
    if record is None:
      remote = next((item for item in self._remote if item.id == record_id), None)
      if remote is None:
        raise self._surface(RecordNotFoundError(f"Record {record_id} was not found."))

    if self._current_id != record_id:
      if self._edit is not None:
        try:
          self._commit_edit()
        except WorkflowError as exc:
          self._surface(exc)
          raise
      self._edit = None
      self._audit = None

    if record is None:
      record = remote.model_copy()
      self._records.insert(0, record)
    self._current_id = record.id
    return record

  def toggle_edit(self) -> Record:
    """Enter edit mode, or commit the scratch buffer and leave it."""
    record = self._require_current()
    if self._edit is None:
      if record.is_approved:
        raise self._surface(RecordLockedError(f"Record {record.id} is approved and can no longer be edited."))
      self._edit = EditBuffer.from_record(record)
      return record

    try:
      committed = self._commit_edit()
    except WorkflowError as exc:
      self._surface(exc)
      raise
    self._edit = None
    return committed

  def update_scratch(self, *, content: str | None = None, summary: str | None = None, keywords: str | None = None, meta_json: str | None = None) -> EditBuffer:
    if self._edit is None:
      raise self._surface(InputValidationError("Edit mode is not active."))
    if content is not None:
      self._edit.content = content
    if summary is not None:
      self._edit.summary = summary
    if keywords is not None:
      self._edit.keywords = keywords
    if meta_json is not None:
      self._edit.meta_json = meta_json
    return self._edit

  async def audit(self) -> AuditOutcome:
    """Self-audit the current record; knowledge-card corrections are applied in place."""
    record = self._require_current()
    if record.is_approved:
      raise self._surface(RecordLockedError(f"Record {record.id} is already approved."))

    with self._operation("audit"):
      if self._edit is not None:
        record = self._commit_edit()
        self._edit = None
      if not record.content.strip():
        raise InputValidationError("The current record has no content to audit.")

      try:
        if record.kind is RecordKind.KNOWLEDGE_CARD:
          outcome = await self._audit_knowledge_card(record)
        else:
          lesson_audit = await self._generation.audit_lesson_plan(content=record.content, meta_json=record.meta_json)
          outcome = AuditOutcome(record_id=record.id, kind=record.kind, report=lesson_audit.render_report(), lesson_audit=lesson_audit)
      except AuditError as exc:
        raise AuditFailedError(f"Audit failed ({exc.category}): {exc.reason}") from exc

      self._audit = outcome
      logger.info("Audited id=%s corrected=%s", record.id, outcome.corrected)
      self._notify("success", f"Audit of {record.id} completed.")
      return outcome

  async def _audit_knowledge_card(self, record: Record) -> AuditOutcome:
    result = await self._generation.audit_knowledge_card(record)
    corrected = result.corrected_json
    if corrected is not None:
      updated = record.model_copy(update={"content": corrected.content, "summary": corrected.summary, "keywords": split_keywords(corrected.keywords), "meta_json": corrected.meta_json})
      self._replace_local(updated)
    return AuditOutcome(record_id=record.id, kind=record.kind, report=result.report, corrected=corrected is not None)

  async def approve(self) -> Record:
    """Append the current record to the store and mark it approved on success."""
    record = self._require_current()
    if record.is_approved:
      raise self._surface(RecordLockedError(f"Record {record.id} is already approved."))

    with self._operation("approve"):
      if self._edit is not None:
        record = self._commit_edit()
        self._edit = None

      approved_by, approved_at = self._approval_identity(record)
      outcome = await self._store.append(record, collection=self.collection_for(record.kind), approved_by=approved_by, approved_at=approved_at)
      if not outcome.success:
        raise PersistenceFailedError(f"Saving {record.id} to the store failed: {outcome.reason}")

      approved = record.model_copy(update={"status": RecordStatus.APPROVED, "approved_by": approved_by, "approved_at": approved_at})
      self._replace_local(approved)
      logger.info("Approved id=%s by=%s", approved.id, approved_by)
      self._notify("success", f"{approved.id} approved and saved.")

    if self._store.is_configured:
      await self._refresh_remote(approved.kind, "")
    return approved

  async def search(self, kind: RecordKind, *, search_text: str = "") -> QueryResult:
    """Refresh the remote result set for one collection.

    Brand and domain are not sent; all filtering happens in `results()`.
    """
    with self._operation("search"):
      return await self._refresh_remote(kind, search_text)

  def results(self, finder_filter: FinderFilter) -> list[Record]:
    return merge_results(self._records, self._remote, finder_filter)

  def get_record(self, record_id: str) -> Record:
    record = self._find_local(record_id) or next((item for item in self._remote if item.id == record_id), None)
    if record is None:
      raise RecordNotFoundError(f"Record {record_id} was not found.")
    return record

  @property
  def last_query(self) -> QueryResult | None:
    return self._last_query

  def snapshot(self) -> dict[str, Any]:
    """Plain-data view of the workspace for the presentation layer."""
    current = self.current_record
    audit = self._audit
    return {
      "current": current.model_dump(mode="json") if current else None,
      "editing": self._edit is not None,
      "edit_buffer": asdict(self._edit) if self._edit else None,
      "audit": {
        "record_id": audit.record_id,
        "kind": audit.kind.value,
        "report": audit.report,
        "corrected": audit.corrected,
        "lesson_audit": audit.lesson_audit.model_dump(mode="json") if audit.lesson_audit else None,
      }
      if audit
      else None,
      "local_count": len(self._records),
      "remote_count": len(self._remote),
      "busy": self.busy,
      "notices": [asdict(notice) for notice in self._notices],
    }

  # Internals

  @contextmanager
  def _operation(self, name: Operation) -> Iterator[None]:
    if name in self._busy:
      raise self._surface(OperationInProgressError(f"A {name} operation is already in progress."))
    self._busy.add(name)
    try:
      yield
    except WorkflowError as exc:
      self._surface(exc)
      raise
    finally:
      self._busy.discard(name)

  def _surface(self, exc: WorkflowError) -> WorkflowError:
    logger.warning("Workflow error code=%s message=%s", exc.code, exc.message)
    self._notify("error", exc.message, code=exc.code)
    return exc

  def _notify(self, level: NoticeLevel, message: str, *, code: str | None = None) -> None:
    self._notices.append(Notice(level=level, message=message, code=code, created_at=self._clock()))

  def _require_current(self) -> Record:
    record = self.current_record
    if record is None:
      raise self._surface(NoCurrentRecordError("No record is selected."))
    return record

  def _find_local(self, record_id: str) -> Record | None:
    return next((record for record in self._records if record.id == record_id), None)

  def _replace_local(self, record: Record) -> None:
    for index, existing in enumerate(self._records):
      if existing.id == record.id:
        self._records[index] = record
        return
    self._records.insert(0, record)

  def _commit_edit(self) -> Record:
    """Write changed scratch fields back to the current record; untouched fields stay as they were."""
    buffer = self._edit
    record = self._require_current()
    if buffer is None or buffer.record_id != record.id:
      return record

    updates: dict[str, Any] = {}
    if buffer.content != record.content:
      if not headings_preserved(record.content, buffer.content):
        raise EditRejectedError("Section headings must not be renumbered, renamed or reordered.")
      updates["content"] = buffer.content
    if buffer.summary != record.summary:
      updates["summary"] = buffer.summary
    if buffer.keywords != record.keywords_text():
      updates["keywords"] = split_keywords(buffer.keywords)
    if buffer.meta_json != record.meta_json:
      try:
        updates["meta_json"] = normalize_meta_json(buffer.meta_json)
      except MetaJsonError as exc:
        raise EditRejectedError(f"meta_json is not valid JSON: {exc}") from exc

    if not updates:
      return record
    updated = record.model_copy(update=updates)
    self._replace_local(updated)
    if self._audit is not None and self._audit.record_id == record.id and ("content" in updates or "meta_json" in updates):
      # The verdict no longer describes the record.
      self._audit = None
    logger.info("Committed edit id=%s fields=%s", record.id, sorted(updates))
    return updated

  def _approval_identity(self, record: Record) -> tuple[str, str]:
    audit = self._audit
    if audit is not None and audit.record_id == record.id and audit.lesson_audit is not None and audit.lesson_audit.result == "pass":
      fields = audit.lesson_audit.approved_fields
      if fields.approved_by and fields.approved_by.strip():
        return fields.approved_by.strip(), _normalize_timestamp(fields.approved_at) or self._clock()
    return self._settings.default_reviewer, self._clock()

  async def _refresh_remote(self, kind: RecordKind, search_text: str) -> QueryResult:
    result = await self._store.query(self.collection_for(kind), kind, search_text=search_text)
    self._last_query = result
    # A failed or unconfigured search degrades to an empty remote set.
    self._remote = list(result.records)
    if result.status is QueryStatus.ERROR:
      self._notify("error", f"Store search failed: {result.error}", code="store_unavailable")
    return result

  def _draft_to_record(self, draft: Draft, *, record_id: str, kind: RecordKind, brand: str, domain: str, topic_name: str) -> Record:
    return Record(
      id=record_id,
      kind=kind,
      topic_name=draft.topic_name.strip() or topic_name.strip(),
      brand=brand,
      domain=domain,
      content=draft.content,
      summary=draft.summary,
      keywords=split_keywords(draft.keywords),
      meta_json=draft.meta_json,
      status=RecordStatus.DRAFT,
      origin="local",
    )
