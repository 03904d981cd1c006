from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from hqdesk.schema.records import Record, RecordKind


class HealthResponse(BaseModel):
  status: Literal["ok"] = "ok"
  version: str


class CollectionInfo(BaseModel):
  kind: RecordKind
  tab: str


class CatalogResponse(BaseModel):
  """Choices the console renders in its brand/domain/collection pickers."""

  brands: list[str]
  domains: list[str]
  collections: list[CollectionInfo]
  poll_seconds: float
  default_reviewer: str


class ConnectionRequest(BaseModel):
  address: StrictStr = Field(min_length=1, description="Apps Script web app URL.", examples=["https://script.google.com/macros/s/AKfy.../exec"])


class ConnectionResponse(BaseModel):
  connected: bool
  host: str | None
  checked_at: str
  poll_seconds: float


class GenerateRequest(BaseModel):
  """Draft request; blank fields are rejected by the controller before any network call."""

  kind: RecordKind = RecordKind.KNOWLEDGE_CARD
  brand: StrictStr = ""
  domain: StrictStr = ""
  topic_name: StrictStr = ""
  source_text: StrictStr = ""
  related_topic_id: StrictStr | None = None

  model_config = ConfigDict(extra="forbid")


class EditRequest(BaseModel):
  """Partial scratch-buffer update; omitted fields are left as they are."""

  content: StrictStr | None = None
  summary: StrictStr | None = None
  keywords: StrictStr | None = None
  meta_json: StrictStr | None = None

  model_config = ConfigDict(extra="forbid")


class EditBufferResponse(BaseModel):
  record_id: str
  content: str
  summary: str
  keywords: str
  meta_json: str


class AuditResponse(BaseModel):
  record_id: str
  kind: RecordKind
  report: str
  corrected: bool
  lesson_audit: dict[str, Any] | None = None
  record: Record


class FinderSearchRequest(BaseModel):
  kind: RecordKind = RecordKind.KNOWLEDGE_CARD
  q: StrictStr = ""


class QueryEvidenceResponse(BaseModel):
  tab_name: str
  rows_returned: int
  query_used: str
  timestamp: str
  status: Literal["ok", "config_missing", "error"]
  error: str | None = None


class FinderResponse(BaseModel):
  results: list[Record]
  total: int
  evidence: QueryEvidenceResponse | None = None


class WorkspaceResponse(BaseModel):
  """Controller snapshot for the console."""

  current: Record | None
  editing: bool
  edit_buffer: EditBufferResponse | None
  audit: dict[str, Any] | None
  local_count: int
  remote_count: int
  busy: dict[str, bool]
  notices: list[dict[str, Any]]
  connection: ConnectionResponse
