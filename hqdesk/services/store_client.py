"""HTTP client for the spreadsheet-backed store (Apps Script web app)."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx
from hqdesk.config import Settings
from hqdesk.schema.records import Record, RecordKind, RecordStatus

logger = logging.getLogger(__name__)

# Positional column order of a `values` row.
ROW_COLUMNS: tuple[str, ...] = ("id", "topic_name", "brand", "domain", "content", "summary", "keywords", "meta_json", "status", "updated_at")

_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class QueryStatus(str, Enum):
  OK = "ok"
  CONFIG_MISSING = "config_missing"
  ERROR = "error"


@dataclass(frozen=True)
class QueryEvidence:
  """What was asked of the store and how much came back."""

  tab_name: str
  rows_returned: int
  query_used: str
  timestamp: str


@dataclass(frozen=True)
class QueryResult:
  records: tuple[Record, ...]
  status: QueryStatus
  evidence: QueryEvidence
  error: str | None = None

  @property
  def ok(self) -> bool:
    return self.status is QueryStatus.OK


@dataclass(frozen=True)
class AppendOutcome:
  success: bool
  reason: str | None = None
  response: dict[str, Any] = field(default_factory=dict)

  @classmethod
  def ok(cls, response: dict[str, Any] | None = None) -> AppendOutcome:
    return cls(success=True, response=response or {})

  @classmethod
  def failed(cls, reason: str) -> AppendOutcome:
    return cls(success=False, reason=reason)


class RemoteStoreClient:
  """Stateless query/append calls against the store endpoint.

  Neither call raises on transport or parse failures; failures come back as a
  status marker (query) or a failed outcome (append). Nothing is retried.
  """

  def __init__(
    self,
    address_provider: Callable[[], str | None],
    *,
    timeout_seconds: float = 30.0,
    approved_status_label: str = "已審定",
    require_confirmation: bool = False,
    transport: httpx.AsyncBaseTransport | None = None,
  ) -> None:
    self._address_provider = address_provider
    self._timeout = timeout_seconds
    self._approved_status_label = approved_status_label
    self._require_confirmation = require_confirmation
    self._transport = transport

  @classmethod
  def from_settings(cls, settings: Settings, address_provider: Callable[[], str | None], *, transport: httpx.AsyncBaseTransport | None = None) -> RemoteStoreClient:
    return cls(
      address_provider,
      timeout_seconds=settings.store_timeout_seconds,
      approved_status_label=settings.approved_status_label,
      require_confirmation=settings.store_require_confirmation,
      transport=transport,
    )

  @property
  def is_configured(self) -> bool:
    return bool(self._address_provider())

  def _build_client(self) -> httpx.AsyncClient:
    # Apps Script answers with a redirect to the content host.
    return httpx.AsyncClient(timeout=self._timeout, follow_redirects=True, transport=self._transport, trust_env=False)

  async def query(self, collection: str, kind: RecordKind, *, brand: str = "", domain: str = "", search_text: str = "") -> QueryResult:
    """Fetch rows from one collection; `kind` is the fallback for rows without an id tag."""
    address = self._address_provider()
    if not address:
      return _query_result(collection, search_text, (), QueryStatus.CONFIG_MISSING, "Store address is not configured.")

    params = {"action": "query", "tab": collection, "brand": brand, "domain": domain, "input": search_text}
    try:
      async with self._build_client() as client:
        response = await client.get(address, params=params)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as exc:
      logger.error("Store query returned %s for tab=%s", exc.response.status_code, collection)
      return _query_result(collection, search_text, (), QueryStatus.ERROR, f"Store returned HTTP {exc.response.status_code}.")
    except httpx.HTTPError as exc:
      logger.error("Store query failed for tab=%s: %s", collection, exc)
      return _query_result(collection, search_text, (), QueryStatus.ERROR, f"Store request failed: {exc}")
    except ValueError as exc:
      logger.error("Store query returned a non-JSON body for tab=%s: %s", collection, exc)
      return _query_result(collection, search_text, (), QueryStatus.ERROR, "Store returned a non-JSON body.")

    if not isinstance(data, dict) or not isinstance(data.get("values") or [], list):
      return _query_result(collection, search_text, (), QueryStatus.ERROR, "Store response has no row list.")
    if data.get("result") == "error" or ("error" in data and "values" not in data):
      message = str(data.get("error") or data.get("message") or "unknown error")
      logger.error("Store query rejected for tab=%s: %s", collection, message)
      return _query_result(collection, search_text, (), QueryStatus.ERROR, f"Store rejected the query: {message}")

    records: list[Record] = []
    for row in data.get("values") or []:
      record = row_to_record(row, kind)
      if record is not None:
        records.append(record)
    logger.info("Store query tab=%s rows=%d", collection, len(records))
    return _query_result(collection, search_text, tuple(records), QueryStatus.OK)

  async def append(self, record: Record, *, collection: str, approved_by: str, approved_at: str) -> AppendOutcome:
    """Append one approved record as a new row."""
    address = self._address_provider()
    if not address:
      return AppendOutcome.failed("no_url")

    payload = {
      "action": "append",
      "tab": collection,
      "id": record.id,
      "topic_name": record.topic_name,
      "brand": record.brand,
      "domain": record.domain,
      "content": record.content,
      "summary": record.summary,
      "keywords": record.keywords_text(),
      "meta_json": record.meta_json,
      "status": self._approved_status_label,
      "approved_by": approved_by,
      "approved_at": approved_at,
    }
    # Plain text keeps the request "simple" for the Apps Script endpoint.
    headers = {"Content-Type": "text/plain;charset=utf-8"}
    body = json.dumps(payload, ensure_ascii=False).encode("utf-8")

    try:
      async with self._build_client() as client:
        response = await client.post(address, content=body, headers=headers)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
      logger.error("Store append returned %s for id=%s", exc.response.status_code, record.id)
      return AppendOutcome.failed(f"Store returned HTTP {exc.response.status_code}.")
    except httpx.HTTPError as exc:
      logger.error("Store append failed for id=%s: %s", record.id, exc)
      return AppendOutcome.failed(f"Store request failed: {exc}")

    return self._interpret_append_response(record.id, response)

  def _interpret_append_response(self, record_id: str, response: httpx.Response) -> AppendOutcome:
    try:
      data = response.json()
    except ValueError:
      data = None

    if not isinstance(data, dict):
      if self._require_confirmation:
        logger.warning("Store append for id=%s was sent but not confirmed", record_id)
        return AppendOutcome.failed("unconfirmed")
      logger.info("Store append for id=%s sent without a readable confirmation", record_id)
      return AppendOutcome.ok()

    verdict = str(data.get("result") or data.get("status") or "").lower()
    if verdict == "error":
      message = str(data.get("error") or data.get("message") or "unknown error")
      logger.error("Store rejected append for id=%s: %s", record_id, message)
      return AppendOutcome.failed(f"Store rejected the write: {message}")
    if self._require_confirmation and verdict not in {"success", "ok"}:
      return AppendOutcome.failed("unconfirmed")

    logger.info("Store append confirmed for id=%s", record_id)
    return AppendOutcome.ok(data)


def row_to_record(row: Any, fallback_kind: RecordKind) -> Record | None:
  """Map one positional row onto a remote, approved record; rows without an id are skipped."""
  if not isinstance(row, (list, tuple)):
    return None
  cells = ["" if cell is None else str(cell) for cell in row[: len(ROW_COLUMNS)]]
  cells.extend([""] * (len(ROW_COLUMNS) - len(cells)))
  values = dict(zip(ROW_COLUMNS, cells))

  record_id = values["id"].strip()
  if not record_id:
    logger.debug("Skipping store row without an id")
    return None

  return Record(
    id=record_id,
    kind=RecordKind.from_id(record_id) or fallback_kind,
    topic_name=values["topic_name"],
    brand=values["brand"],
    domain=values["domain"],
    content=values["content"],
    summary=values["summary"],
    keywords=values["keywords"],
    meta_json=values["meta_json"],
    # Only approved records are ever written to the store.
    status=RecordStatus.APPROVED,
    updated_at=values["updated_at"] or None,
    origin="remote",
  )


def _query_result(collection: str, search_text: str, records: tuple[Record, ...], status: QueryStatus, error: str | None = None) -> QueryResult:
  evidence = QueryEvidence(tab_name=collection, rows_returned=len(records), query_used=search_text, timestamp=time.strftime(_DATE_FORMAT, time.gmtime()))
  return QueryResult(records=records, status=status, evidence=evidence, error=error)
