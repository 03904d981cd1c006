"""Remote store client behaviour against a mocked Apps Script endpoint."""

from __future__ import annotations

import httpx
import pytest

from hqdesk.schema.records import Record, RecordKind, RecordStatus
from hqdesk.services.store_client import QueryStatus, RemoteStoreClient
from tests.helpers import STORE_URL, StoreRecorder


def _client(recorder, *, address: str | None = STORE_URL, **kwargs) -> RemoteStoreClient:
  return RemoteStoreClient(lambda: address, transport=httpx.MockTransport(recorder), **kwargs)


def _record() -> Record:
  return Record(
    id="YYS-TOPIC-001",
    kind=RecordKind.KNOWLEDGE_CARD,
    topic_name="自由式換氣",
    brand="YYS | 燿宇的游泳學校",
    domain="游泳 (Swimming)",
    content="#### 一、定義\n內容",
    summary="摘要",
    keywords=["自由式", "換氣"],
    meta_json='{"brand": "YYS"}',
  )


@pytest.mark.anyio
async def test_query_maps_rows_positionally() -> None:
  rows = [["YYS-TOPIC-001", "自由式換氣", "YYS", "游泳", "#### 一、定義", "摘要", "自由式, 換氣", "{}", "已審定", "2026-01-02"]]
  recorder = StoreRecorder(rows=rows)

  result = await _client(recorder).query("主題知識卡", RecordKind.KNOWLEDGE_CARD, brand="YYS", search_text="換氣")

  assert result.status is QueryStatus.OK
  record = result.records[0]
  assert record.id == "YYS-TOPIC-001"
  assert record.keywords == ["自由式", "換氣"]
  assert record.status is RecordStatus.APPROVED
  assert record.updated_at == "2026-01-02"
  assert record.origin == "remote"
  params = recorder.queries[0].url.params
  assert params["action"] == "query"
  assert params["tab"] == "主題知識卡"
  assert params["brand"] == "YYS"
  assert params["domain"] == ""
  assert params["input"] == "換氣"
  assert result.evidence.rows_returned == 1
  assert result.evidence.tab_name == "主題知識卡"
  assert result.evidence.query_used == "換氣"


@pytest.mark.anyio
async def test_query_pads_short_rows_and_skips_rows_without_id() -> None:
  recorder = StoreRecorder(rows=[["YYS-LESSON-002", "蛙式"], ["", "orphan"], "not-a-row"])

  result = await _client(recorder).query("主題知識卡", RecordKind.KNOWLEDGE_CARD)

  assert [record.id for record in result.records] == ["YYS-LESSON-002"]
  # The id tag wins over the collection the row was read from.
  assert result.records[0].kind is RecordKind.LESSON_PLAN
  assert result.records[0].content == ""


@pytest.mark.anyio
async def test_query_without_address_reports_config_missing() -> None:
  recorder = StoreRecorder()

  result = await _client(recorder, address=None).query("主題知識卡", RecordKind.KNOWLEDGE_CARD)

  assert result.status is QueryStatus.CONFIG_MISSING
  assert result.records == ()
  assert recorder.requests == []


@pytest.mark.anyio
@pytest.mark.parametrize(
  "response",
  [httpx.Response(500, text="boom"), httpx.Response(200, text="<html>login</html>"), httpx.Response(200, json={"result": "error", "error": "bad tab"})],
)
async def test_query_failures_come_back_as_error_status(response: httpx.Response) -> None:
  result = await _client(StoreRecorder(query_response=response)).query("主題知識卡", RecordKind.KNOWLEDGE_CARD)

  assert result.status is QueryStatus.ERROR
  assert result.records == ()
  assert result.error


@pytest.mark.anyio
async def test_query_transport_error_never_raises() -> None:
  def handler(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("unreachable", request=request)

  result = await _client(handler).query("主題知識卡", RecordKind.KNOWLEDGE_CARD)

  assert result.status is QueryStatus.ERROR


@pytest.mark.anyio
async def test_append_posts_plain_text_json_payload() -> None:
  recorder = StoreRecorder()

  outcome = await _client(recorder).append(_record(), collection="主題知識卡", approved_by="HQ", approved_at="2026-03-01T08:00:00Z")

  assert outcome.success
  request = recorder.requests[0]
  assert request.method == "POST"
  assert request.headers["content-type"].startswith("text/plain")
  payload = recorder.appends[0]
  assert payload["action"] == "append"
  assert payload["tab"] == "主題知識卡"
  assert payload["keywords"] == "自由式, 換氣"
  assert payload["status"] == "已審定"
  assert payload["approved_by"] == "HQ"
  assert payload["approved_at"] == "2026-03-01T08:00:00Z"


@pytest.mark.anyio
async def test_append_without_address_fails_with_no_url() -> None:
  recorder = StoreRecorder()

  outcome = await _client(recorder, address=None).append(_record(), collection="主題知識卡", approved_by="HQ", approved_at="now")

  assert not outcome.success
  assert outcome.reason == "no_url"
  assert recorder.requests == []


@pytest.mark.anyio
async def test_append_rejections_and_transport_errors_fail() -> None:
  rejected = StoreRecorder(append_response=httpx.Response(200, json={"result": "error", "message": "locked"}))
  assert not (await _client(rejected).append(_record(), collection="t", approved_by="HQ", approved_at="now")).success

  server_error = StoreRecorder(append_response=httpx.Response(503))
  assert not (await _client(server_error).append(_record(), collection="t", approved_by="HQ", approved_at="now")).success

  def handler(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("slow", request=request)

  outcome = await _client(handler).append(_record(), collection="t", approved_by="HQ", approved_at="now")
  assert not outcome.success
  assert "failed" in outcome.reason


@pytest.mark.anyio
async def test_unreadable_confirmation_counts_as_sent_unless_required() -> None:
  unreadable = httpx.Response(200, text="<html>ok</html>")

  lenient = await _client(StoreRecorder(append_response=unreadable)).append(_record(), collection="t", approved_by="HQ", approved_at="now")
  assert lenient.success

  strict = await _client(StoreRecorder(append_response=httpx.Response(200, text="<html>ok</html>")), require_confirmation=True).append(_record(), collection="t", approved_by="HQ", approved_at="now")
  assert not strict.success
  assert strict.reason == "unconfirmed"


@pytest.mark.anyio
async def test_append_follows_the_apps_script_redirect() -> None:
  def handler(request: httpx.Request) -> httpx.Response:
    if request.url.host == "script.google.com":
      return httpx.Response(302, headers={"location": "https://script.googleusercontent.com/echo?id=1"})
    return httpx.Response(200, json={"result": "success"})

  outcome = await _client(handler).append(_record(), collection="t", approved_by="HQ", approved_at="now")

  assert outcome.success
  assert outcome.response == {"result": "success"}
