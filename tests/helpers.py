"""Test doubles shared across the unit tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx

from hqdesk.ai.providers.base import AIModel, StructuredModelResponse
from hqdesk.config import DEFAULT_BRANDS, DEFAULT_DOMAINS, Settings

FIXTURES_DIR = Path(__file__).resolve().parents[1] / "hqdesk" / "ai" / "fixtures"
STORE_URL = "https://script.google.com/macros/s/test/exec"
FIXED_NOW = "2026-03-01T08:00:00Z"


def make_settings(**overrides: Any) -> Settings:
  values: dict[str, Any] = {
    "environment": "test",
    "debug": False,
    "allowed_origins": ("http://localhost:5173",),
    "log_dir": "./logs",
    "log_max_bytes": 1024 * 1024,
    "log_backup_count": 1,
    "gemini_api_key": None,
    "generation_model": "gemini-2.5-pro",
    "apps_script_url": None,
    "store_allowed_host": "script.google.com",
    "store_timeout_seconds": 5.0,
    "store_require_confirmation": False,
    "connection_poll_seconds": 2.0,
    "knowledge_card_tab": "主題知識卡",
    "lesson_plan_tab": "教案模板",
    "default_reviewer": "HQ",
    "approved_status_label": "已審定",
    "brands": DEFAULT_BRANDS,
    "domains": DEFAULT_DOMAINS,
    "enforce_structure": True,
  }
  values.update(overrides)
  return Settings(**values)


def load_fixture(name: str) -> dict[str, Any]:
  return json.loads((FIXTURES_DIR / f"{name}.json").read_text(encoding="utf-8"))


class ScriptedModel(AIModel):
  """Returns queued payloads (or raises queued exceptions) in call order."""

  def __init__(self, *outputs: dict[str, Any] | Exception) -> None:
    self.name = "scripted-model"
    self.outputs = list(outputs)
    self.prompts: list[str] = []
    self.schemas: list[dict[str, Any]] = []

  async def generate_structured(self, prompt: str, schema: dict[str, Any]) -> StructuredModelResponse:
    self.prompts.append(prompt)
    self.schemas.append(schema)
    if not self.outputs:
      raise AssertionError("ScriptedModel ran out of outputs.")
    output = self.outputs.pop(0)
    if isinstance(output, Exception):
      raise output
    return StructuredModelResponse(content=output)

  @property
  def calls(self) -> int:
    return len(self.prompts)


class StoreRecorder:
  """MockTransport handler that records requests and serves canned rows."""

  def __init__(self, *, rows: list[list[Any]] | None = None, append_response: httpx.Response | None = None, query_response: httpx.Response | None = None) -> None:
    self.rows = rows or []
    self.append_response = append_response
    self.query_response = query_response
    self.requests: list[httpx.Request] = []

  def __call__(self, request: httpx.Request) -> httpx.Response:
    self.requests.append(request)
    if request.method == "GET":
      return self.query_response or httpx.Response(200, json={"values": self.rows})
    return self.append_response or httpx.Response(200, json={"result": "success"})

  @property
  def appends(self) -> list[dict[str, Any]]:
    return [json.loads(request.content) for request in self.requests if request.method == "POST"]

  @property
  def queries(self) -> list[httpx.Request]:
    return [request for request in self.requests if request.method == "GET"]
