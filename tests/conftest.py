"""Shared fixtures for the unit tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from hqdesk.ai.generation import GenerationClient
from hqdesk.ai.providers.base import AIModel
from hqdesk.config import Settings
from hqdesk.services.store_client import RemoteStoreClient
from hqdesk.services.workflow import RecordWorkflowController
from tests.helpers import FIXED_NOW, STORE_URL, StoreRecorder, make_settings


@pytest.fixture
def anyio_backend():
  return "asyncio"


@pytest.fixture(autouse=True)
def _no_dummy_responses(monkeypatch: pytest.MonkeyPatch) -> None:
  # Keep a developer's local dummy flags from leaking into unit tests.
  for operation in ("KNOWLEDGE_CARD_DRAFT", "LESSON_PLAN_DRAFT", "KNOWLEDGE_CARD_AUDIT", "LESSON_PLAN_AUDIT"):
    monkeypatch.delenv(f"HQDESK_USE_DUMMY_{operation}_RESPONSE", raising=False)
    monkeypatch.delenv(f"HQDESK_DUMMY_{operation}_RESPONSE_PATH", raising=False)


@pytest.fixture
def settings() -> Settings:
  return make_settings()


@pytest.fixture
def build_controller() -> Callable[..., RecordWorkflowController]:
  """Factory wiring a controller to a scripted model and a mock store."""

  def _build(model: AIModel | None = None, recorder: StoreRecorder | None = None, *, address: str | None = STORE_URL, address_provider: Callable[[], str | None] | None = None, **overrides: Any) -> RecordWorkflowController:
    active = make_settings(**overrides)
    transport = httpx.MockTransport(recorder or StoreRecorder())
    store = RemoteStoreClient.from_settings(active, address_provider or (lambda: address), transport=transport)
    return RecordWorkflowController(settings=active, generation=GenerationClient(model, settings=active), store=store, clock=lambda: FIXED_NOW)

  return _build
