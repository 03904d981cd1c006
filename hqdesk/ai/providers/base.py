"""Base interfaces for AI providers and models."""

from __future__ import annotations

import os
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

_FIXTURES_DIR = Path(__file__).resolve().parents[1] / "fixtures"
_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


@dataclass
class StructuredModelResponse:
  """Parsed JSON object returned by a model, with token usage when reported."""

  content: dict[str, Any]
  usage: dict[str, int] | None = None


class AIModel(ABC):
  """Abstract base class for AI models."""

  name: str

  @abstractmethod
  async def generate_structured(self, prompt: str, schema: dict[str, Any]) -> StructuredModelResponse:
    """Generate structured output that conforms to the provided JSON schema."""

  @staticmethod
  def strip_json_fences(raw: str) -> str:
    """Drop ```json fences some models wrap around JSON mode output."""
    return _FENCE_RE.sub("", (raw or "").strip())

  @staticmethod
  def load_dummy_response(operation: str) -> str | None:
    """Return a canned response when HQDESK_USE_DUMMY_<OPERATION>_RESPONSE is enabled."""
    # Per-operation flags let local runs bypass provider calls without spending quota.
    key = operation.upper()
    flag = (os.getenv(f"HQDESK_USE_DUMMY_{key}_RESPONSE") or "").strip().lower()
    if flag not in {"1", "true", "yes", "on"}:
      return None

    override = (os.getenv(f"HQDESK_DUMMY_{key}_RESPONSE_PATH") or "").strip()
    path = Path(override) if override else _FIXTURES_DIR / f"{operation.lower()}.json"
    try:
      return path.read_text(encoding="utf-8")
    except OSError as exc:
      raise RuntimeError(f"Dummy response for {key} could not be read from {path}: {exc}") from exc


class Provider(ABC):
  """Abstract base class for AI providers."""

  name: str

  @abstractmethod
  def get_model(self, model: str | None = None) -> AIModel:
    """Return the model client for the provider."""
