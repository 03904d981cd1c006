"""Gemini provider implementation using the google-genai SDK."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Final, cast

from google import genai

from hqdesk.ai.json_parser import parse_json_with_fallback
from hqdesk.ai.providers.base import AIModel, Provider, StructuredModelResponse

logger = logging.getLogger(__name__)


def _usage(response: Any) -> dict[str, int] | None:
  metadata = getattr(response, "usage_metadata", None)
  if not metadata:
    return None
  return {"prompt_tokens": metadata.prompt_token_count, "completion_tokens": metadata.candidates_token_count, "total_tokens": metadata.total_token_count}


class GeminiModel(AIModel):
  """Gemini model client with structured output support using google-genai SDK."""

  def __init__(self, name: str, api_key: str | None = None) -> None:
    self.name: str = name

    api_key = api_key or os.getenv("GEMINI_API_KEY")
    if not api_key:
      raise ValueError("GEMINI_API_KEY environment variable is required")

    self._client = genai.Client(api_key=api_key)

  async def generate_structured(self, prompt: str, schema: dict[str, Any]) -> StructuredModelResponse:
    """Generate structured JSON output using Gemini's JSON mode."""
    response = await self._client.aio.models.generate_content(model=self.name, contents=prompt, config={"response_mime_type": "application/json", "response_schema": schema})
    logger.debug("Gemini structured response (raw):\n%s", response.text)

    text = response.text or ""
    if not text.strip():
      raise RuntimeError("Gemini returned an empty response; failed to parse JSON.")

    try:
      cleaned = self.strip_json_fences(text)
      parsed = parse_json_with_fallback(cleaned)
    except json.JSONDecodeError as e:
      raise RuntimeError(f"Gemini returned invalid JSON: {e}") from e

    if not isinstance(parsed, dict):
      raise RuntimeError("Gemini returned invalid JSON: expected an object.")
    return StructuredModelResponse(content=cast(dict[str, Any], parsed), usage=_usage(response))


class GeminiProvider(Provider):
  """Gemini provider."""

  _DEFAULT_MODEL: Final[str] = "gemini-2.5-pro"
  _AVAILABLE_MODELS: Final[set[str]] = {"gemini-3-pro-preview", "gemini-2.5-pro", "gemini-2.5-flash", "gemini-2.0-flash"}

  def __init__(self, api_key: str | None = None) -> None:
    self.name: str = "gemini"
    self._api_key = api_key

  def get_model(self, model: str | None = None) -> AIModel:
    """Return a Gemini model client."""
    model_name = model or self._DEFAULT_MODEL
    if model_name not in self._AVAILABLE_MODELS:
      raise ValueError(f"Unsupported Gemini model '{model_name}'.")
    return GeminiModel(model_name, api_key=self._api_key)
