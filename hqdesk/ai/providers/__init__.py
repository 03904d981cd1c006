"""Provider implementations."""

from hqdesk.ai.providers.base import AIModel, Provider, StructuredModelResponse
from hqdesk.ai.providers.gemini import GeminiModel, GeminiProvider

__all__ = ["AIModel", "StructuredModelResponse", "Provider", "GeminiModel", "GeminiProvider"]
