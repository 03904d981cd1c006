"""Generation and audit failures, plus provider-vs-output error classification."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Literal

FailureCategory = Literal["provider", "quota", "output", "structure"]

_QUOTA_HINTS: tuple[str, ...] = ("429", "quota", "resource exhausted", "rate limit", "too many requests")

_OUTPUT_HINTS: tuple[str, ...] = ("invalid json", "failed to parse", "parse json", "schema", "validation", "missing required")


class GenerationClientError(RuntimeError):
  """Base class for failures raised by the generation client."""

  def __init__(self, reason: str, *, category: FailureCategory) -> None:
    super().__init__(reason)
    self.reason = reason
    self.category = category


class GenerationError(GenerationClientError):
  """A draft could not be produced; no record may be created from it."""


class AuditError(GenerationClientError):
  """A self-audit could not be completed; the audited record stays as it was."""


def _match_hint(message: str, hints: Iterable[str]) -> bool:
  """Return True when any hint appears in the message."""
  return any(hint in message for hint in hints)


def is_quota_error(exc: Exception) -> bool:
  return _match_hint(str(exc).lower(), _QUOTA_HINTS)


def is_output_error(exc: Exception) -> bool:
  """Return True when an exception indicates invalid output formatting."""
  return _match_hint(str(exc).lower(), _OUTPUT_HINTS)


def classify(exc: Exception) -> FailureCategory:
  """Map a raw provider exception onto a failure category for user-facing messages."""
  if is_quota_error(exc):
    return "quota"
  if is_output_error(exc):
    return "output"
  return "provider"
