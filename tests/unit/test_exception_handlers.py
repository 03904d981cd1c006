"""Unit tests for API exception sanitization behavior."""

from __future__ import annotations

from hqdesk.core.exceptions import _error_payload, _sanitize_validation_errors


def test_sanitize_validation_errors_removes_input_and_serializes_exception_ctx() -> None:
  """Ensure validation errors stay JSON-serializable and redact raw request payloads."""
  errors = [{"type": "value_error", "loc": ("body", "source_text"), "msg": "Value error, bad source.", "input": {"source_text": "教練筆記"}, "ctx": {"error": ValueError("bad source."), "input": {"source_text": "教練筆記"}}}]
  sanitized = _sanitize_validation_errors(errors)
  assert "input" not in sanitized[0]
  assert sanitized[0]["ctx"]["error"] == "ValueError: bad source."
  assert "input" not in sanitized[0]["ctx"]
  assert sanitized[0]["loc"] == ["body", "source_text"]


def test_error_payload_carries_code_and_request_id() -> None:
  assert _error_payload("No record is selected.", request_id="abc", error="no_current_record") == {"detail": "No record is selected.", "error": "no_current_record", "requestId": "abc"}
  assert _error_payload("boom") == {"detail": "boom"}
