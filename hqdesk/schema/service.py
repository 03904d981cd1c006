"""Response-schema helpers for structured generation calls."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

SchemaDict = dict[str, Any]
VisitedRefs = set[str] | None

_ALLOWED_KEYS: frozenset[str] = frozenset({"type", "properties", "items", "anyOf", "enum", "format", "description", "minimum", "maximum", "minItems", "maxItems", "minLength", "maxLength", "required"})


def response_schema(model: type[BaseModel]) -> SchemaDict:
  """Build a Gemini-compatible response schema from a pydantic model."""
  schema = model.model_json_schema(by_alias=True, ref_template="#/$defs/{model}", mode="validation")
  return _sanitize_schema_for_gemini(schema, root_schema=schema)


def _sanitize_schema_for_gemini(schema: Any, root_schema: SchemaDict | None = None, visited: VisitedRefs = None) -> Any:
  """
  Sanitize a JSON Schema for Gemini structured output.

  This strips unsupported keys, resolves $refs, and collapses nullable unions.
  """
  if visited is None:
    visited = set()

  if not isinstance(schema, dict):
    return {"type": "object", "properties": {}}

  if "$ref" in schema:
    ref_path = schema["$ref"]
    defs = (root_schema or {}).get("$defs") or {}
    def_name = ref_path.split("/")[-1]
    if ref_path in visited or def_name not in defs:
      return {"type": "object", "properties": {}}
    return _sanitize_schema_for_gemini(defs[def_name], root_schema, visited | {ref_path})

  # Optional fields arrive as anyOf[<type>, null]; Gemini wants the bare type.
  if "anyOf" in schema and isinstance(schema["anyOf"], list):
    options = [option for option in schema["anyOf"] if not (isinstance(option, dict) and option.get("type") == "null")]
    if len(options) == 1:
      merged = {key: value for key, value in schema.items() if key != "anyOf"}
      collapsed = _sanitize_schema_for_gemini(options[0], root_schema, visited)
      collapsed.update({key: value for key, value in merged.items() if key in _ALLOWED_KEYS})
      return collapsed

  sanitized: SchemaDict = {key: value for key, value in schema.items() if key in _ALLOWED_KEYS}
  # Gemini only understands string enums; Literal fields come through as "const".
  if "const" in schema and "enum" not in sanitized:
    sanitized["enum"] = [schema["const"]]

  if "properties" in sanitized:
    props = sanitized.get("properties")
    sanitized["properties"] = {key: _sanitize_schema_for_gemini(value, root_schema, visited) for key, value in props.items()} if isinstance(props, dict) else {}

  if "items" in sanitized:
    sanitized["items"] = _sanitize_schema_for_gemini(sanitized["items"], root_schema, visited)

  if "anyOf" in sanitized and isinstance(sanitized["anyOf"], list):
    sanitized["anyOf"] = [_sanitize_schema_for_gemini(item, root_schema, visited) for item in sanitized["anyOf"]]

  return sanitized
