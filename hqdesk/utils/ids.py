"""Identifier utilities."""

from __future__ import annotations

import uuid
from collections.abc import Iterable

from hqdesk.schema.records import RecordKind

SEQUENCE_WIDTH = 3


def brand_code(brand: str) -> str:
  """Return the upper-cased code before the `|` in a brand label ("YYS | 燿宇..." -> "YYS")."""
  return brand.split("|")[0].strip().upper()


def id_prefix(brand: str, kind: RecordKind) -> str:
  return f"{brand_code(brand)}-{kind.id_tag}"


def sequence_suffix(record_id: str) -> int | None:
  """Parse the numeric suffix after the last dash, if any."""
  tail = record_id.rsplit("-", 1)[-1]
  return int(tail) if tail.isascii() and tail.isdecimal() else None


def next_sequential_id(brand: str, kind: RecordKind, existing_ids: Iterable[str]) -> str:
  """Return `{BRAND}-{TAG}-{max+1:03d}` over ids sharing the brand/kind prefix.

  Gaps are never filled; only the max suffix matters.
  """
  prefix = id_prefix(brand, kind)
  highest = 0
  for record_id in existing_ids:
    if not record_id or not record_id.upper().startswith(f"{prefix}-"):
      continue
    suffix = sequence_suffix(record_id)
    if suffix is not None and suffix > highest:
      highest = suffix
  return f"{prefix}-{highest + 1:0{SEQUENCE_WIDTH}d}"


def generate_request_id() -> str:
  """Return a new request identifier for log correlation."""
  return str(uuid.uuid4())
