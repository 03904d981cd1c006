"""Finder filtering and local/remote merge."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from hqdesk.schema.records import Record, RecordKind

_PARENTHESIZED_RE = re.compile(r"\((.*?)\)")


@dataclass(frozen=True)
class FinderFilter:
  """Finder predicates; blank fields match everything."""

  kind: RecordKind | None = None
  brand: str = ""
  domain: str = ""
  search_text: str = ""


def _two_way(value: str, needle: str) -> bool:
  return needle in value or value in needle


def brand_matches(record_brand: str, selected_brand: str) -> bool:
  """Compare against the code before `|`, in either direction, ignoring case."""
  if not selected_brand.strip():
    return True
  prefix = selected_brand.split("|")[0].strip().lower()
  return _two_way(record_brand.lower(), prefix)


def domain_matches(record_domain: str, selected_domain: str) -> bool:
  """Accept either the Chinese label or the English name in parentheses."""
  if not selected_domain.strip():
    return True
  value = record_domain.lower()
  label = selected_domain.split(" (")[0].strip().lower()
  if _two_way(value, label):
    return True
  match = _PARENTHESIZED_RE.search(selected_domain)
  english = match.group(1).strip().lower() if match else ""
  return bool(english) and _two_way(value, english)


def text_matches(record: Record, search_text: str) -> bool:
  needle = search_text.strip().lower()
  if not needle:
    return True
  return needle in record.topic_name.lower() or needle in record.id.lower()


def matches_filter(record: Record, finder_filter: FinderFilter) -> bool:
  if finder_filter.kind is not None and record.kind is not finder_filter.kind:
    return False
  return brand_matches(record.brand, finder_filter.brand) and domain_matches(record.domain, finder_filter.domain) and text_matches(record, finder_filter.search_text)


def merge_results(local: Iterable[Record], remote: Iterable[Record], finder_filter: FinderFilter) -> list[Record]:
  """Filter both sets and merge them by id; a local record shadows a remote one.

  Local records come first, in their own order, followed by the remaining
  remote records in store order.
  """
  merged: dict[str, Record] = {}
  for record in local:
    if record.id not in merged and matches_filter(record, finder_filter):
      merged[record.id] = record
  for record in remote:
    if record.id not in merged and matches_filter(record, finder_filter):
      merged[record.id] = record
  return list(merged.values())
