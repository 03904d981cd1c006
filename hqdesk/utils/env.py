"""Loads a local .env file into the process environment before settings are read."""

from __future__ import annotations

import os
from pathlib import Path

ENV_FILE_VARIABLE = "HQDESK_ENV_FILE"


def default_env_path() -> Path:
  """Return `$HQDESK_ENV_FILE` when set, otherwise the .env beside the hqdesk package."""
  override = (os.getenv(ENV_FILE_VARIABLE) or "").strip()
  if override:
    return Path(override).expanduser()
  return Path(__file__).resolve().parents[2] / ".env"


def parse_env_line(raw_line: str) -> tuple[str, str] | None:
  """Split one `.env` line into a key and value; blank, comment and malformed lines give None.

  Quoted values keep everything between the quotes. Unquoted values drop a
  trailing ` # comment`.
  """
  line = raw_line.strip()
  if not line or line.startswith("#"):
    return None
  line = line.removeprefix("export ").lstrip()
  key, sep, value = line.partition("=")
  key = key.strip()
  if not sep or not key or " " in key:
    return None

  value = value.strip()
  if len(value) >= 2 and value[0] in {'"', "'"} and value[-1] == value[0]:
    return key, value[1:-1]
  comment = value.find(" #")
  if comment != -1:
    value = value[:comment].rstrip()
  return key, value


def load_env_file(path: Path, *, override: bool = False) -> list[str]:
  """Export the file's pairs into `os.environ` and return the keys that were set.

  Variables already present in the environment win unless `override` is true.
  """
  if not path.is_file():
    return []

  loaded: list[str] = []
  for raw_line in path.read_text(encoding="utf-8").splitlines():
    parsed = parse_env_line(raw_line)
    if parsed is None:
      continue
    key, value = parsed
    if not override and key in os.environ:
      continue
    os.environ[key] = value
    loaded.append(key)
  return loaded
