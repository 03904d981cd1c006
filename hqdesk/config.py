"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from hqdesk.utils.env import default_env_path, load_env_file

load_env_file(default_env_path(), override=False)

DEFAULT_BRANDS: tuple[str, ...] = ("YYS | 燿宇的游泳學校", "LEADER | 鐵人")
DEFAULT_DOMAINS: tuple[str, ...] = ("游泳 (Swimming)", "鐵人三項 (Triathlon)", "體能 (Fitness)", "行銷經營 (Marketing)", "教育訓練 (Training)")


@dataclass(frozen=True)
class Settings:
  """Typed settings for the HQ Desk service."""

  environment: str
  debug: bool
  allowed_origins: tuple[str, ...]
  log_dir: str
  log_max_bytes: int
  log_backup_count: int
  gemini_api_key: str | None
  generation_model: str
  apps_script_url: str | None
  store_allowed_host: str
  store_timeout_seconds: float
  store_require_confirmation: bool
  connection_poll_seconds: float
  knowledge_card_tab: str
  lesson_plan_tab: str
  default_reviewer: str
  approved_status_label: str
  brands: tuple[str, ...]
  domains: tuple[str, ...]
  enforce_structure: bool


def _parse_bool(raw: str | None, *, default: bool = False) -> bool:
  """Parse a boolean-ish string from environment variables."""

  if raw is None or raw.strip() == "":
    return default

  normalized = raw.strip().lower()
  return normalized in {"1", "true", "yes", "on"}


def _parse_list(raw: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
  # Brand labels contain "|", so entries are separated by ";".
  if not raw:
    return default
  items = tuple(item.strip() for item in raw.split(";") if item.strip())
  return items or default


def _parse_origins(raw: str | None) -> tuple[str, ...]:
  if not raw:
    return ("http://localhost:5173",)

  origins = [origin.strip() for origin in raw.split(",") if origin.strip()]

  if "*" in origins:
    raise ValueError("HQDESK_ALLOWED_ORIGINS must not include wildcard origins.")

  return tuple(origins)


def _optional_str(raw: str | None) -> str | None:
  if raw is None:
    return None
  value = raw.strip()
  if value == "":
    return None
  return value


def _positive_float(name: str, raw: str) -> float:
  value = float(raw)
  if value <= 0:
    raise ValueError(f"{name} must be a positive number.")
  return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Load settings once per process."""

  environment = os.getenv("HQDESK_ENV", "development").lower()
  debug = _parse_bool(os.getenv("HQDESK_DEBUG"))

  log_max_bytes = int(os.getenv("HQDESK_LOG_MAX_BYTES", "5242880"))  # 5MB default
  if log_max_bytes <= 0:
    raise ValueError("HQDESK_LOG_MAX_BYTES must be a positive integer.")

  log_backup_count = int(os.getenv("HQDESK_LOG_BACKUP_COUNT", "10"))
  if log_backup_count < 0:
    raise ValueError("HQDESK_LOG_BACKUP_COUNT must be zero or a positive integer.")

  store_timeout_seconds = _positive_float("HQDESK_STORE_TIMEOUT_SECONDS", os.getenv("HQDESK_STORE_TIMEOUT_SECONDS", "30"))
  connection_poll_seconds = _positive_float("HQDESK_CONNECTION_POLL_SECONDS", os.getenv("HQDESK_CONNECTION_POLL_SECONDS", "2"))

  # The legacy deployment injected APPS_SCRIPT_URL directly; keep honoring it.
  apps_script_url = _optional_str(os.getenv("HQDESK_APPS_SCRIPT_URL")) or _optional_str(os.getenv("APPS_SCRIPT_URL"))

  return Settings(
    environment=environment,
    debug=debug,
    allowed_origins=_parse_origins(os.getenv("HQDESK_ALLOWED_ORIGINS")),
    log_dir=(os.getenv("HQDESK_LOG_DIR") or "./logs").strip(),
    log_max_bytes=log_max_bytes,
    log_backup_count=log_backup_count,
    gemini_api_key=_optional_str(os.getenv("GEMINI_API_KEY")) or _optional_str(os.getenv("API_KEY")),
    generation_model=(os.getenv("HQDESK_GENERATION_MODEL") or "gemini-2.5-pro").strip(),
    apps_script_url=apps_script_url,
    store_allowed_host=(os.getenv("HQDESK_STORE_ALLOWED_HOST") or "script.google.com").strip().lower(),
    store_timeout_seconds=store_timeout_seconds,
    store_require_confirmation=_parse_bool(os.getenv("HQDESK_STORE_REQUIRE_CONFIRMATION")),
    connection_poll_seconds=connection_poll_seconds,
    knowledge_card_tab=(os.getenv("HQDESK_KNOWLEDGE_CARD_TAB") or "主題知識卡").strip(),
    lesson_plan_tab=(os.getenv("HQDESK_LESSON_PLAN_TAB") or "教案模板").strip(),
    default_reviewer=(os.getenv("HQDESK_DEFAULT_REVIEWER") or "HQ").strip(),
    approved_status_label=(os.getenv("HQDESK_APPROVED_STATUS_LABEL") or "已審定").strip(),
    brands=_parse_list(os.getenv("HQDESK_BRANDS"), DEFAULT_BRANDS),
    domains=_parse_list(os.getenv("HQDESK_DOMAINS"), DEFAULT_DOMAINS),
    enforce_structure=_parse_bool(os.getenv("HQDESK_ENFORCE_STRUCTURE"), default=True),
  )
