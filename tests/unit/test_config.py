from __future__ import annotations

import os

import pytest

from hqdesk.config import DEFAULT_BRANDS, get_settings
from hqdesk.utils.env import default_env_path, load_env_file, parse_env_line


@pytest.fixture(autouse=True)
def _fresh_settings():
  get_settings.cache_clear()
  yield
  get_settings.cache_clear()


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
  for name in ("HQDESK_APPS_SCRIPT_URL", "APPS_SCRIPT_URL", "HQDESK_BRANDS", "HQDESK_ENFORCE_STRUCTURE", "HQDESK_KNOWLEDGE_CARD_TAB"):
    monkeypatch.delenv(name, raising=False)

  settings = get_settings()

  assert settings.apps_script_url is None
  assert settings.brands == DEFAULT_BRANDS
  assert settings.enforce_structure is True
  assert settings.knowledge_card_tab == "主題知識卡"
  assert settings.approved_status_label == "已審定"


def test_legacy_apps_script_variable_is_honored(monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.delenv("HQDESK_APPS_SCRIPT_URL", raising=False)
  monkeypatch.setenv("APPS_SCRIPT_URL", " https://script.google.com/macros/s/x/exec ")

  assert get_settings().apps_script_url == "https://script.google.com/macros/s/x/exec"


def test_brand_list_is_semicolon_separated(monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.setenv("HQDESK_BRANDS", "ACME | 測試品牌; OTHER | 其他")

  assert get_settings().brands == ("ACME | 測試品牌", "OTHER | 其他")


@pytest.mark.parametrize(("name", "value"), [("HQDESK_STORE_TIMEOUT_SECONDS", "0"), ("HQDESK_LOG_MAX_BYTES", "-1"), ("HQDESK_ALLOWED_ORIGINS", "*")])
def test_invalid_values_raise(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
  monkeypatch.setenv(name, value)

  with pytest.raises(ValueError):
    get_settings()


def test_env_file_lines_are_parsed_like_a_shell_export() -> None:
  assert parse_env_line("export HQDESK_DEBUG=1") == ("HQDESK_DEBUG", "1")
  assert parse_env_line("HQDESK_BRANDS='ACME | 測試 # 不是註解'") == ("HQDESK_BRANDS", "ACME | 測試 # 不是註解")
  assert parse_env_line("HQDESK_LOG_DIR=/var/log/hqdesk  # rotated daily") == ("HQDESK_LOG_DIR", "/var/log/hqdesk")
  assert parse_env_line("# HQDESK_DEBUG=1") is None
  assert parse_env_line("NOT A PAIR") is None


def test_env_file_never_overrides_real_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
  env_file = tmp_path / "local.env"
  env_file.write_text("HQDESK_DEFAULT_REVIEWER=FromFile\nHQDESK_ENV=staging\n", encoding="utf-8")
  monkeypatch.setenv("HQDESK_DEFAULT_REVIEWER", "FromShell")
  monkeypatch.delenv("HQDESK_ENV", raising=False)

  loaded = load_env_file(env_file)

  assert loaded == ["HQDESK_ENV"]
  assert os.environ["HQDESK_DEFAULT_REVIEWER"] == "FromShell"
  assert os.environ["HQDESK_ENV"] == "staging"


def test_env_file_location_can_be_overridden(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
  monkeypatch.setenv("HQDESK_ENV_FILE", str(tmp_path / "desk.env"))

  assert default_env_path() == tmp_path / "desk.env"
  assert load_env_file(default_env_path()) == []
