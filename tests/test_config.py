from pathlib import Path

import pytest
from pydantic import ValidationError

from dashfmt.config import load_config, repo_root
from dashfmt.markup import MarkupConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("DASHFMT_ENV", "DASHFMT_LOCALE", "DASHFMT_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def write_settings(tmp_path: Path, text: str) -> Path:
    p = tmp_path / "settings.yaml"
    p.write_text(text, encoding="utf-8")
    return p


def test_load_settings_file(tmp_path):
    p = write_settings(
        tmp_path,
        "app:\n  env: prod\n  locale: zh\n  log_level: info\nmarkup:\n  linkify: false\n  breaks: true\n",
    )
    cfg = load_config(p)
    assert cfg.env == "prod"
    assert cfg.locale == "zh"
    assert cfg.log_level == "INFO"
    assert cfg.markup_config() == MarkupConfig(linkify=False, breaks=True)
    assert cfg.translator()("common.time.justNow") == "刚刚"


def test_empty_file_uses_defaults(tmp_path):
    cfg = load_config(write_settings(tmp_path, ""))
    assert cfg.env == "local"
    assert cfg.locale == "en"
    assert cfg.log_level == "WARNING"
    assert cfg.markup_config() == MarkupConfig()


def test_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("DASHFMT_ENV", "staging")
    monkeypatch.setenv("DASHFMT_LOCALE", "ZH")
    cfg = load_config(write_settings(tmp_path, "app:\n  env: prod\n"))
    assert cfg.env == "staging"
    assert cfg.locale == "zh"


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_invalid_settings_raise(tmp_path):
    with pytest.raises(ValidationError):
        load_config(write_settings(tmp_path, "markup:\n  linkify: sometimes\n"))


def test_repo_ships_default_settings():
    assert (repo_root() / "configs" / "settings.yaml").exists()
