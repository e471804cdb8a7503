from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from .i18n import Translator, get_translator
from .markup import MarkupConfig
from .models import Settings


def repo_root() -> Path:
    # Assumes this file lives at: repo/src/dashfmt/config.py
    return Path(__file__).resolve().parents[2]


def load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Missing config file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


@dataclass(frozen=True)
class AppConfig:
    env: str
    locale: str
    log_level: str
    settings: Settings

    def markup_config(self) -> MarkupConfig:
        return MarkupConfig(
            linkify=self.settings.markup.linkify,
            breaks=self.settings.markup.breaks,
        )

    def translator(self) -> Translator:
        return get_translator(self.locale)


def load_config(settings_path: Optional[Path] = None) -> AppConfig:
    load_dotenv(repo_root() / ".env")

    settings_path = settings_path or (repo_root() / "configs" / "settings.yaml")
    settings = Settings.model_validate(load_yaml(settings_path))

    env = os.getenv("DASHFMT_ENV", settings.app.env)
    locale = os.getenv("DASHFMT_LOCALE", settings.app.locale)
    log_level = os.getenv("DASHFMT_LOG_LEVEL", settings.app.log_level)

    return AppConfig(
        env=str(env),
        locale=str(locale).strip().lower() or "en",
        log_level=str(log_level).strip().upper() or "WARNING",
        settings=settings,
    )
