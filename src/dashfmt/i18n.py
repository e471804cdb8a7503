from __future__ import annotations

import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Protocol

import yaml

LOGGER = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")


class Translate(Protocol):
    def __call__(self, key: str, **params: Any) -> str: ...


def locales_dir() -> Path:
    return Path(__file__).resolve().parent / "locales"


class Translator:
    """
    Message lookup over a nested catalog.

    Keys are dotted paths into the catalog ("common.time.daysAgo").
    Placeholders use {name} and are filled from keyword params; a
    placeholder without a matching param is left as-is.
    Unknown keys resolve to the key itself, so a missing message never
    breaks a display path.
    """

    def __init__(self, messages: Mapping[str, Any], locale: str = DEFAULT_LOCALE) -> None:
        self._messages = messages
        self.locale = locale

    def _lookup(self, key: str) -> Optional[str]:
        node: Any = self._messages
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return None
            node = node[part]
        return node if isinstance(node, str) else None

    def __call__(self, key: str, **params: Any) -> str:
        message = self._lookup(key)
        if message is None:
            LOGGER.debug("missing message key=%s locale=%s", key, self.locale)
            return key
        if not params:
            return message

        def fill(m: re.Match) -> str:
            name = m.group(1)
            return str(params[name]) if name in params else m.group(0)

        return _PLACEHOLDER_RE.sub(fill, message)


def load_messages(path: Path) -> Dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Message catalog must be a mapping: {path}")
    return data


@lru_cache(maxsize=None)
def get_translator(locale: str = DEFAULT_LOCALE) -> Translator:
    """
    Cached translator for a shipped catalog (dashfmt/locales/<locale>.yaml).
    Unknown locales fall back to English.
    """
    code = (locale or DEFAULT_LOCALE).strip().lower()
    path = locales_dir() / f"{code}.yaml"
    if not path.exists():
        LOGGER.debug("no catalog for locale=%s, using %s", code, DEFAULT_LOCALE)
        code = DEFAULT_LOCALE
        path = locales_dir() / f"{code}.yaml"
    return Translator(load_messages(path), locale=code)
