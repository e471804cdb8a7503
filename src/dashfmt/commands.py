from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from rich import print
from rich.markup import escape

from . import __version__
from .config import AppConfig, load_config, repo_root
from .formatting import (
    DEFAULT_PATTERN,
    beijing_parts,
    diff_beijing_days,
    format_date,
    format_date_beijing,
    format_relative_time,
    parse_beijing_datetime_local,
)
from .markup import configure, is_safe_link


def setup_logging(cfg: AppConfig, verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, cfg.log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def cmd_ping() -> None:
    cfg = load_config()
    root = repo_root()

    print(f"[bold]dashfmt[/bold] version={__version__}")
    print(f"env={cfg.env}")
    print(f"locale={cfg.locale}")
    print(f"log_level={cfg.log_level}")
    print(f"repo_root={root}")

    settings_path = root / "configs" / "settings.yaml"
    print(f"settings.yaml exists={settings_path.exists()}")

    markup = cfg.settings.markup
    print(f"markup linkify={markup.linkify} breaks={markup.breaks}")


def cmd_check_link(url: str) -> None:
    print(f"url={escape(url)}")
    print(f"safe={is_safe_link(url)}")


def cmd_render(path: Optional[Path]) -> None:
    cfg = load_config()
    if path is None:
        text = sys.stdin.read()
    else:
        text = path.read_text(encoding="utf-8")

    renderer = configure(cfg.markup_config())
    # Plain stdout: rich would interpret the brackets in the HTML.
    sys.stdout.write(renderer.render(text))
    sys.stdout.write("\n")


def cmd_reltime(value: str) -> None:
    cfg = load_config()
    print(format_relative_time(value, translate=cfg.translator()))


def cmd_date(value: str, pattern: str = DEFAULT_PATTERN, beijing: bool = False) -> None:
    out = format_date_beijing(value, pattern) if beijing else format_date(value, pattern)
    if not out:
        print(f"[red]invalid date[/red] value={escape(value)}")
        return
    print(out)


def cmd_beijing_parse(text: str) -> None:
    instant = parse_beijing_datetime_local(text)
    if instant is None:
        print(f"[red]invalid[/red] expected {escape('YYYY-MM-DDTHH:mm[:ss]')}, got {escape(text)}")
        return
    print(f"utc={instant.isoformat()}")
    print(f"beijing={beijing_parts(instant)}")


def cmd_days_between(start: str, end: str) -> None:
    print(f"days={diff_beijing_days(start, end)}")
