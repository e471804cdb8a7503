from __future__ import annotations

import time
from datetime import datetime, timezone

import pytest


@pytest.fixture
def host_tz(monkeypatch):
    """
    Pin the process timezone for the duration of a test.
    Uses POSIX TZ strings ("UTC0", "EST5", "JST-9") so no tz database is needed.
    """
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")

    def set_tz(name: str) -> None:
        monkeypatch.setenv("TZ", name)
        time.tzset()

    yield set_tz
    monkeypatch.undo()
    time.tzset()


@pytest.fixture
def frozen_now():
    now = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    return now
