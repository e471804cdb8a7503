from datetime import datetime, timedelta, timezone

import pytest

from dashfmt.formatting import RelativeBucket, classify_elapsed, format_relative_time
from dashfmt.i18n import get_translator


def ago(now: datetime, **delta) -> datetime:
    return now - timedelta(**delta)


def rel(value, now: datetime, **kwargs) -> str:
    return format_relative_time(value, now=lambda: now, **kwargs)


@pytest.mark.parametrize("value", [None, "", "   ", "not a date", "2024-13-45", object()])
def test_never_for_missing_or_unparseable(value, frozen_now):
    assert rel(value, frozen_now) == "Never"


def test_never_for_future(frozen_now):
    assert rel(frozen_now + timedelta(seconds=1), frozen_now) == "Never"
    assert rel(frozen_now + timedelta(days=3), frozen_now) == "Never"


def test_boundaries(frozen_now):
    assert rel(ago(frozen_now, seconds=0), frozen_now) == "just now"
    assert rel(ago(frozen_now, seconds=59), frozen_now) == "just now"
    assert rel(ago(frozen_now, seconds=60), frozen_now) == "1 minutes ago"
    assert rel(ago(frozen_now, seconds=3599), frozen_now) == "59 minutes ago"
    assert rel(ago(frozen_now, seconds=3600), frozen_now) == "1 hours ago"
    assert rel(ago(frozen_now, seconds=86399), frozen_now) == "23 hours ago"
    assert rel(ago(frozen_now, seconds=86400), frozen_now) == "1 days ago"
    assert rel(ago(frozen_now, days=40), frozen_now) == "40 days ago"


def test_partial_seconds_are_floored(frozen_now):
    assert rel(ago(frozen_now, seconds=59, milliseconds=999), frozen_now) == "just now"
    assert rel(ago(frozen_now, seconds=60, milliseconds=500), frozen_now) == "1 minutes ago"


def test_accepts_strings_and_epoch_millis(frozen_now):
    assert rel("2024-01-01T10:00:00Z", frozen_now) == "2 hours ago"
    assert rel("2024-01-01T19:30:00+08:00", frozen_now) == "30 minutes ago"
    millis = int(ago(frozen_now, days=2).timestamp() * 1000)
    assert rel(millis, frozen_now) == "2 days ago"


def test_passes_key_and_count_to_translator(frozen_now):
    calls = []

    def translate(key, **params):
        calls.append((key, params))
        return key

    assert rel(ago(frozen_now, hours=5), frozen_now, translate=translate) == "common.time.hoursAgo"
    assert rel(None, frozen_now, translate=translate) == "common.time.never"
    assert rel(frozen_now, frozen_now, translate=translate) == "common.time.justNow"
    assert calls == [
        ("common.time.hoursAgo", {"n": 5}),
        ("common.time.never", {}),
        ("common.time.justNow", {}),
    ]


def test_other_locale(frozen_now):
    zh = get_translator("zh")
    assert rel(ago(frozen_now, days=2), frozen_now, translate=zh) == "2 天前"


def test_default_clock_is_real_time():
    recent = datetime.now(timezone.utc) - timedelta(minutes=5, seconds=10)
    assert format_relative_time(recent) == "5 minutes ago"


def test_classify_elapsed_uses_flat_division():
    assert classify_elapsed(86399).bucket is RelativeBucket.HOURS
    assert classify_elapsed(86399).magnitude == 23
    assert classify_elapsed(2 * 86400 + 7200).magnitude == 2
    assert classify_elapsed(30).bucket is RelativeBucket.JUST_NOW
