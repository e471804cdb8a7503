from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from numbers import Real
from typing import Any, Callable, Dict, Optional

from .i18n import Translate, get_translator

Clock = Callable[[], datetime]

DEFAULT_PATTERN = "YYYY-MM-DD HH:mm:ss"

# Fixed civil offset for the "Beijing" family. Asia/Shanghai has had no DST
# since 1991; a fixed offset keeps the parse/format pair exact for all dates.
BEIJING_OFFSET = timedelta(hours=8)
BEIJING_TZ = timezone(BEIJING_OFFSET)

BYTE_UNITS = ["Bytes", "KB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB"]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_DATE_ONLY_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_LOCAL_INPUT_RE = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2})T([0-9]{2}):([0-9]{2})(?::([0-9]{2}))?"
)
_TOKEN_RE = re.compile(r"YYYY|MM|DD|HH|mm|ss")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ------------------------------------------------------------
# Instants
# ------------------------------------------------------------

def _parse_timestamp(text: str) -> Optional[datetime]:
    s = text.strip()
    if not s:
        return None

    # Date-only ISO strings are UTC midnight; date-times without an
    # offset are host-local.
    if _DATE_ONLY_RE.fullmatch(s):
        try:
            d = date.fromisoformat(s)
        except ValueError:
            return None
        return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)

    if s[-1] in "zZ":
        s = s[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        return None


def to_instant(value: Any) -> Optional[datetime]:
    """
    Normalize an instant-like value to an aware UTC datetime.

    Accepts datetime (naive = host-local), date (UTC midnight), ISO-8601
    strings and epoch milliseconds. Returns None for anything that does
    not describe a valid point in time.
    """
    if value is None or isinstance(value, bool):
        return None

    try:
        if isinstance(value, datetime):
            dt = value
        elif isinstance(value, date):
            dt = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
        elif isinstance(value, (int, float)):
            if not math.isfinite(value):
                return None
            dt = _EPOCH + timedelta(milliseconds=value)
        elif isinstance(value, str):
            dt = _parse_timestamp(value)
            if dt is None:
                return None
        else:
            return None

        if dt.tzinfo is None:
            dt = dt.astimezone()
        return dt.astimezone(timezone.utc)
    except (OverflowError, ValueError, OSError):
        return None


@dataclass(frozen=True)
class CivilDateTimeParts:
    year: str
    month: str
    day: str
    hour: str
    minute: str
    second: str

    @classmethod
    def from_datetime(cls, dt: datetime) -> "CivilDateTimeParts":
        return cls(
            year=f"{dt.year:04d}",
            month=f"{dt.month:02d}",
            day=f"{dt.day:02d}",
            hour=f"{dt.hour:02d}",
            minute=f"{dt.minute:02d}",
            second=f"{dt.second:02d}",
        )

    def as_date(self) -> date:
        return date(int(self.year), int(self.month), int(self.day))

    def tokens(self) -> Dict[str, str]:
        return {
            "YYYY": self.year,
            "MM": self.month,
            "DD": self.day,
            "HH": self.hour,
            "mm": self.minute,
            "ss": self.second,
        }


def local_parts(value: Any) -> Optional[CivilDateTimeParts]:
    """Calendar fields in the host's local timezone."""
    instant = to_instant(value)
    if instant is None:
        return None
    try:
        return CivilDateTimeParts.from_datetime(instant.astimezone())
    except (OverflowError, ValueError, OSError):
        return None


def beijing_parts(value: Any) -> Optional[CivilDateTimeParts]:
    """Calendar fields in fixed UTC+8, whatever the host timezone is."""
    instant = to_instant(value)
    if instant is None:
        return None
    try:
        return CivilDateTimeParts.from_datetime(instant.astimezone(BEIJING_TZ))
    except OverflowError:
        return None


def _substitute(pattern: str, parts: CivilDateTimeParts) -> str:
    if not isinstance(pattern, str):
        pattern = DEFAULT_PATTERN
    tokens = parts.tokens()
    # One scan; substituted values are never re-examined.
    return _TOKEN_RE.sub(lambda m: tokens[m.group(0)], pattern)


# ------------------------------------------------------------
# Relative time
# ------------------------------------------------------------

class RelativeBucket(str, Enum):
    JUST_NOW = "just_now"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"


_BUCKET_KEYS = {
    RelativeBucket.JUST_NOW: "common.time.justNow",
    RelativeBucket.MINUTES: "common.time.minutesAgo",
    RelativeBucket.HOURS: "common.time.hoursAgo",
    RelativeBucket.DAYS: "common.time.daysAgo",
}


@dataclass(frozen=True)
class RelativeDuration:
    bucket: RelativeBucket
    magnitude: int

    @property
    def message_key(self) -> str:
        return _BUCKET_KEYS[self.bucket]


def classify_elapsed(seconds: int) -> RelativeDuration:
    """
    Flat division of elapsed seconds, no calendar awareness:
    86399s is 23 hours, 86400s is 1 day.
    """
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24
    if days > 0:
        return RelativeDuration(RelativeBucket.DAYS, days)
    if hours > 0:
        return RelativeDuration(RelativeBucket.HOURS, hours)
    if minutes > 0:
        return RelativeDuration(RelativeBucket.MINUTES, minutes)
    return RelativeDuration(RelativeBucket.JUST_NOW, 0)


def format_relative_time(
    value: Any,
    *,
    now: Optional[Clock] = None,
    translate: Optional[Translate] = None,
) -> str:
    """
    "5 minutes ago" style label.
    Missing, unparseable and future instants all render as "never".
    """
    t = translate or get_translator()

    past = to_instant(value)
    current = to_instant((now or utc_now)())
    if past is None or current is None:
        return t("common.time.never")

    diff = current - past
    if diff < timedelta(0):
        return t("common.time.never")

    duration = classify_elapsed(diff // timedelta(seconds=1))
    if duration.bucket is RelativeBucket.JUST_NOW:
        return t(duration.message_key)
    return t(duration.message_key, n=duration.magnitude)


# ------------------------------------------------------------
# Numbers
# ------------------------------------------------------------

def _as_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (Real, Decimal)):
        return None
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf
    except ValueError:
        return None


def _trim_zeros(text: str) -> str:
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def format_number(num: Any) -> str:
    """
    Compact number: 1.2K, 3.45M, 1.00B.

    Below one thousand the value is rendered with comma grouping and at
    most three fraction digits, independent of the host locale.
    """
    n = _as_number(num)
    if n is None:
        return "0"

    magnitude = abs(n)
    if magnitude >= 1e9:
        return f"{n / 1e9:.2f}B"
    if magnitude >= 1e6:
        return f"{n / 1e6:.2f}M"
    if magnitude >= 1e3:
        return f"{n / 1e3:.1f}K"

    if n.is_integer():
        return f"{int(n):,}"
    return _trim_zeros(f"{n:,.3f}")


def format_currency(amount: Any) -> str:
    a = _as_number(amount)
    if a is None:
        return "$0.00"

    # Sub-cent amounts would otherwise read "$0.00"
    if 0 < a < 0.01:
        return f"${a:.6f}"
    return f"${a:.2f}"


def format_bytes(num: Any, decimals: Any = 2) -> str:
    b = _as_number(num)
    if b is None or not math.isfinite(b) or b == 0:
        return "0 Bytes"

    dm = _as_number(decimals)
    if dm is None or not math.isfinite(dm):
        dm = 2
    dm = min(max(int(dm), 0), 20)

    # log base 1024; log2 is exact for powers of two
    i = math.floor(math.log2(abs(b)) / 10)
    i = min(max(i, 0), len(BYTE_UNITS) - 1)

    value = b / (1024 ** i)
    return f"{_trim_zeros(f'{value:.{dm}f}')} {BYTE_UNITS[i]}"


# ------------------------------------------------------------
# Host-local dates
# ------------------------------------------------------------

def format_date(value: Any, pattern: str = DEFAULT_PATTERN) -> str:
    """
    Substitute YYYY, MM, DD, HH, mm, ss in `pattern` with host-local
    calendar fields. Every occurrence is replaced; anything else is kept.
    """
    parts = local_parts(value)
    if parts is None:
        return ""
    return _substitute(pattern, parts)


def format_date_only(value: Any) -> str:
    return format_date(value, "YYYY-MM-DD")


def format_date_time(value: Any) -> str:
    return format_date(value, DEFAULT_PATTERN)


def format_time(value: Any) -> str:
    return format_date(value, "HH:mm")


# ------------------------------------------------------------
# Fixed UTC+8 dates
# ------------------------------------------------------------

def format_date_beijing(value: Any, pattern: str = DEFAULT_PATTERN) -> str:
    parts = beijing_parts(value)
    if parts is None:
        return ""
    return _substitute(pattern, parts)


def format_date_only_beijing(value: Any) -> str:
    return format_date_beijing(value, "YYYY-MM-DD")


def format_date_time_beijing(value: Any) -> str:
    return format_date_beijing(value, DEFAULT_PATTERN)


def format_time_beijing(value: Any) -> str:
    return format_date_beijing(value, "HH:mm")


def format_datetime_local_beijing(value: Any) -> str:
    """Value for an <input type="datetime-local"> showing UTC+8 time."""
    return format_date_beijing(value, "YYYY-MM-DDTHH:mm")


def parse_beijing_datetime_local(text: Any) -> Optional[datetime]:
    """
    Parse "YYYY-MM-DDTHH:mm[:ss]" as UTC+8 civil time.

    Returns the UTC instant, or None when the shape or any field is
    invalid. The host timezone plays no part.
    """
    if not isinstance(text, str) or not text:
        return None

    m = _LOCAL_INPUT_RE.fullmatch(text)
    if not m:
        return None

    year, month, day, hour, minute, second = (int(g or "0") for g in m.groups())
    try:
        civil = datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
        return civil - BEIJING_OFFSET
    except (OverflowError, ValueError):
        return None


def diff_beijing_days(start: Any, end: Any) -> int:
    """Calendar days from `start` to `end`, both taken as UTC+8 dates."""
    a = beijing_parts(start)
    b = beijing_parts(end)
    if a is None or b is None:
        return 0
    return (b.as_date() - a.as_date()).days
