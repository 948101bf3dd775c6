"""Calendar arithmetic for the timeline: parse, format, add, diff, truncate."""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta

MILLISECOND = "millisecond"
SECOND = "second"
MINUTE = "minute"
HOUR = "hour"
DAY = "day"
MONTH = "month"
YEAR = "year"

_UNIT_SECONDS: dict[str, float] = {
    MILLISECOND: 0.001,
    SECOND: 1,
    MINUTE: 60,
    HOUR: 3600,
    DAY: 86400,
    MONTH: 86400 * 30,
    YEAR: 86400 * 30 * 12,
}

# Units whose diff keeps its fractional part; coarser units truncate toward zero.
_EXACT_UNITS = {MILLISECOND, SECOND, MINUTE, HOUR}

_DATE_RE = re.compile(
    r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})"
    r"(?:[ T](\d{1,2}):(\d{1,2})(?::(\d{1,2})(?:\.(\d{1,3}))?)?)?\s*$"
)

_FORMAT_TOKEN_RE = re.compile(r"YYYY|YY|MMMM|MMM|MM|M|DD|D|HH|mm|ss|SSS")

MONTH_NAMES: dict[str, list[str]] = {
    "en": [
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ],
    "es": [
        "Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio",
        "Julio", "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre",
    ],
    "fr": [
        "Janvier", "Février", "Mars", "Avril", "Mai", "Juin",
        "Juillet", "Août", "Septembre", "Octobre", "Novembre", "Décembre",
    ],
    "de": [
        "Januar", "Februar", "März", "April", "Mai", "Juni",
        "Juli", "August", "September", "Oktober", "November", "Dezember",
    ],
    "pt": [
        "Janeiro", "Fevereiro", "Março", "Abril", "Maio", "Junho",
        "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro",
    ],
    "ru": [
        "Январь", "Февраль", "Март", "Апрель", "Май", "Июнь",
        "Июль", "Август", "Сентябрь", "Октябрь", "Ноябрь", "Декабрь",
    ],
}


def _normalize_unit(unit: str) -> str:
    unit = unit.lower()
    if unit.endswith("s"):
        unit = unit[:-1]
    if unit not in _UNIT_SECONDS:
        raise ValueError(f"Unknown date unit: '{unit}'")
    return unit


def today() -> datetime:
    """Return today's date at midnight."""
    return start_of(datetime.now(), DAY)


def parse(value: object) -> datetime | None:
    """Parse a date value into a datetime.

    Accepts ``datetime``, ``date`` or text like ``2024-01-01`` /
    ``2024-01-01 09:30:00.250``. Returns None for anything else; callers treat
    None as a missing date.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None
    m = _DATE_RE.match(value)
    if not m:
        return None
    year, month, day, hour, minute, second, ms = m.groups()
    try:
        return datetime(
            int(year),
            int(month),
            int(day),
            int(hour or 0),
            int(minute or 0),
            int(second or 0),
            int((ms or "0").ljust(3, "0")) * 1000,
        )
    except ValueError:
        return None


def month_name(month: int, language: str = "en", short: bool = False) -> str:
    """Localized month name (1-based month); unknown languages fall back to English."""
    names = MONTH_NAMES.get(language.split("-")[0].lower(), MONTH_NAMES["en"])
    name = names[month - 1]
    return name[:3] if short else name


def format(d: datetime, pattern: str = "YYYY-MM-DD HH:mm:ss.SSS", language: str = "en") -> str:
    """Format a datetime with moment-style tokens."""
    values = {
        "YYYY": f"{d.year:04d}",
        "YY": f"{d.year % 100:02d}",
        "MMMM": month_name(d.month, language),
        "MMM": month_name(d.month, language, short=True),
        "MM": f"{d.month:02d}",
        "M": str(d.month),
        "DD": f"{d.day:02d}",
        "D": str(d.day),
        "HH": f"{d.hour:02d}",
        "mm": f"{d.minute:02d}",
        "ss": f"{d.second:02d}",
        "SSS": f"{d.microsecond // 1000:03d}",
    }
    return _FORMAT_TOKEN_RE.sub(lambda m: values[m.group(0)], pattern)


def add(d: datetime, amount: float, unit: str) -> datetime:
    """Add *amount* of *unit* to a datetime. Month/year steps are calendar-aware."""
    unit = _normalize_unit(unit)
    if unit == MONTH:
        return d + relativedelta(months=int(amount))
    if unit == YEAR:
        return d + relativedelta(years=int(amount))
    return d + timedelta(seconds=amount * _UNIT_SECONDS[unit])


def diff(a: datetime, b: datetime, unit: str = DAY) -> float:
    """Signed difference ``a - b`` in *unit*.

    Hours and finer units are exact to the second; days and coarser units are
    truncated toward zero (a month counts as 30 days, a year as 12 of those).
    """
    unit = _normalize_unit(unit)
    value = (a - b).total_seconds() / _UNIT_SECONDS[unit]
    if unit in _EXACT_UNITS:
        return value
    return int(value)


def start_of(d: datetime, unit: str) -> datetime:
    """Truncate a datetime to the start of *unit*."""
    unit = _normalize_unit(unit)
    if unit == YEAR:
        return datetime(d.year, 1, 1)
    if unit == MONTH:
        return datetime(d.year, d.month, 1)
    if unit == DAY:
        return datetime(d.year, d.month, d.day)
    if unit == HOUR:
        return d.replace(minute=0, second=0, microsecond=0)
    if unit == MINUTE:
        return d.replace(second=0, microsecond=0)
    if unit == SECOND:
        return d.replace(microsecond=0)
    return d


def clone(d: datetime) -> datetime:
    return datetime(*get_date_values(d)[:6], d.microsecond)


def get_date_values(d: datetime) -> tuple[int, int, int, int, int, int, int]:
    """(year, month, day, hour, minute, second, millisecond)."""
    return (d.year, d.month, d.day, d.hour, d.minute, d.second, d.microsecond // 1000)


def days_in_month(d: datetime | date) -> int:
    return calendar.monthrange(d.year, d.month)[1]


def iso_week_number(d: datetime | date) -> int:
    return d.isocalendar()[1]
