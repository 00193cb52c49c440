import re
from datetime import date

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_CLOCK_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def is_valid_date(date_str: str) -> bool:
    """A real calendar day written as YYYY-MM-DD"""
    if not isinstance(date_str, str) or not _DATE_RE.match(date_str):
        return False
    try:
        date.fromisoformat(date_str)
    except ValueError:
        return False
    return True


def is_valid_clock_time(value: str) -> bool:
    return bool(_CLOCK_RE.match(value or ""))


def is_blank(text: str) -> bool:
    return not (text or "").strip()
