from datetime import datetime, date, timedelta

import pytz


class Clock:
    """Wall clock in a fixed timezone. Tests swap in a frozen one."""

    def __init__(self, timezone: str = "UTC"):
        self.tz = pytz.timezone(timezone)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> str:
        return self.now().strftime("%Y-%m-%d")

    def timestamp_ms(self) -> int:
        return int(self.now().timestamp() * 1000)


def parse_date(date_str: str) -> date:
    return date.fromisoformat(date_str)


def format_date(d: date) -> str:
    return d.isoformat()


def add_days(date_str: str, days: int) -> str:
    return format_date(parse_date(date_str) + timedelta(days=days))


def days_between(start: str, end: str) -> int:
    return (parse_date(end) - parse_date(start)).days


def short_label(date_str: str) -> str:
    """'2024-01-05' -> '1/5'"""
    d = parse_date(date_str)
    return f"{d.month}/{d.day}"


def weekday_short(date_str: str) -> str:
    return parse_date(date_str).strftime("%a")
