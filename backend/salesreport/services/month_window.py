"""Month window resolution: month selector → half-open datetime range.

Windows are anchored to a fixed reference year (the seed dataset's year), so
"month 3" always means March of that year regardless of today's date.
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Union

from ..errors import InvalidArgument

_MONTH_NAMES = {
    name.lower(): number
    for names in (calendar.month_name, calendar.month_abbr)
    for number, name in enumerate(names)
    if name
}


@dataclass(frozen=True)
class MonthWindow:
    year: int
    month: int
    start: datetime   # inclusive, first instant of the month
    end: datetime     # exclusive, first instant of the next month

    @property
    def last_day(self) -> date:
        return (self.end - timedelta(days=1)).date()

    @property
    def days(self) -> int:
        return (self.end - self.start).days

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


def parse_month(value: Union[int, str]) -> int:
    """Return the month number 1–12 for an int, numeric string or English month name."""
    if isinstance(value, bool):
        raise InvalidArgument(f"month must be 1-12, got {value!r}")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidArgument("month is required")
        if text.isascii() and text.isdigit():
            number = int(text)
        elif text.lower() in _MONTH_NAMES:
            number = _MONTH_NAMES[text.lower()]
        else:
            raise InvalidArgument(f"month must be 1-12 or a month name, got {value!r}")
    else:
        raise InvalidArgument(f"month must be 1-12, got {value!r}")

    if not 1 <= number <= 12:
        raise InvalidArgument(f"month must be 1-12, got {value!r}")
    return number


def resolve_month(value: Union[int, str], reference_year: int) -> MonthWindow:
    month = parse_month(value)
    last = calendar.monthrange(reference_year, month)[1]
    start = datetime(reference_year, month, 1)
    end = start + timedelta(days=last)
    return MonthWindow(year=reference_year, month=month, start=start, end=end)
