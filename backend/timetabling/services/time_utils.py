from __future__ import annotations

import re

from timetabling.core.exceptions import InvalidTimeFormatError

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
MINUTES_PER_DAY = 24 * 60


def parse_time(value: str) -> int:
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise InvalidTimeFormatError(value)
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def format_time(minutes: int) -> str:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise InvalidTimeFormatError(minutes)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def validate_time_format(value: str) -> str:
    parse_time(value)
    return value


def overlaps(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open interval overlap; touching endpoints do not overlap."""
    return start_a < end_b and end_a > start_b
