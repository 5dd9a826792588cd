"""Canonical text encoding for durations used in health reports."""

import re
from datetime import timedelta


ZERO_DURATION = timedelta(0)

TICKS_PER_MICROSECOND = 10
MICROSECONDS_PER_SECOND = 1_000_000

# [ws][-]{ d | [d.]hh:mm[:ss[.fffffff]] }[ws]
_CLOCK_PATTERN = re.compile(
    r'^\s*(?P<sign>-)?'
    r'(?:(?P<days>\d+)\.)?'
    r'(?P<hours>\d{1,2}):(?P<minutes>\d{1,2})'
    r'(?::(?P<seconds>\d{1,2})(?:\.(?P<fraction>\d{1,7}))?)?'
    r'\s*$'
)
_DAYS_PATTERN = re.compile(r'^\s*(?P<sign>-)?(?P<days>\d+)\s*$')


def format_duration(value: timedelta) -> str:
    """
    Format a duration as ``[-][d.]hh:mm:ss[.fffffff]``.

    Days are written only when non-zero. The fractional part is written only
    when non-zero and always carries seven digits (100 ns ticks).

    Args:
        value: Duration to format

    Returns:
        Canonical duration string

    Raises:
        TypeError: If value is not a timedelta
    """
    if not isinstance(value, timedelta):
        raise TypeError(f"Expected timedelta, got {type(value).__name__}")

    total_us = (value.days * 86400 + value.seconds) * MICROSECONDS_PER_SECOND + value.microseconds
    sign = '-' if total_us < 0 else ''
    total_us = abs(total_us)

    total_seconds, microseconds = divmod(total_us, MICROSECONDS_PER_SECOND)
    total_minutes, seconds = divmod(total_seconds, 60)
    total_hours, minutes = divmod(total_minutes, 60)
    days, hours = divmod(total_hours, 24)

    text = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    if days:
        text = f"{days}.{text}"
    if microseconds:
        text = f"{text}.{microseconds * TICKS_PER_MICROSECOND:07d}"
    return sign + text


def parse_duration(text) -> timedelta:
    """
    Parse a duration written in the canonical format.

    Parsing is lenient: anything that cannot be read (wrong type, bad shape,
    out-of-range component, overflow) yields ``ZERO_DURATION`` instead of an
    error. Sub-microsecond ticks are truncated.

    Args:
        text: Duration string

    Returns:
        Parsed duration, or ZERO_DURATION on failure
    """
    if not isinstance(text, str):
        return ZERO_DURATION

    match = _CLOCK_PATTERN.match(text)
    if match:
        hours = int(match.group('hours'))
        minutes = int(match.group('minutes'))
        seconds = int(match.group('seconds') or 0)
        if hours > 23 or minutes > 59 or seconds > 59:
            return ZERO_DURATION
        fraction = match.group('fraction') or ''
        ticks = int(fraction.ljust(7, '0')) if fraction else 0
        days = int(match.group('days') or 0)
    else:
        match = _DAYS_PATTERN.match(text)
        if not match:
            return ZERO_DURATION
        days = int(match.group('days'))
        hours = minutes = seconds = ticks = 0

    try:
        result = timedelta(
            days=days,
            hours=hours,
            minutes=minutes,
            seconds=seconds,
            microseconds=ticks // TICKS_PER_MICROSECOND,
        )
    except OverflowError:
        return ZERO_DURATION

    return -result if match.group('sign') else result


class DurationCodec:
    """Object wrapper around format_duration / parse_duration."""

    def encode(self, value: timedelta) -> str:
        return format_duration(value)

    def decode(self, text) -> timedelta:
        return parse_duration(text)
