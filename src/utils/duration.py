"""Parsing of short duration strings such as ``24h`` or ``7d``."""

import re
from datetime import timedelta

_UNITS = {
    's': 'seconds',
    'm': 'minutes',
    'h': 'hours',
    'd': 'days',
    'w': 'weeks',
}

_DURATION_RE = re.compile(r'^\s*(\d+)\s*([smhdw]?)\s*$', re.IGNORECASE)


def parse_duration(value: str | int) -> timedelta:
    """Parse a duration like ``30s``, ``15m``, ``24h``, ``7d`` or ``2w``.

    A bare number is read as seconds.

    Raises:
        ValueError: value is not a recognised duration
    """
    if isinstance(value, int):
        return timedelta(seconds=value)

    match = _DURATION_RE.match(value)
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")

    amount, unit = match.groups()
    return timedelta(**{_UNITS[unit.lower() or 's']: int(amount)})
