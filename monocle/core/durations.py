"""Duration parsing and formatting in Go ``time.Duration`` notation.

CircleCI users pass intervals such as ``30s`` or ``1m30s`` on the command
line, and build durations are displayed the same way (``2m4.5s``,
``450ms``).  Both directions work on ``datetime.timedelta``, so precision
stops at microseconds.
"""

from __future__ import annotations

import re
from datetime import timedelta
from decimal import Decimal, InvalidOperation

_NS_PER_US = 1_000
_NS_PER_MS = 1_000_000
_NS_PER_S = 1_000_000_000
_NS_PER_MIN = 60 * _NS_PER_S
_NS_PER_HOUR = 60 * _NS_PER_MIN

# Range of a signed 64-bit nanosecond count, about 2562047h.
_MAX_NS = (1 << 63) - 1
_MIN_NS = -(1 << 63)

_UNIT_NS: dict[str, int] = {
    "ns": 1,
    "us": _NS_PER_US,
    "µs": _NS_PER_US,  # micro sign
    "μs": _NS_PER_US,  # greek mu
    "ms": _NS_PER_MS,
    "s": _NS_PER_S,
    "m": _NS_PER_MIN,
    "h": _NS_PER_HOUR,
}

# "ms" must be tried before "m" and "s".
_COMPONENT = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(text: str) -> timedelta:
    """Parse a Go-style duration string such as ``"1h15m"`` or ``"300ms"``.

    A unit is required on every component; the bare string ``"0"`` is the
    only unitless value accepted.  Values beyond a signed 64-bit count of
    nanoseconds are rejected.

    Raises
    ------
    ValueError
        If *text* is not a valid duration.
    """
    raw = text.strip()
    body = raw
    sign = 1
    if body[:1] in ("+", "-"):
        sign = -1 if body[0] == "-" else 1
        body = body[1:]

    if body == "0":
        return timedelta(0)
    if not body:
        raise ValueError(f"time: invalid duration {text!r}")

    total_ns = Decimal(0)
    pos = 0
    while pos < len(body):
        match = _COMPONENT.match(body, pos)
        if match is None:
            raise ValueError(f"time: invalid duration {text!r}")
        try:
            value = Decimal(match.group(1))
        except InvalidOperation as exc:
            raise ValueError(f"time: invalid duration {text!r}") from exc
        total_ns += value * _UNIT_NS[match.group(2)]
        pos = match.end()

    total_ns *= sign
    if not _MIN_NS <= total_ns <= _MAX_NS:
        raise ValueError(f"time: invalid duration {text!r}")
    return timedelta(microseconds=int(total_ns / _NS_PER_US))


def format_duration(delta: timedelta) -> str:
    """Format *delta* the way Go's ``Duration.String`` does.

    Sub-second values use the largest fitting unit (``ns``, ``µs``, ``ms``);
    longer values use ``h``/``m``/``s`` with fractional seconds and no
    trailing zeros, e.g. ``1h0m5.25s``.
    """
    total_ns = (
        (delta.days * 86_400 + delta.seconds) * _NS_PER_S
        + delta.microseconds * _NS_PER_US
    )
    negative = total_ns < 0
    total_ns = abs(total_ns)

    if total_ns == 0:
        return "0s"

    if total_ns < _NS_PER_S:
        if total_ns < _NS_PER_US:
            text = f"{total_ns}ns"
        elif total_ns < _NS_PER_MS:
            text = _with_fraction(total_ns, _NS_PER_US) + "µs"
        else:
            text = _with_fraction(total_ns, _NS_PER_MS) + "ms"
    else:
        hours, rest = divmod(total_ns, _NS_PER_HOUR)
        minutes, rest = divmod(rest, _NS_PER_MIN)
        text = _with_fraction(rest, _NS_PER_S) + "s"
        if hours or minutes:
            text = f"{minutes}m{text}"
        if hours:
            text = f"{hours}h{text}"

    return f"-{text}" if negative else text


def _with_fraction(value: int, unit: int) -> str:
    whole, fraction = divmod(value, unit)
    if not fraction:
        return str(whole)
    width = len(str(unit)) - 1
    digits = str(fraction).rjust(width, "0").rstrip("0")
    return f"{whole}.{digits}"
