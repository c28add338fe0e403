from __future__ import annotations

import math
import re
from decimal import Decimal

MIN_PRECISION = 1
MAX_PRECISION = 25

# Exponents strictly inside this window are always written out in fixed point.
FIXED_POINT_MIN_EXPONENT = -10
FIXED_POINT_MAX_EXPONENT = 20

COMPACT_MARKER = "…{digit}×{count}"

_TRAILING_RUN_RE = re.compile(r"([0-9])\1+$")
_COMPACT_MARKER_RE = re.compile("^(?P<prefix>.*)…(?P<digit>[0-9])×(?P<count>[0-9]+)$")


def clamp_precision(precision: int) -> int:
    return min(max(int(precision), MIN_PRECISION), MAX_PRECISION)


def _round_significant(value: float, precision: int) -> tuple[str, int]:
    """Round ``abs(value)`` to ``precision`` significant digits.

    Works on the exact decimal expansion of the double, so there is no double
    rounding; exact ties go away from zero. Returns the digit string and the
    decimal exponent of its first digit.
    """
    exact = Decimal(abs(value))
    _, digit_tuple, exponent = exact.as_tuple()
    digits = "".join(str(digit) for digit in digit_tuple).lstrip("0")
    decimal_exponent = len(digits) - 1 + exponent

    if len(digits) <= precision:
        return digits.ljust(precision, "0"), decimal_exponent

    head = int(digits[:precision])
    if digits[precision] >= "5":
        head += 1
    if head == 10**precision:
        head //= 10
        decimal_exponent += 1
    return str(head), decimal_exponent


def _fixed_point(digits: str, exponent: int) -> str:
    if exponent < 0:
        return "0." + "0" * (-exponent - 1) + digits
    int_len = exponent + 1
    if len(digits) <= int_len:
        return digits + "0" * (int_len - len(digits))
    return digits[:int_len] + "." + digits[int_len:]


def _strip_fraction_zeros(text: str) -> str:
    if "." not in text:
        return text
    return text.rstrip("0").rstrip(".")


def _uses_fixed_point(exponent: int, precision: int) -> bool:
    if -6 <= exponent < precision:
        return True
    return FIXED_POINT_MIN_EXPONENT < exponent < FIXED_POINT_MAX_EXPONENT


def render_full_precision(value: float, precision: int) -> str:
    """Render ``value`` with ``precision`` significant digits.

    Moderate magnitudes come out in fixed point, extreme ones in scientific
    notation (``1e+25``). Trailing fraction zeros are dropped.
    The scientific mantissa is stripped too, so ``1e-10`` rather than the
    ``1.0000000000000000e-10`` that ``Number.prototype.toPrecision`` prints.
    """
    if not math.isfinite(value):
        if math.isnan(value):
            return "NaN"
        return "Infinity" if value > 0 else "-Infinity"

    digits_count = clamp_precision(precision)
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    digits, exponent = _round_significant(value, digits_count)

    if _uses_fixed_point(exponent, digits_count):
        return sign + _strip_fraction_zeros(_fixed_point(digits, exponent))

    mantissa = digits[0]
    if len(digits) > 1:
        mantissa = _strip_fraction_zeros(mantissa + "." + digits[1:])
    exponent_sign = "+" if exponent >= 0 else "-"
    return f"{sign}{mantissa}e{exponent_sign}{abs(exponent)}"


def is_scientific(text: str) -> bool:
    return "e" in text or "E" in text


def compact_repeats(full: str, min_run: int, enabled: bool = True) -> str:
    """Replace a long run of one digit at the very end of ``full`` with a marker."""
    if not enabled or "." not in full or is_scientific(full):
        return full
    match = _TRAILING_RUN_RE.search(full)
    if match is None:
        return full
    run = len(match.group(0))
    marker = COMPACT_MARKER.format(digit=match.group(1), count=run)
    if run < min_run or len(marker) >= run:
        return full
    return full[:-run] + marker


def parse_compact_marker(display: str) -> tuple[str, str, int] | None:
    match = _COMPACT_MARKER_RE.match(display)
    if match is None:
        return None
    return match.group("prefix"), match.group("digit"), int(match.group("count"))

