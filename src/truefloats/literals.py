from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

DECIMAL_DIGITS = frozenset("0123456789")
HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
WORD_CHARS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_")
# A dot before a digit is member access (`t.0`) or a range (`1..5`, `..5`).
MARKER_CHARS = frozenset("#@.")
DECIMAL_EXPONENT_MARKS = frozenset("eE")
HEX_EXPONENT_MARKS = frozenset("pP")
EXPONENT_SIGNS = frozenset("+-")
TYPE_SUFFIXES = frozenset("fFdD")
FLOAT_MARKERS = frozenset(".eEpPfFdD")

_PARSE_SUFFIX_RE = re.compile(r"[fFdDlL]$")
_HEX_FLOAT_RE = re.compile(
    r"0[xX](?P<int>[0-9a-fA-F]*)(?:\.(?P<frac>[0-9a-fA-F]*))?[pP](?P<exp>[+-]?[0-9]+)"
)
_PLAIN_INTEGER_RE = re.compile(r"[0-9]+\.")
HEX_EXPONENT_MAX_DIGITS = 6


class ScanState(Enum):
    INTEGER_PART = "integer-part"
    FRACTION_PART = "fraction-part"
    EXPONENT_PART = "exponent-part"
    HEX_INT = "hex-int"
    HEX_FRAC = "hex-frac"
    HEX_EXPONENT = "hex-exponent"


@dataclass(frozen=True)
class LiteralToken:
    text: str
    start: int
    end: int


def _char_at(text: str, pos: int) -> str:
    return text[pos : pos + 1]


def _skip_group(text: str, pos: int, digits: frozenset[str]) -> int:
    """Consume a digit group: one leading digit, then digits or ``_``."""
    if _char_at(text, pos) not in digits:
        return pos
    pos += 1
    while pos < len(text) and (text[pos] in digits or text[pos] == "_"):
        pos += 1
    return pos


def _skip_exponent(text: str, pos: int, marks: frozenset[str]) -> int | None:
    if _char_at(text, pos) not in marks:
        return None
    pos += 1
    if _char_at(text, pos) in EXPONENT_SIGNS:
        pos += 1
    digits_start = pos
    while pos < len(text) and text[pos] in DECIMAL_DIGITS:
        pos += 1
    if pos == digits_start:
        return None
    return pos


def _scan_decimal(text: str, start: int) -> int | None:
    pos = start
    accepted: int | None = None
    state: ScanState | None = ScanState.INTEGER_PART
    if text[pos] == ".":
        if _char_at(text, pos + 1) not in DECIMAL_DIGITS:
            return None
        pos += 1
        state = ScanState.FRACTION_PART

    while state is not None:
        char = _char_at(text, pos)
        if state is ScanState.INTEGER_PART:
            pos = _skip_group(text, pos, DECIMAL_DIGITS)
            char = _char_at(text, pos)
            if char == "." and _char_at(text, pos + 1) != ".":
                pos += 1
                accepted = pos
                state = ScanState.FRACTION_PART
            elif char in DECIMAL_EXPONENT_MARKS:
                state = ScanState.EXPONENT_PART
            else:
                state = None
        elif state is ScanState.FRACTION_PART:
            if char in DECIMAL_DIGITS:
                pos = _skip_group(text, pos, DECIMAL_DIGITS)
                accepted = pos
            if _char_at(text, pos) in DECIMAL_EXPONENT_MARKS:
                state = ScanState.EXPONENT_PART
            else:
                state = None
        else:
            end = _skip_exponent(text, pos, DECIMAL_EXPONENT_MARKS)
            if end is not None:
                accepted = end
            state = None

    return accepted


def _scan_hex_float(text: str, start: int) -> int | None:
    pos = start + 2
    has_digits = False
    state: ScanState | None = ScanState.HEX_INT

    while state is not None:
        char = _char_at(text, pos)
        if state is ScanState.HEX_INT:
            if char in HEX_DIGITS:
                pos = _skip_group(text, pos, HEX_DIGITS)
                has_digits = True
                char = _char_at(text, pos)
            if char == ".":
                pos += 1
                state = ScanState.HEX_FRAC
            elif char in HEX_EXPONENT_MARKS:
                state = ScanState.HEX_EXPONENT
            else:
                return None
        elif state is ScanState.HEX_FRAC:
            if char in HEX_DIGITS:
                pos = _skip_group(text, pos, HEX_DIGITS)
                has_digits = True
            if _char_at(text, pos) not in HEX_EXPONENT_MARKS:
                return None
            state = ScanState.HEX_EXPONENT
        else:
            if not has_digits:
                return None
            return _skip_exponent(text, pos, HEX_EXPONENT_MARKS)

    return None


def _starts_token(text: str, pos: int) -> bool:
    char = text[pos]
    if char not in DECIMAL_DIGITS and not (
        char == "." and _char_at(text, pos + 1) in DECIMAL_DIGITS
    ):
        return False
    if pos == 0:
        return True
    previous = text[pos - 1]
    return previous not in WORD_CHARS and previous not in MARKER_CHARS


def _match_at(text: str, pos: int) -> int | None:
    end = None
    if text[pos] == "0" and _char_at(text, pos + 1) in {"x", "X"}:
        end = _scan_hex_float(text, pos)
    if end is None:
        end = _scan_decimal(text, pos)
    if end is None:
        return None
    if _char_at(text, end) in TYPE_SUFFIXES:
        end += 1
    return end


def scan_literals(text: str) -> list[LiteralToken]:
    """Find float literal tokens in ``text``, left to right, without overlaps.

    Pure integers never qualify: a token must carry a decimal point, an
    exponent marker or a type suffix.
    """
    tokens: list[LiteralToken] = []
    pos = 0
    length = len(text)
    while pos < length:
        if not _starts_token(text, pos):
            pos += 1
            continue
        end = _match_at(text, pos)
        if end is None:
            pos += 1
            continue
        literal = text[pos:end]
        if any(char in FLOAT_MARKERS for char in literal):
            tokens.append(LiteralToken(text=literal, start=pos, end=end))
        pos = end
    return tokens


def _hex_exponent(text: str) -> int:
    digits = text.lstrip("+-").lstrip("0")
    # Anything this wide already saturates ldexp to inf or 0.
    if len(digits) > HEX_EXPONENT_MAX_DIGITS:
        digits = "9" * HEX_EXPONENT_MAX_DIGITS
    exponent = int(digits or "0")
    return -exponent if text.startswith("-") else exponent


def _parse_hex_float(cleaned: str) -> float | None:
    match = _HEX_FLOAT_RE.fullmatch(cleaned)
    if match is None:
        return None
    int_hex = match.group("int")
    frac_hex = match.group("frac") or ""
    if not int_hex and not frac_hex:
        return None

    integer_value = int(int_hex, 16) if int_hex else 0
    fraction_value = 0.0
    denominator = 16.0
    for digit in frac_hex:
        fraction_value += int(digit, 16) / denominator
        denominator *= 16.0

    exponent = _hex_exponent(match.group("exp"))
    try:
        return math.ldexp(float(integer_value) + fraction_value, exponent)
    except OverflowError:
        return math.inf


def parse_literal(text: str) -> float | None:
    """Parse a decimal or hex-float literal; ``None`` when it is not a number."""
    cleaned = _PARSE_SUFFIX_RE.sub("", text.replace("_", ""))

    if cleaned[:2] in {"0x", "0X"} and ("p" in cleaned or "P" in cleaned):
        return _parse_hex_float(cleaned)

    if cleaned.startswith("."):
        cleaned = "0" + cleaned
    if _PLAIN_INTEGER_RE.fullmatch(cleaned):
        cleaned += "0"
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if math.isnan(value):
        return None
    return value


def canonical_literal_text(literal: str) -> str:
    """Normalize literal text for comparison against a full-precision rendering."""
    text = literal.replace("_", "")
    if text[-1:] in TYPE_SUFFIXES:
        text = text[:-1]
    if text.startswith("."):
        text = "0" + text
    if _PLAIN_INTEGER_RE.fullmatch(text):
        text = text[:-1]
    is_plain_fraction = (
        "." in text
        and text[:2] not in {"0x", "0X"}
        and not any(char in DECIMAL_EXPONENT_MARKS for char in text)
    )
    if is_plain_fraction:
        text = text.rstrip("0").rstrip(".")
    text = re.sub(r"^0+(?=[0-9])", "", text)
    return text or "0"
