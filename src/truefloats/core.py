from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from .config import TrueFloatsConfig
from .datatypes import bits_from_hex, format_bit_breakdown, ieee754_hex
from .literals import LiteralToken, canonical_literal_text, parse_literal, scan_literals
from .rendering import compact_repeats, parse_compact_marker, render_full_precision

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedForm:
    full: str
    display: str


@dataclass(frozen=True)
class AnnotationRecord:
    token: LiteralToken
    value: float
    rendered: RenderedForm
    hex: str | None = None

    @property
    def literal(self) -> str:
        return self.token.text

    @property
    def start(self) -> int:
        return self.token.start

    @property
    def end(self) -> int:
        return self.token.end

    @property
    def full(self) -> str:
        return self.rendered.full

    @property
    def display(self) -> str:
        return self.rendered.display

    def to_dict(self) -> dict[str, object]:
        return {
            "literal": self.literal,
            "start": self.start,
            "end": self.end,
            "value": self.value,
            "full": self.full,
            "display": self.display,
            "hex": self.hex,
        }


def render_value(value: float, config: TrueFloatsConfig) -> RenderedForm:
    full = render_full_precision(value, config.precision)
    display = compact_repeats(full, config.compact_repeat_min_run, config.compact_repeats)
    return RenderedForm(full=full, display=display)


def annotate_token(token: LiteralToken, config: TrueFloatsConfig) -> AnnotationRecord | None:
    """Build the record for one token, or ``None`` when it should not be shown."""
    value = parse_literal(token.text)
    if value is None or not math.isfinite(value):
        logger.debug("Dropping literal %r at %d: not a finite number", token.text, token.start)
        return None

    full = render_full_precision(value, config.precision)
    canonical = canonical_literal_text(token.text) if config.only_when_different else None
    if canonical is not None and canonical == full:
        return None

    display = compact_repeats(full, config.compact_repeat_min_run, config.compact_repeats)
    if canonical is not None and display == canonical:
        return None

    return AnnotationRecord(
        token=token,
        value=value,
        rendered=RenderedForm(full=full, display=display),
        hex=ieee754_hex(value) if config.show_hex else None,
    )


def scan(text: str, config: TrueFloatsConfig | None = None) -> list[AnnotationRecord]:
    """Annotate every float literal in ``text`` whose true value is worth showing.

    Records come back in source order. The result depends only on ``text`` and
    the configuration, so callers may cache it by document version and
    ``config.signature()``.
    """
    if config is None:
        config = TrueFloatsConfig()
    records: list[AnnotationRecord] = []
    for token in scan_literals(text):
        record = annotate_token(token, config)
        if record is not None:
            records.append(record)
    return records


def line_col(text: str, offset: int) -> tuple[int, int]:
    """Zero-based line and column of ``offset`` in ``text``."""
    line = text.count("\n", 0, offset)
    line_start = text.rfind("\n", 0, offset) + 1
    return line, offset - line_start


def format_hover_text(record: AnnotationRecord) -> str:
    lines = [
        f"Source literal: `{record.literal}`",
        "",
        f"Number value: **{record.value!r}**",
        f"Full precision: **{record.full}**",
    ]
    compacted = parse_compact_marker(record.display)
    if compacted is not None:
        _, digit, count = compacted
        lines.append(f"Shown as: **{record.display}** ({digit} repeated {count} times)")
    if record.hex is not None:
        lines.append(f"Hex (IEEE-754 binary64): **{record.hex}**")
        bits = bits_from_hex(record.hex)
        if bits is not None:
            lines.append("")
            lines.append(f"`{format_bit_breakdown(bits)}`")
            lines.append("`sign | exponent | fraction`")
    return "\n".join(lines)
