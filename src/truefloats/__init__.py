"""
truefloats finds float literals in source text and shows their true binary64 values.
"""

from __future__ import annotations

from .config import TrueFloatsConfig, ViewerSettings, config_from_dict, config_from_yaml, load_config
from .core import AnnotationRecord, RenderedForm, format_hover_text, scan
from .datatypes import FloatBits, bits_from_hex, bits_of, ieee754_hex
from .literals import LiteralToken, canonical_literal_text, parse_literal, scan_literals
from .rendering import compact_repeats, render_full_precision
from .session import AnnotationSession, ReplaceRequest, replace_literal

__all__ = [
    "AnnotationRecord",
    "AnnotationSession",
    "FloatBits",
    "LiteralToken",
    "RenderedForm",
    "ReplaceRequest",
    "TrueFloatsConfig",
    "ViewerSettings",
    "bits_from_hex",
    "bits_of",
    "canonical_literal_text",
    "compact_repeats",
    "config_from_dict",
    "config_from_yaml",
    "format_hover_text",
    "ieee754_hex",
    "load_config",
    "parse_literal",
    "render_full_precision",
    "replace_literal",
    "scan",
    "scan_literals",
]

__version__ = "0.1.0"
