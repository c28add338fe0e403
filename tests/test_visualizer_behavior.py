import math

import pytest

pytest.importorskip("tkinter")

from truefloats.app import annotation_label, record_at_offset  # noqa: E402
from truefloats.config import TrueFloatsConfig  # noqa: E402
from truefloats.core import scan  # noqa: E402
from truefloats.datatypes import bits_of  # noqa: E402
from truefloats.visualizer import bit_index_tokens, field_factor_text  # noqa: E402


def test_bit_index_tokens() -> None:
    assert bit_index_tokens(5) == [" 4", " 3", " 2", " 1", " 0"]
    assert bit_index_tokens(12)[:3] == ["11", "10", " 9"]
    assert bit_index_tokens(0) == []


def test_field_factor_text_normal_value() -> None:
    sign, exponent, fraction = field_factor_text(bits_of(-1.5))
    assert sign == "(-1)^1 = -1"
    assert exponent == "2^(1023-1023) = 2^0"
    assert fraction == "1 + 2251799813685248/2^52 = 1.5"


def test_field_factor_text_special_values() -> None:
    assert field_factor_text(bits_of(0.0))[1:] == ("zero case", "0")
    assert field_factor_text(bits_of(math.inf))[2] == "0 -> infinity"
    assert field_factor_text(bits_of(math.nan))[2].endswith("-> NaN")
    assert field_factor_text(bits_of(5e-324))[1] == "2^(1-1023) = 2^-1022"


def test_annotation_label_with_and_without_hex() -> None:
    plain = scan("x = 0.1")[0]
    with_hex = scan("x = 0.1", TrueFloatsConfig(show_hex=True))[0]
    assert annotation_label(plain) == "≈ 0.10000000000000001"
    assert annotation_label(with_hex) == "≈ 0.10000000000000001 0x3fb999999999999a"


def test_record_at_offset() -> None:
    records = scan("a = 0.1; b = 0.3")
    assert record_at_offset(records, 4) is records[0]
    assert record_at_offset(records, 6) is records[0]
    assert record_at_offset(records, 7) is None
    assert record_at_offset(records, 14) is records[1]
