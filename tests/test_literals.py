import math

from truefloats.literals import canonical_literal_text, parse_literal, scan_literals


def _texts(source: str) -> list[str]:
    return [token.text for token in scan_literals(source)]


def test_scan_skips_plain_integers() -> None:
    assert scan_literals("x = 42;") == []
    assert scan_literals("0x1F + 17") == []


def test_scan_reports_exact_spans() -> None:
    source = "value = 1.5f;\nother = 2.5e-3"
    tokens = scan_literals(source)

    assert [token.text for token in tokens] == ["1.5f", "2.5e-3"]
    assert tokens[0].start == 8
    assert tokens[0].end == 12
    for token in tokens:
        assert source[token.start : token.end] == token.text


def test_scan_ignores_literals_inside_identifiers() -> None:
    assert scan_literals("var1.5 = abc2e5") == []


def test_scan_ignores_annotation_markers() -> None:
    assert scan_literals("@2.5 #1.0") == []


def test_scan_does_not_split_ranges_or_member_access() -> None:
    assert scan_literals("for i in 1..5 {}") == []
    assert scan_literals("pair.0e1") == []
    assert scan_literals("x = a..5;") == []


def test_scan_decimal_forms() -> None:
    assert _texts("a = 1_000.000_1") == ["1_000.000_1"]
    assert _texts("a = .25;") == [".25"]
    assert _texts("a = 1.;") == ["1."]
    assert _texts("a = 1e10") == ["1e10"]
    assert _texts("a = 3.0E+2d") == ["3.0E+2d"]


def test_scan_incomplete_exponent_is_not_consumed() -> None:
    assert _texts("1.5e") == ["1.5"]
    assert _texts("1e+") == []


def test_scan_version_like_text_yields_leading_pair_only() -> None:
    assert _texts("v = 1.5.2") == ["1.5"]


def test_scan_hex_floats() -> None:
    assert _texts("x = 0x1.8p1;") == ["0x1.8p1"]
    assert _texts("x = 0X1P-3d") == ["0X1P-3d"]
    assert _texts("x = 0x.8p0") == ["0x.8p0"]
    assert _texts("x = 0x_1p3") == []
    assert _texts("x = 0x1.8") == []


def test_parse_hex_float_identities() -> None:
    assert parse_literal("0x1.8p1") == 3.0
    assert parse_literal("0x1p10") == 1024.0
    assert parse_literal("0x.8p1") == 1.0
    assert parse_literal("0xA.8p-2f") == 2.625
    assert parse_literal("0x1_0p0") == 16.0


def test_parse_hex_float_invalid_groups() -> None:
    assert parse_literal("0xp1") is None
    assert parse_literal("0x.p1") is None
    assert parse_literal("0x1.gp1") is None


def test_parse_hex_float_overflow_is_infinite() -> None:
    assert parse_literal("0x1p99999") == math.inf
    assert parse_literal("0x1p-99999") == 0.0


def test_parse_hex_float_with_huge_exponent_saturates() -> None:
    assert parse_literal("0x1p" + "1" * 5000) == math.inf
    assert parse_literal("0x1p-" + "1" * 5000) == 0.0
    assert parse_literal("0x0p" + "9" * 5000) == 0.0
    assert parse_literal("0x1p+000000000000010") == 1024.0
    assert scan_literals("x = 0x1p" + "1" * 5000)[0].start == 4


def test_parse_decimal_forms() -> None:
    assert parse_literal("1_000.5") == 1000.5
    assert parse_literal(".5") == 0.5
    assert parse_literal("1.") == 1.0
    assert parse_literal("2.5f") == 2.5
    assert parse_literal("1e3d") == 1000.0
    assert parse_literal("1e999") == math.inf


def test_parse_rejects_non_numbers() -> None:
    assert parse_literal("abc") is None
    assert parse_literal("nan") is None
    assert parse_literal("") is None


def test_canonical_literal_text() -> None:
    assert canonical_literal_text("1.50") == "1.5"
    assert canonical_literal_text("1_000.0f") == "1000"
    assert canonical_literal_text(".5") == "0.5"
    assert canonical_literal_text("007.5") == "7.5"
    assert canonical_literal_text("1.") == "1"
    assert canonical_literal_text("00.000") == "0"
    assert canonical_literal_text("1e5") == "1e5"
    assert canonical_literal_text("0x1.8p1") == "0x1.8p1"
