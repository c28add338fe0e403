from pytest import MonkeyPatch

import truefloats.core as core_module
from truefloats.config import TrueFloatsConfig
from truefloats.core import format_hover_text, line_col, scan
from truefloats.literals import parse_literal


def test_scan_annotates_inexact_literal() -> None:
    source = "x = 0.1;"
    records = scan(source)

    assert len(records) == 1
    record = records[0]
    assert record.literal == "0.1"
    assert (record.start, record.end) == (4, 7)
    assert record.value == 0.1
    assert record.full == "0.10000000000000001"
    assert record.display == "0.10000000000000001"
    assert record.hex is None


def test_scan_suppresses_exact_literals() -> None:
    assert scan("a = 1.5;") == []
    assert scan("a = 1.50;") == []
    assert scan("a = 123.456;") == []
    assert scan("a = 1_000.0f;") == []


def test_scan_reports_everything_when_not_comparing() -> None:
    config = TrueFloatsConfig(only_when_different=False)
    records = scan("a = 1.5;", config)
    assert [record.full for record in records] == ["1.5"]


def test_scan_drops_non_finite_values() -> None:
    assert scan("a = 1e999; b = 0x1p2000;") == []
    assert scan("a = 0x1p" + "1" * 5000) == []


def test_scan_hex_float_with_encoding() -> None:
    records = scan("limit = 0x1p10;", TrueFloatsConfig(show_hex=True))

    assert len(records) == 1
    assert records[0].value == 1024.0
    assert records[0].full == "1024"
    assert records[0].hex == "0x4090000000000000"


def test_scan_keeps_large_values_scientific() -> None:
    records = scan("big = 1e25")
    assert [record.full for record in records] == ["1.0000000000000001e+25"]


def test_scan_compacts_display_only() -> None:
    config = TrueFloatsConfig(precision=15)
    records = scan("third = 0.3333333333333333", config)

    assert len(records) == 1
    assert records[0].full == "0.333333333333333"
    assert records[0].display == "0.…3×15"


def test_scan_returns_records_in_source_order() -> None:
    source = "a = 0.3, b = 0.1, c = 2.675"
    records = scan(source)
    starts = [record.start for record in records]
    assert starts == sorted(starts)
    assert [record.literal for record in records] == ["0.3", "0.1", "2.675"]


def test_scan_full_precision_round_trips() -> None:
    source = "0.1 0.2 0.3 1e-7 2.675 6.02214076e23 0x1.999999999999ap-4"
    for record in scan(source):
        assert parse_literal(record.full) == parse_literal(record.literal)


def test_scan_is_repeatable() -> None:
    source = "a = 0.1; b = 0.7e-3f"
    config = TrueFloatsConfig(show_hex=True)
    assert scan(source, config) == scan(source, config)


def test_line_col() -> None:
    text = "a = 1\nb = 0.1\n"
    assert line_col(text, 0) == (0, 0)
    assert line_col(text, 10) == (1, 4)


def test_hover_text_includes_bit_breakdown() -> None:
    record = scan("x = 0.1", TrueFloatsConfig(show_hex=True))[0]
    hover = format_hover_text(record)

    assert "Source literal: `0.1`" in hover
    assert "Full precision: **0.10000000000000001**" in hover
    assert "Hex (IEEE-754 binary64): **0x3fb999999999999a**" in hover
    assert "`sign | exponent | fraction`" in hover


def test_hover_text_without_hex() -> None:
    record = scan("x = 0.1")[0]
    assert "Hex" not in format_hover_text(record)


def test_scan_drops_literal_whose_display_matches_source(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setattr(
        core_module, "compact_repeats", lambda full, min_run, enabled=True: "0.1"
    )
    assert scan("x = 0.1") == []

    records = scan("x = 0.1", TrueFloatsConfig(only_when_different=False))
    assert [record.display for record in records] == ["0.1"]


def test_hover_text_describes_compacted_display() -> None:
    record = scan("x = 0.3333333333333", TrueFloatsConfig(precision=10))[0]
    assert record.full == "0.3333333333"
    assert record.display == "0.…3×10"

    hover = format_hover_text(record)
    assert "Shown as: **0.…3×10** (3 repeated 10 times)" in hover
    assert "Shown as" not in format_hover_text(scan("x = 0.1")[0])
