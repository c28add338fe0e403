import logging

from pytest import LogCaptureFixture, MonkeyPatch

import truefloats.session as session_module
from truefloats.config import TrueFloatsConfig, ViewerSettings
from truefloats.core import scan
from truefloats.session import (
    AnnotationSession,
    Position,
    ReplaceRequest,
    apply_replace_request,
    offset_of,
    replace_literal,
)


def _counting_scan(monkeypatch: MonkeyPatch) -> list[str]:
    calls: list[str] = []

    def _scan(text: str, config: TrueFloatsConfig):
        calls.append(text)
        return scan(text, config)

    monkeypatch.setattr(session_module, "scan", _scan)
    return calls


def test_session_caches_by_version_and_config(monkeypatch: MonkeyPatch) -> None:
    calls = _counting_scan(monkeypatch)
    with AnnotationSession() as session:
        first = session.annotate("doc", 1, "x = 0.1")
        second = session.annotate("doc", 1, "x = 0.1")
        assert first == second
        assert len(calls) == 1

        session.annotate("doc", 2, "x = 0.1")
        assert len(calls) == 2

        session.annotate("doc", 2, "x = 0.1", forced=True)
        assert len(calls) == 3


def test_session_config_change_invalidates_cache(monkeypatch: MonkeyPatch) -> None:
    calls = _counting_scan(monkeypatch)
    with AnnotationSession() as session:
        session.annotate("doc", 1, "x = 0.1")
        assert session.toggle_hex() is True
        records = session.annotate("doc", 1, "x = 0.1")
        assert len(calls) == 2
        assert records[0].hex == "0x3fb999999999999a"


def test_session_lifecycle_and_enabled_flag() -> None:
    session = AnnotationSession()
    assert session.is_active is False
    assert session.annotate("doc", 1, "x = 0.1") == []

    session.start()
    assert len(session.annotate("doc", 1, "x = 0.1")) == 1
    assert session.toggle() is False
    assert session.annotate("doc", 1, "x = 0.1") == []

    session.dispose()
    assert session.is_active is False


def test_session_starts_disabled_from_config() -> None:
    config = TrueFloatsConfig(viewer=ViewerSettings(enabled=False))
    with AnnotationSession(config) as session:
        assert session.enabled is False
        assert session.annotate("doc", 1, "x = 0.1") == []


def test_replace_literal_keeps_float_suffix() -> None:
    text = "x = 0.1f;"
    assert replace_literal(text, 4, 8, "0.10000000000000001") == "x = 0.10000000000000001f;"


def test_replace_literal_plain() -> None:
    text = "x = 0.1;"
    assert replace_literal(text, 4, 7, "0.10000000000000001") == "x = 0.10000000000000001;"


def test_replace_literal_skips_changed_text(caplog: LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="truefloats.session"):
        assert replace_literal("x = abc;", 4, 7, "1") is None
    assert "Literal changed" in caplog.text
    assert replace_literal("x = 0.1", 4, 40, "1") is None


def test_replace_request_round_trip() -> None:
    text = "a = 1\nb = 0.1\n"
    record = scan(text)[0]
    request = ReplaceRequest.for_record("doc", text, record)

    assert request.start == Position(1, 4)
    assert request.end == Position(1, 7)
    restored = ReplaceRequest.from_json(request.to_json())
    assert restored == request
    assert apply_replace_request(text, restored) == "a = 1\nb = 0.10000000000000001\n"


def test_offset_of_out_of_range() -> None:
    text = "a = 1\nb = 0.1"
    assert offset_of(text, Position(1, 4)) == 10
    assert offset_of(text, Position(5, 0)) is None
    assert offset_of(text, Position(0, 99)) is None


def test_session_toggle_hex_keeps_disabled_state() -> None:
    with AnnotationSession() as session:
        assert session.toggle() is False
        assert session.toggle_hex() is True
        assert session.enabled is False
        assert session.annotate("doc", 1, "x = 0.1") == []

        assert session.toggle() is True
        assert session.annotate("doc", 1, "x = 0.1")[0].hex == "0x3fb999999999999a"
