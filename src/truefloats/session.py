from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass, field, replace

from .config import TrueFloatsConfig
from .core import AnnotationRecord, line_col, scan

logger = logging.getLogger(__name__)

_LIVE_LITERAL_RE = re.compile(r"[0-9_.+\-xXa-fA-FpP]+")
_LIVE_SUFFIX_RE = re.compile(r"[fF]$")


@dataclass(frozen=True)
class CacheEntry:
    version: int
    config_key: str
    records: tuple[AnnotationRecord, ...]


@dataclass(frozen=True)
class Position:
    line: int
    character: int


@dataclass(frozen=True)
class ReplaceRequest:
    """Serializable arguments of a "replace with true value" action."""

    doc_id: str
    start: Position
    end: Position
    replacement: str

    @classmethod
    def for_record(cls, doc_id: str, text: str, record: AnnotationRecord) -> "ReplaceRequest":
        start_line, start_char = line_col(text, record.start)
        end_line, end_char = line_col(text, record.end)
        return cls(
            doc_id=doc_id,
            start=Position(start_line, start_char),
            end=Position(end_line, end_char),
            replacement=record.full,
        )

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, payload: str) -> "ReplaceRequest":
        data = json.loads(payload)
        return cls(
            doc_id=data["doc_id"],
            start=Position(**data["start"]),
            end=Position(**data["end"]),
            replacement=data["replacement"],
        )


def offset_of(text: str, position: Position) -> int | None:
    lines = text.split("\n")
    if position.line < 0 or position.line >= len(lines):
        return None
    if position.character < 0 or position.character > len(lines[position.line]):
        return None
    return sum(len(line) + 1 for line in lines[: position.line]) + position.character


def replace_literal(text: str, start: int, end: int, replacement: str) -> str | None:
    """Splice ``replacement`` over ``text[start:end]`` if it still looks numeric.

    A trailing ``f``/``F`` on the live literal is kept. Returns ``None`` when the
    span no longer holds a numeric literal.
    """
    current = text[start:end]
    if not (0 <= start < end <= len(text)) or not _LIVE_LITERAL_RE.fullmatch(current):
        logger.warning("Literal changed; skipped replacement at %d:%d (%r)", start, end, current)
        return None
    suffix = _LIVE_SUFFIX_RE.search(current)
    if suffix is not None:
        replacement += suffix.group(0)
    return text[:start] + replacement + text[end:]


def apply_replace_request(text: str, request: ReplaceRequest) -> str | None:
    start = offset_of(text, request.start)
    end = offset_of(text, request.end)
    if start is None or end is None:
        logger.warning("Replace target %s is outside the document", request.doc_id)
        return None
    return replace_literal(text, start, end, request.replacement)


@dataclass
class AnnotationSession:
    """Per-window annotation state owned by the integration layer.

    Holds the enabled flag and a scan cache keyed by document id, memoized on
    (document version, configuration signature).
    """

    config: TrueFloatsConfig = field(default_factory=TrueFloatsConfig)
    enabled: bool = True
    _cache: dict[str, CacheEntry] = field(default_factory=dict, repr=False)
    _active: bool = field(default=False, repr=False)

    @property
    def is_active(self) -> bool:
        return self._active

    def start(self) -> "AnnotationSession":
        self.enabled = self.config.viewer.enabled
        self._cache.clear()
        self._active = True
        logger.debug("Annotation session started (%s)", self.config.signature())
        return self

    def dispose(self) -> None:
        self._cache.clear()
        self._active = False
        logger.debug("Annotation session disposed")

    def __enter__(self) -> "AnnotationSession":
        return self.start()

    def __exit__(self, *_exc: object) -> None:
        self.dispose()

    def toggle(self) -> bool:
        self.enabled = not self.enabled
        return self.enabled

    def toggle_hex(self) -> bool:
        self.update_config(replace(self.config, show_hex=not self.config.show_hex))
        return self.config.show_hex

    def update_config(self, config: TrueFloatsConfig) -> None:
        self.config = config
        self.invalidate()

    def invalidate(self, doc_id: str | None = None) -> None:
        if doc_id is None:
            self._cache.clear()
        else:
            self._cache.pop(doc_id, None)

    def annotate(
        self,
        doc_id: str,
        version: int,
        text: str,
        *,
        forced: bool = False,
    ) -> list[AnnotationRecord]:
        if not self._active or not self.enabled:
            return []

        config_key = self.config.signature()
        existing = self._cache.get(doc_id)
        if (
            not forced
            and existing is not None
            and existing.version == version
            and existing.config_key == config_key
        ):
            logger.debug("Cache hit for %s@%d", doc_id, version)
            return list(existing.records)

        logger.debug("Scanning %s@%d", doc_id, version)
        records = scan(text, self.config)
        self._cache[doc_id] = CacheEntry(version=version, config_key=config_key, records=tuple(records))
        return records
