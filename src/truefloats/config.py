from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

from .rendering import MAX_PRECISION, MIN_PRECISION, clamp_precision

logger = logging.getLogger(__name__)

SETTINGS_SECTION = "trueFloats"

# Names used by the editor settings store, mapped onto dataclass fields.
_SETTING_ALIASES = {
    "decimalPrecision": "precision",
    "onlyWhenDifferent": "only_when_different",
    "showHex": "show_hex",
    "compactRepeats": "compact_repeats",
    "compactRepeatMinRun": "compact_repeat_min_run",
    "debounceMs": "debounce_ms",
    "fontSizeDelta": "font_size_delta",
}


@dataclass(slots=True)
class ViewerSettings:
    """Presentation options for the desktop viewer."""

    enabled: bool = True
    debounce_ms: int = 250
    font_size_delta: int = -1


@dataclass(slots=True)
class TrueFloatsConfig:
    """Options controlling how literals are rendered and which are reported."""

    precision: int = 17
    only_when_different: bool = True
    show_hex: bool = False
    compact_repeats: bool = True
    compact_repeat_min_run: int = 6
    viewer: ViewerSettings = field(default_factory=ViewerSettings)

    def __post_init__(self) -> None:
        precision = clamp_precision(self.precision)
        if precision != self.precision:
            logger.debug(
                "Clamped precision %r into [%d, %d]",
                self.precision,
                MIN_PRECISION,
                MAX_PRECISION,
            )
        self.precision = precision
        self.compact_repeat_min_run = max(1, int(self.compact_repeat_min_run))

    def signature(self) -> str:
        """Cache key covering every option that changes ``scan`` output."""
        return (
            f"{self.precision}|{self.only_when_different}|{self.show_hex}"
            f"|{self.compact_repeats}|{self.compact_repeat_min_run}"
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable dictionary representation of the configuration."""
        return dict(asdict(self))


def _normalize_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    return {_SETTING_ALIASES.get(key, key): value for key, value in data.items()}


def _build_viewer_settings(data: Mapping[str, Any]) -> ViewerSettings:
    allowed = {item.name for item in fields(ViewerSettings)}
    normalized = _normalize_keys(data)
    return ViewerSettings(**{key: normalized[key] for key in normalized if key in allowed})


def _build_kwargs(data: Mapping[str, Any]) -> dict[str, Any]:
    normalized = _normalize_keys(data)
    allowed = {item.name for item in fields(TrueFloatsConfig)}
    kwargs = {key: normalized[key] for key in normalized if key in allowed}

    viewer_value = normalized.get("viewer")
    viewer_data: dict[str, Any] = {}
    if isinstance(viewer_value, Mapping):
        viewer_data.update(viewer_value)
    # The settings store keeps viewer options next to the core ones.
    viewer_allowed = {item.name for item in fields(ViewerSettings)}
    for key in viewer_allowed:
        if key in normalized:
            viewer_data.setdefault(key, normalized[key])
    if isinstance(viewer_value, ViewerSettings):
        kwargs["viewer"] = viewer_value
    elif viewer_data:
        kwargs["viewer"] = _build_viewer_settings(viewer_data)
    return kwargs


def config_from_dict(data: Mapping[str, Any] | None) -> TrueFloatsConfig:
    """Build a TrueFloatsConfig from a dictionary-like input."""
    if data is None:
        return TrueFloatsConfig()
    section = data.get(SETTINGS_SECTION)
    if isinstance(section, Mapping):
        data = section
    return TrueFloatsConfig(**_build_kwargs(data))


def config_from_yaml(path: str | Path) -> TrueFloatsConfig:
    """Load configuration from a YAML file."""
    contents = Path(path).read_text(encoding="utf-8")
    parsed = yaml.safe_load(contents) or {}
    if not isinstance(parsed, MutableMapping):
        raise ValueError("Configuration YAML must define a mapping.")
    return config_from_dict(parsed)


def load_config(path: str | Path | None = None) -> TrueFloatsConfig:
    """Load configuration from YAML when provided, otherwise return defaults."""
    if path is None:
        return TrueFloatsConfig()
    return config_from_yaml(path)
