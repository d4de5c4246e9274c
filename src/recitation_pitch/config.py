"""Configuration objects for pitch tracking sessions."""

from __future__ import annotations

import dataclasses
import json
import math
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_CONFIG_NAME = "pitch_tracker_config.json"

_FILTER_ALIASES = {
    "minHz": "min_hz",
    "maxHz": "max_hz",
    "minConfidence": "min_confidence",
    "smoothingWindow": "smoothing_window",
}

_TRACKER_ALIASES = {
    "sampleRate": "samplerate",
    "sample_rate": "samplerate",
    "blockSize": "block_size",
    "fftSize": "block_size",
    "tickHz": "tick_hz",
    "highpassHz": "highpass_hz",
    "lowpassHz": "lowpass_hz",
    "stabilizerWindow": "stabilizer_window",
    "pitchBufferSize": "pitch_buffer_size",
    "filterOptions": "filter",
}


def _rename_aliases(raw: Dict[str, Any], aliases: Dict[str, str]) -> Dict[str, Any]:
    normalized = dict(raw)
    for legacy_key, new_key in aliases.items():
        if legacy_key in normalized:
            normalized[new_key] = normalized.pop(legacy_key)
    return normalized


@dataclasses.dataclass(frozen=True)
class FilterOptions:
    """Range/confidence gate and stabilization switch.

    Filtering and smoothing are off by default: raw estimator output is
    delivered as-is unless ``enabled`` is set.
    """

    min_hz: float = 0.0
    max_hz: float = math.inf
    min_confidence: float = 0.0
    smoothing_window: int = 1
    enabled: bool = False

    def __post_init__(self) -> None:
        if math.isnan(self.min_hz) or self.min_hz < 0:
            raise ValueError("min_hz must be a non-negative number.")
        if math.isnan(self.max_hz) or self.max_hz <= self.min_hz:
            raise ValueError("max_hz must be greater than min_hz.")
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ValueError("min_confidence must lie within [0, 1].")
        if isinstance(self.smoothing_window, bool) or int(self.smoothing_window) != self.smoothing_window:
            raise ValueError("smoothing_window must be an integer.")
        if self.smoothing_window < 1:
            raise ValueError("smoothing_window must be at least 1.")
        object.__setattr__(self, "smoothing_window", int(self.smoothing_window))

    @staticmethod
    def from_dict(raw: Optional[Dict[str, Any]]) -> "FilterOptions":
        normalized = _rename_aliases(raw or {}, _FILTER_ALIASES)
        if normalized.get("max_hz") is None:
            normalized.pop("max_hz", None)
        known = {f.name for f in dataclasses.fields(FilterOptions)}
        filtered = {k: v for k, v in normalized.items() if k in known}
        for key in ("min_hz", "max_hz", "min_confidence"):
            if key in filtered:
                filtered[key] = float(filtered[key])
        if "enabled" in filtered:
            filtered["enabled"] = bool(filtered["enabled"])
        return FilterOptions(**filtered)

    @staticmethod
    def voice_preset() -> "FilterOptions":
        """Light filtering used when recording a student's voice."""
        return FilterOptions(
            min_hz=60.0,
            max_hz=1200.0,
            min_confidence=0.3,
            smoothing_window=3,
            enabled=True,
        )

    def merged(self, **overrides: Any) -> "FilterOptions":
        return FilterOptions.from_dict({**dataclasses.asdict(self), **overrides})


@dataclasses.dataclass
class TrackerConfig:
    """Audio graph and scheduling settings for a tracking session."""

    samplerate: int = 44100
    block_size: int = 8192
    tick_hz: float = 60.0
    hop: int = 512
    highpass_hz: float = 60.0
    lowpass_hz: float = 4000.0
    stabilizer_window: int = 7
    pitch_buffer_size: int = 20
    device: Optional[str] = None
    filter: FilterOptions = dataclasses.field(default_factory=FilterOptions)

    def __post_init__(self) -> None:
        if self.samplerate <= 0:
            raise ValueError("samplerate must be positive.")
        if self.block_size < 2:
            raise ValueError("block_size must be at least 2 samples.")
        if not self.tick_hz > 0:
            raise ValueError("tick_hz must be positive.")
        if self.hop < 1:
            raise ValueError("hop must be at least 1 sample.")
        if self.stabilizer_window < 1 or self.pitch_buffer_size < 1:
            raise ValueError("buffer sizes must be at least 1.")

    @property
    def tick_interval(self) -> float:
        return 1.0 / self.tick_hz

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "TrackerConfig":
        normalized = _rename_aliases(raw, _TRACKER_ALIASES)

        filter_data: Dict[str, Any] = {}
        filter_raw = normalized.pop("filter", None)
        if isinstance(filter_raw, dict):
            filter_data.update(filter_raw)
        elif isinstance(filter_raw, FilterOptions):
            filter_data.update(dataclasses.asdict(filter_raw))

        # Flat filter keys at the top level are accepted as well.
        for key in (*_FILTER_ALIASES, *_FILTER_ALIASES.values(), "enabled"):
            if key in normalized:
                filter_data[key] = normalized.pop(key)

        known = {f.name for f in dataclasses.fields(TrackerConfig)}
        filtered = {k: v for k, v in normalized.items() if k in known}
        filtered["filter"] = FilterOptions.from_dict(filter_data)
        return TrackerConfig(**filtered)


def load_config(path: Path) -> TrackerConfig:
    data = json.loads(Path(path).read_text())
    return TrackerConfig.from_dict(data)


def load_default_config() -> TrackerConfig:
    """Load the configuration shipped next to this module."""
    return load_config(Path(__file__).with_name(DEFAULT_CONFIG_NAME))


__all__ = [
    "FilterOptions",
    "TrackerConfig",
    "load_config",
    "load_default_config",
]
