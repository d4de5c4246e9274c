"""Real-time pitch tracking for recitation training."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__all__ = [
    "ArraySource",
    "AudioSource",
    "DemoSource",
    "MicSource",
    "FilterChain",
    "FilterChainError",
    "FilterOptions",
    "FilterPolicy",
    "Frame",
    "FrameSampler",
    "ManualDriver",
    "PitchEstimate",
    "PitchPoint",
    "PitchTrackRecorder",
    "PitchTracker",
    "SessionStartError",
    "SessionStateError",
    "SleepDriver",
    "TemporalStabilizer",
    "TrackerConfig",
    "detect_pitch",
    "extract_pitch_track",
    "filter_pitch",
    "hz_to_midi",
    "load_config",
    "midi_to_note_name",
    "smooth_pitch_data",
]

_EXPORT_MAP = {
    "ArraySource": ("recitation_pitch.audio_sources", "ArraySource"),
    "AudioSource": ("recitation_pitch.audio_sources", "AudioSource"),
    "DemoSource": ("recitation_pitch.audio_sources", "DemoSource"),
    "MicSource": ("recitation_pitch.audio_sources", "MicSource"),
    "FilterChain": ("recitation_pitch.filter_chain", "FilterChain"),
    "FilterChainError": ("recitation_pitch.filter_chain", "FilterChainError"),
    "FilterOptions": ("recitation_pitch.config", "FilterOptions"),
    "FilterPolicy": ("recitation_pitch.policy", "FilterPolicy"),
    "Frame": ("recitation_pitch.sampler", "Frame"),
    "FrameSampler": ("recitation_pitch.sampler", "FrameSampler"),
    "ManualDriver": ("recitation_pitch.driver", "ManualDriver"),
    "PitchEstimate": ("recitation_pitch.results", "PitchEstimate"),
    "PitchPoint": ("recitation_pitch.results", "PitchPoint"),
    "PitchTrackRecorder": ("recitation_pitch.recorder", "PitchTrackRecorder"),
    "PitchTracker": ("recitation_pitch.session", "PitchTracker"),
    "SessionStartError": ("recitation_pitch.session", "SessionStartError"),
    "SessionStateError": ("recitation_pitch.session", "SessionStateError"),
    "SleepDriver": ("recitation_pitch.driver", "SleepDriver"),
    "TemporalStabilizer": ("recitation_pitch.stabilizer", "TemporalStabilizer"),
    "TrackerConfig": ("recitation_pitch.config", "TrackerConfig"),
    "detect_pitch": ("recitation_pitch.estimator", "detect_pitch"),
    "extract_pitch_track": ("recitation_pitch.workflow", "extract_pitch_track"),
    "filter_pitch": ("recitation_pitch.policy", "filter_pitch"),
    "hz_to_midi": ("recitation_pitch.utils", "hz_to_midi"),
    "load_config": ("recitation_pitch.config", "load_config"),
    "midi_to_note_name": ("recitation_pitch.utils", "midi_to_note_name"),
    "smooth_pitch_data": ("recitation_pitch.stabilizer", "smooth_pitch_data"),
}


if TYPE_CHECKING:  # pragma: no cover - only for type checkers
    from recitation_pitch.audio_sources import ArraySource, AudioSource, DemoSource, MicSource
    from recitation_pitch.config import FilterOptions, TrackerConfig, load_config
    from recitation_pitch.driver import ManualDriver, SleepDriver
    from recitation_pitch.estimator import detect_pitch
    from recitation_pitch.filter_chain import FilterChain, FilterChainError
    from recitation_pitch.policy import FilterPolicy, filter_pitch
    from recitation_pitch.recorder import PitchTrackRecorder
    from recitation_pitch.results import PitchEstimate, PitchPoint
    from recitation_pitch.sampler import Frame, FrameSampler
    from recitation_pitch.session import PitchTracker, SessionStartError, SessionStateError
    from recitation_pitch.stabilizer import TemporalStabilizer, smooth_pitch_data
    from recitation_pitch.utils import hz_to_midi, midi_to_note_name
    from recitation_pitch.workflow import extract_pitch_track


def __getattr__(name: str) -> Any:
    """Lazily import submodules on demand."""

    if name in _EXPORT_MAP:
        module_name, attribute = _EXPORT_MAP[name]
        module = import_module(module_name)
        value = getattr(module, attribute)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(set(__all__))
