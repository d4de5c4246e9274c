"""Value types emitted by the pitch tracking pipeline."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional

from .utils import hz_to_midi


@dataclass(frozen=True)
class PitchEstimate:
    frequency: Optional[float]
    confidence: float

    @classmethod
    def unvoiced(cls) -> "PitchEstimate":
        return cls(frequency=None, confidence=0.0)


@dataclass(frozen=True)
class PitchPoint:
    """One observation per tick; ``time`` is seconds since the session started."""

    time: float
    frequency: Optional[float]
    confidence: float
    midi: Optional[float] = field(default=None)

    def __post_init__(self) -> None:
        if self.midi is None and self.frequency is not None:
            object.__setattr__(self, "midi", hz_to_midi(self.frequency))

    @property
    def voiced(self) -> bool:
        return self.frequency is not None

    def with_frequency(self, frequency: Optional[float]) -> "PitchPoint":
        """Copy of this point carrying ``frequency`` and its matching MIDI value."""
        return dataclasses.replace(
            self, frequency=frequency, midi=hz_to_midi(frequency)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


EXPECTED_COLUMNS = [f.name for f in fields(PitchPoint)]

__all__ = ["PitchEstimate", "PitchPoint", "EXPECTED_COLUMNS"]
