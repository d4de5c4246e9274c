"""Collect emitted pitch points and export them as tables."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import pandas as pd

from .results import EXPECTED_COLUMNS, PitchPoint
from .stabilizer import SMOOTHING_WINDOW, smooth_pitch_data


class PitchTrackRecorder:
    """Consumer callback that keeps every point of a session in order."""

    def __init__(self, max_points: Optional[int] = None) -> None:
        self.max_points = max_points
        self.points: List[PitchPoint] = []

    def __call__(self, point: PitchPoint) -> None:
        self.points.append(point)
        if self.max_points is not None and len(self.points) > self.max_points:
            del self.points[: len(self.points) - self.max_points]

    def __len__(self) -> int:
        return len(self.points)

    def clear(self) -> None:
        self.points.clear()

    def latest_voiced(self) -> Optional[PitchPoint]:
        """Most recent point that carries a frequency."""
        for point in reversed(self.points):
            if point.frequency is not None:
                return point
        return None

    def voiced_ratio(self) -> float:
        if not self.points:
            return 0.0
        return sum(p.frequency is not None for p in self.points) / len(self.points)

    def smoothed(self, window: int = SMOOTHING_WINDOW) -> List[PitchPoint]:
        return smooth_pitch_data(self.points, window)

    def to_dataframe(self) -> pd.DataFrame:
        if not self.points:
            return pd.DataFrame(columns=EXPECTED_COLUMNS)
        return pd.DataFrame([p.to_dict() for p in self.points], columns=EXPECTED_COLUMNS)

    def save_csv(self, path: Path) -> Path:
        """Write the track to ``path``; unvoiced frequencies are left blank."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.to_dataframe().to_csv(path, index=False)
        return path


def load_track_csv(path: Path) -> List[PitchPoint]:
    """Read a track written by :meth:`PitchTrackRecorder.save_csv`."""
    df = pd.read_csv(path)
    points: List[PitchPoint] = []
    for row in df.itertuples(index=False):
        frequency = None if pd.isna(row.frequency) else float(row.frequency)
        points.append(
            PitchPoint(
                time=float(row.time),
                frequency=frequency,
                confidence=float(row.confidence),
            )
        )
    return points


__all__ = ["PitchTrackRecorder", "load_track_csv"]
