from pathlib import Path
import sys

import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from recitation_pitch.recorder import PitchTrackRecorder, load_track_csv
from recitation_pitch.results import EXPECTED_COLUMNS, PitchPoint


def _recorder():
    recorder = PitchTrackRecorder()
    for i, freq in enumerate([220.0, None, 230.0, None]):
        recorder(PitchPoint(time=i / 60.0, frequency=freq, confidence=0.0 if freq is None else 0.7))
    return recorder


def test_latest_voiced_and_ratio():
    recorder = _recorder()
    assert recorder.latest_voiced().frequency == 230.0
    assert recorder.voiced_ratio() == pytest.approx(0.5)
    assert PitchTrackRecorder().latest_voiced() is None
    assert PitchTrackRecorder().voiced_ratio() == 0.0


def test_max_points_keeps_newest():
    recorder = PitchTrackRecorder(max_points=2)
    for i in range(5):
        recorder(PitchPoint(time=float(i), frequency=200.0, confidence=0.5))
    assert [p.time for p in recorder.points] == [3.0, 4.0]


def test_dataframe_columns():
    df = _recorder().to_dataframe()
    assert list(df.columns) == EXPECTED_COLUMNS
    assert df["frequency"].isna().sum() == 2
    empty = PitchTrackRecorder().to_dataframe()
    assert list(empty.columns) == EXPECTED_COLUMNS
    assert empty.empty


def test_csv_round_trip(tmp_path):
    recorder = _recorder()
    path = recorder.save_csv(tmp_path / "out" / "track.csv")
    assert path.exists()
    assert len(pd.read_csv(path)) == 4

    points = load_track_csv(path)
    assert [p.frequency for p in points] == [220.0, None, 230.0, None]
    assert points[0].midi == pytest.approx(recorder.points[0].midi)
    assert points[1].midi is None
