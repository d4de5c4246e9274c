"""Command-line entrypoint for live pitch tracking."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import math
from pathlib import Path
from typing import Optional

from .audio_sources import AudioSource, DemoSource, MicSource, sd
from .config import TrackerConfig, load_config, load_default_config
from .recorder import PitchTrackRecorder
from .results import PitchPoint
from .utils import midi_to_note_name
from .workflow import run_live_session


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Real-time recitation pitch tracker (autocorrelation F0)"
    )
    parser.add_argument(
        "--config", type=Path, default=None, help="JSON configuration file."
    )
    parser.add_argument("--samplerate", type=int, default=None)
    parser.add_argument("--block-size", type=int, default=None)
    parser.add_argument("--tick-hz", type=float, default=None)
    parser.add_argument("--device", type=str, default=None)
    parser.add_argument("--demo", action="store_true")
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop after this many seconds (default: run until Ctrl+C).",
    )
    parser.add_argument(
        "--filter",
        action="store_true",
        default=None,
        help="Enable range/confidence filtering and stabilization.",
    )
    parser.add_argument("--min-hz", type=float, default=None)
    parser.add_argument("--max-hz", type=float, default=None)
    parser.add_argument("--min-confidence", type=float, default=None)
    parser.add_argument("--smoothing-window", type=int, default=None)
    parser.add_argument(
        "--output", type=Path, default=None, help="Write the pitch track to CSV."
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Do not print every pitch point."
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> TrackerConfig:
    config = load_config(args.config) if args.config else load_default_config()

    overrides = {
        "samplerate": args.samplerate,
        "block_size": args.block_size,
        "tick_hz": args.tick_hz,
        "device": args.device,
    }
    config = dataclasses.replace(
        config, **{k: v for k, v in overrides.items() if v is not None}
    )

    filter_overrides = {
        "enabled": args.filter,
        "min_hz": args.min_hz,
        "max_hz": args.max_hz,
        "min_confidence": args.min_confidence,
        "smoothing_window": args.smoothing_window,
    }
    filter_overrides = {k: v for k, v in filter_overrides.items() if v is not None}
    if filter_overrides:
        config = dataclasses.replace(
            config, filter=config.filter.merged(**filter_overrides)
        )
    return config


def _demo_hop(config: TrackerConfig) -> int:
    """Samples per tick so the synthetic stream keeps pace with session time."""
    return max(1, int(round(config.samplerate * config.tick_interval)))


def create_source(args: argparse.Namespace, config: TrackerConfig) -> AudioSource:
    if args.demo or sd is None:
        return DemoSource(config.samplerate, _demo_hop(config))
    try:
        return MicSource(config.samplerate, config.hop, device=config.device)
    except Exception as exc:  # pragma: no cover - interactive fallback
        print(f"[WARN] Could not initialize microphone input: {exc}")
        print("Falling back to demo mode. Use --device to select input or install sounddevice.")
        return DemoSource(config.samplerate, _demo_hop(config))


def format_point(point: PitchPoint) -> str:
    if point.frequency is None or point.midi is None or not math.isfinite(point.midi):
        return f"{point.time:7.2f}s      --"
    note = midi_to_note_name(point.midi)
    return (
        f"{point.time:7.2f}s  {point.frequency:7.1f} Hz  {note:<4}"
        f"  conf={point.confidence:.2f}"
    )


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )
    config = build_config(args)
    source = create_source(args, config)
    recorder = PitchTrackRecorder()

    def on_update(point: PitchPoint) -> None:
        recorder(point)
        if not args.quiet:
            print(format_point(point))

    print("[INFO] Tracking pitch; press Ctrl+C to stop.")
    run_live_session(source, on_update, config=config, duration=args.duration)

    print(
        f"[INFO] {len(recorder)} points, {recorder.voiced_ratio() * 100.0:.0f}% voiced."
    )
    output: Optional[Path] = args.output
    if output is not None:
        path = recorder.save_csv(output)
        print(f"[INFO] Pitch track written to {path}")
    return 0


__all__ = ["parse_args", "build_config", "create_source", "format_point", "main"]
