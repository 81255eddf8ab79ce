"""Command-line interface for extracting and replaying landmark recordings.

    pushcount record frames.npy --out-dir recordings [--rotation 90] [--count]
    pushcount replay session.jsonl [--quiet] [--summary] [--down-angle 90] ...

``record`` runs MediaPipe Pose over a stack of RGB frames saved with
``numpy.save`` (shape N x H x W x 3) and writes a JSONL recording named after
the source hash and pose settings. ``replay`` feeds each frame of a recording
to the counter in order; the per-frame count and instruction are printed,
followed by the final rep count.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Iterator, List, Optional, Tuple

import numpy as np

from pushcount.config import SUPPORTED_ROTATIONS, CounterConfig, FrameSourceSpec, PoseConfig
from pushcount.session import replay
from pushcount.signals.kinematics import angle_series, summarize
from pushcount.vision.cache import load_landmark_frames, recording_path, save_landmark_frames
from pushcount.vision.landmarker import PoseLandmarkerSource


def eprint(*args: object) -> None:
    print(*args, file=sys.stderr)


def _add_threshold_args(p: argparse.ArgumentParser) -> None:
    defaults = CounterConfig()
    p.add_argument("--visibility-threshold", type=float, default=defaults.visibility_threshold,
                   help=f"Minimum landmark visibility (default: {defaults.visibility_threshold})")
    p.add_argument("--down-angle", type=float, default=defaults.down_elbow_angle,
                   help=f"Elbow angle below which the rep bottoms out (default: {defaults.down_elbow_angle})")
    p.add_argument("--up-angle", type=float, default=defaults.up_elbow_angle,
                   help=f"Elbow angle above which the arms are locked out (default: {defaults.up_elbow_angle})")
    p.add_argument("--straight-body-angle", type=float, default=defaults.straight_body_angle,
                   help=f"Hip angle above which the body is straight (default: {defaults.straight_body_angle})")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    pose_defaults = PoseConfig()
    p = argparse.ArgumentParser(
        prog="pushcount",
        description="Count push-up repetitions from pose landmarks.",
    )
    p.add_argument("-v", "--verbose", action="store_true",
                   help="Log gate decisions and phase transitions (DEBUG)")
    sub = p.add_subparsers(dest="command", required=True)

    rec = sub.add_parser("record", help="Extract a landmark recording from a stack of RGB frames")
    rec.add_argument("source", help="Path to a .npy array of RGB frames (N x H x W x 3)")
    rec.add_argument("--out-dir", default="recordings",
                     help="Directory for the JSONL recording (default: recordings)")
    rec.add_argument("--fps", type=float, default=30.0,
                     help="Capture frame rate used for timestamps (default: 30)")
    rec.add_argument("--rotation", type=int, default=0, choices=sorted(SUPPORTED_ROTATIONS),
                     help="Clockwise camera rotation in degrees (default: 0)")
    rec.add_argument("--model-complexity", type=int, default=pose_defaults.model_complexity,
                     choices=[0, 1, 2], help=f"MediaPipe Pose model (default: {pose_defaults.model_complexity})")
    rec.add_argument("--count", action="store_true",
                     help="Also count reps over the new recording and print the total")
    _add_threshold_args(rec)

    rp = sub.add_parser("replay", help="Replay a JSONL landmark recording through the counter")
    rp.add_argument("recording", help="Path to a JSONL landmark recording")
    _add_threshold_args(rp)
    rp.add_argument("--quiet", action="store_true",
                    help="Only print the final rep count")
    rp.add_argument("--summary", action="store_true",
                    help="Print a JSON summary of elbow/hip angle ranges")
    return p.parse_args(argv)


def _counter_config(args: argparse.Namespace) -> CounterConfig:
    return CounterConfig(
        visibility_threshold=args.visibility_threshold,
        down_elbow_angle=args.down_angle,
        up_elbow_angle=args.up_angle,
        straight_body_angle=args.straight_body_angle,
    )


def validate_args(args: argparse.Namespace) -> CounterConfig:
    if args.command == "record":
        source = Path(args.source).expanduser()
        if not source.is_file():
            raise FileNotFoundError(f"Source frames not found: {source}")
        if source.suffix != ".npy":
            raise ValueError(f"Source must be a .npy frame stack: {source}")
        if args.fps <= 0:
            raise ValueError("--fps must be positive")
    else:
        recording = Path(args.recording).expanduser()
        if not recording.is_file():
            raise FileNotFoundError(f"Recording not found: {recording}")
    return _counter_config(args)


def load_frame_stack(path: Path) -> np.ndarray:
    """Memory-map an N x H x W x 3 RGB frame stack."""
    frames = np.load(path, mmap_mode="r")
    if frames.ndim != 4 or frames.shape[-1] != 3:
        raise ValueError(f"Expected frames shaped (N, H, W, 3), got {frames.shape}")
    return frames


def _timestamped(frames: np.ndarray, fps: float) -> Iterator[Tuple[int, Any]]:
    for idx in range(frames.shape[0]):
        yield int(round(idx * 1000.0 / fps)), np.ascontiguousarray(frames[idx])


def _record(args: argparse.Namespace, config: CounterConfig) -> int:
    source = Path(args.source).expanduser()
    pose_config = PoseConfig(model_complexity=args.model_complexity)
    stack = load_frame_stack(source)
    height, width = stack.shape[1:3]
    spec = FrameSourceSpec(width=int(width), height=int(height), rotation=args.rotation)

    out = recording_path(Path(args.out_dir).expanduser(), source, pose_config)
    with PoseLandmarkerSource(spec, pose_config) as landmarker:
        frames = list(landmarker.iter_frames(_timestamped(stack, args.fps)))
    save_landmark_frames(out, frames)
    print(f"Wrote {len(frames)} frames to {out}")

    if args.count:
        states = replay(frames, config)
        print(f"Total reps: {states[-1].rep_count if states else 0}")
    return 0


def _replay(args: argparse.Namespace, config: CounterConfig) -> int:
    frames = list(load_landmark_frames(Path(args.recording).expanduser()))
    states = replay(frames, config)

    if not args.quiet:
        for idx, (frame, state) in enumerate(zip(frames, states)):
            ts = "-" if frame.timestamp_ms is None else f"{frame.timestamp_ms}ms"
            print(f"{idx:5d} {ts:>10} reps={state.rep_count} {state.last_instruction.value}")

    final = states[-1].rep_count if states else 0
    print(f"Total reps: {final}")

    if args.summary:
        print(json.dumps(summarize(angle_series(frames, config)), indent=2))
    return 0


def run(args: argparse.Namespace) -> int:
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = validate_args(args)
        if args.command == "record":
            return _record(args, config)
        return _replay(args, config)

    except Exception as ex:
        eprint(f"Error: {ex}")
        return 2


def run_cli(argv: Optional[List[str]] = None) -> int:
    return run(parse_args(argv))


if __name__ == "__main__":
    raise SystemExit(run_cli())
