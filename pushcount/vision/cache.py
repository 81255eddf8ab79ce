"""On-disk landmark recordings for deterministic replay.

Landmark frames are stored as JSONL, one frame per line, keyed by
(source hash, pose config cache key) so a capture only needs pose extraction
once. Joints are stored by name to keep files readable.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Iterable, Iterator

from pushcount.config import PoseConfig
from pushcount.landmarks import Joint, LandmarkFrame, LandmarkPoint


class RecordingError(RuntimeError):
    """Raised when a landmark recording cannot be parsed."""


def source_sha256(path: Path, *, chunk_size: int = 1024 * 1024) -> str:
    """Compute a deterministic hash for the capture to key recordings."""

    sha = hashlib.sha256()
    with path.open("rb") as fh:
        while True:
            chunk = fh.read(chunk_size)
            if not chunk:
                break
            sha.update(chunk)
    return sha.hexdigest()


def recording_filename(source_hash: str, pose_config: PoseConfig) -> str:
    """Build a recording filename using source hash and pose config cache key."""
    return f"{source_hash}_{pose_config.cache_key()}.jsonl"


def recording_path(recording_dir: Path, source_path: Path, pose_config: PoseConfig) -> Path:
    """Return the path for the recording file without creating it."""
    return recording_dir / recording_filename(source_sha256(source_path), pose_config)


def _frame_to_json(frame: LandmarkFrame) -> str:
    payload = {
        "timestamp_ms": frame.timestamp_ms,
        "image_width": frame.image_width,
        "image_height": frame.image_height,
        "landmarks": {
            joint.name: {"x": p.x, "y": p.y, "z": p.z, "visibility": p.visibility}
            for joint, p in frame.points.items()
        },
    }
    return json.dumps(payload)


def _frame_from_obj(obj: dict) -> LandmarkFrame:
    points = {
        Joint.from_name(name): LandmarkPoint(**lm) for name, lm in (obj.get("landmarks") or {}).items()
    }
    return LandmarkFrame(
        points,
        image_width=int(obj.get("image_width", 0)),
        image_height=int(obj.get("image_height", 0)),
        timestamp_ms=obj.get("timestamp_ms"),
    )


def save_landmark_frames(
    recording_file: Path, frames: Iterable[LandmarkFrame], *, overwrite: bool = True
) -> Path:
    """Write landmark frames to a JSONL recording.

    Args:
        recording_file: Destination path for the JSONL file.
        frames: Iterable of LandmarkFrame instances.
        overwrite: Whether to overwrite an existing file.
    """

    recording_file.parent.mkdir(parents=True, exist_ok=True)
    if recording_file.exists() and not overwrite:
        raise FileExistsError(f"Recording already exists: {recording_file}")

    with recording_file.open("w", encoding="utf-8") as fh:
        for frame in frames:
            fh.write(_frame_to_json(frame))
            fh.write("\n")
    return recording_file


def load_landmark_frames(recording_file: Path) -> Iterator[LandmarkFrame]:
    """Read landmark frames from a JSONL recording.

    Raises:
        RecordingError: on malformed JSON or unknown joint/landmark fields.
    """
    with recording_file.open("r", encoding="utf-8") as fh:
        for lineno, line in enumerate(fh, start=1):
            if not line.strip():
                continue
            try:
                frame = _frame_from_obj(json.loads(line))
            except (TypeError, ValueError, AttributeError) as exc:
                raise RecordingError(f"{recording_file}:{lineno}: invalid frame: {exc}") from exc
            yield frame
