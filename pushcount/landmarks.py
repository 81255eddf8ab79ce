"""Landmark data model consumed by the repetition counter.

Frames map a closed set of joints to points. Joint values are the MediaPipe
Pose landmark indices so detector output can be picked apart by index.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional, Sequence, Tuple


class Joint(Enum):
    """Joints of interest for push-up analysis, valued by MediaPipe index."""

    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26

    @classmethod
    def from_name(cls, name: str) -> "Joint":
        """Look up a joint by case-insensitive name (``left_elbow``)."""
        try:
            return cls[name.strip().upper()]
        except KeyError as exc:
            raise ValueError(f"Unknown joint: {name!r}") from exc


@dataclass(frozen=True)
class LandmarkPoint:
    """Single tracked body point with a visibility score."""

    x: float
    y: float
    visibility: float
    z: float = 0.0


@dataclass(frozen=True)
class LandmarkFrame:
    """Landmarks detected for one image.

    ``points`` may be empty (no person detected) or omit joints the detector
    dropped. Image dimensions are those of the (upright) analyzed image.
    """

    points: Mapping[Joint, LandmarkPoint] = field(default_factory=dict)
    image_width: int = 0
    image_height: int = 0
    timestamp_ms: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", MappingProxyType(dict(self.points)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LandmarkFrame):
            return NotImplemented
        return (
            dict(self.points) == dict(other.points)
            and self.image_width == other.image_width
            and self.image_height == other.image_height
            and self.timestamp_ms == other.timestamp_ms
        )

    def __hash__(self) -> int:
        return hash((tuple(sorted(self.points.items(), key=lambda kv: kv[0].value)),
                     self.image_width, self.image_height, self.timestamp_ms))

    @property
    def is_empty(self) -> bool:
        return not self.points

    @property
    def image_size(self) -> Tuple[int, int]:
        return (self.image_width, self.image_height)

    def get(self, joint: Joint) -> Optional[LandmarkPoint]:
        return self.points.get(joint)

    def __iter__(self) -> Iterator[Joint]:
        return iter(self.points)

    def __len__(self) -> int:
        return len(self.points)

    @classmethod
    def empty(
        cls, image_width: int = 0, image_height: int = 0, timestamp_ms: Optional[int] = None
    ) -> "LandmarkFrame":
        return cls({}, image_width=image_width, image_height=image_height, timestamp_ms=timestamp_ms)

    @classmethod
    def from_pose_landmarks(
        cls,
        landmarks: Sequence[Any],
        *,
        image_width: int = 0,
        image_height: int = 0,
        timestamp_ms: Optional[int] = None,
    ) -> "LandmarkFrame":
        """Build a frame from a MediaPipe-indexed landmark sequence.

        Each element needs ``x``, ``y`` and ``visibility`` attributes (``z`` is
        optional). Joints beyond the end of a short sequence are omitted.
        """

        points = {}
        for joint in Joint:
            if joint.value >= len(landmarks):
                continue
            lm = landmarks[joint.value]
            points[joint] = LandmarkPoint(
                x=float(lm.x),
                y=float(lm.y),
                visibility=float(lm.visibility),
                z=float(getattr(lm, "z", 0.0) or 0.0),
            )
        return cls(points, image_width=image_width, image_height=image_height, timestamp_ms=timestamp_ms)
