"""Shared configuration and data models used across the counting pipeline."""

import math
from dataclasses import dataclass
from typing import Tuple

SUPPORTED_ROTATIONS = {0, 90, 180, 270}


@dataclass(frozen=True)
class CounterConfig:
    """Thresholds for the push-up repetition state machine.

    Attributes:
        visibility_threshold: Minimum landmark visibility for a joint to count
            as present.
        down_elbow_angle: Both elbows must be below this angle (degrees) for
            the bottom of a rep.
        up_elbow_angle: Both elbows must be above this angle (degrees) for the
            top of a rep.
        straight_body_angle: Both hip angles must exceed this for the body to
            count as straight.

    Elbow angles between ``down_elbow_angle`` and ``up_elbow_angle`` form a
    dead zone: such frames keep the current phase and repeat its prompt.
    """

    visibility_threshold: float = 0.8
    down_elbow_angle: float = 90.0
    up_elbow_angle: float = 150.0
    straight_body_angle: float = 150.0

    def __post_init__(self) -> None:
        for name in ("visibility_threshold", "down_elbow_angle", "up_elbow_angle", "straight_body_angle"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be a finite number")
        if not 0.0 <= self.visibility_threshold <= 1.0:
            raise ValueError("visibility_threshold must be within [0, 1]")
        if not 0.0 < self.down_elbow_angle < self.up_elbow_angle <= 180.0:
            raise ValueError(
                "elbow thresholds must satisfy 0 < down_elbow_angle < up_elbow_angle <= 180"
            )
        if not 0.0 < self.straight_body_angle <= 180.0:
            raise ValueError("straight_body_angle must be within (0, 180]")

    @property
    def dead_zone(self) -> Tuple[float, float]:
        """Return the (low, high) elbow-angle band that carries no phase information."""
        return (self.down_elbow_angle, self.up_elbow_angle)


@dataclass(frozen=True)
class FrameSourceSpec:
    """Geometry of the images a frame source feeds to pose detection.

    Attributes:
        width: Pixel width of the captured image (pre-rotation).
        height: Pixel height of the captured image (pre-rotation).
        rotation: Clockwise rotation in degrees reported by the camera; one of
            {0, 90, 180, 270}.
    """

    width: int
    height: int
    rotation: int = 0

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("width and height must be positive")
        if self.rotation not in SUPPORTED_ROTATIONS:
            raise ValueError(f"Unsupported rotation: {self.rotation}. Expected one of {SUPPORTED_ROTATIONS}.")


@dataclass(frozen=True)
class PoseConfig:
    """Configuration for MediaPipe Pose landmark extraction.

    Kept centralized so recordings can be keyed by the exact detector settings
    that produced them. Only a single person is ever tracked.
    """

    model_complexity: int = 1
    smooth_landmarks: bool = True
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5

    def cache_key(self) -> str:
        """Return a short string usable in recording file naming."""
        return (
            f"mc{self.model_complexity}"
            f"-sml{int(self.smooth_landmarks)}"
            f"-det{self.min_detection_confidence:.2f}"
            f"-trk{self.min_tracking_confidence:.2f}"
        )
