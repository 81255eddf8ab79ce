"""Rotation normalization for landmark coordinates.

Cameras report a clockwise sensor rotation alongside each image. Landmarks
detected on the raw image are mapped into upright space here so the counter
always sees a consistent orientation, and can be mapped back for overlays
drawn on the original image.

Coordinates are continuous. With ``normalized=True`` they are fractions of
the image extent (MediaPipe's convention); otherwise they are pixels.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from pushcount.config import SUPPORTED_ROTATIONS, FrameSourceSpec
from pushcount.landmarks import LandmarkFrame, LandmarkPoint


def _assert_supported_rotation(rotation: int) -> None:
    if rotation not in SUPPORTED_ROTATIONS:
        raise ValueError(f"Unsupported rotation: {rotation}. Expected one of {SUPPORTED_ROTATIONS}.")


@dataclass(frozen=True)
class RotationTransform:
    """Bidirectional mapping between original and upright coordinates."""

    width: int
    height: int
    rotation: int
    normalized: bool = True

    @classmethod
    def from_source_spec(cls, spec: FrameSourceSpec, *, normalized: bool = True) -> "RotationTransform":
        return cls(width=spec.width, height=spec.height, rotation=spec.rotation, normalized=normalized)

    @property
    def normalized_size(self) -> Tuple[int, int]:
        """Return (width, height) of the upright image."""
        _assert_supported_rotation(self.rotation)
        if self.rotation in {90, 270}:
            return (self.height, self.width)
        return (self.width, self.height)

    def _extent(self) -> Tuple[float, float]:
        if self.normalized:
            return (1.0, 1.0)
        return (float(self.width), float(self.height))

    def to_normalized(self, point: Tuple[float, float]) -> Tuple[float, float]:
        """Map a point from original orientation to upright space."""
        _assert_supported_rotation(self.rotation)
        w, h = self._extent()
        x, y = point
        if self.rotation == 0:
            return (x, y)
        if self.rotation == 90:
            return (y, w - x)
        if self.rotation == 180:
            return (w - x, h - y)
        # rotation == 270
        return (h - y, x)

    def to_original(self, point: Tuple[float, float]) -> Tuple[float, float]:
        """Map a point from upright space back to the original orientation."""
        _assert_supported_rotation(self.rotation)
        w, h = self._extent()
        x, y = point
        if self.rotation == 0:
            return (x, y)
        if self.rotation == 90:
            return (w - y, x)
        if self.rotation == 180:
            return (w - x, h - y)
        # rotation == 270
        return (y, h - x)

    def normalize_frame(self, frame: LandmarkFrame) -> LandmarkFrame:
        """Return ``frame`` with every landmark and the image size made upright."""
        if self.rotation == 0:
            return frame
        points = {}
        for joint, point in frame.points.items():
            x, y = self.to_normalized((point.x, point.y))
            points[joint] = LandmarkPoint(x=x, y=y, visibility=point.visibility, z=point.z)
        width, height = self.normalized_size
        return LandmarkFrame(points, image_width=width, image_height=height, timestamp_ms=frame.timestamp_ms)
