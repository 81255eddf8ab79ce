"""Joint angle geometry for 2D landmarks."""

from __future__ import annotations

import math
from typing import Protocol


class DegenerateAngleError(ValueError):
    """Raised when an angle is undefined (coincident or non-finite points)."""


class Point2D(Protocol):
    x: float
    y: float


def angle_degrees(a: Point2D, vertex: Point2D, b: Point2D) -> float:
    """Return the angle at ``vertex`` formed by ``a`` and ``b``, in [0, 180].

    Each arm's direction is taken with ``atan2``; the absolute difference is
    folded back into [0, 180] when it exceeds a half turn.

    Raises:
        DegenerateAngleError: if a coordinate is non-finite or an endpoint
            coincides with the vertex.
    """

    coords = (a.x, a.y, vertex.x, vertex.y, b.x, b.y)
    if not all(math.isfinite(c) for c in coords):
        raise DegenerateAngleError("angle undefined for non-finite coordinates")

    ax, ay = a.x - vertex.x, a.y - vertex.y
    bx, by = b.x - vertex.x, b.y - vertex.y
    if (ax == 0.0 and ay == 0.0) or (bx == 0.0 and by == 0.0):
        raise DegenerateAngleError("angle undefined when an endpoint coincides with the vertex")

    angle = abs(math.degrees(math.atan2(by, bx) - math.atan2(ay, ax)))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle
