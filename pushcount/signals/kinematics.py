"""Joint-angle signals over a sequence of landmark frames.

Converts frames into per-frame elbow and hip angle series for offline review
of a recording. Frames that fail the visibility gate carry NaN.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional

import numpy as np

from pushcount.config import CounterConfig
from pushcount.counter import Gate, evaluate_frame
from pushcount.landmarks import LandmarkFrame

SERIES_NAMES = ("left_elbow", "right_elbow", "left_hip", "right_hip")


@dataclass(frozen=True)
class AngleSeries:
    """Per-frame angles (degrees) and the gate each frame ended on."""

    timestamps_ms: np.ndarray
    left_elbow: np.ndarray
    right_elbow: np.ndarray
    left_hip: np.ndarray
    right_hip: np.ndarray
    gates: tuple

    def __len__(self) -> int:
        return len(self.gates)


def angle_series(frames: Iterable[LandmarkFrame], config: Optional[CounterConfig] = None) -> AngleSeries:
    config = config or CounterConfig()
    timestamps = []
    rows = []
    gates = []
    for frame in frames:
        evaluation = evaluate_frame(frame, config)
        gates.append(evaluation.gate)
        timestamps.append(np.nan if frame.timestamp_ms is None else frame.timestamp_ms)
        if evaluation.angles is None:
            rows.append((np.nan,) * 4)
        else:
            a = evaluation.angles
            rows.append((a.left_elbow, a.right_elbow, a.left_hip, a.right_hip))

    data = np.asarray(rows, dtype=float).reshape(-1, 4)
    return AngleSeries(
        timestamps_ms=np.asarray(timestamps, dtype=float),
        left_elbow=data[:, 0],
        right_elbow=data[:, 1],
        left_hip=data[:, 2],
        right_hip=data[:, 3],
        gates=tuple(gates),
    )


def _nan_extrema(values: np.ndarray) -> tuple:
    if values.size == 0 or np.all(np.isnan(values)):
        return (None, None)
    return (float(np.nanmin(values)), float(np.nanmax(values)))


def summarize(series: AngleSeries) -> Dict[str, object]:
    """Return min/max per angle series plus gate counts."""
    summary: Dict[str, object] = {"frames": len(series)}
    for name in SERIES_NAMES:
        low, high = _nan_extrema(getattr(series, name))
        summary[f"{name}_min"] = low
        summary[f"{name}_max"] = high
    summary["gated_frames"] = sum(1 for g in series.gates if g is not Gate.PASSED)
    summary["bad_posture_frames"] = sum(1 for g in series.gates if g is Gate.BAD_POSTURE)
    return summary
