"""MediaPipe Pose frame source.

Turns RGB images into :class:`~pushcount.landmarks.LandmarkFrame` objects for
the counter. Only one person is tracked. MediaPipe is imported lazily so the
counter, replay and HTTP layers work without it installed.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Optional, Tuple

from pushcount.config import FrameSourceSpec, PoseConfig
from pushcount.io.normalization import RotationTransform
from pushcount.landmarks import LandmarkFrame


def _require_mediapipe():
    """Import mediapipe lazily to avoid a hard dependency when unused."""
    try:
        import mediapipe as mp  # type: ignore
    except ImportError as exc:  # pragma: no cover - environment dependent
        raise ImportError(
            "mediapipe is required for live pose extraction. "
            "Install the 'vision' extra or feed recorded landmark frames instead."
        ) from exc
    return mp


class PoseLandmarkerSource:
    """Run MediaPipe Pose over a stream of RGB images.

    Args:
        source: Geometry of the incoming images, including camera rotation.
        pose_config: Detector settings.

    Landmarks come back in MediaPipe's normalized coordinates and are rotated
    into upright space using ``source.rotation``.
    """

    def __init__(self, source: FrameSourceSpec, pose_config: Optional[PoseConfig] = None) -> None:
        self.source = source
        self.pose_config = pose_config or PoseConfig()
        self._transform = RotationTransform.from_source_spec(source)
        mp = _require_mediapipe()
        self._pose = mp.solutions.pose.Pose(
            static_image_mode=False,
            model_complexity=self.pose_config.model_complexity,
            smooth_landmarks=self.pose_config.smooth_landmarks,
            enable_segmentation=False,
            min_detection_confidence=self.pose_config.min_detection_confidence,
            min_tracking_confidence=self.pose_config.min_tracking_confidence,
        )

    def detect(self, rgb_image: Any, timestamp_ms: Optional[int] = None) -> LandmarkFrame:
        """Detect landmarks on one RGB image (HxWx3 array)."""
        if self._pose is None:
            raise RuntimeError("PoseLandmarkerSource is closed")
        results = self._pose.process(rgb_image)
        width, height = self.source.width, self.source.height
        if not results.pose_landmarks:
            empty_w, empty_h = self._transform.normalized_size
            return LandmarkFrame.empty(empty_w, empty_h, timestamp_ms)

        frame = LandmarkFrame.from_pose_landmarks(
            results.pose_landmarks.landmark,
            image_width=width,
            image_height=height,
            timestamp_ms=timestamp_ms,
        )
        return self._transform.normalize_frame(frame)

    def iter_frames(self, images: Iterable[Tuple[int, Any]]) -> Iterator[LandmarkFrame]:
        """Yield a landmark frame for every ``(timestamp_ms, rgb_image)`` pair."""
        for timestamp_ms, image in images:
            yield self.detect(image, timestamp_ms)

    def close(self) -> None:
        if self._pose is not None:
            self._pose.close()
            self._pose = None

    def __enter__(self) -> "PoseLandmarkerSource":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
