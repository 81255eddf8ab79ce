import unittest
from types import SimpleNamespace
from unittest import mock

from pushcount.config import FrameSourceSpec, PoseConfig
from pushcount.landmarks import Joint
from pushcount.vision import landmarker


class FakePose:
    def __init__(self, results, **kwargs) -> None:
        self.kwargs = kwargs
        self.results = list(results)
        self.closed = False

    def process(self, image):
        return self.results.pop(0)

    def close(self) -> None:
        self.closed = True


def fake_mediapipe(results):
    created = {}

    def make_pose(**kwargs):
        created["pose"] = FakePose(results, **kwargs)
        return created["pose"]

    mp = SimpleNamespace(solutions=SimpleNamespace(pose=SimpleNamespace(Pose=make_pose)))
    return mp, created


def detected(x: float = 0.25, y: float = 0.1):
    landmarks = [SimpleNamespace(x=x, y=y, z=0.0, visibility=0.95) for _ in range(33)]
    return SimpleNamespace(pose_landmarks=SimpleNamespace(landmark=landmarks))


class PoseLandmarkerSourceTests(unittest.TestCase):
    def test_raises_when_mediapipe_missing(self) -> None:
        with mock.patch.object(landmarker, "_require_mediapipe", side_effect=ImportError("no mp")):
            with self.assertRaises(ImportError):
                landmarker.PoseLandmarkerSource(FrameSourceSpec(640, 480))

    def test_detect_converts_and_rotates_landmarks(self) -> None:
        mp, created = fake_mediapipe([detected(), SimpleNamespace(pose_landmarks=None)])
        spec = FrameSourceSpec(640, 480, rotation=90)
        with mock.patch.object(landmarker, "_require_mediapipe", return_value=mp):
            with landmarker.PoseLandmarkerSource(spec, PoseConfig(model_complexity=2)) as source:
                frames = list(source.iter_frames([(0, "img0"), (33, "img1")]))

        self.assertEqual(created["pose"].kwargs["model_complexity"], 2)
        self.assertTrue(created["pose"].closed)

        first, second = frames
        self.assertEqual(len(first), 10)
        wrist = first.get(Joint.LEFT_WRIST)
        self.assertAlmostEqual(wrist.x, 0.1)
        self.assertAlmostEqual(wrist.y, 0.75)
        self.assertEqual(first.image_size, (480, 640))
        self.assertEqual(first.timestamp_ms, 0)

        self.assertTrue(second.is_empty)
        self.assertEqual(second.image_size, (480, 640))
        self.assertEqual(second.timestamp_ms, 33)

    def test_detect_after_close_raises(self) -> None:
        mp, _ = fake_mediapipe([])
        with mock.patch.object(landmarker, "_require_mediapipe", return_value=mp):
            source = landmarker.PoseLandmarkerSource(FrameSourceSpec(640, 480))
        source.close()
        with self.assertRaises(RuntimeError):
            source.detect("img")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
