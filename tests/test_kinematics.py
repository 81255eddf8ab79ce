import math
import unittest

from synthetic import pose_frame

from pushcount.counter import Gate
from pushcount.landmarks import LandmarkFrame
from pushcount.signals.kinematics import angle_series, summarize


class AngleSeriesTests(unittest.TestCase):
    def test_series_marks_gated_frames_with_nan(self) -> None:
        frames = [
            pose_frame(170, timestamp_ms=0),
            LandmarkFrame.empty(timestamp_ms=33),
            pose_frame(80, hip_angle=140, timestamp_ms=66),
        ]
        series = angle_series(frames)

        self.assertEqual(len(series), 3)
        self.assertEqual(series.gates, (Gate.PASSED, Gate.NO_PERSON, Gate.BAD_POSTURE))
        self.assertAlmostEqual(series.left_elbow[0], 170.0)
        self.assertTrue(math.isnan(series.right_elbow[1]))
        self.assertAlmostEqual(series.left_hip[2], 140.0)
        self.assertEqual(list(series.timestamps_ms), [0.0, 33.0, 66.0])

    def test_summary_ranges_and_gate_counts(self) -> None:
        series = angle_series([pose_frame(170), pose_frame(80), LandmarkFrame.empty(), pose_frame(120, hip_angle=145)])
        summary = summarize(series)

        self.assertEqual(summary["frames"], 4)
        self.assertAlmostEqual(summary["left_elbow_min"], 80.0)
        self.assertAlmostEqual(summary["left_elbow_max"], 170.0)
        self.assertAlmostEqual(summary["right_hip_min"], 145.0)
        self.assertEqual(summary["gated_frames"], 2)
        self.assertEqual(summary["bad_posture_frames"], 1)

    def test_summary_of_empty_recording(self) -> None:
        summary = summarize(angle_series([]))
        self.assertEqual(summary["frames"], 0)
        self.assertIsNone(summary["left_elbow_min"])
        self.assertEqual(summary["gated_frames"], 0)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
