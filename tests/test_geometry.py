import itertools
import math
import unittest

from pushcount.geometry import DegenerateAngleError, angle_degrees
from pushcount.landmarks import LandmarkPoint


def pt(x: float, y: float) -> LandmarkPoint:
    return LandmarkPoint(x=x, y=y, visibility=1.0)


class AngleDegreesTests(unittest.TestCase):
    def test_right_angle(self) -> None:
        self.assertAlmostEqual(angle_degrees(pt(1, 0), pt(0, 0), pt(0, 1)), 90.0)

    def test_straight_line_is_180(self) -> None:
        self.assertAlmostEqual(angle_degrees(pt(-1, 0), pt(0, 0), pt(1, 0)), 180.0)

    def test_reflex_difference_is_folded(self) -> None:
        # atan2 difference is 270 degrees here; the joint angle is 90.
        self.assertAlmostEqual(angle_degrees(pt(0, -1), pt(0, 0), pt(-1, 0)), 90.0)
        self.assertAlmostEqual(angle_degrees(pt(1, -1), pt(0, 0), pt(1, 1)), 90.0)

    def test_symmetric_and_bounded(self) -> None:
        coords = [(-1.0, 0.3), (0.5, 2.0), (2.0, -1.5), (0.0, -0.7), (-0.2, -0.9)]
        vertex = pt(0.1, 0.1)
        for (ax, ay), (bx, by) in itertools.permutations(coords, 2):
            a, b = pt(ax, ay), pt(bx, by)
            forward = angle_degrees(a, vertex, b)
            self.assertAlmostEqual(forward, angle_degrees(b, vertex, a))
            self.assertGreaterEqual(forward, 0.0)
            self.assertLessEqual(forward, 180.0)

    def test_coincident_endpoint_is_degenerate(self) -> None:
        with self.assertRaises(DegenerateAngleError):
            angle_degrees(pt(0, 0), pt(0, 0), pt(1, 1))

    def test_non_finite_coordinate_is_degenerate(self) -> None:
        with self.assertRaises(DegenerateAngleError):
            angle_degrees(pt(math.nan, 0), pt(0, 0), pt(1, 1))
        with self.assertRaises(ValueError):
            angle_degrees(pt(1, 0), pt(0, math.inf), pt(1, 1))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
