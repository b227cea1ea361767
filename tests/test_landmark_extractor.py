"""LandmarkExtractor helper unit tests"""

import pytest

from core.landmark_extractor import Landmark, LandmarkExtractor, MalformedLandmarksError


class TestGeometry:
    def test_average_position_includes_z(self):
        points = [Landmark(0.0, 0.0, 0.0), Landmark(1.0, 2.0, 3.0)]
        assert LandmarkExtractor.average_position(points, [0, 1]) == Landmark(0.5, 1.0, 1.5)

    def test_midpoint(self):
        assert LandmarkExtractor.midpoint(Landmark(0.2, 0.4, 1.0), Landmark(0.4, 0.8, 3.0)) == pytest.approx(
            (0.3, 0.6, 2.0)
        )

    def test_distance_ignores_z(self):
        assert LandmarkExtractor.distance(Landmark(0, 0, 5), Landmark(3, 4, -5)) == pytest.approx(5.0)

    def test_require(self):
        LandmarkExtractor.require([Landmark(0, 0)] * 13, 12, "pose")
        with pytest.raises(MalformedLandmarksError):
            LandmarkExtractor.require([Landmark(0, 0)] * 12, 12, "pose")


class TestToLandmarks:
    def test_none_passthrough(self):
        assert LandmarkExtractor.to_landmarks(None) is None

    def test_copies_attribute_objects(self):
        class Raw:
            def __init__(self, x, y):
                self.x, self.y = x, y

        result = LandmarkExtractor.to_landmarks([Raw(0.1, 0.2)])
        assert result == (Landmark(0.1, 0.2, 0.0),)
