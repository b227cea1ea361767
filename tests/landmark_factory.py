"""Builders for synthetic face mesh and pose landmark sets."""

from core.landmark_extractor import Landmark, LandmarkExtractor


def make_face(left_iris=(0.45, 0.5), right_iris=(0.55, 0.5), z=0.0,
              eye_open=0.02, eye_width=0.06):
    """Face mesh with both iris rings centered on the given points.

    Each eye contour is a hexagon of width eye_width and lid gap eye_open,
    giving an EAR of eye_open / eye_width.
    """
    points = [Landmark(0.5, 0.5, z) for _ in range(LandmarkExtractor.FACE_LANDMARK_COUNT)]

    def ring(indices, center):
        cx, cy = center
        offsets = ((0.005, 0.0), (0.0, 0.005), (-0.005, 0.0), (0.0, -0.005))
        for idx, (ox, oy) in zip(indices, offsets):
            points[idx] = Landmark(cx + ox, cy + oy, z)

    def eye(indices, center):
        cx, cy = center
        half_w = eye_width / 2
        half_h = eye_open / 2
        p1, p2, p3, p4, p5, p6 = indices
        points[p1] = Landmark(cx - half_w, cy, z)
        points[p4] = Landmark(cx + half_w, cy, z)
        points[p2] = Landmark(cx - half_w / 2, cy - half_h, z)
        points[p6] = Landmark(cx - half_w / 2, cy + half_h, z)
        points[p3] = Landmark(cx + half_w / 2, cy - half_h, z)
        points[p5] = Landmark(cx + half_w / 2, cy + half_h, z)

    ring(LandmarkExtractor.LEFT_IRIS, left_iris)
    ring(LandmarkExtractor.RIGHT_IRIS, right_iris)
    eye(LandmarkExtractor.LEFT_EYE, left_iris)
    eye(LandmarkExtractor.RIGHT_EYE, right_iris)
    return points


def make_pose(ear_mid=(0.5, 0.3), shoulder_mid=(0.5, 0.6), z=0.0, half_span=0.1):
    """Pose with ears and shoulders placed symmetrically around two midpoints."""
    points = [Landmark(0.5, 0.5, z) for _ in range(LandmarkExtractor.POSE_LANDMARK_COUNT)]
    ex, ey = ear_mid
    sx, sy = shoulder_mid
    points[LandmarkExtractor.LEFT_EAR] = Landmark(ex + half_span / 2, ey, z)
    points[LandmarkExtractor.RIGHT_EAR] = Landmark(ex - half_span / 2, ey, z)
    points[LandmarkExtractor.LEFT_SHOULDER] = Landmark(sx + half_span, sy, z)
    points[LandmarkExtractor.RIGHT_SHOULDER] = Landmark(sx - half_span, sy, z)
    return points
