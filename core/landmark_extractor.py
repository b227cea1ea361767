"""
Landmark conventions and 2D geometry helpers for EyeGuard
"""
import math
from dataclasses import dataclass
from typing import Any, NamedTuple, Optional, Sequence


class Landmark(NamedTuple):
    """Normalized image-plane point. z is depth-relative and unused by 2D math."""
    x: float
    y: float
    z: float = 0.0


class MalformedLandmarksError(ValueError):
    """A landmark set is too short to hold the indices the checks read."""


@dataclass(frozen=True)
class LandmarkFrame:
    """Landmarks produced for one analyzed frame. Either side may be absent."""
    face: Optional[Sequence[Any]] = None
    pose: Optional[Sequence[Any]] = None
    timestamp_ms: Optional[float] = None


class LandmarkExtractor:
    """Index conventions and averaging helpers for face mesh and pose landmarks"""

    # MediaPipe face mesh indices (478-point model with refined irises)
    LEFT_IRIS = (474, 475, 476, 477)
    RIGHT_IRIS = (469, 470, 471, 472)
    # p1..p6: p1/p4 horizontal corners, p2/p3/p5/p6 lid points
    LEFT_EYE = (362, 385, 387, 263, 373, 380)
    RIGHT_EYE = (33, 160, 158, 133, 153, 144)
    FACE_LANDMARK_COUNT = 478

    # MediaPipe pose landmark indices
    LEFT_EAR = 7
    RIGHT_EAR = 8
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    POSE_LANDMARK_COUNT = 33

    @staticmethod
    def require(landmarks: Sequence[Any], highest_index: int, kind: str) -> None:
        """Fail fast when a landmark set cannot hold highest_index."""
        if len(landmarks) <= highest_index:
            raise MalformedLandmarksError(
                f"{kind} landmark set has {len(landmarks)} points, "
                f"index {highest_index} is required"
            )

    @staticmethod
    def average_position(landmarks: Sequence[Any], indices: Sequence[int]) -> Landmark:
        """Component-wise mean of the landmarks at the given indices."""
        points = [landmarks[i] for i in indices]
        count = len(points)
        return Landmark(
            sum(p.x for p in points) / count,
            sum(p.y for p in points) / count,
            sum(p.z for p in points) / count,
        )

    @staticmethod
    def midpoint(a: Any, b: Any) -> Landmark:
        return Landmark((a.x + b.x) / 2, (a.y + b.y) / 2, (a.z + b.z) / 2)

    @staticmethod
    def distance(a: Any, b: Any) -> float:
        """Euclidean distance on the image plane (z ignored)."""
        return math.dist((a.x, a.y), (b.x, b.y))

    @staticmethod
    def to_landmarks(raw: Optional[Sequence[Any]]) -> Optional[tuple]:
        """Copy model output (e.g. NormalizedLandmark list) into immutable Landmarks."""
        if raw is None:
            return None
        return tuple(Landmark(float(p.x), float(p.y), float(getattr(p, "z", 0.0))) for p in raw)
