"""
Posture Analyzer Module for EyeGuard.

This module classifies a single frame's face and pose landmarks into a set of
warning conditions using absolute, adjustable thresholds. It keeps no history
and performs no I/O; the temporal logic lives in monitoring.alert_system.

Expected Inputs:
    - face: face mesh landmarks (478 points, refined irises) or None
    - pose: pose landmarks (33 points) or None
    - thresholds: a ThresholdConfig
        {
            "iris_distance_threshold": 0.12,           # distance > threshold => too close
            "slouching_angle_threshold_degrees": 20.0, # angle > threshold => slouching
            "ear_threshold": 0.2,                      # ear < threshold => squinting
        }

Computation:
    - Too close: distance between the two iris centers on the image plane.
      A face moving toward the camera shows a larger apparent separation.
    - Slouching: tilt of the ear midpoint over the shoulder midpoint,
      atan(dx / dy) in degrees. dy == 0 is reported as not slouching.
    - Squinting: mean eye aspect ratio of both eyes,
      EAR = (|p2-p6| + |p3-p5|) / (2 * |p1-p4|), 0 when |p1-p4| == 0.

Result:
    classify() returns a frozenset of WarningState. measure() returns a
    FrameMeasurements with the raw values as well, for UI or logging.

Usage:
    from core.posture_analyzer import ThresholdConfig, classify
    warnings = classify(face_landmarks, pose_landmarks, ThresholdConfig())

Author: EyeGuard Engineering
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Sequence

from config.defaults import DETECTION_THRESHOLDS
from core.landmark_extractor import LandmarkExtractor


class WarningState(Enum):
    TOO_CLOSE = "too_close"
    SLOUCHING = "slouching"
    SQUINTING = "squinting"


@dataclass(frozen=True)
class ThresholdConfig:
    """
    Immutable detection thresholds. Updates produce a new instance so that a
    reader holding a reference never observes a half-applied change.

    Attributes:
        iris_distance_threshold: Maximum inter-iris distance (normalized units).
        slouching_angle_threshold_degrees: Maximum forward head tilt (0-180).
        ear_threshold: Minimum mean eye aspect ratio.
    """
    iris_distance_threshold: float = DETECTION_THRESHOLDS['iris_distance_threshold']
    slouching_angle_threshold_degrees: float = DETECTION_THRESHOLDS['slouching_angle_threshold_degrees']
    ear_threshold: float = DETECTION_THRESHOLDS['ear_threshold']

    def validate(self) -> "ThresholdConfig":
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{f.name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ValueError(f"{f.name} must be finite")
            if value < 0:
                raise ValueError(f"{f.name} must be >= 0")
        if self.slouching_angle_threshold_degrees > 180:
            raise ValueError("slouching_angle_threshold_degrees must be <= 180")
        return self

    def with_updates(self, **updates: float) -> "ThresholdConfig":
        """Return a validated copy with the given fields overwritten."""
        known = {f.name for f in fields(self)}
        unknown = set(updates) - known
        if unknown:
            raise KeyError(f"Unknown threshold field(s): {', '.join(sorted(unknown))}")
        coerced = {k: float(v) if not isinstance(v, bool) and isinstance(v, (int, float)) else v
                   for k, v in updates.items()}
        return replace(self, **coerced).validate()

    def as_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class FrameMeasurements:
    """Raw values behind one classification. None means the input was absent."""
    iris_distance: Optional[float] = None
    slouch_angle: Optional[float] = None
    ear: Optional[float] = None
    warnings: FrozenSet[WarningState] = field(default_factory=frozenset)

    def as_dict(self) -> Dict[str, Any]:
        """Flatten the result for UI or logging."""
        return {
            "iris_distance": self.iris_distance,
            "slouch_angle": self.slouch_angle,
            "ear": self.ear,
            "warnings": sorted(w.value for w in self.warnings),
        }


# --------------- Geometry ---------------

def iris_distance(face: Sequence[Any]) -> float:
    LandmarkExtractor.require(face, max(LandmarkExtractor.LEFT_IRIS + LandmarkExtractor.RIGHT_IRIS), "face")
    left = LandmarkExtractor.average_position(face, LandmarkExtractor.LEFT_IRIS)
    right = LandmarkExtractor.average_position(face, LandmarkExtractor.RIGHT_IRIS)
    return LandmarkExtractor.distance(left, right)


def slouch_angle(pose: Sequence[Any]) -> Optional[float]:
    """Forward head tilt in degrees, or None when the ear and shoulder midpoints share a y."""
    LandmarkExtractor.require(pose, LandmarkExtractor.RIGHT_SHOULDER, "pose")
    shoulders = LandmarkExtractor.midpoint(
        pose[LandmarkExtractor.LEFT_SHOULDER], pose[LandmarkExtractor.RIGHT_SHOULDER]
    )
    ears = LandmarkExtractor.midpoint(pose[LandmarkExtractor.LEFT_EAR], pose[LandmarkExtractor.RIGHT_EAR])

    dx = abs(ears.x - shoulders.x)
    dy = abs(ears.y - shoulders.y)
    if dy == 0:
        return None
    return math.degrees(math.atan(dx / dy))


def eye_aspect_ratio(face: Sequence[Any], eye_indices: Sequence[int]) -> float:
    p1, p2, p3, p4, p5, p6 = (face[i] for i in eye_indices)
    horizontal = LandmarkExtractor.distance(p1, p4)
    if horizontal == 0:
        return 0.0
    vertical = LandmarkExtractor.distance(p2, p6) + LandmarkExtractor.distance(p3, p5)
    return vertical / (2.0 * horizontal)


def mean_eye_aspect_ratio(face: Sequence[Any]) -> float:
    LandmarkExtractor.require(face, max(LandmarkExtractor.LEFT_EYE + LandmarkExtractor.RIGHT_EYE), "face")
    left = eye_aspect_ratio(face, LandmarkExtractor.LEFT_EYE)
    right = eye_aspect_ratio(face, LandmarkExtractor.RIGHT_EYE)
    return (left + right) / 2.0


# --------------- Classification ---------------

def measure(
    face: Optional[Sequence[Any]],
    pose: Optional[Sequence[Any]],
    thresholds: ThresholdConfig,
) -> FrameMeasurements:
    """
    Compute raw measurements and the warnings they imply for one frame.

    Absent inputs skip the checks that depend on them. A landmark set that is
    too short raises MalformedLandmarksError.
    """
    result = FrameMeasurements()
    warnings = set()

    if face is not None:
        result.iris_distance = iris_distance(face)
        if result.iris_distance > thresholds.iris_distance_threshold:
            warnings.add(WarningState.TOO_CLOSE)

        result.ear = mean_eye_aspect_ratio(face)
        if result.ear < thresholds.ear_threshold:
            warnings.add(WarningState.SQUINTING)

    if pose is not None:
        result.slouch_angle = slouch_angle(pose)
        if result.slouch_angle is not None and result.slouch_angle > thresholds.slouching_angle_threshold_degrees:
            warnings.add(WarningState.SLOUCHING)

    result.warnings = frozenset(warnings)
    return result


def classify(
    face: Optional[Sequence[Any]],
    pose: Optional[Sequence[Any]],
    thresholds: ThresholdConfig,
) -> FrozenSet[WarningState]:
    """Return the warning conditions present in a single frame."""
    return measure(face, pose, thresholds).warnings


class PostureAnalyzer:
    """
    Convenience wrapper holding its own ThresholdConfig.

    Threshold changes swap the whole config object; analyze() reads the
    reference once per call, so an update takes effect on the next frame.
    """

    def __init__(self, thresholds: Optional[ThresholdConfig] = None):
        self.thresholds = (thresholds or ThresholdConfig()).validate()

    def update_thresholds(self, **updates: float) -> ThresholdConfig:
        self.thresholds = self.thresholds.with_updates(**updates)
        return self.thresholds

    def analyze(self, face: Optional[Sequence[Any]], pose: Optional[Sequence[Any]]) -> FrameMeasurements:
        return measure(face, pose, self.thresholds)
