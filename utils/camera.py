"""
Camera management and frame drawing utilities
"""
import logging
from typing import Optional, Sequence, Tuple

import cv2 as cv
import numpy as np

from core.landmark_extractor import LandmarkExtractor

logger = logging.getLogger(__name__)

# Overlay shown while the user is too close: black at ~67% opacity
OVERLAY_COLOR = (0, 0, 0)
OVERLAY_ALPHA = 0.67


class CameraManager:
    """Manage camera operations for EyeGuard"""

    def __init__(self, camera_id: int = 0):
        self.camera_id = camera_id
        self.cap = None
        self.is_initialized = False

    def initialize(self) -> bool:
        """Initialize camera"""
        self.cap = cv.VideoCapture(self.camera_id)
        if not self.cap.isOpened():
            logger.error("Failed to open camera %s", self.camera_id)
            return False

        self.is_initialized = True
        return True

    def read_frame(self) -> Tuple[bool, Optional[np.ndarray]]:
        """Read a BGR frame from camera"""
        if not self.is_initialized or self.cap is None:
            return False, None

        ret, frame = self.cap.read()
        return ret, frame

    def release(self):
        """Release camera resources"""
        if self.cap:
            self.cap.release()
            self.cap = None
        self.is_initialized = False


def _to_pixel(landmark, width: int, height: int) -> Tuple[int, int]:
    return int(landmark.x * width), int(landmark.y * height)


def draw_landmarks_on_image(image: np.ndarray, face: Optional[Sequence] = None,
                            pose: Optional[Sequence] = None) -> np.ndarray:
    """Draw the landmarks the checks read: irises, eye contours, ears and shoulders"""
    if face is None and pose is None:
        return image

    annotated_image = image.copy()
    height, width = annotated_image.shape[:2]

    if face is not None:
        for indices in (LandmarkExtractor.LEFT_IRIS, LandmarkExtractor.RIGHT_IRIS):
            if max(indices) < len(face):
                center = LandmarkExtractor.average_position(face, indices)
                cv.circle(annotated_image, _to_pixel(center, width, height), 4, (0, 255, 255), -1)
        for indices in (LandmarkExtractor.LEFT_EYE, LandmarkExtractor.RIGHT_EYE):
            if max(indices) < len(face):
                contour = np.array([_to_pixel(face[i], width, height) for i in indices], dtype=np.int32)
                cv.polylines(annotated_image, [contour], True, (0, 255, 0), 1)

    if pose is not None and len(pose) > LandmarkExtractor.RIGHT_SHOULDER:
        ears = LandmarkExtractor.midpoint(pose[LandmarkExtractor.LEFT_EAR], pose[LandmarkExtractor.RIGHT_EAR])
        shoulders = LandmarkExtractor.midpoint(
            pose[LandmarkExtractor.LEFT_SHOULDER], pose[LandmarkExtractor.RIGHT_SHOULDER]
        )
        for idx in (LandmarkExtractor.LEFT_EAR, LandmarkExtractor.RIGHT_EAR,
                    LandmarkExtractor.LEFT_SHOULDER, LandmarkExtractor.RIGHT_SHOULDER):
            cv.circle(annotated_image, _to_pixel(pose[idx], width, height), 8, (0, 255, 0), -1)
        cv.line(annotated_image, _to_pixel(shoulders, width, height), _to_pixel(ears, width, height),
                (255, 0, 0), 2)

    return annotated_image


def draw_distance_overlay(image: np.ndarray, message: str = "Please keep your distance") -> np.ndarray:
    """Dim the whole frame and print the distance warning in the middle"""
    overlay = np.full_like(image, OVERLAY_COLOR, dtype=image.dtype)
    dimmed = cv.addWeighted(overlay, OVERLAY_ALPHA, image, 1.0 - OVERLAY_ALPHA, 0)

    height, width = dimmed.shape[:2]
    (text_w, text_h), _ = cv.getTextSize(message, cv.FONT_HERSHEY_SIMPLEX, 1.0, 2)
    origin = (max(0, (width - text_w) // 2), (height + text_h) // 2)
    cv.putText(dimmed, message, origin, cv.FONT_HERSHEY_SIMPLEX, 1.0, (255, 255, 255), 2, cv.LINE_AA)
    return dimmed
