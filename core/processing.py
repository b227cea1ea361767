"""
Processing wrapper for EyeGuard.

Minimal wiring:
- Ensure LandmarkDetector is initialized (MediaPipe IMAGE mode)
- Convert BGR->RGB, perform face and pose detection
- Draw the landmarks the checks read

The result is a LandmarkFrame that the alert coordinator classifies; this
module does no threshold logic of its own.
"""

import logging
from typing import Any, Dict, Optional, Tuple

import cv2 as cv

from config.defaults import MODEL_SETTINGS
from core.landmark_detector import LandmarkDetector
from core.landmark_extractor import LandmarkFrame
from utils.camera import draw_landmarks_on_image

logger = logging.getLogger(__name__)

# Global singleton for lightweight reuse across frames
_detector: Optional[LandmarkDetector] = None


def _ensure_detector() -> bool:
    global _detector
    if _detector is None:
        logger.debug("Initializing LandmarkDetector (IMAGE mode)")
        _detector = LandmarkDetector(MODEL_SETTINGS['face_model_path'], MODEL_SETTINGS['pose_model_path'])
    if _detector.is_initialized:
        return True
    return _detector.initialize()


def release_detector() -> None:
    global _detector
    if _detector is not None:
        _detector.cleanup()
        _detector = None


def process_frame(image, timestamp_ms: float, annotate: bool = True) -> Tuple[Any, LandmarkFrame, Dict[str, Any]]:
    """
    Process a single BGR image and return (annotated_image, landmarks, status).

    status["status"] is one of "ok", "no_input", "detector_init_failed",
    "no_landmarks".
    """
    if image is None:
        return image, LandmarkFrame(timestamp_ms=timestamp_ms), {"status": "no_input"}

    if not _ensure_detector():
        return image, LandmarkFrame(timestamp_ms=timestamp_ms), {"status": "detector_init_failed"}

    rgb = cv.cvtColor(image, cv.COLOR_BGR2RGB)
    frame = _detector.detect(rgb, timestamp_ms)

    status = {
        "status": "ok" if (frame.face is not None or frame.pose is not None) else "no_landmarks",
        "face_detected": frame.face is not None,
        "pose_detected": frame.pose is not None,
    }

    annotated = draw_landmarks_on_image(image, frame.face, frame.pose) if annotate else image
    return annotated, frame, status
