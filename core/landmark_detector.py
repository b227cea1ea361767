"""
MediaPipe-based face and pose landmark detection for EyeGuard
"""
import logging
import os

# Suppress verbose C++ / framework logs
os.environ.setdefault("GLOG_minloglevel", "2")  # 0=INFO,1=WARNING,2=ERROR,3=FATAL
os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "2")
os.environ.setdefault("MEDIAPIPE_DISABLE_GPU", "1")  # Force CPU inference

import mediapipe as mp
import numpy as np
from typing import Optional

from config.defaults import MODEL_SETTINGS
from core.landmark_extractor import LandmarkExtractor, LandmarkFrame

logger = logging.getLogger(__name__)


class LandmarkDetector:
    """Synchronous face mesh + pose detection using MediaPipe tasks (IMAGE mode)"""

    def __init__(self, face_model_path: str = MODEL_SETTINGS['face_model_path'],
                 pose_model_path: str = MODEL_SETTINGS['pose_model_path']):
        self.face_model_path = face_model_path
        self.pose_model_path = pose_model_path
        self.face_landmarker = None
        self.pose_landmarker = None

        # MediaPipe classes
        self.BaseOptions = mp.tasks.BaseOptions
        self.FaceLandmarker = mp.tasks.vision.FaceLandmarker
        self.FaceLandmarkerOptions = mp.tasks.vision.FaceLandmarkerOptions
        self.PoseLandmarker = mp.tasks.vision.PoseLandmarker
        self.PoseLandmarkerOptions = mp.tasks.vision.PoseLandmarkerOptions
        self.VisionRunningMode = mp.tasks.vision.RunningMode

    def initialize(self) -> bool:
        """Create both landmarkers. Returns False if either model fails to load."""
        try:
            face_options = self.FaceLandmarkerOptions(
                base_options=self.BaseOptions(model_asset_path=self.face_model_path),
                running_mode=self.VisionRunningMode.IMAGE,
                num_faces=1,
                min_face_detection_confidence=MODEL_SETTINGS['min_face_detection_confidence'],
            )
            pose_options = self.PoseLandmarkerOptions(
                base_options=self.BaseOptions(model_asset_path=self.pose_model_path),
                running_mode=self.VisionRunningMode.IMAGE,
                num_poses=1,
                min_pose_detection_confidence=MODEL_SETTINGS['min_pose_detection_confidence'],
                min_pose_presence_confidence=MODEL_SETTINGS['min_pose_presence_confidence'],
                output_segmentation_masks=False,
            )
            self.face_landmarker = self.FaceLandmarker.create_from_options(face_options)
            self.pose_landmarker = self.PoseLandmarker.create_from_options(pose_options)
        except (RuntimeError, ValueError, OSError) as e:
            logger.error("Failed to initialize landmark models: %s", e)
            self.cleanup()
            return False

        logger.debug("LandmarkDetector initialized (face=%s, pose=%s)", self.face_model_path, self.pose_model_path)
        return True

    @property
    def is_initialized(self) -> bool:
        return self.face_landmarker is not None and self.pose_landmarker is not None

    def detect(self, rgb_image: np.ndarray, timestamp_ms: Optional[float] = None) -> LandmarkFrame:
        """Detect the first face and first body in an RGB image. Missing detections are None."""
        if not self.is_initialized:
            return LandmarkFrame(timestamp_ms=timestamp_ms)

        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_image)

        face_result = self.face_landmarker.detect(mp_image)
        face = face_result.face_landmarks[0] if face_result and face_result.face_landmarks else None

        pose_result = self.pose_landmarker.detect(mp_image)
        pose = pose_result.pose_landmarks[0] if pose_result and pose_result.pose_landmarks else None

        return LandmarkFrame(
            face=LandmarkExtractor.to_landmarks(face),
            pose=LandmarkExtractor.to_landmarks(pose),
            timestamp_ms=timestamp_ms,
        )

    def cleanup(self):
        """Clean up resources"""
        for landmarker in (self.face_landmarker, self.pose_landmarker):
            if landmarker is not None:
                landmarker.close()
        self.face_landmarker = None
        self.pose_landmarker = None
        logger.debug("LandmarkDetector cleaned up")
