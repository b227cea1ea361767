"""
Default configuration values for EyeGuard
"""

# Detection thresholds (absolute values on normalized image coordinates)
DETECTION_THRESHOLDS = {
    'iris_distance_threshold': 0.12,  # inter-iris distance above this => too close
    'slouching_angle_threshold_degrees': 20.0,  # ear-over-shoulder tilt above this => slouching
    'ear_threshold': 0.2,  # eye aspect ratio below this => squinting
}

# Timing settings (milliseconds, monotonic clock)
TIMING_SETTINGS = {
    'detection_interval_ms': 500,  # minimum gap between analyzed frames
    'voice_alert_cooldown_ms': 10000,
    'notification_cooldown_ms': 0,  # 0 = notify on every qualifying frame
    'config_poll_interval_ms': 2000,
}

# Camera settings
CAMERA_SETTINGS = {
    'camera_id': 0,
    'target_fps': 15,
}

# MediaPipe model settings
MODEL_SETTINGS = {
    'face_model_path': './models/face_landmarker.task',
    'pose_model_path': './models/pose_landmarker_lite.task',
    'min_face_detection_confidence': 0.5,
    'min_pose_detection_confidence': 0.5,
    'min_pose_presence_confidence': 0.5,
}

# Alert messages
ALERT_MESSAGES = {
    'too_close_to_screen': "Please keep your distance",
    'posture_prefix': "Posture alert: ",
    'notification_title': "Eye Health Warning",
}
