"""
EyeGuard - Real-time screen distance, posture and eye strain monitoring
Entry point for the desktop application
"""
import argparse
import logging
import time

import cv2 as cv

from config.defaults import ALERT_MESSAGES, CAMERA_SETTINGS
from config.loader import ThresholdFileWatcher, load_config
from core.processing import process_frame, release_detector
from monitoring.alert_system import create_default_coordinator
from monitoring.presenter import DesktopPresenter, dispatch_commands
from monitoring.threshold_updates import ThresholdUpdateChannel
from monitoring.timer_manager import FrameThrottle
from utils.camera import CameraManager, draw_distance_overlay
from utils.logging_config import DEBUG, configure_logging

logger = logging.getLogger("eyeguard")


def _now_ms() -> float:
    return time.monotonic() * 1000.0


class EyeGuardApp:
    """Main application class for EyeGuard"""

    def __init__(self, config_path=None, camera_id=CAMERA_SETTINGS['camera_id'], show_window=True):
        self.settings = load_config(config_path)
        self.camera_manager = CameraManager(camera_id)
        self.presenter = DesktopPresenter()
        self.channel = ThresholdUpdateChannel()
        self.coordinator = create_default_coordinator(
            self.settings,
            speech_probe=self.presenter.is_speaking,
            channel=self.channel,
        )
        self.throttle = FrameThrottle(self.settings['detection_interval_ms'])
        self.watcher = None
        if config_path is not None:
            self.watcher = ThresholdFileWatcher(
                config_path, self.channel, self.settings['config_poll_interval_ms']
            )
        self.show_window = show_window
        self.running = False

    def initialize(self) -> bool:
        """Initialize all components"""
        logger.info("Initializing EyeGuard...")

        if not self.camera_manager.initialize():
            logger.error("Could not initialize camera")
            return False

        logger.info("EyeGuard initialized with thresholds %s", self.coordinator.thresholds.as_dict())
        return True

    def run(self):
        """Run the monitoring loop until 'q' is pressed or the camera stops"""
        logger.info("Starting monitoring... Press 'q' to quit")
        self.running = True
        display_frame = None

        while self.running:
            ret, bgr_frame = self.camera_manager.read_frame()
            if not ret or bgr_frame is None:
                logger.error("Could not read frame")
                break

            now_ms = _now_ms()
            if self.watcher is not None:
                self.watcher.poll(now_ms)

            if self.throttle.should_process(now_ms):
                display_frame = self._analyze(bgr_frame, now_ms)
            elif display_frame is None:
                display_frame = bgr_frame

            if self.show_window:
                if self.presenter.overlay_visible:
                    shown = draw_distance_overlay(bgr_frame, ALERT_MESSAGES['too_close_to_screen'])
                else:
                    shown = display_frame
                cv.imshow('EyeGuard', shown)
                if cv.waitKey(1) & 0xFF == ord('q'):
                    break

        self.cleanup()

    def _analyze(self, bgr_frame, now_ms: float):
        annotated, frame, status = process_frame(bgr_frame, now_ms)
        if status["status"] == "detector_init_failed":
            logger.error("Landmark models unavailable, stopping")
            self.running = False
            return bgr_frame

        commands = self.coordinator.process(frame.face, frame.pose, now_ms)
        if commands:
            logger.debug("Commands at %.0f ms: %s", now_ms, [c.as_dict() for c in commands])
        dispatch_commands(commands, self.presenter)
        return annotated

    def cleanup(self):
        """Clean up resources"""
        logger.info("Cleaning up...")
        self.running = False
        dispatch_commands(self.coordinator.shutdown(), self.presenter)
        self.presenter.notifier.stop_speaking()
        self.camera_manager.release()
        release_detector()
        if self.show_window:
            cv.destroyAllWindows()
        logger.info("EyeGuard stopped")


def main():
    """Main function"""
    parser = argparse.ArgumentParser(description="EyeGuard screen distance and posture monitor")
    parser.add_argument("--config", type=str, default=None,
                        help="JSON threshold file (watched for changes while running)")
    parser.add_argument("--camera", type=int, default=CAMERA_SETTINGS['camera_id'], help="Camera index")
    parser.add_argument("--no-window", action="store_true", help="Run without a preview window")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    args = parser.parse_args()

    configure_logging(debug=args.debug or DEBUG)
    app = EyeGuardApp(config_path=args.config, camera_id=args.camera, show_window=not args.no_window)

    if app.initialize():
        try:
            app.run()
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
            app.cleanup()
    else:
        logger.error("Failed to initialize EyeGuard")


if __name__ == "__main__":
    main()
