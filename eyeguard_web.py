"""
Streamlit UI for EyeGuard (browser-first).

Responsibilities:
- Video processing (WebRTC transformer) feeding the alert coordinator
- Threshold sliders published through the ThresholdUpdateChannel
- Rendering of live measurements and recent alerts
"""

from utils.logging_config import configure_silent_logging
configure_silent_logging()  # Must be first import

import html
import logging
import time

import av
import streamlit as st
from streamlit_webrtc import webrtc_streamer, WebRtcMode, VideoTransformerBase

from config.defaults import ALERT_MESSAGES, DETECTION_THRESHOLDS, TIMING_SETTINGS
from core.processing import process_frame
from monitoring.alert_system import create_default_coordinator
from monitoring.presenter import DesktopPresenter, dispatch_commands
from monitoring.threshold_updates import ThresholdUpdateChannel
from monitoring.timer_manager import FrameThrottle
from utils.camera import draw_distance_overlay

logger = logging.getLogger("eyeguard.web")

st.set_page_config(page_title="EyeGuard", layout="wide", initial_sidebar_state="expanded")
st.markdown("## EyeGuard")
st.caption("Screen distance, posture and eye strain warnings. Video is processed locally.")

with st.sidebar:
    st.markdown("### Thresholds")
    iris_threshold = st.slider(
        "Iris distance (too close above)", 0.02, 0.40,
        float(DETECTION_THRESHOLDS['iris_distance_threshold']), 0.005,
        help="Normalized distance between iris centers"
    )
    slouch_threshold = st.slider(
        "Slouching angle (degrees)", 0.0, 90.0,
        float(DETECTION_THRESHOLDS['slouching_angle_threshold_degrees']), 1.0,
        help="Forward tilt of ears over shoulders"
    )
    ear_threshold = st.slider(
        "Eye aspect ratio (squinting below)", 0.05, 0.50,
        float(DETECTION_THRESHOLDS['ear_threshold']), 0.01,
    )

    st.markdown("### Alerts")
    overlay_flag = st.checkbox("Dim video when too close", value=True)
    enable_speech = st.checkbox("Spoken warnings", value=True)
    enable_notifications = st.checkbox("System notifications", value=True)

    st.markdown("### Live")
    status_placeholder = st.empty()
    measurements_placeholder = st.empty()
    alerts_placeholder = st.empty()


class _VideoProcessor(VideoTransformerBase):
    def __init__(self):
        self.channel = ThresholdUpdateChannel()
        self.presenter = DesktopPresenter()
        self.coordinator = create_default_coordinator(
            speech_probe=self.presenter.is_speaking,
            channel=self.channel,
        )
        self.throttle = FrameThrottle(TIMING_SETTINGS['detection_interval_ms'])
        self.show_overlay = True
        self.status = {}
        self.measurements = {}
        self._annotated = None

    def recv(self, frame: av.VideoFrame) -> av.VideoFrame:
        bgr = frame.to_ndarray(format="bgr24")
        now_ms = time.monotonic() * 1000.0

        if self.throttle.should_process(now_ms):
            annotated, landmarks, status = process_frame(bgr, now_ms)
            self.status = status
            if status["status"] != "detector_init_failed":
                commands = self.coordinator.process(landmarks.face, landmarks.pose, now_ms)
                dispatch_commands(commands, self.presenter)
                self.measurements = self.coordinator.last_measurements.as_dict()
            self._annotated = annotated
        output = self._annotated if self._annotated is not None and self._annotated.shape == bgr.shape else bgr

        if self.show_overlay and self.presenter.overlay_visible:
            output = draw_distance_overlay(bgr, ALERT_MESSAGES['too_close_to_screen'])
        return av.VideoFrame.from_ndarray(output, format="bgr24")

    def on_ended(self):
        dispatch_commands(self.coordinator.shutdown(), self.presenter)
        self.presenter.notifier.stop_speaking()


ctx = webrtc_streamer(
    key="eyeguard-live",
    mode=WebRtcMode.SENDRECV,
    media_stream_constraints={"video": {"width": {"ideal": 640}, "height": {"ideal": 480}}, "audio": False},
    video_processor_factory=_VideoProcessor,
)


def publish_thresholds(vp):
    current = vp.coordinator.thresholds
    wanted = {
        "iris_distance_threshold": float(iris_threshold),
        "slouching_angle_threshold_degrees": float(slouch_threshold),
        "ear_threshold": float(ear_threshold),
    }
    for key, value in wanted.items():
        if getattr(current, key) != value:
            vp.channel.publish(key, value)


def render(vp):
    status = vp.status.get("status", "waiting")
    overlay = "too close" if vp.presenter.overlay_visible else "ok"
    status_placeholder.markdown(f"**Detector:** {status} &nbsp; **Distance:** {overlay}")
    measurements_placeholder.write(vp.measurements or {})
    recent = list(vp.presenter.history)[-5:]
    if recent:
        alerts_placeholder.markdown(
            "".join(f"<div>⚠️ {html.escape(msg)}</div>" for msg in reversed(recent)),
            unsafe_allow_html=True,
        )
    else:
        alerts_placeholder.markdown("<i>No alerts</i>", unsafe_allow_html=True)


def main_loop(vp):
    update_interval = 0.5
    while ctx.state.playing:
        vp.show_overlay = overlay_flag
        vp.presenter.enable_speech = enable_speech
        vp.presenter.enable_notifications = enable_notifications
        render(vp)
        time.sleep(update_interval)


if ctx.state.playing and ctx.video_processor:
    vp = ctx.video_processor
    publish_thresholds(vp)
    main_loop(vp)
else:
    st.info("Grant camera access and press Start to begin monitoring.")
