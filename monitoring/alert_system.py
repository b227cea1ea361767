"""
Alert System Module for EyeGuard.

Purpose:
    Turn the per-frame warning sets produced by core.posture_analyzer into
    user-facing alert commands without flicker or spam.

Separation of Concerns:
    - The posture analyzer decides WHAT is wrong in a single frame.
    - The alert system decides WHICH commands to issue now, given what it has
      already issued (overlay state, last spoken warning).
    - A presenter (monitoring.presenter) carries the commands out.

Core Concepts:
    - "Too close" drives a two-state overlay machine:
        Idle --TOO_CLOSE--> Alerting   emits SHOW_OVERLAY
        Alerting --clear--> Idle       emits HIDE_OVERLAY
        Alerting --TOO_CLOSE--> Alerting   emits nothing for the overlay
    - While TOO_CLOSE is reported, a spoken warning fires on its own cooldown
      (10 s by default), independent of the overlay state. If the speech
      channel is busy the warning is skipped and NOT marked as spoken.
    - SLOUCHING / SQUINTING emit one combined notification per evaluation,
      e.g. "Posture alert: slouching and squinting". An optional
      notification cooldown can rate-limit these; it is off by default.
    - Commands within one evaluation are ordered overlay, speech, notification.

Pure Core:
    step(session, warnings, now_ms, config, speech_busy) -> (session, commands)
    holds all timing decisions. AlertCoordinator wraps it with the mutable
    session, the current ThresholdConfig and the threshold update channel.

Thread-Safety:
    - evaluate()/process() must be called from one sequencer. A timestamp
      earlier than the previous one is logged and clamped to it.
    - update_thresholds() may be called from any thread. The config is an
      immutable object swapped under a lock, so an evaluation sees either the
      old config or the new one.

Author: EyeGuard Engineering
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from config.defaults import ALERT_MESSAGES, TIMING_SETTINGS
from core.posture_analyzer import ThresholdConfig, WarningState, measure
from monitoring.threshold_updates import ThresholdUpdateChannel, merge_updates
from monitoring.timer_manager import cooldown_elapsed

logger = logging.getLogger(__name__)


# ---------------------------------------------------------
# Data Classes
# ---------------------------------------------------------

class CommandKind(Enum):
    SHOW_OVERLAY = "show_overlay"
    HIDE_OVERLAY = "hide_overlay"
    SPEAK = "speak"
    NOTIFY = "notify"


@dataclass(frozen=True)
class AlertCommand:
    """A single instruction for the presentation layer."""
    kind: CommandKind
    text: Optional[str] = None

    @classmethod
    def show_overlay(cls) -> "AlertCommand":
        return cls(CommandKind.SHOW_OVERLAY)

    @classmethod
    def hide_overlay(cls) -> "AlertCommand":
        return cls(CommandKind.HIDE_OVERLAY)

    @classmethod
    def speak(cls, text: str) -> "AlertCommand":
        return cls(CommandKind.SPEAK, text)

    @classmethod
    def notify(cls, text: str) -> "AlertCommand":
        return cls(CommandKind.NOTIFY, text)

    def as_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "text": self.text}


@dataclass(frozen=True)
class AlertSession:
    """
    Temporal state of the coordinator.

    Attributes:
        overlay_active: True while a "too close" overlay is shown.
        last_spoken_at: When the last spoken warning was delivered (ms).
        last_notified_at: When the last posture notification was issued (ms).
    """
    overlay_active: bool = False
    last_spoken_at: Optional[float] = None
    last_notified_at: Optional[float] = None


@dataclass
class AlertConfig:
    """
    Timing and wording of alerts.

    Attributes:
        voice_cooldown_ms: Minimum gap between spoken "too close" warnings.
        notification_cooldown_ms: Minimum gap between posture notifications
            (0 notifies on every qualifying frame).
        distance_message: Text spoken for the "too close" condition.
        posture_prefix: Prefix of the combined posture notification.
    """
    voice_cooldown_ms: float = TIMING_SETTINGS['voice_alert_cooldown_ms']
    notification_cooldown_ms: float = TIMING_SETTINGS['notification_cooldown_ms']
    distance_message: str = ALERT_MESSAGES['too_close_to_screen']
    posture_prefix: str = ALERT_MESSAGES['posture_prefix']

    def validate(self) -> "AlertConfig":
        if self.voice_cooldown_ms < 0:
            raise ValueError("voice_cooldown_ms must be >= 0")
        if self.notification_cooldown_ms < 0:
            raise ValueError("notification_cooldown_ms must be >= 0")
        return self


# Posture conditions in the order they are listed in a notification
_POSTURE_WORDS = (
    (WarningState.SLOUCHING, "slouching"),
    (WarningState.SQUINTING, "squinting"),
)


def posture_message(warnings: Iterable[WarningState], prefix: str = ALERT_MESSAGES['posture_prefix']) -> Optional[str]:
    """Combined notification text, or None when no posture condition is present."""
    present = set(warnings)
    words = [word for state, word in _POSTURE_WORDS if state in present]
    if not words:
        return None
    return prefix + " and ".join(words)


# ---------------------------------------------------------
# Pure State Machine
# ---------------------------------------------------------

def step(
    session: AlertSession,
    frame_warnings: Iterable[WarningState],
    now_ms: float,
    config: Optional[AlertConfig] = None,
    speech_busy: bool = False,
) -> Tuple[AlertSession, List[AlertCommand]]:
    """
    Advance the alert state machine by one analyzed frame.

    Args:
        session: State after the previous frame.
        frame_warnings: Warnings detected in this frame.
        now_ms: Monotonic timestamp of this frame.
        config: Cooldowns and wording (defaults when None).
        speech_busy: The speech channel is already talking; a due spoken
            warning is skipped and last_spoken_at is left unchanged.

    Returns:
        (new_session, commands)
    """
    config = config or AlertConfig()
    warnings = frozenset(frame_warnings)
    commands: List[AlertCommand] = []

    if WarningState.TOO_CLOSE in warnings:
        if not session.overlay_active:
            commands.append(AlertCommand.show_overlay())
            session = replace(session, overlay_active=True)

        if cooldown_elapsed(session.last_spoken_at, now_ms, config.voice_cooldown_ms):
            if speech_busy:
                logger.debug("Speech busy at %.0f ms, distance warning not delivered", now_ms)
            else:
                commands.append(AlertCommand.speak(config.distance_message))
                session = replace(session, last_spoken_at=now_ms)
    elif session.overlay_active:
        commands.append(AlertCommand.hide_overlay())
        session = replace(session, overlay_active=False)

    message = posture_message(warnings, config.posture_prefix)
    if message is not None and cooldown_elapsed(session.last_notified_at, now_ms, config.notification_cooldown_ms):
        commands.append(AlertCommand.notify(message))
        session = replace(session, last_notified_at=now_ms)

    return session, commands


def teardown(session: AlertSession) -> Tuple[AlertSession, List[AlertCommand]]:
    """Final commands when the coordinator stops: hide an overlay left showing."""
    commands = [AlertCommand.hide_overlay()] if session.overlay_active else []
    return AlertSession(), commands


# ---------------------------------------------------------
# Coordinator
# ---------------------------------------------------------

class AlertCoordinator:
    """
    Stateful wrapper around step() for one frame-processing pipeline.

    Parameters:
        thresholds: Initial ThresholdConfig used by process().
        config: AlertConfig with cooldowns and wording.
        speech_probe: Callable returning True while speech is in progress.
            Asked only when a spoken warning is due.
        channel: Optional ThresholdUpdateChannel drained at the start of
            every process() call.

    Public Methods:
        evaluate(frame_warnings, now_ms) -> List[AlertCommand]
        process(face, pose, now_ms) -> List[AlertCommand]
        update_thresholds(patch=None, **fields) -> ThresholdConfig
        shutdown() -> List[AlertCommand]
    """

    def __init__(
        self,
        thresholds: Optional[ThresholdConfig] = None,
        config: Optional[AlertConfig] = None,
        speech_probe: Optional[Callable[[], bool]] = None,
        channel: Optional[ThresholdUpdateChannel] = None,
    ):
        self.config = (config or AlertConfig()).validate()
        self.channel = channel
        self._speech_probe = speech_probe
        self._thresholds = (thresholds or ThresholdConfig()).validate()
        self._thresholds_lock = threading.Lock()
        self._session = AlertSession()
        self._last_now_ms: Optional[float] = None
        self.last_measurements = None

    # -----------------------------------------------------
    # Thresholds
    # -----------------------------------------------------

    @property
    def thresholds(self) -> ThresholdConfig:
        with self._thresholds_lock:
            return self._thresholds

    def update_thresholds(self, patch: Optional[Mapping[str, float]] = None, **fields: float) -> ThresholdConfig:
        """
        Overwrite only the supplied fields. The whole patch is validated first;
        on error nothing changes and ValueError/KeyError propagates.
        """
        updates = dict(patch or {})
        updates.update(fields)
        with self._thresholds_lock:
            new = self._thresholds.with_updates(**updates)
            self._thresholds = new
        logger.info("Thresholds updated: %s", updates)
        return new

    def apply_pending_updates(self) -> bool:
        """Drain the channel and apply it as one update. Invalid batches are logged and dropped."""
        if self.channel is None:
            return False
        pending = self.channel.drain()
        if not pending:
            return False
        try:
            self.update_thresholds(merge_updates(pending))
        except (KeyError, ValueError) as e:
            logger.warning("Rejected threshold update batch %s: %s", pending, e)
            return False
        return True

    # -----------------------------------------------------
    # Evaluation
    # -----------------------------------------------------

    @property
    def session(self) -> AlertSession:
        return self._session

    @property
    def overlay_active(self) -> bool:
        return self._session.overlay_active

    def evaluate(self, frame_warnings: Iterable[WarningState], now_ms: float) -> List[AlertCommand]:
        """Consume one frame's warnings and return the commands to present."""
        if self._last_now_ms is not None and now_ms < self._last_now_ms:
            logger.warning(
                "Frame timestamp %.0f ms is before %.0f ms, evaluating at the later time",
                now_ms, self._last_now_ms,
            )
            now_ms = self._last_now_ms
        warnings: FrozenSet[WarningState] = frozenset(frame_warnings)

        busy = False
        if (
            self._speech_probe is not None
            and WarningState.TOO_CLOSE in warnings
            and cooldown_elapsed(self._session.last_spoken_at, now_ms, self.config.voice_cooldown_ms)
        ):
            busy = bool(self._speech_probe())

        session, commands = step(self._session, warnings, now_ms, self.config, speech_busy=busy)
        if session.overlay_active != self._session.overlay_active:
            logger.debug("Overlay %s at %.0f ms", "shown" if session.overlay_active else "hidden", now_ms)
        self._session = session
        self._last_now_ms = now_ms
        return commands

    def process(
        self,
        face: Optional[Sequence[Any]],
        pose: Optional[Sequence[Any]],
        now_ms: float,
    ) -> List[AlertCommand]:
        """Classify one landmark frame with the current thresholds and evaluate it."""
        self.apply_pending_updates()
        self.last_measurements = measure(face, pose, self.thresholds)
        return self.evaluate(self.last_measurements.warnings, now_ms)

    def shutdown(self) -> List[AlertCommand]:
        """Tear down: returns [HIDE_OVERLAY] iff the overlay is showing, then resets."""
        self._session, commands = teardown(self._session)
        self._last_now_ms = None
        return commands

    # -----------------------------------------------------
    # Representation
    # -----------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"AlertCoordinator(session={self._session}, thresholds={self.thresholds}, "
            f"config={self.config})"
        )


def create_default_coordinator(
    settings: Optional[Mapping[str, Any]] = None,
    speech_probe: Optional[Callable[[], bool]] = None,
    channel: Optional[ThresholdUpdateChannel] = None,
) -> AlertCoordinator:
    """
    Build a coordinator from a flat settings dict such as the one returned by
    config.loader.load_config(). Missing keys fall back to the defaults.
    """
    settings = dict(settings or {})
    defaults = ThresholdConfig()
    thresholds = ThresholdConfig(
        iris_distance_threshold=float(settings.get('iris_distance_threshold', defaults.iris_distance_threshold)),
        slouching_angle_threshold_degrees=float(
            settings.get('slouching_angle_threshold_degrees', defaults.slouching_angle_threshold_degrees)
        ),
        ear_threshold=float(settings.get('ear_threshold', defaults.ear_threshold)),
    )
    config = AlertConfig(
        voice_cooldown_ms=float(settings.get('voice_alert_cooldown_ms', TIMING_SETTINGS['voice_alert_cooldown_ms'])),
        notification_cooldown_ms=float(
            settings.get('notification_cooldown_ms', TIMING_SETTINGS['notification_cooldown_ms'])
        ),
    )
    return AlertCoordinator(thresholds=thresholds, config=config, speech_probe=speech_probe, channel=channel)
