"""
Presentation layer for EyeGuard alert commands.

The alert coordinator only decides which commands to issue; a presenter
carries them out. dispatch_commands() walks a command list in order and calls
the matching presenter capability.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, Iterable, Optional

from config.defaults import ALERT_MESSAGES
from monitoring.alert_system import AlertCommand, CommandKind

logger = logging.getLogger(__name__)

# Most recent notifications kept for UIs
HISTORY_LIMIT = 50


class AlertPresenter(ABC):
    """Capabilities the coordinator's commands are mapped onto."""

    @abstractmethod
    def show_overlay(self) -> None:
        ...

    @abstractmethod
    def hide_overlay(self) -> None:
        ...

    @abstractmethod
    def speak(self, text: str) -> bool:
        """Speak text; False if speech was already in progress."""

    @abstractmethod
    def notify(self, text: str) -> None:
        ...

    def is_speaking(self) -> bool:
        return False


def dispatch_commands(commands: Iterable[AlertCommand], presenter: AlertPresenter) -> int:
    """Execute commands in order. Returns how many were delivered."""
    delivered = 0
    for command in commands:
        if command.kind is CommandKind.SHOW_OVERLAY:
            presenter.show_overlay()
        elif command.kind is CommandKind.HIDE_OVERLAY:
            presenter.hide_overlay()
        elif command.kind is CommandKind.SPEAK:
            if not presenter.speak(command.text or ""):
                # No retry: the coordinator already judged the cooldown.
                logger.debug("Speech rejected: %r", command.text)
                continue
        elif command.kind is CommandKind.NOTIFY:
            presenter.notify(command.text or "")
        delivered += 1
    return delivered


class DesktopPresenter(AlertPresenter):
    """
    Presenter for the desktop and web hosts.

    The overlay is a flag read by the frame drawing code
    (utils.camera.draw_distance_overlay); speech and notifications go through
    SystemNotifier. Issued notifications are also kept in `history` for UIs
    that render their own alert list; only the last `history_limit` are kept.
    """

    def __init__(self, notifier=None, title: str = ALERT_MESSAGES['notification_title'],
                 enable_speech: bool = True, enable_notifications: bool = True,
                 history_limit: int = HISTORY_LIMIT):
        if notifier is None:
            from utils.system_notifier import SystemNotifier
            notifier = SystemNotifier()
        self.notifier = notifier
        self.title = title
        self.enable_speech = enable_speech
        self.enable_notifications = enable_notifications
        self.overlay_visible = False
        self.history: Deque[str] = deque(maxlen=history_limit)
        self.last_spoken: Optional[str] = None

    def show_overlay(self) -> None:
        self.overlay_visible = True

    def hide_overlay(self) -> None:
        self.overlay_visible = False

    def speak(self, text: str) -> bool:
        if not self.enable_speech:
            return False
        if self.notifier.speak(text):
            self.last_spoken = text
            return True
        return False

    def notify(self, text: str) -> None:
        self.history.append(text)
        if self.enable_notifications:
            self.notifier.notify(self.title, text)

    def is_speaking(self) -> bool:
        return bool(self.enable_speech and self.notifier.is_speaking())
