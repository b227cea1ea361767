"""
System notification module for EyeGuard.
Provides native OS notifications and text-to-speech across platforms.

Speech runs on a pyttsx3 engine in a background thread, one utterance at a
time; is_speaking() is True from speak() until runAndWait() returns.
"""

import logging
import platform
import shutil
import subprocess
import threading
from typing import Callable, Optional

import pyttsx3

logger = logging.getLogger(__name__)

SPEECH_RATE = 180


def _applescript_quote(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _powershell_quote(text: str) -> str:
    # Backtick is the escape character inside PowerShell double-quoted strings
    return text.replace("`", "``").replace('"', '`"').replace("$", "`$")


class SystemNotifier:
    def __init__(self, engine_factory: Callable[[], object] = pyttsx3.init):
        self.system = platform.system()
        self._engine_factory = engine_factory
        self._engine = None
        self._engine_lock = threading.Lock()
        self._speaking = threading.Event()
        self._speech_thread: Optional[threading.Thread] = None
        self._check_requirements()

    def _check_requirements(self):
        """Check if system has required notification tools"""
        self.has_osascript = self.system == "Darwin" and shutil.which("osascript") is not None
        self.has_notify_send = self.system == "Linux" and shutil.which("notify-send") is not None

    def notify(self, title: str, message: str, urgency: str = "normal") -> bool:
        """
        Send system notification
        Args:
            title: Notification title
            message: Notification message
            urgency: Priority level ("low", "normal", "critical")
        Returns:
            bool: True if notification was sent successfully
        """
        try:
            if self.system == "Darwin":  # macOS
                if not self.has_osascript:
                    return False
                script = (
                    f'display notification "{_applescript_quote(message)}" '
                    f'with title "{_applescript_quote(title)}"'
                )
                subprocess.run(['osascript', '-e', script], check=True)
                return True

            elif self.system == "Linux":
                if not self.has_notify_send:
                    return False
                urgency_flag = f"--urgency={urgency}"
                subprocess.run(['notify-send', urgency_flag, title, message], check=True)
                return True

            elif self.system == "Windows":
                ps_cmd = (
                    f'New-BurntToastNotification -Text "{_powershell_quote(title)}",'
                    f'"{_powershell_quote(message)}"'
                )
                subprocess.run(['powershell', '-command', ps_cmd], check=True)
                return True

        except (OSError, subprocess.SubprocessError) as e:
            logger.error(f"Failed to send notification: {e}")
            return False

        return False  # Unsupported platform

    def is_speaking(self) -> bool:
        """True while a previously started utterance is still playing."""
        return self._speaking.is_set()

    def speak(self, text: str) -> bool:
        """Start speaking text in the background.

        Returns False without queueing anything if an utterance is already
        playing.
        """
        if self._speaking.is_set():
            return False
        self._speaking.set()
        self._speech_thread = threading.Thread(target=self._run_speech, args=(text,), daemon=True)
        self._speech_thread.start()
        return True

    def _run_speech(self, text: str) -> None:
        with self._engine_lock:
            try:
                if self._engine is None:
                    self._engine = self._engine_factory()
                    self._engine.setProperty('rate', SPEECH_RATE)
                self._engine.say(text)
                self._engine.runAndWait()
            except (RuntimeError, OSError) as e:
                logger.error(f"Text-to-speech failed: {e}")
                # Engine may be left in a bad state; rebuild it next time
                self._engine = None
            finally:
                self._speaking.clear()

    def stop_speaking(self) -> None:
        engine = self._engine
        if engine is not None and self._speaking.is_set():
            engine.stop()
        if self._speech_thread is not None:
            self._speech_thread.join(timeout=1.0)
            self._speech_thread = None
