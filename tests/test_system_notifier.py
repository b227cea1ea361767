"""SystemNotifier speech and notification command tests"""

import subprocess
import threading
from unittest.mock import MagicMock

import pytest

from utils.system_notifier import SystemNotifier


@pytest.fixture
def engine():
    mock = MagicMock()
    mock.release = threading.Event()
    mock.runAndWait.side_effect = lambda: mock.release.wait(timeout=5)
    return mock


@pytest.fixture
def notifier(engine):
    return SystemNotifier(engine_factory=lambda: engine)


def _finish(notifier, engine):
    engine.release.set()
    notifier._speech_thread.join(timeout=5)


class TestSpeech:
    def test_speaks_in_background(self, notifier, engine):
        assert notifier.speak("Please keep your distance") is True
        assert notifier.is_speaking() is True

        _finish(notifier, engine)
        engine.say.assert_called_once_with("Please keep your distance")
        assert notifier.is_speaking() is False

    def test_busy_rejects_second_utterance(self, notifier, engine):
        notifier.speak("first")
        assert notifier.speak("second") is False

        _finish(notifier, engine)
        engine.say.assert_called_once_with("first")

    def test_engine_reused_between_utterances(self, engine):
        factory = MagicMock(return_value=engine)
        notifier = SystemNotifier(engine_factory=factory)
        engine.release.set()
        for text in ("one", "two"):
            notifier.speak(text)
            notifier._speech_thread.join(timeout=5)
        assert factory.call_count == 1
        assert engine.say.call_count == 2

    def test_engine_failure_clears_busy_and_rebuilds(self, engine):
        engine.runAndWait.side_effect = RuntimeError("run loop already started")
        factory = MagicMock(return_value=engine)
        notifier = SystemNotifier(engine_factory=factory)

        notifier.speak("hi")
        notifier._speech_thread.join(timeout=5)
        assert notifier.is_speaking() is False

        notifier.speak("again")
        notifier._speech_thread.join(timeout=5)
        assert factory.call_count == 2

    def test_text_with_quotes_passed_verbatim(self, notifier, engine):
        notifier.speak("Don't sit so close")
        _finish(notifier, engine)
        engine.say.assert_called_once_with("Don't sit so close")

    def test_stop_speaking(self, notifier, engine):
        started = threading.Event()
        engine.say.side_effect = lambda text: started.set()
        engine.stop.side_effect = engine.release.set
        notifier.speak("long warning")
        assert started.wait(timeout=5)

        notifier.stop_speaking()
        engine.stop.assert_called_once()
        assert notifier.is_speaking() is False


class TestNotificationQuoting:
    def test_macos_escapes_quotes(self, notifier, monkeypatch):
        calls = []
        monkeypatch.setattr(subprocess, "run", lambda args, check: calls.append(args))
        notifier.system = "Darwin"
        notifier.has_osascript = True

        assert notifier.notify('Say "hi"', 'Sit \\ back "now"') is True
        script = calls[0][2]
        assert script == 'display notification "Sit \\\\ back \\"now\\"" with title "Say \\"hi\\""'

    def test_windows_escapes_quotes(self, notifier, monkeypatch):
        calls = []
        monkeypatch.setattr(subprocess, "run", lambda args, check: calls.append(args))
        notifier.system = "Windows"

        assert notifier.notify("Eye Health", 'Posture "alert" $x') is True
        assert calls[0][2] == 'New-BurntToastNotification -Text "Eye Health","Posture `"alert`" `$x"'

    def test_failed_command_returns_false(self, notifier, monkeypatch):
        def fail(args, check):
            raise subprocess.CalledProcessError(1, args)

        monkeypatch.setattr(subprocess, "run", fail)
        notifier.system = "Linux"
        notifier.has_notify_send = True
        assert notifier.notify("t", "m") is False
