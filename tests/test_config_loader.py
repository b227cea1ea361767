"""load_config / ThresholdFileWatcher unit tests"""

import json
import os

from config.defaults import DETECTION_THRESHOLDS, TIMING_SETTINGS
from config.loader import ThresholdFileWatcher, load_config
from monitoring.threshold_updates import ThresholdUpdateChannel

_DEFAULTS = {**DETECTION_THRESHOLDS, **TIMING_SETTINGS}


class TestLoadConfig:
    def test_no_config_path_returns_defaults(self):
        assert load_config(None) == _DEFAULTS

    def test_valid_config_file(self, tmp_path):
        cfg_file = tmp_path / "config.json"
        cfg_file.write_text(json.dumps({
            "iris_distance_threshold": 0.15,
            "slouching_angle_threshold_degrees": 25.0,
            "voice_alert_cooldown_ms": 8000,
        }), encoding="utf-8")

        config = load_config(str(cfg_file))
        assert config["iris_distance_threshold"] == 0.15
        assert config["slouching_angle_threshold_degrees"] == 25.0
        assert config["voice_alert_cooldown_ms"] == 8000
        assert config["ear_threshold"] == DETECTION_THRESHOLDS["ear_threshold"]

    def test_missing_file_uses_defaults(self, caplog):
        assert load_config("/nonexistent/path.json") == _DEFAULTS
        assert "not found" in caplog.text

    def test_invalid_json_uses_defaults(self, tmp_path, caplog):
        cfg_file = tmp_path / "bad.json"
        cfg_file.write_text("not valid json {{{", encoding="utf-8")
        assert load_config(str(cfg_file)) == _DEFAULTS
        assert "not valid JSON" in caplog.text

    def test_null_and_unknown_keys(self, tmp_path):
        cfg_file = tmp_path / "nulls.json"
        cfg_file.write_text(json.dumps({"ear_threshold": None, "extra": 1}), encoding="utf-8")
        config = load_config(str(cfg_file))
        assert config["ear_threshold"] == DETECTION_THRESHOLDS["ear_threshold"]
        assert "extra" not in config


class TestThresholdFileWatcher:
    def _write(self, path, data, mtime):
        path.write_text(json.dumps(data), encoding="utf-8")
        os.utime(path, (mtime, mtime))

    def test_publishes_changed_thresholds_only(self, tmp_path):
        cfg_file = tmp_path / "watch.json"
        self._write(cfg_file, {"ear_threshold": 0.25, "voice_alert_cooldown_ms": 1}, 1000)
        channel = ThresholdUpdateChannel()
        watcher = ThresholdFileWatcher(str(cfg_file), channel, poll_interval_ms=0)

        assert watcher.poll(0) == 1
        assert [(u.field, u.value) for u in channel.drain()] == [("ear_threshold", 0.25)]

        # unchanged file
        assert watcher.poll(10) == 0

        self._write(cfg_file, {"ear_threshold": 0.25, "iris_distance_threshold": 0.2}, 2000)
        assert watcher.poll(20) == 1
        assert [(u.field, u.value) for u in channel.drain()] == [("iris_distance_threshold", 0.2)]

    def test_respects_poll_interval(self, tmp_path):
        cfg_file = tmp_path / "watch.json"
        self._write(cfg_file, {"ear_threshold": 0.25}, 1000)
        watcher = ThresholdFileWatcher(str(cfg_file), ThresholdUpdateChannel(), poll_interval_ms=2000)
        assert watcher.poll(0) == 1
        self._write(cfg_file, {"ear_threshold": 0.3}, 2000)
        assert watcher.poll(1000) == 0
        assert watcher.poll(2000) == 1

    def test_missing_file_is_quiet(self, tmp_path):
        watcher = ThresholdFileWatcher(str(tmp_path / "absent.json"), ThresholdUpdateChannel(), 0)
        assert watcher.poll(0) == 0
