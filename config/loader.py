"""
Configuration loading for EyeGuard.

Two entry points:
    - load_config(path): overlay a JSON file on the defaults from
      config.defaults. Missing keys and null values keep the default,
      unknown keys are ignored.
    - ThresholdFileWatcher: poll the same JSON file and publish changed
      threshold values into a ThresholdUpdateChannel so a running monitor
      picks them up on its next frame.

Example file:
    {
        "iris_distance_threshold": 0.14,
        "ear_threshold": 0.18,
        "voice_alert_cooldown_ms": 8000
    }
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

from config.defaults import DETECTION_THRESHOLDS, TIMING_SETTINGS

logger = logging.getLogger(__name__)

_DEFAULTS: Dict[str, Any] = {**DETECTION_THRESHOLDS, **TIMING_SETTINGS}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load thresholds and timing from a JSON file, falling back to defaults."""
    config = dict(_DEFAULTS)

    if config_path is None:
        return config

    data = _read_json(config_path)
    if data is None:
        return config

    for key in _DEFAULTS:
        if key in data and data[key] is not None:
            config[key] = data[key]

    return config


def _read_json(config_path: str) -> Optional[Dict[str, Any]]:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.warning("Config file not found: %s, using defaults", config_path)
        return None
    except json.JSONDecodeError:
        logger.warning("Config file is not valid JSON: %s, using defaults", config_path)
        return None

    if not isinstance(data, dict):
        logger.warning("Config file must hold a JSON object: %s", config_path)
        return None
    return data


class ThresholdFileWatcher:
    """
    Poll a JSON config file and forward threshold changes to a channel.

    Only the three detection thresholds are watched; timing settings are read
    once at startup. poll() is cheap when the file is unchanged (one stat call).
    """

    def __init__(self, config_path: str, channel, poll_interval_ms: float = 2000.0):
        self.config_path = config_path
        self.channel = channel
        self.poll_interval_ms = float(poll_interval_ms)
        self._last_mtime: Optional[float] = None
        self._last_poll_ms: Optional[float] = None
        self._published: Dict[str, float] = {}

    def poll(self, now_ms: float) -> int:
        """Publish changed thresholds; returns the number of updates queued."""
        if self._last_poll_ms is not None and now_ms - self._last_poll_ms < self.poll_interval_ms:
            return 0
        self._last_poll_ms = now_ms

        try:
            mtime = os.stat(self.config_path).st_mtime
        except OSError:
            return 0
        if mtime == self._last_mtime:
            return 0
        self._last_mtime = mtime

        data = _read_json(self.config_path)
        if data is None:
            return 0

        queued = 0
        for key in DETECTION_THRESHOLDS:
            value = data.get(key)
            if value is None or self._published.get(key) == value:
                continue
            self.channel.publish(key, value)
            self._published[key] = value
            queued += 1

        if queued:
            logger.info("Queued %d threshold update(s) from %s", queued, self.config_path)
        return queued
