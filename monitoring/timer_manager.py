"""
Timer Manager Module for EyeGuard.

Purpose:
    Small timing primitives shared by the alert coordinator and the hosts.

    - cooldown_elapsed(): whether a rate-limited action may fire again.
    - FrameThrottle: caller-side pacing of analyzed frames. Landmark models are
      the expensive part of the pipeline, so hosts skip frames that arrive
      sooner than detection_interval_ms after the last analyzed one.

Key Concepts:
    - All timestamps are monotonic milliseconds (e.g. time.monotonic() * 1000).
    - A cooldown of 0 (or less) never blocks.
    - The throttle is a policy of the caller; the classifier and coordinator
      accept frames at any rate.

Usage Pattern:
    throttle = FrameThrottle(interval_ms=500)
    while running:
        now_ms = time.monotonic() * 1000
        if not throttle.should_process(now_ms):
            continue
        ...

Author: EyeGuard Engineering
"""

from __future__ import annotations

from typing import Dict, Optional


def cooldown_elapsed(last_fired_ms: Optional[float], now_ms: float, cooldown_ms: float) -> bool:
    """
    True when an action last fired at last_fired_ms may fire again at now_ms.

    Never-fired actions are always ready. The boundary is inclusive: an action
    with a 10000 ms cooldown fired at t=0 is ready again at t=10000.
    """
    if last_fired_ms is None or cooldown_ms <= 0:
        return True
    return (now_ms - last_fired_ms) >= cooldown_ms


class FrameThrottle:
    """
    Admit at most one frame per interval.

    Public API:
        - should_process(now_ms) -> bool
        - reset()
        - get_state_snapshot(now_ms) -> dict
    """

    def __init__(self, interval_ms: float = 500.0):
        if interval_ms < 0:
            raise ValueError("interval_ms must be >= 0")
        self.interval_ms = float(interval_ms)
        self._last_processed_ms: Optional[float] = None
        self.skipped = 0
        self.processed = 0

    def should_process(self, now_ms: float) -> bool:
        if self._last_processed_ms is not None and (now_ms - self._last_processed_ms) < self.interval_ms:
            self.skipped += 1
            return False
        self._last_processed_ms = now_ms
        self.processed += 1
        return True

    def reset(self) -> None:
        self._last_processed_ms = None

    def get_state_snapshot(self, now_ms: float) -> Dict[str, Optional[float]]:
        """Diagnostic info for performance panels."""
        if self._last_processed_ms is None:
            ready_in = 0.0
        else:
            ready_in = max(0.0, self.interval_ms - (now_ms - self._last_processed_ms))
        total = self.skipped + self.processed
        return {
            "interval_ms": self.interval_ms,
            "last_processed_ms": self._last_processed_ms,
            "ready_in_ms": ready_in,
            "skip_rate": round(self.skipped / total, 2) if total else 0.0,
        }

    def __repr__(self) -> str:
        return (
            f"FrameThrottle(interval_ms={self.interval_ms}, processed={self.processed}, "
            f"skipped={self.skipped})"
        )
