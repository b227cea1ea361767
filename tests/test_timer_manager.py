"""cooldown_elapsed / FrameThrottle unit tests"""

import pytest

from monitoring.timer_manager import FrameThrottle, cooldown_elapsed


class TestCooldownElapsed:
    def test_never_fired_is_ready(self):
        assert cooldown_elapsed(None, 0, 10000) is True

    def test_inside_cooldown(self):
        assert cooldown_elapsed(0, 9999, 10000) is False

    def test_boundary_is_inclusive(self):
        assert cooldown_elapsed(0, 10000, 10000) is True

    def test_zero_cooldown_never_blocks(self):
        assert cooldown_elapsed(500, 500, 0) is True


class TestFrameThrottle:
    def test_first_frame_admitted(self):
        assert FrameThrottle(500).should_process(0) is True

    def test_frames_inside_interval_skipped(self):
        throttle = FrameThrottle(500)
        admitted = [t for t in range(0, 2000, 100) if throttle.should_process(t)]
        assert admitted == [0, 500, 1000, 1500]
        assert throttle.processed == 4
        assert throttle.skipped == 16

    def test_reset_admits_next_frame(self):
        throttle = FrameThrottle(500)
        throttle.should_process(0)
        throttle.reset()
        assert throttle.should_process(10) is True

    def test_snapshot(self):
        throttle = FrameThrottle(500)
        throttle.should_process(0)
        throttle.should_process(100)
        snapshot = throttle.get_state_snapshot(200)
        assert snapshot["ready_in_ms"] == pytest.approx(300)
        assert snapshot["skip_rate"] == 0.5

    def test_negative_interval_rejected(self):
        with pytest.raises(ValueError):
            FrameThrottle(-1)
