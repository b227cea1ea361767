"""ThresholdUpdateChannel unit tests"""

import threading

import pytest

from monitoring.threshold_updates import ThresholdUpdate, ThresholdUpdateChannel, merge_updates


class TestThresholdUpdate:
    @pytest.mark.parametrize("field, attribute", [
        ("irisDistance", "iris_distance_threshold"),
        ("slouchingAngle", "slouching_angle_threshold_degrees"),
        ("ear", "ear_threshold"),
        ("ear_threshold", "ear_threshold"),
    ])
    def test_aliases(self, field, attribute):
        assert ThresholdUpdate(field, 1.0).attribute == attribute

    def test_unknown_field(self):
        with pytest.raises(KeyError):
            ThresholdUpdate("blink", 1.0).attribute

    def test_merge_keeps_latest_value(self):
        patch = merge_updates([
            ThresholdUpdate("ear", 0.1),
            ThresholdUpdate("irisDistance", 0.2),
            ThresholdUpdate("ear_threshold", 0.3),
        ])
        assert patch == {"ear_threshold": 0.3, "iris_distance_threshold": 0.2}


class TestChannel:
    def test_drain_returns_in_order_and_empties(self):
        channel = ThresholdUpdateChannel()
        channel.publish("ear", 0.1)
        channel.publish("slouchingAngle", 25.0)
        assert len(channel) == 2
        assert channel.drain() == [ThresholdUpdate("ear", 0.1), ThresholdUpdate("slouchingAngle", 25.0)]
        assert channel.drain() == []

    def test_publish_rejects_unknown_field(self):
        channel = ThresholdUpdateChannel()
        with pytest.raises(KeyError):
            channel.publish("brightness", 1.0)
        assert len(channel) == 0

    def test_publish_from_other_threads(self):
        channel = ThresholdUpdateChannel()
        threads = [
            threading.Thread(target=lambda: [channel.publish("ear", 0.2) for _ in range(50)])
            for _ in range(4)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(channel.drain()) == 200
