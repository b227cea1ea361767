"""
Threshold update channel for EyeGuard.

Threshold changes may come from any thread (a UI slider callback, a config
file watcher, an RPC handler). They are queued here and drained by the thread
that evaluates frames, right before it evaluates the next one. A drained batch
is applied as a single replacement of the ThresholdConfig.

Field names accept both the short wire names and the attribute names:

    irisDistance    -> iris_distance_threshold
    slouchingAngle  -> slouching_angle_threshold_degrees
    ear             -> ear_threshold
"""

from __future__ import annotations

import logging
import queue
from dataclasses import dataclass
from typing import Dict, List

logger = logging.getLogger(__name__)

FIELD_ALIASES: Dict[str, str] = {
    "irisDistance": "iris_distance_threshold",
    "slouchingAngle": "slouching_angle_threshold_degrees",
    "ear": "ear_threshold",
    "iris_distance_threshold": "iris_distance_threshold",
    "slouching_angle_threshold_degrees": "slouching_angle_threshold_degrees",
    "ear_threshold": "ear_threshold",
}


@dataclass(frozen=True)
class ThresholdUpdate:
    field: str
    value: float

    @property
    def attribute(self) -> str:
        try:
            return FIELD_ALIASES[self.field]
        except KeyError:
            raise KeyError(f"Unknown threshold field: {self.field}") from None


def merge_updates(updates: List[ThresholdUpdate]) -> Dict[str, float]:
    """Collapse a batch into one patch; later updates to a field win."""
    patch: Dict[str, float] = {}
    for update in updates:
        patch[update.attribute] = update.value
    return patch


class ThresholdUpdateChannel:
    """Thread-safe FIFO of ThresholdUpdate events."""

    def __init__(self):
        self._queue: "queue.Queue[ThresholdUpdate]" = queue.Queue()

    def publish(self, field: str, value: float) -> None:
        update = ThresholdUpdate(field, value)
        # Resolve the alias now so a typo fails at the publisher, not the evaluator.
        update.attribute
        self._queue.put(update)

    def drain(self) -> List[ThresholdUpdate]:
        """Remove and return everything queued so far, oldest first."""
        drained: List[ThresholdUpdate] = []
        while True:
            try:
                drained.append(self._queue.get_nowait())
            except queue.Empty:
                break
        if drained:
            logger.debug("Drained %d threshold update(s)", len(drained))
        return drained

    def __len__(self) -> int:
        return self._queue.qsize()
