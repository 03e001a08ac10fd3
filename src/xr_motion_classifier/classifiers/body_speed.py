"""file containing functions for classifying walking from hip speed."""

import math
from typing import Optional

import numpy as np

from xr_motion_classifier.core.config import HipSpeedConfig
from xr_motion_classifier.core.types import HipSpeedResult


class HipSpeedClassifier:
    """Walking when the body-tracked hip moves faster than speed_threshold."""

    def __init__(self, config: Optional[HipSpeedConfig] = None):
        self.config = config or HipSpeedConfig()
        self.previous_position: Optional[np.ndarray] = None
        self.latest = HipSpeedResult(walking=False)

    def update(
        self, hip_position: Optional[np.ndarray], tick_duration: float
    ) -> HipSpeedResult:
        """Compute the hip speed since the previous tick.

        Args:
            hip_position: hip joint position (meters), or None if the body is not tracked.
            tick_duration: seconds since the previous tick.

        Returns:
            HipSpeedResult. The previous result is kept while the speed cannot
            be computed.
        """
        if hip_position is None:
            return self.latest

        position = np.asarray(hip_position, dtype=float)
        if not np.isfinite(position).all():
            return self.latest
        previous, self.previous_position = self.previous_position, position.copy()
        if previous is None or not (math.isfinite(tick_duration) and tick_duration > 0):
            return self.latest

        speed = float(np.linalg.norm(position - previous)) / tick_duration
        self.latest = HipSpeedResult(speed > self.config.speed_threshold, speed)
        return self.latest
