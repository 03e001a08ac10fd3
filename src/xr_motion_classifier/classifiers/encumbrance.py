"""file containing functions for classifying left/right encumbrance."""

import logging
import math
from typing import Optional

from xr_motion_classifier.core.config import EncumbranceConfig
from xr_motion_classifier.core.signal import TimeWindowedBuffer, VelocityFusion
from xr_motion_classifier.core.types import (
    ControllerMotion,
    EncumbranceResult,
    EncumbranceState,
)

logger = logging.getLogger(__name__)


def classify_ratio(
    left_mean: float, right_mean: float, config: EncumbranceConfig
) -> EncumbranceResult:
    """This function compares averaged left and right motion.

    The low activity check always runs first. The left and right checks cannot
    both hold because the threshold is below 1.

    Args:
        left_mean: windowed mean of the left motion magnitude.
        right_mean: windowed mean of the right motion magnitude.
        config: encumbrance parameters.

    Returns:
        EncumbranceResult with the active ratio set for ENCUMBERED_LEFT/RIGHT.
    """
    safe_left = left_mean + config.epsilon
    safe_right = right_mean + config.epsilon
    lr_ratio = safe_left / safe_right

    if safe_left + safe_right < config.low_activity_floor:
        state, ratio = EncumbranceState.LOW_ACTIVITY, None
    elif lr_ratio < config.threshold:
        state, ratio = EncumbranceState.ENCUMBERED_LEFT, lr_ratio
    elif 1.0 / lr_ratio < config.threshold:
        state, ratio = EncumbranceState.ENCUMBERED_RIGHT, 1.0 / lr_ratio
    else:
        state, ratio = EncumbranceState.NORMAL, None

    return EncumbranceResult(state, ratio, left_mean, right_mean, lr_ratio)


def _finite_or_zero(value: float) -> float:
    return value if math.isfinite(value) else 0.0


class BilateralRatioClassifier:
    """Detects a sustained asymmetry between left and right motion magnitudes."""

    def __init__(self, config: Optional[EncumbranceConfig] = None):
        self.config = config or EncumbranceConfig()
        self.left_window = TimeWindowedBuffer(self.config.window)
        self.right_window = TimeWindowedBuffer(self.config.window)
        self.fusion = VelocityFusion(self.config.linear_velocity_weight)

    def update(
        self, left_magnitude: float, right_magnitude: float, tick_duration: float
    ) -> EncumbranceResult:
        """Push one pair of magnitudes and classify the windowed means.

        Args:
            left_magnitude: fused motion magnitude of the left side.
            right_magnitude: fused motion magnitude of the right side.
            tick_duration: seconds since the previous tick.

        Returns:
            EncumbranceResult for this tick.
        """
        # Non-finite magnitudes count as no motion.
        self.left_window.push(_finite_or_zero(left_magnitude), tick_duration)
        self.right_window.push(_finite_or_zero(right_magnitude), tick_duration)

        result = classify_ratio(
            self.left_window.mean(), self.right_window.mean(), self.config
        )
        logger.debug(
            "encumbrance left=%.3f right=%.3f ratio=%.3f state=%s",
            result.left_mean,
            result.right_mean,
            result.lr_ratio,
            result.state.value,
        )
        return result

    def update_controllers(
        self,
        left: Optional[ControllerMotion],
        right: Optional[ControllerMotion],
        tick_duration: float,
    ) -> EncumbranceResult:
        """Fuse each controller's velocities, then update. Missing controllers count as 0."""
        return self.update(self._fused(left), self._fused(right), tick_duration)

    def _fused(self, motion: Optional[ControllerMotion]) -> float:
        if motion is None:
            return 0.0
        return self.fusion(motion.linear_velocity, motion.angular_velocity)
