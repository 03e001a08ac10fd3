"""file containing the walking classifier driven by head pose."""

import logging
from typing import Optional

import numpy as np

from xr_motion_classifier.core.config import WalkConfig
from xr_motion_classifier.core.signal import (
    ExponentialSmoother,
    TimeWindowedBuffer,
    delta_angle,
)
from xr_motion_classifier.core.types import HeadPose, WalkResult

logger = logging.getLogger(__name__)


def horizontal_distance(previous: np.ndarray, current: np.ndarray) -> float:
    """This function computes the distance travelled in the XZ (floor) plane.

    Args:
        previous: head position on the previous tick.
        current: head position on this tick.

    Returns:
        planar distance, ignoring the vertical (Y) axis.
    """
    dx = current[0] - previous[0]
    dz = current[2] - previous[2]
    return float(np.hypot(dx, dz))


class WalkClassifier:
    """Classifies walking from horizontal travel, vertical head bob and head pitch.

    Every tick the planar distance and the smoothed vertical bob since the last
    pose are pushed into trailing windows. The wearer is walking when the mean
    horizontal travel reaches position_threshold and either the mean bob
    reaches bob_threshold or the pitch change of this tick reaches
    pitch_threshold.
    """

    def __init__(
        self,
        config: Optional[WalkConfig] = None,
        initial_pose: Optional[HeadPose] = None,
    ):
        self.config = config or WalkConfig()
        self.bob_smoother = ExponentialSmoother(self.config.smoothing_factor)
        self.horizontal_window = TimeWindowedBuffer(self.config.window)
        self.bob_window = TimeWindowedBuffer(self.config.window)
        self.previous_position: Optional[np.ndarray] = None
        self.previous_pitch: Optional[float] = None
        if initial_pose is not None:
            self._remember(initial_pose)

    def _remember(self, pose: HeadPose) -> None:
        self.previous_position = np.asarray(pose.position, dtype=float).copy()
        self.previous_pitch = pose.pitch

    def update(self, pose: Optional[HeadPose], tick_duration: float) -> WalkResult:
        """Advance the classifier by one tick.

        Args:
            pose: head pose for this tick, or None when the headset did not report one.
            tick_duration: seconds since the previous tick.

        Returns:
            WalkResult. ready is False until a pose is available to diff against.
        """
        if pose is None:
            return WalkResult(False, 0.0, 0.0, 0.0, ready=False)

        if self.previous_position is None:
            # First pose only seeds the deltas.
            self._remember(pose)
            return WalkResult(False, 0.0, 0.0, 0.0, ready=False)

        position = np.asarray(pose.position, dtype=float)
        pitch = pose.pitch

        horizontal = horizontal_distance(self.previous_position, position)
        raw_bob = abs(float(position[1] - self.previous_position[1]))
        smoothed_bob = self.bob_smoother.update(raw_bob)
        pitch_delta = delta_angle(self.previous_pitch, pitch)

        self.horizontal_window.push(horizontal, tick_duration)
        self.bob_window.push(smoothed_bob, tick_duration)

        avg_horizontal = self.horizontal_window.mean() or 0.0
        avg_bob = self.bob_window.mean() or 0.0

        walking = avg_horizontal >= self.config.position_threshold and (
            avg_bob >= self.config.bob_threshold
            or abs(pitch_delta) >= self.config.pitch_threshold
        )

        self.previous_position = position.copy()
        self.previous_pitch = pitch

        logger.debug(
            "walk horizontal=%.4f bob=%.4f pitch=%.3f walking=%s",
            avg_horizontal,
            avg_bob,
            pitch_delta,
            walking,
        )
        return WalkResult(walking, avg_horizontal, avg_bob, pitch_delta)
