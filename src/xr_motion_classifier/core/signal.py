"""Time windowed averaging, exponential smoothing and velocity fusion."""

import logging
import math
from collections import deque
from typing import Optional, Sequence

import numpy as np

from xr_motion_classifier.core.config import ConfigurationError

logger = logging.getLogger(__name__)

# Absorbs float error in window / tick (e.g. 1.0 / 0.02 == 50.000000000000004).
_CAPACITY_TOLERANCE = 1e-9


def window_capacity(window_seconds: float, tick_duration: float) -> int:
    """Number of ticks of length tick_duration that span window_seconds (at least 1)."""
    return max(1, math.ceil(window_seconds / tick_duration - _CAPACITY_TOLERANCE))


class TimeWindowedBuffer:
    """Trailing buffer of scalar samples covering a fixed wall-clock duration.

    The capacity is recomputed from the tick duration of every push, so the
    window keeps spanning roughly the same number of seconds when the sample
    rate changes. Samples beyond the capacity are evicted oldest first.
    """

    def __init__(self, window_seconds: float):
        if not math.isfinite(window_seconds) or window_seconds < 0:
            raise ConfigurationError(
                f"window_seconds must be a non-negative number, got {window_seconds}"
            )
        self.window_seconds = window_seconds
        self._samples: deque = deque()
        self._tick_duration: Optional[float] = None

    def __len__(self) -> int:
        return len(self._samples)

    @property
    def capacity(self) -> int:
        if self._tick_duration is None:
            return 1
        return window_capacity(self.window_seconds, self._tick_duration)

    def push(self, value: float, tick_duration: float) -> None:
        """Append a sample and evict until the buffer fits the current capacity.

        Args:
            value: scalar sample.
            tick_duration: seconds since the previous sample. Non-positive or
                non-finite durations reuse the last valid duration.

        Non-finite values are dropped, but the tick duration still applies.
        """
        if math.isfinite(tick_duration) and tick_duration > 0:
            self._tick_duration = tick_duration
        else:
            logger.debug(
                "Ignoring invalid tick duration %r, keeping %r",
                tick_duration,
                self._tick_duration,
            )

        if math.isfinite(value):
            self._samples.append(float(value))
        else:
            logger.debug("Dropping non-finite sample %r", value)
        capacity = self.capacity
        while len(self._samples) > capacity:
            self._samples.popleft()

    def mean(self) -> Optional[float]:
        """Arithmetic mean of the buffer, or None before the first sample."""
        if not self._samples:
            return None
        values = np.fromiter(self._samples, dtype=float, count=len(self._samples))
        # Shifted by the oldest sample so a constant window averages exactly.
        shift = values[0]
        return float(shift + np.mean(values - shift))


class ExponentialSmoother:
    """Single pole low-pass filter: state = alpha * state + (1 - alpha) * raw."""

    def __init__(self, alpha: float):
        if not (0.0 <= alpha < 1.0):
            raise ConfigurationError(f"alpha must be in [0, 1), got {alpha}")
        self.alpha = alpha
        self.value: Optional[float] = None

    def update(self, raw: float) -> float:
        if self.value is None:
            self.value = float(raw)
        else:
            # Same as alpha * value + (1 - alpha) * raw, but exact when raw == value.
            self.value = self.value + (1.0 - self.alpha) * (float(raw) - self.value)
        return self.value

    def reset(self) -> None:
        self.value = None


def _magnitude(vector: Optional[Sequence[float]]) -> float:
    if vector is None:
        return 0.0
    magnitude = float(np.linalg.norm(vector))
    # A non-finite reading contributes nothing, like a missing one.
    return magnitude if math.isfinite(magnitude) else 0.0


def fuse(
    linear: Optional[Sequence[float]],
    angular: Optional[Sequence[float]],
    linear_weight: float,
) -> float:
    """Blend linear and angular velocity magnitudes into one scalar.

    Args:
        linear: linear velocity vector, or None if not reported.
        angular: angular velocity vector, or None if not reported.
        linear_weight: weight of the linear magnitude in [0, 1].

    Returns:
        |linear| * linear_weight + |angular| * (1 - linear_weight); a missing
        vector contributes 0, so no vectors at all gives exactly 0.
    """
    if linear is None and angular is None:
        return 0.0
    return _magnitude(linear) * linear_weight + _magnitude(angular) * (
        1.0 - linear_weight
    )


class VelocityFusion:
    """fuse() bound to a fixed linear weight."""

    def __init__(self, linear_weight: float):
        if not (0.0 <= linear_weight <= 1.0):
            raise ConfigurationError(
                f"linear_weight must be in [0, 1], got {linear_weight}"
            )
        self.linear_weight = linear_weight

    def __call__(
        self,
        linear: Optional[Sequence[float]],
        angular: Optional[Sequence[float]],
    ) -> float:
        return fuse(linear, angular, self.linear_weight)


def delta_angle(previous: float, current: float) -> float:
    """Shortest signed difference current - previous in degrees, in (-180, 180]."""
    delta = (current - previous) % 360.0
    if delta > 180.0:
        delta -= 360.0
    return delta
