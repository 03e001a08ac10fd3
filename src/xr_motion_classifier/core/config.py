"""File containing all default parameters and thresholds for classifications."""

import dataclasses
import math
from typing import Tuple

from xr_motion_classifier.core.types import HAND_JOINTS, HandJoint

# Walking (head pose)
POSITION_THRESHOLD = 0.005  # meters of horizontal travel per tick (window mean)
BOB_THRESHOLD = 0.0008  # meters of smoothed vertical head bob per tick
PITCH_THRESHOLD = 1.0  # degrees of head pitch change per tick
SMOOTHING_FACTOR = 0.1  # higher = heavier damping of the bob signal
WALK_WINDOW = 1.0  # seconds

# Encumbrance (controllers)
ENCUMBRANCE_THRESHOLD = 0.6  # left is < 60% of right (or vice versa)
ENCUMBRANCE_WINDOW = 2.0  # seconds
LINEAR_VELOCITY_WEIGHT = 0.7  # linear vs angular velocity blend
EPSILON = 0.0001  # prevents division by zero
LOW_ACTIVITY_FLOOR = 0.1  # combined motion below this skips left/right checks

# Hand visibility
VISIBILITY_UPDATE_INTERVAL = 0.1  # seconds between joint polls

# Body tracking
HIP_SPEED_THRESHOLD = 0.5  # m/s

# Sensor source
RECONNECT_INTERVAL = 2.0  # seconds between stream resolve attempts
RESOLVE_TIMEOUT = 1.0  # seconds spent on one resolve attempt


class ConfigurationError(ValueError):
    """Raised when a classifier is constructed with invalid parameters."""


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigurationError(message)


def _finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


@dataclasses.dataclass(frozen=True)
class WalkConfig:
    """Thresholds for head-pose walking detection.

    Attributes:
        position_threshold: minimum mean horizontal distance per tick.
        bob_threshold: minimum mean smoothed vertical bob per tick.
        pitch_threshold: minimum absolute pitch change (degrees) per tick.
        smoothing_factor: exponential smoothing factor for the bob, in [0, 1).
        window: trailing window (seconds) for both averages.
    """

    position_threshold: float = POSITION_THRESHOLD
    bob_threshold: float = BOB_THRESHOLD
    pitch_threshold: float = PITCH_THRESHOLD
    smoothing_factor: float = SMOOTHING_FACTOR
    window: float = WALK_WINDOW

    def __post_init__(self) -> None:
        _require(
            _finite(
                self.position_threshold,
                self.bob_threshold,
                self.pitch_threshold,
                self.smoothing_factor,
                self.window,
            ),
            "walk parameters must be finite",
        )
        _require(self.position_threshold >= 0, "position_threshold must be >= 0")
        _require(self.bob_threshold >= 0, "bob_threshold must be >= 0")
        _require(self.pitch_threshold >= 0, "pitch_threshold must be >= 0")
        _require(
            0.0 <= self.smoothing_factor < 1.0, "smoothing_factor must be in [0, 1)"
        )
        _require(self.window > 0, "walk window must be positive")


@dataclasses.dataclass(frozen=True)
class EncumbranceConfig:
    """Parameters for left/right controller asymmetry detection."""

    threshold: float = ENCUMBRANCE_THRESHOLD
    window: float = ENCUMBRANCE_WINDOW
    linear_velocity_weight: float = LINEAR_VELOCITY_WEIGHT
    epsilon: float = EPSILON
    low_activity_floor: float = LOW_ACTIVITY_FLOOR

    def __post_init__(self) -> None:
        _require(
            _finite(
                self.threshold,
                self.window,
                self.linear_velocity_weight,
                self.epsilon,
                self.low_activity_floor,
            ),
            "encumbrance parameters must be finite",
        )
        _require(0.0 < self.threshold < 1.0, "encumbrance threshold must be in (0, 1)")
        _require(self.window > 0, "encumbrance window must be positive")
        _require(
            0.0 <= self.linear_velocity_weight <= 1.0,
            "linear_velocity_weight must be in [0, 1]",
        )
        _require(self.epsilon > 0, "epsilon must be positive")
        # With no motion at all L + R == 2 * epsilon; that must read as low activity.
        _require(
            self.low_activity_floor > 2 * self.epsilon,
            "low_activity_floor must exceed 2 * epsilon",
        )


@dataclasses.dataclass(frozen=True)
class VisibilityConfig:
    """Joint set and polling interval for hand visibility."""

    joints: Tuple[HandJoint, ...] = HAND_JOINTS
    update_interval: float = VISIBILITY_UPDATE_INTERVAL

    def __post_init__(self) -> None:
        _require(len(self.joints) > 0, "joint set must not be empty")
        _require(
            HandJoint.INVALID not in self.joints,
            "joint set must not contain the invalid joint id",
        )
        _require(len(set(self.joints)) == len(self.joints), "joint set has duplicates")
        _require(
            _finite(self.update_interval) and self.update_interval > 0,
            "update_interval must be positive",
        )


@dataclasses.dataclass(frozen=True)
class HipSpeedConfig:
    """Speed threshold for body-tracked walking detection."""

    speed_threshold: float = HIP_SPEED_THRESHOLD

    def __post_init__(self) -> None:
        _require(
            _finite(self.speed_threshold) and self.speed_threshold >= 0,
            "hip speed_threshold must be >= 0",
        )


@dataclasses.dataclass(frozen=True)
class EngineConfig:
    """Aggregate configuration handed to the engine once at startup."""

    walk: WalkConfig = dataclasses.field(default_factory=WalkConfig)
    encumbrance: EncumbranceConfig = dataclasses.field(
        default_factory=EncumbranceConfig
    )
    visibility: VisibilityConfig = dataclasses.field(default_factory=VisibilityConfig)
    hip_speed: HipSpeedConfig = dataclasses.field(default_factory=HipSpeedConfig)
