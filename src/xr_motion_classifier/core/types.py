"""Sensor frame and classification result types."""

import dataclasses
import enum
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
from scipy.spatial.transform import Rotation as R


class HandJoint(enum.IntEnum):
    """OpenXR hand joint identifiers. INVALID is never aggregated."""

    INVALID = 0
    WRIST = 1
    PALM = 2
    THUMB_METACARPAL = 3
    THUMB_PROXIMAL = 4
    THUMB_DISTAL = 5
    THUMB_TIP = 6
    INDEX_METACARPAL = 7
    INDEX_PROXIMAL = 8
    INDEX_INTERMEDIATE = 9
    INDEX_DISTAL = 10
    INDEX_TIP = 11
    MIDDLE_METACARPAL = 12
    MIDDLE_PROXIMAL = 13
    MIDDLE_INTERMEDIATE = 14
    MIDDLE_DISTAL = 15
    MIDDLE_TIP = 16
    RING_METACARPAL = 17
    RING_PROXIMAL = 18
    RING_INTERMEDIATE = 19
    RING_DISTAL = 20
    RING_TIP = 21
    LITTLE_METACARPAL = 22
    LITTLE_PROXIMAL = 23
    LITTLE_INTERMEDIATE = 24
    LITTLE_DISTAL = 25
    LITTLE_TIP = 26


HAND_JOINTS: Tuple[HandJoint, ...] = tuple(j for j in HandJoint if j != HandJoint.INVALID)

# Quaternions shorter than this carry no orientation.
QUATERNION_MIN_NORM = 1e-6


class FrameDecodeError(ValueError):
    """Raised when a flat sample does not match the frame channel layout."""


@dataclasses.dataclass(frozen=True, eq=False)
class HeadPose:
    """Head position (meters, Y up) and orientation quaternion [x, y, z, w]."""

    position: np.ndarray
    orientation: np.ndarray

    def __post_init__(self) -> None:
        position = np.asarray(self.position, dtype=float)
        orientation = np.asarray(self.orientation, dtype=float)
        if position.shape != (3,) or not np.isfinite(position).all():
            raise ValueError(f"position must be 3 finite floats, got {self.position!r}")
        if (
            orientation.shape != (4,)
            or not np.isfinite(orientation).all()
            or np.linalg.norm(orientation) <= QUATERNION_MIN_NORM
        ):
            raise ValueError(
                f"orientation must be a non-zero finite quaternion, got {self.orientation!r}"
            )
        object.__setattr__(self, "position", position)
        object.__setattr__(self, "orientation", orientation)

    @classmethod
    def from_euler(
        cls,
        position: Sequence[float],
        pitch: float,
        yaw: float = 0.0,
        roll: float = 0.0,
    ) -> "HeadPose":
        quat = R.from_euler("YXZ", [yaw, pitch, roll], degrees=True).as_quat()
        return cls(np.asarray(position, dtype=float), quat)

    @property
    def pitch(self) -> float:
        """Rotation about the X axis in degrees, yaw-pitch-roll order."""
        return float(R.from_quat(self.orientation).as_euler("YXZ", degrees=True)[1])


@dataclasses.dataclass(frozen=True, eq=False)
class ControllerMotion:
    """Velocities reported by one controller. Either may be missing."""

    linear_velocity: Optional[np.ndarray] = None
    angular_velocity: Optional[np.ndarray] = None


@dataclasses.dataclass(frozen=True)
class HandSnapshot:
    """Tracking state of one hand.

    Attributes:
        is_tracked: whether the hand itself is tracked.
        high_fidelity: joint id -> True when the joint has a high fidelity pose.
            Joints missing from the mapping count as obstructed.
    """

    is_tracked: bool
    high_fidelity: Mapping[HandJoint, bool] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass(frozen=True, eq=False)
class SensorFrame:
    """Everything the sensor source reports for one tick."""

    tick_duration: float
    head: Optional[HeadPose] = None
    hip_position: Optional[np.ndarray] = None
    left_controller: Optional[ControllerMotion] = None
    right_controller: Optional[ControllerMotion] = None
    left_hand: Optional[HandSnapshot] = None
    right_hand: Optional[HandSnapshot] = None


def _vector_channels(prefix: str, axes: str = "xyz") -> List[str]:
    return [f"{prefix}_{axis}" for axis in axes]


def _hand_channels(side: str) -> List[str]:
    return [f"{side}_hand_tracked"] + [
        f"{side}_{joint.name.lower()}" for joint in HAND_JOINTS
    ]


FRAME_CHANNELS: Tuple[str, ...] = tuple(
    ["tick_duration"]
    + _vector_channels("head_position")
    + _vector_channels("head_orientation", "xyzw")
    + _vector_channels("hip_position")
    + _vector_channels("left_linear_velocity")
    + _vector_channels("left_angular_velocity")
    + _vector_channels("right_linear_velocity")
    + _vector_channels("right_angular_velocity")
    + _hand_channels("left")
    + _hand_channels("right")
)

_SLICES: Dict[str, slice] = {}
_offset = 0
for _name, _width in (
    ("tick_duration", 1),
    ("head_position", 3),
    ("head_orientation", 4),
    ("hip_position", 3),
    ("left_linear_velocity", 3),
    ("left_angular_velocity", 3),
    ("right_linear_velocity", 3),
    ("right_angular_velocity", 3),
    ("left_hand", 1 + len(HAND_JOINTS)),
    ("right_hand", 1 + len(HAND_JOINTS)),
):
    _SLICES[_name] = slice(_offset, _offset + _width)
    _offset += _width


def _vector(values: np.ndarray) -> Optional[np.ndarray]:
    """NaN or inf anywhere in a group means the sensor did not report it."""
    if not np.isfinite(values).all():
        return None
    return values.copy()


def _decode_hand(values: np.ndarray) -> Optional[HandSnapshot]:
    if np.isnan(values[0]):
        return None
    flags = values[1:]
    return HandSnapshot(
        is_tracked=bool(values[0] > 0.5),
        high_fidelity={
            joint: bool(flag > 0.5) for joint, flag in zip(HAND_JOINTS, flags)
        },
    )


def _decode_controller(
    linear: np.ndarray, angular: np.ndarray
) -> Optional[ControllerMotion]:
    linear_velocity = _vector(linear)
    angular_velocity = _vector(angular)
    if linear_velocity is None and angular_velocity is None:
        return None
    return ControllerMotion(linear_velocity, angular_velocity)


def decode_frame(sample: Sequence[float]) -> SensorFrame:
    """This function converts a flat sample laid out as FRAME_CHANNELS into a frame.

    Args:
        sample: one float per channel; NaN marks a missing vector or hand.

    Returns:
        SensorFrame for the tick.

    Raises:
        FrameDecodeError: if the sample has the wrong number of channels.
    """
    values = np.asarray(sample, dtype=float)
    if values.shape != (len(FRAME_CHANNELS),):
        raise FrameDecodeError(
            f"expected {len(FRAME_CHANNELS)} channels, got shape {values.shape}"
        )

    head = None
    position = _vector(values[_SLICES["head_position"]])
    orientation = _vector(values[_SLICES["head_orientation"]])
    if (
        position is not None
        and orientation is not None
        and np.linalg.norm(orientation) > QUATERNION_MIN_NORM
    ):
        head = HeadPose(position, orientation)

    return SensorFrame(
        tick_duration=float(values[0]),
        head=head,
        hip_position=_vector(values[_SLICES["hip_position"]]),
        left_controller=_decode_controller(
            values[_SLICES["left_linear_velocity"]],
            values[_SLICES["left_angular_velocity"]],
        ),
        right_controller=_decode_controller(
            values[_SLICES["right_linear_velocity"]],
            values[_SLICES["right_angular_velocity"]],
        ),
        left_hand=_decode_hand(values[_SLICES["left_hand"]]),
        right_hand=_decode_hand(values[_SLICES["right_hand"]]),
    )


def _encode_hand(hand: Optional[HandSnapshot]) -> List[float]:
    if hand is None:
        return [np.nan] * (1 + len(HAND_JOINTS))
    return [float(hand.is_tracked)] + [
        float(hand.high_fidelity.get(joint, False)) for joint in HAND_JOINTS
    ]


def _encode_vector(vector: Optional[np.ndarray], width: int = 3) -> List[float]:
    if vector is None:
        return [np.nan] * width
    return [float(v) for v in vector]


def encode_frame(frame: SensorFrame) -> np.ndarray:
    """Flatten a frame into the FRAME_CHANNELS layout."""
    left = frame.left_controller or ControllerMotion()
    right = frame.right_controller or ControllerMotion()
    head_position = frame.head.position if frame.head is not None else None
    head_orientation = frame.head.orientation if frame.head is not None else None
    values = (
        [float(frame.tick_duration)]
        + _encode_vector(head_position)
        + _encode_vector(head_orientation, 4)
        + _encode_vector(frame.hip_position)
        + _encode_vector(left.linear_velocity)
        + _encode_vector(left.angular_velocity)
        + _encode_vector(right.linear_velocity)
        + _encode_vector(right.angular_velocity)
        + _encode_hand(frame.left_hand)
        + _encode_hand(frame.right_hand)
    )
    return np.array(values, dtype=float)


@dataclasses.dataclass(frozen=True)
class WalkResult:
    """Walking state plus the three values it was derived from."""

    walking: bool
    avg_horizontal: float
    avg_bob: float
    pitch_delta: float
    ready: bool = True

    def describe(self) -> str:
        if not self.ready:
            return "Walking: waiting for head pose"
        return (
            f"Walking: {'YES' if self.walking else 'NO'} "
            f"(Horizontal: {self.avg_horizontal:.4f}, "
            f"Vertical: {self.avg_bob:.4f}, "
            f"Rotation: {self.pitch_delta:.3f}°)"
        )


class EncumbranceState(enum.Enum):
    NORMAL = "normal"
    ENCUMBERED_LEFT = "encumbered_left"
    ENCUMBERED_RIGHT = "encumbered_right"
    LOW_ACTIVITY = "low_activity"


@dataclasses.dataclass(frozen=True)
class EncumbranceResult:
    """Encumbrance state.

    Attributes:
        state: classification for this tick.
        ratio: the ratio that triggered ENCUMBERED_LEFT / ENCUMBERED_RIGHT, else None.
        left_mean: windowed mean of the left fused velocity.
        right_mean: windowed mean of the right fused velocity.
        lr_ratio: (left + epsilon) / (right + epsilon), for display only.
    """

    state: EncumbranceState
    ratio: Optional[float]
    left_mean: float
    right_mean: float
    lr_ratio: float

    def describe(self) -> str:
        if self.state is EncumbranceState.LOW_ACTIVITY:
            return "Low Movement"
        if self.state is EncumbranceState.ENCUMBERED_LEFT:
            return f"Encumbered: LEFT (Ratio: {self.ratio:.2f})"
        if self.state is EncumbranceState.ENCUMBERED_RIGHT:
            return f"Encumbered: RIGHT (Ratio: {self.ratio:.2f})"
        return "Normal Movement"


class VisibilityState(enum.Enum):
    NOT_TRACKED = "not_tracked"
    TRACKED = "tracked"


@dataclasses.dataclass(frozen=True)
class VisibilityResult:
    state: VisibilityState
    visible_percent: Optional[float] = None
    obstructed_percent: Optional[float] = None
    obstructed_joints: int = 0
    total_joints: int = 0

    def describe(self, hand_name: str = "Hand") -> str:
        if self.state is VisibilityState.NOT_TRACKED:
            return f"{hand_name}: Not Tracked"
        return (
            f"{hand_name}: {self.visible_percent:.0f}% Visible / "
            f"{self.obstructed_percent:.0f}% Obstructed"
        )


@dataclasses.dataclass(frozen=True)
class HipSpeedResult:
    walking: bool
    speed: Optional[float] = None

    def describe(self) -> str:
        if self.speed is None:
            return "Hip Speed: unknown"
        return f"Hip Speed: {self.speed:.2f} m/s ({'walking' if self.walking else 'still'})"


@dataclasses.dataclass(frozen=True)
class FrameClassification:
    """All classifier outputs for one tick, as handed to result sinks."""

    tick: int
    walk: WalkResult
    encumbrance: EncumbranceResult
    left_hand: VisibilityResult
    right_hand: VisibilityResult
    hip_speed: HipSpeedResult

    def describe(self) -> List[str]:
        return [
            self.walk.describe(),
            self.encumbrance.describe(),
            self.left_hand.describe("Left Hand"),
            self.right_hand.describe("Right Hand"),
            self.hip_speed.describe(),
        ]
