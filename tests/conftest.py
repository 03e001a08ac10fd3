"""Shared fixtures for the test suite."""

import sys
from typing import Callable, List, Optional, Sequence
from unittest.mock import MagicMock

import numpy as np
import pytest

try:
    import pylsl  # noqa: F401
except (ImportError, RuntimeError):
    # liblsl is a native library; every test that touches LSL patches its calls.
    sys.modules["pylsl"] = MagicMock()

from xr_motion_classifier.core.types import (  # noqa: E402
    HAND_JOINTS,
    ControllerMotion,
    HandJoint,
    HandSnapshot,
    HeadPose,
    SensorFrame,
)


@pytest.fixture
def make_hand() -> Callable[..., HandSnapshot]:
    """Factory for hand snapshots with the first `obstructed` joints obstructed."""

    def _make(
        obstructed: int = 0,
        tracked: bool = True,
        joints: Sequence[HandJoint] = HAND_JOINTS,
    ) -> HandSnapshot:
        return HandSnapshot(
            is_tracked=tracked,
            high_fidelity={joint: i >= obstructed for i, joint in enumerate(joints)},
        )

    return _make


@pytest.fixture
def make_frame() -> Callable[..., SensorFrame]:
    def _make(
        tick_duration: float = 1 / 72,
        position: Optional[Sequence[float]] = (0.0, 1.6, 0.0),
        pitch: float = 0.0,
        hip: Optional[Sequence[float]] = None,
        left_linear: Optional[Sequence[float]] = None,
        right_linear: Optional[Sequence[float]] = None,
        left_hand: Optional[HandSnapshot] = None,
        right_hand: Optional[HandSnapshot] = None,
    ) -> SensorFrame:
        head = None if position is None else HeadPose.from_euler(position, pitch)
        return SensorFrame(
            tick_duration=tick_duration,
            head=head,
            hip_position=None if hip is None else np.asarray(hip, dtype=float),
            left_controller=None
            if left_linear is None
            else ControllerMotion(np.asarray(left_linear, dtype=float)),
            right_controller=None
            if right_linear is None
            else ControllerMotion(np.asarray(right_linear, dtype=float)),
            left_hand=left_hand,
            right_hand=right_hand,
        )

    return _make


@pytest.fixture
def session_frames(make_frame, make_hand) -> List[SensorFrame]:
    """A short session: standing, then walking while carrying something in the left hand."""
    rng = np.random.default_rng(7)
    frames = []
    for i in range(120):
        walking = i >= 40
        x = 0.012 * max(0, i - 40)
        y = 1.6 + (0.004 if walking and i % 2 else 0.0)
        frames.append(
            make_frame(
                tick_duration=float(rng.uniform(1 / 90, 1 / 60)),
                position=(x, y, 0.0),
                pitch=float(rng.normal(0.0, 0.5)),
                hip=(x, 1.0, 0.0),
                left_linear=(0.1, 0.0, 0.0) if walking else None,
                right_linear=(0.6, 0.2, 0.0),
                left_hand=make_hand(obstructed=i % 5),
                right_hand=make_hand(tracked=i % 30 != 0),
            )
        )
    return frames
