"""Tests for hand joint visibility."""

import pytest

from xr_motion_classifier.classifiers.hand_visibility import (
    HandVisibilityMonitor,
    JointVisibilityAggregator,
)
from xr_motion_classifier.core.config import ConfigurationError, VisibilityConfig
from xr_motion_classifier.core.types import (
    HAND_JOINTS,
    HandJoint,
    HandSnapshot,
    VisibilityState,
)


def test_three_of_ten_obstructed(make_hand) -> None:
    joints = HAND_JOINTS[:10]
    aggregator = JointVisibilityAggregator(VisibilityConfig(joints=joints))

    result = aggregator.aggregate(make_hand(obstructed=3, joints=joints))

    assert result.state is VisibilityState.TRACKED
    assert result.visible_percent == 70.0
    assert result.obstructed_percent == 30.0
    assert result.obstructed_joints == 3
    assert result.total_joints == 10


def test_untracked_hand_ignores_joint_data(make_hand) -> None:
    aggregator = JointVisibilityAggregator()

    result = aggregator.aggregate(make_hand(obstructed=0, tracked=False))

    assert result.state is VisibilityState.NOT_TRACKED
    assert result.visible_percent is None
    assert result.describe("Left Hand") == "Left Hand: Not Tracked"


def test_missing_snapshot_is_not_tracked() -> None:
    result = JointVisibilityAggregator().aggregate(None)

    assert result.state is VisibilityState.NOT_TRACKED


def test_all_joints_visible(make_hand) -> None:
    result = JointVisibilityAggregator().aggregate(make_hand())

    assert result.visible_percent == 100.0
    assert result.total_joints == 26
    assert result.describe("Right Hand") == "Right Hand: 100% Visible / 0% Obstructed"


def test_unreported_joints_count_as_obstructed() -> None:
    snapshot = HandSnapshot(is_tracked=True, high_fidelity={HandJoint.WRIST: True})
    config = VisibilityConfig(joints=(HandJoint.WRIST, HandJoint.PALM))

    result = JointVisibilityAggregator(config).aggregate(snapshot)

    assert result.visible_percent == 50.0


def test_invalid_joint_id_never_counted() -> None:
    assert HandJoint.INVALID not in HAND_JOINTS
    assert len(HAND_JOINTS) == 26


@pytest.mark.parametrize(
    "joints",
    [(), (HandJoint.INVALID, HandJoint.WRIST), (HandJoint.PALM, HandJoint.PALM)],
)
def test_bad_joint_sets_rejected(joints) -> None:
    with pytest.raises(ConfigurationError):
        VisibilityConfig(joints=joints)


def test_monitor_polls_on_interval(make_hand) -> None:
    monitor = HandVisibilityMonitor(VisibilityConfig(update_interval=0.1))

    left, right = monitor.update(make_hand(obstructed=13), None, 0.04)
    assert left.visible_percent == 50.0
    assert right.state is VisibilityState.NOT_TRACKED

    # Not due yet: results are held.
    held = monitor.update(make_hand(), make_hand(), 0.04)
    assert held[0].visible_percent == 50.0
    held = monitor.update(make_hand(), make_hand(), 0.04)
    assert held[1].state is VisibilityState.NOT_TRACKED

    left, right = monitor.update(make_hand(), make_hand(), 0.04)
    assert left.visible_percent == 100.0
    assert right.state is VisibilityState.TRACKED
