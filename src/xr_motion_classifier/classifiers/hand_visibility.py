"""file containing functions for classifying hand joint visibility."""

import logging
import math
from typing import Optional, Tuple

from xr_motion_classifier.core.config import VisibilityConfig
from xr_motion_classifier.core.types import (
    HandSnapshot,
    VisibilityResult,
    VisibilityState,
)

logger = logging.getLogger(__name__)


class JointVisibilityAggregator:
    """Percentage of a hand's joints that currently have a high fidelity pose."""

    def __init__(self, config: Optional[VisibilityConfig] = None):
        self.config = config or VisibilityConfig()

    def aggregate(self, snapshot: Optional[HandSnapshot]) -> VisibilityResult:
        """This function counts obstructed joints for one hand.

        Args:
            snapshot: hand tracking snapshot, or None if the hand was not reported.

        Returns:
            NOT_TRACKED if the hand is not tracked, otherwise TRACKED with the
            visible and obstructed percentages.
        """
        if snapshot is None or not snapshot.is_tracked:
            return VisibilityResult(VisibilityState.NOT_TRACKED)

        total = len(self.config.joints)
        # Joints missing from the snapshot count as obstructed.
        obstructed = sum(
            1
            for joint in self.config.joints
            if not snapshot.high_fidelity.get(joint, False)
        )
        obstructed_percent = 100.0 * obstructed / total
        return VisibilityResult(
            VisibilityState.TRACKED,
            visible_percent=100.0 - obstructed_percent,
            obstructed_percent=obstructed_percent,
            obstructed_joints=obstructed,
            total_joints=total,
        )


class HandVisibilityMonitor:
    """Polls both hands every update_interval seconds of accumulated tick time.

    Between polls the last results are returned unchanged. The first tick
    always polls.
    """

    def __init__(self, config: Optional[VisibilityConfig] = None):
        self.config = config or VisibilityConfig()
        self.left = JointVisibilityAggregator(self.config)
        self.right = JointVisibilityAggregator(self.config)
        self.timer = 0.0
        self.latest: Optional[Tuple[VisibilityResult, VisibilityResult]] = None

    def update(
        self,
        left_hand: Optional[HandSnapshot],
        right_hand: Optional[HandSnapshot],
        tick_duration: float,
    ) -> Tuple[VisibilityResult, VisibilityResult]:
        if math.isfinite(tick_duration) and tick_duration > 0:
            self.timer += tick_duration

        if self.latest is not None and self.timer < self.config.update_interval:
            return self.latest

        self.timer = 0.0
        self.latest = (self.left.aggregate(left_hand), self.right.aggregate(right_hand))
        for name, result in zip(("Left Hand", "Right Hand"), self.latest):
            if result.state is VisibilityState.NOT_TRACKED:
                logger.debug("%s not tracked", name)
        return self.latest
