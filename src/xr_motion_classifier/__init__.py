"""Real-time walking, encumbrance and hand visibility classification."""

from xr_motion_classifier.classifiers.body_speed import HipSpeedClassifier
from xr_motion_classifier.classifiers.encumbrance import BilateralRatioClassifier
from xr_motion_classifier.classifiers.hand_visibility import (
    HandVisibilityMonitor,
    JointVisibilityAggregator,
)
from xr_motion_classifier.classifiers.walking import WalkClassifier
from xr_motion_classifier.core.config import ConfigurationError, EngineConfig
from xr_motion_classifier.core.signal import (
    ExponentialSmoother,
    TimeWindowedBuffer,
    VelocityFusion,
)

__all__ = [
    "BilateralRatioClassifier",
    "ConfigurationError",
    "EngineConfig",
    "ExponentialSmoother",
    "HandVisibilityMonitor",
    "HipSpeedClassifier",
    "JointVisibilityAggregator",
    "TimeWindowedBuffer",
    "VelocityFusion",
    "WalkClassifier",
]
