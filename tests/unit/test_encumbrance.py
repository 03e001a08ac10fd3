"""Tests for left/right encumbrance classification."""

import numpy as np
import pytest

from xr_motion_classifier.classifiers.encumbrance import (
    BilateralRatioClassifier,
    classify_ratio,
)
from xr_motion_classifier.core.config import EncumbranceConfig
from xr_motion_classifier.core.types import ControllerMotion, EncumbranceState


@pytest.fixture
def config() -> EncumbranceConfig:
    return EncumbranceConfig(threshold=0.6, window=2.0, epsilon=1e-4)


@pytest.mark.parametrize("magnitude", [0.2, 1.0, 7.5])
def test_equal_sides_are_normal(config: EncumbranceConfig, magnitude: float) -> None:
    result = classify_ratio(magnitude, magnitude, config)

    assert result.state is EncumbranceState.NORMAL
    assert result.ratio is None
    assert result.lr_ratio == 1.0


def test_still_left_side_is_encumbered_left(config: EncumbranceConfig) -> None:
    result = classify_ratio(0.0, 1.0, config)

    assert result.state is EncumbranceState.ENCUMBERED_LEFT
    assert result.ratio == pytest.approx(config.epsilon, rel=1e-3)


def test_still_right_side_is_encumbered_right(config: EncumbranceConfig) -> None:
    result = classify_ratio(1.0, 0.0, config)

    assert result.state is EncumbranceState.ENCUMBERED_RIGHT
    assert result.ratio == pytest.approx(config.epsilon, rel=1e-3)


@pytest.mark.parametrize("threshold", [0.05, 0.5, 0.95])
def test_no_motion_is_low_activity(threshold: float) -> None:
    result = classify_ratio(0.0, 0.0, EncumbranceConfig(threshold=threshold))

    assert result.state is EncumbranceState.LOW_ACTIVITY
    assert result.ratio is None


def test_low_activity_takes_priority_over_ratio(config: EncumbranceConfig) -> None:
    result = classify_ratio(0.0, 0.05, config)

    assert result.state is EncumbranceState.LOW_ACTIVITY


def test_mild_asymmetry_is_normal(config: EncumbranceConfig) -> None:
    result = classify_ratio(0.7, 1.0, config)

    assert result.state is EncumbranceState.NORMAL
    assert result.lr_ratio == pytest.approx(0.7001 / 1.0001)


def test_windowed_means_drive_classification(config: EncumbranceConfig) -> None:
    classifier = BilateralRatioClassifier(config)
    for _ in range(4):
        result = classifier.update(1.0, 1.0, 0.5)
    assert result.state is EncumbranceState.NORMAL

    for _ in range(2):
        result = classifier.update(0.0, 1.0, 0.5)

    assert result.left_mean == 0.5
    assert result.right_mean == 1.0
    assert result.state is EncumbranceState.ENCUMBERED_LEFT
    assert result.ratio == pytest.approx(0.5001 / 1.0001)


def test_sustained_asymmetry(config: EncumbranceConfig) -> None:
    classifier = BilateralRatioClassifier(config)

    for _ in range(200):
        result = classifier.update(0.2, 1.0, 1 / 72)

    assert result.state is EncumbranceState.ENCUMBERED_LEFT
    assert result.describe() == "Encumbered: LEFT (Ratio: 0.20)"


def test_missing_controllers_count_as_still(config: EncumbranceConfig) -> None:
    classifier = BilateralRatioClassifier(config)

    result = classifier.update_controllers(None, None, 1 / 72)

    assert result.state is EncumbranceState.LOW_ACTIVITY
    assert result.describe() == "Low Movement"


def test_controller_velocities_are_fused(config: EncumbranceConfig) -> None:
    classifier = BilateralRatioClassifier(config)
    left = ControllerMotion(np.array([1.0, 0.0, 0.0]), np.array([0.0, 0.0, 1.0]))

    result = classifier.update_controllers(left, ControllerMotion(), 1 / 72)

    assert result.left_mean == pytest.approx(1.0)
    assert result.right_mean == 0.0
    assert result.state is EncumbranceState.ENCUMBERED_RIGHT
    assert result.describe().startswith("Encumbered: RIGHT")


def test_describe_normal(config: EncumbranceConfig) -> None:
    assert classify_ratio(1.0, 0.9, config).describe() == "Normal Movement"


def test_non_finite_magnitude_counts_as_still(config: EncumbranceConfig) -> None:
    classifier = BilateralRatioClassifier(config)

    result = classifier.update(np.inf, 0.5, 0.1)

    assert result.left_mean == 0.0
    assert result.state is EncumbranceState.ENCUMBERED_LEFT
