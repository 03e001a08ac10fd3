"""Python based runner."""

import logging
from typing import Optional, Sequence

from xr_motion_classifier.classifiers.body_speed import HipSpeedClassifier
from xr_motion_classifier.classifiers.encumbrance import BilateralRatioClassifier
from xr_motion_classifier.classifiers.hand_visibility import HandVisibilityMonitor
from xr_motion_classifier.classifiers.walking import WalkClassifier
from xr_motion_classifier.core.config import EngineConfig
from xr_motion_classifier.core.export import ResultSink
from xr_motion_classifier.core.sensors import SensorSource
from xr_motion_classifier.core.types import FrameClassification, SensorFrame

logger = logging.getLogger(__name__)


class MotionClassificationEngine:
    """Owns one instance of every classifier and advances them once per tick.

    The classifiers share no state; the engine only routes the parts of each
    frame to the classifier that consumes them.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.walk = WalkClassifier(self.config.walk)
        self.encumbrance = BilateralRatioClassifier(self.config.encumbrance)
        self.visibility = HandVisibilityMonitor(self.config.visibility)
        self.hip_speed = HipSpeedClassifier(self.config.hip_speed)
        self.tick = 0

    def step(self, frame: SensorFrame) -> FrameClassification:
        """Classify one frame.

        Args:
            frame: sensor readings for this tick.

        Returns:
            FrameClassification with every classifier's result.
        """
        self.tick += 1
        dt = frame.tick_duration

        walk = self.walk.update(frame.head, dt)
        encumbrance = self.encumbrance.update_controllers(
            frame.left_controller, frame.right_controller, dt
        )
        left_hand, right_hand = self.visibility.update(
            frame.left_hand, frame.right_hand, dt
        )
        hip_speed = self.hip_speed.update(frame.hip_position, dt)

        return FrameClassification(
            tick=self.tick,
            walk=walk,
            encumbrance=encumbrance,
            left_hand=left_hand,
            right_hand=right_hand,
            hip_speed=hip_speed,
        )


def run(
    source: SensorSource,
    sinks: Sequence[ResultSink],
    config: Optional[EngineConfig] = None,
    max_ticks: Optional[int] = None,
) -> int:
    """This function is responsible for the main processing of the pipeline.

    Every frame produced by the source is classified and handed to each sink.
    The loop ends when the source is exhausted, max_ticks frames have been
    processed, or the user interrupts with Ctrl+C. The source and sinks are
    closed on the way out.

    Args:
        source: sensor source collaborator.
        sinks: presentation sinks that receive every tick's classifications.
        config: engine configuration; defaults are used when None.
        max_ticks: stop after this many frames.

    Returns:
        number of ticks processed.
    """
    engine = MotionClassificationEngine(config)
    logger.info("Starting motion classification. Press Ctrl+C to stop.")

    try:
        for frame in source.frames():
            if max_ticks is not None and engine.tick >= max_ticks:
                break
            result = engine.step(frame)
            for sink in sinks:
                sink.publish(result)
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping after %d ticks", engine.tick)
    finally:
        source.close()
        for sink in sinks:
            sink.close()

    logger.info("Processed %d ticks", engine.tick)
    return engine.tick
