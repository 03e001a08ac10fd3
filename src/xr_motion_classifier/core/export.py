"""Result sinks and recording export."""

import csv
import logging
import pathlib as pl
from typing import Iterable, List, Optional, Protocol, Union

import numpy as np
from pylsl import StreamInfo, StreamOutlet

from xr_motion_classifier.core.types import (
    FRAME_CHANNELS,
    FrameClassification,
    SensorFrame,
    encode_frame,
)

logger = logging.getLogger(__name__)

CHANNEL_LABELS = ["Walking", "Encumbrance", "Left Hand", "Right Hand", "Hip Speed"]

CSV_COLUMNS = [
    "tick",
    "walking",
    "avg_horizontal",
    "avg_bob",
    "pitch_delta",
    "encumbrance",
    "encumbrance_ratio",
    "left_mean",
    "right_mean",
    "lr_ratio",
    "left_hand",
    "left_visible_percent",
    "right_hand",
    "right_visible_percent",
    "hip_walking",
    "hip_speed",
]


class ResultSink(Protocol):
    def publish(self, result: FrameClassification) -> None:
        """Present the classifications of one tick."""

    def close(self) -> None:
        """Flush and release the sink."""


class LslResultSink:
    """Streams one string marker per classifier per tick over LabStreamingLayer."""

    def __init__(
        self, stream_name: str = "MotionClassification", source_id: str = "xr-headset"
    ):
        info = StreamInfo(
            stream_name, "Markers", len(CHANNEL_LABELS), 0, "string", source_id
        )
        # Set up channel names in the stream description
        channels = info.desc().append_child("channels")
        for label in CHANNEL_LABELS:
            channels.append_child("channel").append_child_value("label", label)

        self.outlet = StreamOutlet(info)
        logger.info("Opened LSL outlet '%s' (%s)", stream_name, source_id)

    def publish(self, result: FrameClassification) -> None:
        self.outlet.push_sample(result.describe())

    def close(self) -> None:
        self.outlet = None


class LoggingResultSink:
    """Logs one line per tick, every_n ticks."""

    def __init__(self, every_n: int = 1, level: int = logging.INFO):
        self.every_n = max(1, every_n)
        self.level = level

    def publish(self, result: FrameClassification) -> None:
        if result.tick % self.every_n == 0:
            logger.log(
                self.level, "Frame %d - %s", result.tick, " | ".join(result.describe())
            )

    def close(self) -> None:
        pass


def _optional(value: Optional[float]) -> Union[float, str]:
    return "" if value is None else value


def result_row(result: FrameClassification) -> List[Union[int, float, str]]:
    """Flatten one tick of classifications into CSV_COLUMNS order."""
    walk = result.walk
    enc = result.encumbrance
    return [
        result.tick,
        int(walk.walking),
        walk.avg_horizontal,
        walk.avg_bob,
        walk.pitch_delta,
        enc.state.value,
        _optional(enc.ratio),
        enc.left_mean,
        enc.right_mean,
        enc.lr_ratio,
        result.left_hand.state.value,
        _optional(result.left_hand.visible_percent),
        result.right_hand.state.value,
        _optional(result.right_hand.visible_percent),
        int(result.hip_speed.walking),
        _optional(result.hip_speed.speed),
    ]


class CsvResultSink:
    """Writes every tick's classifications to a CSV file."""

    def __init__(self, path: Union[str, pl.Path]):
        self.path = pl.Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.path, "w", newline="")
        self._writer = csv.writer(self._file)
        self._writer.writerow(CSV_COLUMNS)
        logger.info("Writing classifications to %s", self.path)

    def publish(self, result: FrameClassification) -> None:
        self._writer.writerow(result_row(result))

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()


def write_recording(path: Union[str, pl.Path], frames: Iterable[SensorFrame]) -> int:
    """This function saves frames as a CSV recording readable by RecordingSensorSource.

    Args:
        path: destination file; parent directories are created.
        frames: frames to save, in tick order.

    Returns:
        number of frames written.
    """
    path = pl.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    rows = [encode_frame(frame) for frame in frames]
    data = np.vstack(rows) if rows else np.empty((0, len(FRAME_CHANNELS)))
    np.savetxt(path, data, delimiter=",", header=",".join(FRAME_CHANNELS))
    return len(rows)
