"""Sensor sources feeding frames to the classification engine."""

import dataclasses
import logging
import math
import pathlib as pl
import time
import warnings
from typing import Iterable, Iterator, Optional, Protocol, Union

import numpy as np
from pylsl import StreamInlet, resolve_byprop

from xr_motion_classifier.core import config
from xr_motion_classifier.core.types import FRAME_CHANNELS, SensorFrame, decode_frame

logger = logging.getLogger(__name__)


class SensorSourceError(RuntimeError):
    """Raised when a sensor source cannot deliver frames."""


class SensorSource(Protocol):
    def frames(self) -> Iterator[SensorFrame]:
        """Yield one frame per tick, in order."""

    def close(self) -> None:
        """Release any handle held by the source."""


class ReplaySensorSource:
    """Replays frames that are already in memory."""

    def __init__(self, frames: Iterable[SensorFrame]):
        self._frames = list(frames)

    def frames(self) -> Iterator[SensorFrame]:
        yield from self._frames

    def close(self) -> None:
        pass


class RecordingSensorSource:
    """Reads a CSV recording laid out as FRAME_CHANNELS (see export.write_recording)."""

    def __init__(self, path: Union[str, pl.Path]):
        self.path = pl.Path(path)
        if not self.path.exists():
            raise SensorSourceError(f"recording not found: {self.path}")

    def frames(self) -> Iterator[SensorFrame]:
        with warnings.catch_warnings():
            # numpy warns on a header-only file; reported below instead.
            warnings.simplefilter("ignore", UserWarning)
            try:
                data = np.loadtxt(self.path, delimiter=",", comments="#", ndmin=2)
            except ValueError as e:
                raise SensorSourceError(f"unreadable recording {self.path}: {e}") from e
        if data.size == 0:
            logger.warning("Recording %s has no samples", self.path)
            return
        logger.info("Replaying %d frames from %s", data.shape[0], self.path)
        for row in data:
            yield decode_frame(row)

    def close(self) -> None:
        pass


class LslSensorSource:
    """Pulls frames from a LabStreamingLayer stream of FRAME_CHANNELS floats.

    Stream resolution is retried every reconnect_interval seconds, forever
    unless max_attempts is set. When the tick duration channel is NaN the LSL
    timestamp difference is used instead.
    """

    def __init__(
        self,
        stream_name: str,
        reconnect_interval: float = config.RECONNECT_INTERVAL,
        resolve_timeout: float = config.RESOLVE_TIMEOUT,
        max_attempts: Optional[int] = None,
        pull_timeout: float = 1.0,
    ):
        self.stream_name = stream_name
        self.reconnect_interval = reconnect_interval
        self.resolve_timeout = resolve_timeout
        self.max_attempts = max_attempts
        self.pull_timeout = pull_timeout
        self.inlet: Optional[StreamInlet] = None

    def connect(self) -> None:
        """Resolve the stream by name and open an inlet.

        Raises:
            SensorSourceError: if max_attempts is exhausted or the stream has
                the wrong channel count.
        """
        attempt = 0
        while True:
            attempt += 1
            logger.info(
                "Resolving LSL stream '%s' (attempt %d)", self.stream_name, attempt
            )
            streams = resolve_byprop(
                "name", self.stream_name, timeout=self.resolve_timeout
            )
            if streams:
                break
            if self.max_attempts is not None and attempt >= self.max_attempts:
                raise SensorSourceError(
                    f"LSL stream '{self.stream_name}' not found after {attempt} attempts"
                )
            logger.warning(
                "LSL stream '%s' not found, retrying in %.1f s",
                self.stream_name,
                self.reconnect_interval,
            )
            time.sleep(self.reconnect_interval)

        info = streams[0]
        if info.channel_count() != len(FRAME_CHANNELS):
            raise SensorSourceError(
                f"LSL stream '{self.stream_name}' has {info.channel_count()} channels, "
                f"expected {len(FRAME_CHANNELS)}"
            )
        self.inlet = StreamInlet(info)
        logger.info("Connected to LSL stream '%s'", self.stream_name)

    def frames(self) -> Iterator[SensorFrame]:
        if self.inlet is None:
            self.connect()

        previous_timestamp = None
        while True:
            sample, timestamp = self.inlet.pull_sample(timeout=self.pull_timeout)
            if sample is None:
                logger.debug("No sample within %.1f s", self.pull_timeout)
                continue

            frame = decode_frame(sample)
            missing_duration = not math.isfinite(frame.tick_duration)
            if missing_duration and previous_timestamp is not None:
                frame = dataclasses.replace(
                    frame, tick_duration=timestamp - previous_timestamp
                )
            previous_timestamp = timestamp
            yield frame

    def close(self) -> None:
        if self.inlet is not None:
            self.inlet.close_stream()
            self.inlet = None
