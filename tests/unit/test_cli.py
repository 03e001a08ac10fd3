"""Tests for the command line interface."""

import csv
from unittest.mock import patch

import pytest

from xr_motion_classifier.core import cli, config
from xr_motion_classifier.core.export import write_recording
from xr_motion_classifier.core.sensors import LslSensorSource, RecordingSensorSource


def test_source_is_required() -> None:
    with pytest.raises(SystemExit):
        cli.parse_arguments([])


def test_sources_are_exclusive() -> None:
    with pytest.raises(SystemExit):
        cli.parse_arguments(["-s", "XRSensors", "-r", "session.csv"])


def test_defaults() -> None:
    arguments = cli.parse_arguments(["-s", "XRSensors"])

    engine_config = cli.build_config(arguments)

    assert engine_config == config.EngineConfig()
    assert arguments.max_attempts is None
    assert not arguments.no_lsl_output


def test_threshold_flags_reach_config() -> None:
    arguments = cli.parse_arguments(
        ["-s", "XRSensors", "--encumbrance-threshold", "0.4", "--walk-window", "0.5"]
    )

    engine_config = cli.build_config(arguments)

    assert engine_config.encumbrance.threshold == 0.4
    assert engine_config.walk.window == 0.5


def test_build_source() -> None:
    arguments = cli.parse_arguments(["-s", "XRSensors", "--max-attempts", "3"])

    source = cli.build_source(arguments)

    assert isinstance(source, LslSensorSource)
    assert source.max_attempts == 3


def test_replay_recording_to_csv(tmp_path, session_frames) -> None:
    recording = tmp_path / "session.csv"
    output = tmp_path / "classifications.csv"
    write_recording(recording, session_frames)

    status = cli.main(["-r", str(recording), "--no-lsl-output", "-o", str(output)])

    assert status == 0
    with open(output, newline="") as f:
        assert len(list(csv.reader(f))) == len(session_frames) + 1


def test_recording_source_selected(tmp_path, session_frames) -> None:
    recording = tmp_path / "session.csv"
    write_recording(recording, session_frames[:3])

    source = cli.build_source(cli.parse_arguments(["-r", str(recording)]))

    assert isinstance(source, RecordingSensorSource)


def test_invalid_threshold_exits_with_error() -> None:
    status = cli.main(["-s", "XRSensors", "--encumbrance-threshold", "1.5"])

    assert status == 1


def test_missing_recording_exits_with_error(tmp_path) -> None:
    status = cli.main(["-r", str(tmp_path / "missing.csv"), "--no-lsl-output"])

    assert status == 1


@patch("xr_motion_classifier.core.cli.LslResultSink")
def test_lsl_output_enabled_by_default(sink_cls, tmp_path, session_frames) -> None:
    recording = tmp_path / "session.csv"
    write_recording(recording, session_frames[:5])

    status = cli.main(["-r", str(recording), "--source-id", "headset-lab-a"])

    assert status == 0
    sink_cls.assert_called_once_with("MotionClassification", "headset-lab-a")
    assert sink_cls.return_value.publish.call_count == 5


def test_unreadable_recording_exits_with_error(tmp_path) -> None:
    recording = tmp_path / "ragged.csv"
    recording.write_text("0.1,0.2\n0.1,oops\n")

    status = cli.main(["-r", str(recording), "--no-lsl-output"])

    assert status == 1
