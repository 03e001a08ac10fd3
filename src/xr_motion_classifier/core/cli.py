"""CLI for xr_motion_classifier."""

import argparse
import logging
from typing import List, Optional

from xr_motion_classifier.core import config, orchestrator
from xr_motion_classifier.core.export import (
    CsvResultSink,
    LoggingResultSink,
    LslResultSink,
    ResultSink,
)
from xr_motion_classifier.core.sensors import (
    LslSensorSource,
    RecordingSensorSource,
    SensorSource,
    SensorSourceError,
)
from xr_motion_classifier.core.types import FrameDecodeError

logger = logging.getLogger(__name__)

# (flag, default, help)
THRESHOLD_FLAGS = (
    ("--position-threshold", config.POSITION_THRESHOLD, "Meters of horizontal travel."),
    ("--bob-threshold", config.BOB_THRESHOLD, "Meters of smoothed head bob."),
    ("--pitch-threshold", config.PITCH_THRESHOLD, "Degrees of head pitch change."),
    ("--smoothing-factor", config.SMOOTHING_FACTOR, "Head bob smoothing in [0, 1)."),
    ("--walk-window", config.WALK_WINDOW, "Seconds averaged for walking."),
    ("--encumbrance-threshold", config.ENCUMBRANCE_THRESHOLD, "L/R ratio in (0, 1)."),
    ("--encumbrance-window", config.ENCUMBRANCE_WINDOW, "Seconds for encumbrance."),
    ("--linear-velocity-weight", config.LINEAR_VELOCITY_WEIGHT, "Linear weight."),
    ("--visibility-interval", config.VISIBILITY_UPDATE_INTERVAL, "Hand poll seconds."),
    ("--hip-speed-threshold", config.HIP_SPEED_THRESHOLD, "Hip speed in m/s."),
)


def parse_arguments(args: Optional[List[str]]) -> argparse.Namespace:
    """Argument parser for xr_motion_classifier cli.

    Args:
        args: A list of command line arguments given as strings. If None, the parser
            will take the args from `sys.argv`.

    Returns:
        Namespace object with all the input arguments and default values.

    Raises:
        SystemExit: if the arguments are invalid.
    """
    parser = argparse.ArgumentParser(
        description="Run the real-time walking, encumbrance and hand visibility classification pipeline.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "-s",
        "--stream-name",
        type=str,
        help="Name of the LSL stream carrying sensor frames.",
    )
    source.add_argument(
        "-r",
        "--recording",
        type=str,
        help="CSV recording of sensor frames to replay.",
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=None,
        help="Give up resolving the LSL stream after this many attempts (default: retry forever).",
    )
    parser.add_argument(
        "--reconnect-interval",
        type=float,
        default=config.RECONNECT_INTERVAL,
        help="Seconds between LSL stream resolve attempts.",
    )
    parser.add_argument(
        "-o",
        "--output-csv",
        type=str,
        default=None,
        help="Write every tick's classifications to this CSV file.",
    )
    parser.add_argument(
        "--no-lsl-output",
        action="store_true",
        help="Do not stream classifications over LSL.",
    )
    parser.add_argument(
        "--output-stream-name",
        type=str,
        default="MotionClassification",
        help="Name of the LSL marker stream for classifications.",
    )
    parser.add_argument(
        "--source-id",
        type=str,
        default="xr-headset",
        help="LSL source id of the classification stream, ex: 'headset-lab-a'.",
    )
    parser.add_argument(
        "--max-ticks",
        type=int,
        default=None,
        help="Stop after this many ticks.",
    )
    parser.add_argument(
        "--log-every",
        type=int,
        default=30,
        help="Log classifications every N ticks.",
    )

    thresholds = parser.add_argument_group("thresholds")
    for flag, default, help_text in THRESHOLD_FLAGS:
        thresholds.add_argument(flag, type=float, default=default, help=help_text)
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")

    return parser.parse_args(args)


def build_config(arguments: argparse.Namespace) -> config.EngineConfig:
    """Build the engine configuration from parsed arguments.

    Raises:
        ConfigurationError: if any value is out of range.
    """
    return config.EngineConfig(
        walk=config.WalkConfig(
            position_threshold=arguments.position_threshold,
            bob_threshold=arguments.bob_threshold,
            pitch_threshold=arguments.pitch_threshold,
            smoothing_factor=arguments.smoothing_factor,
            window=arguments.walk_window,
        ),
        encumbrance=config.EncumbranceConfig(
            threshold=arguments.encumbrance_threshold,
            window=arguments.encumbrance_window,
            linear_velocity_weight=arguments.linear_velocity_weight,
        ),
        visibility=config.VisibilityConfig(
            update_interval=arguments.visibility_interval
        ),
        hip_speed=config.HipSpeedConfig(speed_threshold=arguments.hip_speed_threshold),
    )


def build_source(arguments: argparse.Namespace) -> SensorSource:
    if arguments.recording is not None:
        return RecordingSensorSource(arguments.recording)
    return LslSensorSource(
        arguments.stream_name,
        reconnect_interval=arguments.reconnect_interval,
        max_attempts=arguments.max_attempts,
    )


def build_sinks(arguments: argparse.Namespace) -> List[ResultSink]:
    sinks: List[ResultSink] = [LoggingResultSink(every_n=arguments.log_every)]
    if not arguments.no_lsl_output:
        sinks.append(LslResultSink(arguments.output_stream_name, arguments.source_id))
    if arguments.output_csv is not None:
        sinks.append(CsvResultSink(arguments.output_csv))
    return sinks


def main(
    args: Optional[List[str]] = None,
) -> int:
    """Runs motion classification orchestrator with command line arguments.

    Args:
         args: A list of command line arguments given as strings. If None, the parser
            will take the args from `sys.argv`.

    Returns:
        process exit status.
    """
    arguments = parse_arguments(args)
    logging.basicConfig(
        level=logging.DEBUG if arguments.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        engine_config = build_config(arguments)
        source = build_source(arguments)
        sinks = build_sinks(arguments)
        orchestrator.run(
            source, sinks, config=engine_config, max_ticks=arguments.max_ticks
        )
    except (config.ConfigurationError, SensorSourceError, FrameDecodeError) as err:
        logger.error("%s", err)
        return 1
    return 0
