"""CLI entry point for the face attendance system.

Usage:
    face-attendance run [--config PATH] [--labels-dir DIR] [--no-display] [--no-report] [--debug]
    face-attendance enroll [--config PATH] [--labels-dir DIR] --output FILE.npz
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from .constants import Config, get_config
from .detection import create_detector, create_enrollment_detectors
from .errors import AcquisitionError, ModelReadinessError
from .recognition import LabelRegistry, RecognitionEngine
from .sensors import OpenCVCamera
from .session import RecognitionSession
from .sinks import AttendanceReporter, AttendanceSink, LogSink, OverlaySink

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_registry(config: Config, labels_dir: Optional[str] = None) -> LabelRegistry:
    """Load the cached registry if configured and present, else enroll."""
    enrollment = config.enrollment

    cache_path = enrollment.cache_path
    if cache_path and Path(cache_path).exists():
        logger.info(f"Loading enrolled identities from {cache_path}")
        return LabelRegistry.from_npz(cache_path)

    detectors = create_enrollment_detectors(enrollment.detector_variants, config.detector)
    for detector in detectors:
        detector.prepare()

    return LabelRegistry.build(
        labels_dir or enrollment.labels_dir,
        detectors,
        labels=enrollment.labels,
        extension=enrollment.image_extension,
        descriptor_dim=config.recognition.descriptor_dim,
    )


def build_session(
    config: Config,
    registry: LabelRegistry,
    display: bool = True,
    report: bool = True,
) -> RecognitionSession:
    """Wire camera, detector, engine and sinks from configuration."""
    camera_config = config.camera
    camera = OpenCVCamera(
        device_id=camera_config.device_id,
        resolution=camera_config.resolution,
        fps=camera_config.fps,
    )

    detector = create_detector(
        config.detector.backend,
        config.detector,
        expression_vocabulary=config.recognition.expression_vocabulary,
    )
    engine = RecognitionEngine.from_config(registry, config.recognition)

    sinks = [LogSink()]
    overlay = None
    if display and config.display.enabled:
        overlay = OverlaySink(window_name=config.display.window_name)
        sinks.append(overlay)
    if report and config.reporting.enabled:
        reporter = AttendanceReporter(
            base_url=config.reporting.base_url,
            timeout=config.reporting.timeout,
        )
        sinks.append(AttendanceSink(reporter))

    session = RecognitionSession(
        camera=camera,
        detector=detector,
        engine=engine,
        sinks=sinks,
        interval=config.scheduler.interval,
        detector_timeout=config.scheduler.detector_timeout,
    )
    if overlay is not None:
        overlay.on_quit = session.request_stop

    return session


async def _run_session(session: RecognitionSession) -> None:
    async with session:
        await session.wait()


def cmd_run(args, config: Config) -> int:
    """Run a live recognition session until interrupted."""
    logger.info("Starting face attendance session")

    try:
        registry = build_registry(config, args.labels_dir)
        session = build_session(
            config, registry,
            display=not args.no_display,
            report=not args.no_report,
        )
        asyncio.run(_run_session(session))
    except (AcquisitionError, ModelReadinessError) as e:
        logger.error(f"Failed to start: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")

    return 0


def cmd_enroll(args, config: Config) -> int:
    """Enroll every label and save the descriptors."""
    try:
        detectors = create_enrollment_detectors(
            config.enrollment.detector_variants, config.detector
        )
        for detector in detectors:
            detector.prepare()
    except ModelReadinessError as e:
        logger.error(f"Failed to load models: {e}")
        return 1

    enrollment = config.enrollment
    registry = LabelRegistry.build(
        args.labels_dir or enrollment.labels_dir,
        detectors,
        labels=enrollment.labels,
        extension=enrollment.image_extension,
        descriptor_dim=config.recognition.descriptor_dim,
    )

    if len(registry) == 0:
        logger.error("No identities enrolled")
        return 1

    registry.export_to_npz(args.output)
    return 0


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="face-attendance",
        description="Live face recognition with attendance reporting",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run live recognition")
    run_parser.add_argument("--config", help="Path to config.yaml")
    run_parser.add_argument("--labels-dir", help="Directory of {label}.jpg enrollment images")
    run_parser.add_argument("--no-display", action="store_true", help="Do not open a window")
    run_parser.add_argument("--no-report", action="store_true", help="Do not call the attendance API")
    run_parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    run_parser.set_defaults(func=cmd_run)

    enroll_parser = subparsers.add_parser("enroll", help="Enroll labels and save descriptors")
    enroll_parser.add_argument("--config", help="Path to config.yaml")
    enroll_parser.add_argument("--labels-dir", help="Directory of {label}.jpg enrollment images")
    enroll_parser.add_argument("--output", required=True, help="Output .npz file")
    enroll_parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    enroll_parser.set_defaults(func=cmd_enroll)

    return parser


def main(argv=None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    config = get_config()
    if args.config:
        config.reload(Path(args.config))

    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())
