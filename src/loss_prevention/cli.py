"""
Loss Prevention Recorder CLI
Main entry point for running the recorder.

Commands:
  --validate      Check configuration validity
  --sanity-check  Record a few frames to prove camera and writer work
"""

import argparse
import logging
import signal
import sys
from threading import Event as ThreadEvent
from typing import TextIO

from . import __version__
from .config import Config, ConfigValidationError, load_config
from .core import (
    DetectorSet,
    MovementTriggerClassifier,
    RecordingOrchestrator,
    SensorRegistry,
)
from .processor import EventIngestor, TriggerHandler
from .processor.notifiers import create_notifiers

logger = logging.getLogger(__name__)

# Module-level shutdown signal for SIGTERM/SIGINT handling
_shutdown_signal = ThreadEvent()

LOG_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
}


def _handle_shutdown_signal(signum, _frame):
    """Handle SIGTERM/SIGINT: stop reading events after the current message."""
    signal_name = "SIGTERM" if signum == signal.SIGTERM else "SIGINT"
    # Note: print is safer than logger in signal handlers
    print(f"\nReceived {signal_name}, initiating graceful shutdown...")
    _shutdown_signal.set()
    if signum == signal.SIGINT:
        raise KeyboardInterrupt


def _setup_signal_handlers():
    """Register signal handlers for graceful shutdown."""
    signal.signal(signal.SIGTERM, _handle_shutdown_signal)
    signal.signal(signal.SIGINT, _handle_shutdown_signal)


def parse_log_level(name: str | None) -> int:
    """Map a level name to a logging level. Unknown names fall back to INFO."""
    return LOG_LEVELS.get((name or "").strip().lower(), logging.INFO)


def setup_logging(level: str | None = "info", quiet: bool = False) -> None:
    """
    Setup logging configuration.

    Args:
        level: error, warn, info, debug or trace
        quiet: If True, only show warnings and errors
    """
    log_level = logging.WARNING if quiet else parse_log_level(level)

    # Custom formatter with shorter module names
    class ShortNameFormatter(logging.Formatter):
        def format(self, record):
            record.name = record.name.replace("loss_prevention.", "lp.")
            return super().format(record)

    handler = logging.StreamHandler()
    handler.setFormatter(
        ShortNameFormatter(
            fmt="%(asctime)s %(name)s %(levelname)s %(message)s", datefmt="%H:%M:%S"
        )
    )
    logging.root.handlers = [handler]
    logging.root.setLevel(log_level)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Loss Prevention Recorder - Record video when tagged items leave the store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m loss_prevention < events.ndjson       # Consume events from stdin
  python -m loss_prevention --events replay.ndjson
  python -m loss_prevention --validate            # Check config validity
  python -m loss_prevention --sanity-check        # Record a few test frames

Environment Variables:
  VIDEO_DEVICE - Override camera device from config
  LOG_LEVEL    - Override logging level from config
        """,
    )

    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to config file (default: ./config.yaml, then ~/.config/loss-prevention/config.yaml)",
    )

    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Quiet mode - only show warnings and errors",
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration and show derived settings",
    )

    parser.add_argument(
        "--sanity-check",
        action="store_true",
        help="Record a few frames and exit",
    )

    parser.add_argument(
        "--events",
        metavar="EVENTS_FILE",
        help="Read newline-delimited JSON messages from a file instead of stdin",
    )

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    return parser.parse_args(argv)


def print_summary(config: Config, detector_set: DetectorSet) -> None:
    """Print the derived settings."""
    camera = config.camera
    recording = config.recording
    sku, epc = config.filters.sku, config.filters.epc

    print("\n" + "=" * 70)
    print(f"LOSS PREVENTION RECORDER v{__version__}")
    print("=" * 70)
    print(
        f"\nCamera: {camera.device} {camera.width}x{camera.height}@{camera.fps:g} "
        f"(fourcc: {camera.capture_fourcc or 'default'}, buffer: {camera.buffer_size})"
    )
    print(
        f"Recording: {recording.duration_seconds:g}s to {recording.output_root} "
        f"({recording.codec}, {recording.extension})"
    )
    print(
        f"Detectors: {', '.join(detector_set.names) or 'none'} "
        f"(scale 1/{detector_set.scale:g}, save: {detector_set.save_detections})"
    )
    print(f"Filters: sku={sku!r} epc={epc!r}")
    print(f"Sensors: {len(config.sensors)} configured")
    notifiers = config.notifications
    state = "enabled" if notifiers.enabled else "disabled"
    print(f"Notifications: {state} ({len(notifiers.notifiers)} notifier(s))")
    print("=" * 70 + "\n")


def build_orchestrator(config: Config) -> RecordingOrchestrator:
    detector_set = DetectorSet.from_config(config.detection)
    return RecordingOrchestrator(config.camera, config.recording, detector_set)


def build_ingestor(config: Config, orchestrator: RecordingOrchestrator) -> EventIngestor:
    """Wire registry, classifier, trigger handler and notifiers together."""
    registry = SensorRegistry.from_config(s.model_dump() for s in config.sensors)

    notifiers = {}
    if config.notifications.enabled:
        notifiers = create_notifiers(config.notifications.notifiers)

    handler = TriggerHandler(config, orchestrator, notifiers)
    sku_filter, epc_filter = config.filters.compiled()
    classifier = MovementTriggerClassifier(registry, sku_filter, epc_filter, handler.fire)
    return EventIngestor(registry, classifier)


def run_validate(config_path: str | None) -> int:
    """Run validation mode."""
    try:
        config = load_config(config_path)
    except ConfigValidationError as e:
        print(f"\n{e}")
        for error in e.errors:
            print(f"  - {error}")
        return 1

    print_summary(config, DetectorSet.from_config(config.detection))
    print("Configuration valid")
    return 0


def run_sanity_check(orchestrator: RecordingOrchestrator) -> bool:
    result = orchestrator.sanity_check()
    if result.error is not None:
        logger.error(f"Sanity check failed: {result.error}")
        return False
    return result.recorded


def consume_events(ingestor: EventIngestor, stream: TextIO) -> None:
    def lines():
        for line in stream:
            if _shutdown_signal.is_set():
                return
            yield line

    try:
        ingestor.run(lines())
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping event consumption")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging("info", args.quiet)

    if args.validate:
        return run_validate(args.config)

    try:
        config = load_config(args.config)
    except ConfigValidationError as e:
        logger.error(str(e))
        for error in e.errors:
            logger.error(f"  - {error}")
        return 1

    setup_logging(config.logging.level, args.quiet)
    _setup_signal_handlers()

    orchestrator = build_orchestrator(config)

    if args.sanity_check:
        return 0 if run_sanity_check(orchestrator) else 1

    if config.recording.sanity_check_on_startup and not run_sanity_check(orchestrator):
        logger.warning("Startup sanity check did not record; continuing anyway")

    print_summary(config, orchestrator.detector_set)
    ingestor = build_ingestor(config, orchestrator)

    if args.events:
        try:
            with open(args.events, encoding="utf-8") as f:
                consume_events(ingestor, f)
        except OSError as e:
            logger.error(f"Unable to read events file {args.events}: {e}")
            return 1
    else:
        logger.info("Reading events from stdin")
        consume_events(ingestor, sys.stdin)

    logger.info("Shutdown complete")
    return 0
