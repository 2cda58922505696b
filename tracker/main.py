"""Main entry point for the job-tracker ingestion service."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import signal
import sys
import threading
import time
from pathlib import Path
from typing import Optional, Tuple

from tracker.api.server import create_app
from tracker.config.environment import EnvironmentConfig
from tracker.config.exceptions import ConfigurationError
from tracker.config.loader import load_config
from tracker.config.models import AppConfig
from tracker.extraction.exceptions import ExtractionError
from tracker.identity.exceptions import IdentityRequiredError
from tracker.identity.resolver import IdentityResolver
from tracker.logging import get_logger
from tracker.logging.config import configure_logging
from tracker.persistence.database import close_database, init_database
from tracker.pipeline import IngestionPipeline
from tracker.recording.store import SqlApplicationStore
from tracker.scheduler import SchedulerService

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and settle the effective log level.

    Log level priority: CLI > environment > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif env_config.log_level:
        pass
    elif app_config.logging and app_config.logging.level:
        env_config.log_level = app_config.logging.level
    else:
        env_config.log_level = "INFO"

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Job tracker ingestion - scrape job listings and record them as applications"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml, then config/config.yaml)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--manual-run",
        action="store_true",
        help="Run a single ingestion for the batch actor and exit",
    )
    mode.add_argument(
        "--serve",
        action="store_true",
        help="Serve the HTTP API (also schedules runs when scan_interval is set)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    return parser


def run_manual(pipeline: IngestionPipeline, resolver: IdentityResolver) -> int:
    """Run once for the batch actor; non-zero exit when extraction failed."""
    logger.info("Executing manual ingestion", extra={"event": "service.manual_run.starting"})

    try:
        actor = resolver.batch_actor()
    except IdentityRequiredError as e:
        logger.error(
            f"Manual ingestion refused: {e}",
            extra={"event": "service.manual_run.refused"},
        )
        return 1

    try:
        result = pipeline.run_once(actor)
    except ExtractionError as e:
        logger.error(
            f"Manual ingestion failed: {e}",
            extra={"event": "service.manual_run.failed", "error_type": type(e).__name__},
        )
        return 1

    extraction = result.extraction
    logger.info(
        f"Manual ingestion completed: "
        f"{len(result.listings)} scraped, "
        f"{result.successful_inserts}/{result.attempted_inserts} recorded",
        extra={
            "event": "service.manual_run.completed",
            "duration_seconds": result.duration_seconds,
            "pages_scraped": extraction.pages_scraped,
            "stop_reason": extraction.stop_reason.value,
        },
    )
    return 1 if extraction.is_partial else 0


def build_scheduler(
    app_config: AppConfig,
    pipeline: IngestionPipeline,
    resolver: IdentityResolver,
    shutdown_event: Optional[threading.Event] = None,
) -> SchedulerService:
    """Schedule runs for the batch actor.

    Raises:
        IdentityRequiredError: If no batch account is provisioned under ``require``
    """
    actor = resolver.batch_actor()
    return SchedulerService(
        run_callable=lambda: pipeline.run_once(actor),
        interval_seconds=app_config.scan_interval_seconds,
        shutdown_event=shutdown_event,
    )


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)

        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        logger.info(
            "Ingestion service starting",
            extra={
                "event": "service.starting",
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
                "manual_run": args.manual_run,
                "serve": args.serve,
            },
        )

        init_database(env_config.database_url)

        logger.info(
            "Configuration loaded",
            extra={
                "event": "config.loaded",
                "source": app_config.source.name,
                "max_pages": app_config.extraction.max_pages,
                "identity_policy": app_config.identity.policy,
                "scan_interval_seconds": app_config.scan_interval_seconds,
                "log_format": app_config.logging.format,
            },
        )

        store = SqlApplicationStore()
        pipeline = IngestionPipeline(app_config, store)
        resolver = IdentityResolver.from_config(app_config.identity, env_config)

        if args.manual_run:
            try:
                return run_manual(pipeline, resolver)
            finally:
                close_database()
                logger.info(
                    "Ingestion service stopped",
                    extra={
                        "event": "service.stopping",
                        "uptime_seconds": round(time.time() - start_time, 2),
                    },
                )

        if args.serve:
            scheduler_service = None
            if app_config.scan_interval_seconds:
                scheduler_service = build_scheduler(app_config, pipeline, resolver)
                scheduler_service.start()

            app = create_app(pipeline, resolver, store, app_config.api)
            logger.info(
                f"Serving HTTP API on {app_config.api.host}:{app_config.api.port}",
                extra={
                    "event": "service.api.started",
                    "host": app_config.api.host,
                    "port": app_config.api.port,
                },
            )
            try:
                app.run(host=app_config.api.host, port=app_config.api.port, threaded=True)
            finally:
                if scheduler_service:
                    scheduler_service.shutdown(wait=False)
                close_database()
            return 0

        if not app_config.scan_interval_seconds:
            raise ConfigurationError(
                "Daemon mode requires scan_interval",
                suggestions=[
                    "Set scan_interval in config.yaml (e.g. 6h or PT6H)",
                    "Or use --manual-run / --serve",
                ],
            )

        shutdown_event = threading.Event()
        scheduler_service = build_scheduler(app_config, pipeline, resolver, shutdown_event)

        def signal_handler(signum, frame):
            logger.info(
                f"Received signal {signum}, shutting down",
                extra={"event": "service.signal_received", "signal": signum},
            )
            scheduler_service.shutdown(wait=False)
            close_database()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        scheduler_service.start()
        logger.info(
            "Scheduler started. Press Ctrl+C to stop",
            extra={"event": "service.daemon_mode.started"},
        )

        try:
            shutdown_event.wait()
        except KeyboardInterrupt:
            logger.info(
                "Keyboard interrupt received, shutting down",
                extra={"event": "service.keyboard_interrupt"},
            )
            scheduler_service.shutdown(wait=False)
            close_database()

        logger.info(
            "Ingestion service stopped",
            extra={
                "event": "service.stopping",
                "uptime_seconds": round(time.time() - start_time, 2),
            },
        )
        return 0

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return 1
    except IdentityRequiredError as e:
        print(f"Identity Error: {e}", file=sys.stderr)
        close_database()
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error during startup",
            extra={
                "event": "service.startup.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
