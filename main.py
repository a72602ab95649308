#!/usr/bin/env python3
"""
Therapy Slot Bot - Automated therapy appointment booking.

Main entry point for the application.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from src.core.config.settings import Settings, get_settings
from src.core.exceptions import ConfigurationError, ValidationError
from src.core.infra.shutdown import (
    safe_shutdown_cleanup,
    set_shutdown_event,
    setup_signal_handlers,
)
from src.core.logger import setup_structured_logging
from src.models.db_factory import DatabaseFactory
from src.models.schemas import PatientInfo
from src.services.booking.reconciliation_scheduler import ReconciliationScheduler
from src.services.booking.service_context import BookingServiceContext, BookingServiceFactory
from src.utils.helpers import require_booking_href


def load_patient_file(path: str) -> PatientInfo:
    """
    Load patient data from a JSON file.

    Args:
        path: Path to a JSON object with patient fields

    Returns:
        Validated PatientInfo

    Raises:
        ConfigurationError: If the file is missing or not a JSON object
    """
    patient_path = Path(path)
    if not patient_path.is_file():
        raise ConfigurationError(f"Patient file not found: {path}")
    try:
        data = json.loads(patient_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Patient file is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise ConfigurationError("Patient file must contain a JSON object")
    return PatientInfo.model_validate(data)


async def _build_services(settings: Settings) -> BookingServiceContext:
    DatabaseFactory.get_instance(settings.database_url)
    db = await DatabaseFactory.ensure_connected()
    return BookingServiceFactory.create(db, settings)


async def run_process_mode(settings: Settings) -> int:
    """
    Run a single reconciliation pass.

    Returns:
        Exit code (1 if any record failed)
    """
    logger.info("Starting one-shot reconciliation...")
    try:
        services = await _build_services(settings)
        summary = await services.processor.process_pending()
        print(json.dumps(summary.to_dict(), indent=2, default=str))
        return 0 if summary.failed == 0 and not summary.error else 1
    finally:
        await safe_shutdown_cleanup()


async def run_schedule_mode(settings: Settings) -> int:
    """
    Run reconciliation on an interval until SIGINT/SIGTERM.

    Returns:
        Exit code
    """
    logger.info("Starting reconciliation scheduler...")
    shutdown_event = asyncio.Event()
    setup_signal_handlers(shutdown_event)
    try:
        services = await _build_services(settings)
        scheduler = ReconciliationScheduler(
            services.processor,
            interval_seconds=settings.reconciliation_interval_seconds,
            shutdown_event=shutdown_event,
        )
        await scheduler.run()
        return 0
    finally:
        await safe_shutdown_cleanup()
        set_shutdown_event(None)


async def run_submit_mode(settings: Settings, href: str, patient: PatientInfo) -> int:
    """
    Submit a single booking request.

    Returns:
        Exit code (0 when booked)
    """
    logger.info("Submitting booking request...")
    try:
        services = await _build_services(settings)
        result = await services.submitter.submit(patient, href)
        print(json.dumps(result.to_dict(), indent=2, default=str))
        return 0 if result.success else 1
    finally:
        await safe_shutdown_cleanup()


def run_api_mode(settings: Settings, host: Optional[str], port: Optional[int]) -> int:
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "web.app:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_level=settings.log_level.lower(),
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        description="Therapy Slot Bot - Automated therapy appointment booking"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (defaults to LOG_LEVEL)",
    )
    subparsers = parser.add_subparsers(dest="mode", required=True)

    api = subparsers.add_parser("api", help="Serve the HTTP API")
    api.add_argument("--host", default=None)
    api.add_argument("--port", type=int, default=None)

    subparsers.add_parser("process", help="Reconcile unknown appointments once")
    subparsers.add_parser("schedule", help="Reconcile unknown appointments periodically")

    submit = subparsers.add_parser("submit", help="Book a single appointment")
    submit.add_argument("--href", required=True, help="Appointment booking URL")
    submit.add_argument(
        "--patient-file", required=True, help="JSON file with the patient fields"
    )
    return parser


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except Exception as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    setup_structured_logging(args.log_level or settings.log_level, json_format=settings.log_json)

    try:
        if args.mode == "api":
            return run_api_mode(settings, args.host, args.port)
        if args.mode == "process":
            return asyncio.run(run_process_mode(settings))
        if args.mode == "schedule":
            return asyncio.run(run_schedule_mode(settings))
        href = require_booking_href(args.href)
        patient = load_patient_file(args.patient_file)
        return asyncio.run(run_submit_mode(settings, href, patient))
    except (ConfigurationError, ValidationError) as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Stopped by user")
        return 0
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
