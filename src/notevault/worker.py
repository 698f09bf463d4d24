"""Watermark worker entry point."""

import asyncio
import logging
import signal

from notevault import __version__
from notevault.application.use_cases.watermark.process_watermark_job import (
    ProcessWatermarkJobUseCase,
)
from notevault.config import Settings, get_settings
from notevault.context import AppContext
from notevault.interfaces.worker.watermark_worker import WatermarkWorker
from notevault.logging_config import configure_logging

logger = logging.getLogger(__name__)


def build_worker(context: AppContext) -> WatermarkWorker:
    settings = context.settings
    return WatermarkWorker(
        context.job_queue,
        ProcessWatermarkJobUseCase(context.uow_factory, context.object_store, context.watermarker),
        concurrency=settings.worker_concurrency,
        max_attempts=settings.job_max_attempts,
        backoff_base_seconds=settings.job_backoff_base_seconds,
        backoff_max_seconds=settings.job_backoff_max_seconds,
        poll_interval_seconds=settings.worker_poll_interval_seconds,
    )


async def run_worker(settings: Settings) -> None:
    async with AppContext(settings) as context:
        worker = build_worker(context)
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, worker.stop)
        await worker.run()


def main() -> None:
    """CLI entry point - run the watermark worker until SIGINT/SIGTERM."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_json)
    logger.info("NoteVault worker v%s starting", __version__)
    asyncio.run(run_worker(settings))
