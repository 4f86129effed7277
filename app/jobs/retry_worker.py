"""Standalone retry worker.

Runs the retry scheduler outside the web process:

    python -m jobs.retry_worker

SIGTERM and SIGINT stop polling and let the in-flight pass finish.
"""

import signal
import threading

from dotenv import load_dotenv

from infrastructure.logging import configure_logging, get_module_logger
from infrastructure.services import (
    get_retry_scheduler,
    get_settings,
    get_translation_mirror,
)
from modules.webhooks import register_default_handlers

logger = get_module_logger()


def run(stop_requested: threading.Event, poll_timeout: float = 1.0) -> None:
    """Run the retry scheduler until ``stop_requested`` is set."""
    scheduler = get_retry_scheduler()
    register_default_handlers(scheduler, get_translation_mirror())
    scheduler.start()
    logger.info("retry_worker_started")
    try:
        while not stop_requested.wait(poll_timeout):
            pass
    finally:
        scheduler.stop()
        logger.info("retry_worker_stopped")


def main() -> None:
    load_dotenv()
    settings = get_settings()
    configure_logging(log_level=settings.LOG_LEVEL, is_production=settings.is_production)

    stop_requested = threading.Event()

    def _handle_signal(signum, _frame):
        logger.info("retry_worker_signal_received", signal=signal.Signals(signum).name)
        stop_requested.set()

    signal.signal(signal.SIGTERM, _handle_signal)
    signal.signal(signal.SIGINT, _handle_signal)
    run(stop_requested)


if __name__ == "__main__":
    main()
