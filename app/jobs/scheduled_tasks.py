import threading
import time
from typing import Optional

import schedule

from infrastructure.configuration import TaskSettings
from infrastructure.logging import get_module_logger
from infrastructure.tasks import TaskMaintenance

logger = get_module_logger()

HOUSEKEEPING_TAG = "housekeeping"


def safe_run(job):
    def wrapper(*args, **kwargs):
        try:
            return job(*args, **kwargs)
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "safe_run_error",
                error=str(e),
                function=job.__name__,
                module=job.__module__,
            )
            return None

    return wrapper


def init(
    maintenance: TaskMaintenance,
    task_settings: TaskSettings,
    scheduler: Optional[schedule.Scheduler] = None,
) -> schedule.Scheduler:
    """Register the housekeeping jobs. Re-running replaces earlier registrations."""
    scheduler = scheduler or schedule.default_scheduler
    scheduler.clear(HOUSEKEEPING_TAG)

    scheduler.every(5).minutes.do(safe_run(scheduler_heartbeat)).tag(HOUSEKEEPING_TAG)
    scheduler.every(task_settings.cleanup_interval_minutes).minutes.do(
        safe_run(purge_expired_tasks), maintenance=maintenance
    ).tag(HOUSEKEEPING_TAG)
    scheduler.every(task_settings.stuck_timeout_minutes).minutes.do(
        safe_run(fail_stuck_tasks), maintenance=maintenance
    ).tag(HOUSEKEEPING_TAG)

    logger.info(
        "scheduled_tasks_initialized",
        cleanup_interval_minutes=task_settings.cleanup_interval_minutes,
        stuck_timeout_minutes=task_settings.stuck_timeout_minutes,
    )
    return scheduler


def scheduler_heartbeat():
    logger.info("scheduler_heartbeat", time=time.ctime())


def purge_expired_tasks(maintenance: TaskMaintenance) -> int:
    return maintenance.purge_expired()


def fail_stuck_tasks(maintenance: TaskMaintenance) -> int:
    return maintenance.fail_stuck_tasks()


def run_continuously(
    interval=1, scheduler: Optional[schedule.Scheduler] = None
) -> threading.Event:
    """Run pending housekeeping jobs every ``interval`` seconds on a daemon thread.

    Jobs missed while the thread was busy run once, not once per missed slot.
    Set the returned event to stop the thread.
    """
    scheduler = scheduler or schedule.default_scheduler
    cease_continuous_run = threading.Event()

    def run():
        while not cease_continuous_run.is_set():
            scheduler.run_pending()
            cease_continuous_run.wait(interval)

    continuous_thread = threading.Thread(
        target=run, daemon=True, name="housekeeping-scheduler"
    )
    continuous_thread.start()
    return cease_continuous_run
