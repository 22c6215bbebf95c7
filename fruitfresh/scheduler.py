"""Scheduled snack reminders."""

from __future__ import annotations

import logging

from .notifier import DesktopNotifier
from .suggestion import REMINDER_TITLE, daily_suggestion, reminder_body

logger = logging.getLogger(__name__)


def send_reminder(postal_code: str = "", notifier: DesktopNotifier | None = None) -> str:
    """Send one reminder notification and return its body text."""
    notifier = notifier or DesktopNotifier()
    body = reminder_body(daily_suggestion(postal_code))
    notifier.notify(REMINDER_TITLE, body)
    return body


class ReminderScheduler:
    """Fires reminder notifications on a cron schedule.

    Uses APScheduler for cron-based scheduling.
    """

    def __init__(self, context, notifier: DesktopNotifier | None = None) -> None:
        """Initialize scheduler with an AppContext.

        Args:
            context: AppContext instance.
            notifier: Notification sink; defaults to DesktopNotifier.

        Raises:
            ImportError: If apscheduler is not installed.
        """
        try:
            from apscheduler.schedulers.asyncio import AsyncIOScheduler
            from apscheduler.triggers.cron import CronTrigger
        except ImportError:
            raise ImportError(
                "apscheduler is required: pip install 'fruitfresh[scheduler]'"
            )

        self._context = context
        self._notifier = notifier or DesktopNotifier()
        self._scheduler = AsyncIOScheduler()
        self._CronTrigger = CronTrigger
        self._running = False

    def setup_jobs(self) -> None:
        """Register the reminder job if reminders are enabled."""
        reminder = self._context.config.reminder
        if not reminder.enabled:
            logger.info("Reminders disabled; no jobs registered")
            return

        trigger = self._parse_cron(reminder.schedule)
        self._scheduler.add_job(
            self._job_remind,
            trigger=trigger,
            id="fruit_reminder",
            name="Fruit snack reminder",
            replace_existing=True,
        )
        logger.info("Reminder job registered: %s", reminder.schedule)

    def start(self) -> None:
        """Start the scheduler."""
        self.setup_jobs()
        self._scheduler.start()
        self._running = True
        logger.info("Scheduler started")

    def stop(self) -> None:
        """Stop the scheduler."""
        if self._running:
            self._scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Scheduler stopped")

    def get_jobs(self) -> list[dict]:
        """Return info about scheduled jobs."""
        jobs = []
        for job in self._scheduler.get_jobs():
            next_run = getattr(job, "next_run_time", None)
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run": str(next_run) if next_run else None,
            })
        return jobs

    def _parse_cron(self, expr: str):
        """Parse a cron expression into a CronTrigger."""
        parts = expr.split()
        if len(parts) == 5:
            return self._CronTrigger(
                minute=parts[0],
                hour=parts[1],
                day=parts[2],
                month=parts[3],
                day_of_week=parts[4],
            )
        raise ValueError(f"Invalid cron expression: {expr}")

    async def _job_remind(self) -> None:
        logger.info("Sending scheduled reminder")
        try:
            send_reminder(self._context.postal_code, self._notifier)
        except RuntimeError:
            logger.exception("Reminder notification failed")
