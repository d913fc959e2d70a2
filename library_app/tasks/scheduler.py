# library_app/tasks/scheduler.py
from __future__ import annotations

import os

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger


def run_reminder_job(app) -> int | None:
    with app.app_context():
        from library_app.services.reminder_service import ReminderService

        try:
            count = ReminderService.scan_due_tomorrow()
            app.logger.info(f"[scheduler] due reminders processed: {count}")
            return count
        except Exception as ex:
            app.logger.exception(f"[scheduler] reminder job error: {ex}")
            return None


def start_scheduler(app):
    """
    Daily due-reminder sweep (UTC).
    - disabled with SCHEDULER_ENABLED=0 (tests, one-off CLI runs)
    - the debug reloader runs two processes; only the real one schedules
    """
    if not app.config.get("SCHEDULER_ENABLED", True):
        app.logger.info("[scheduler] disabled by config.")
        return None

    if app.debug and os.environ.get("WERKZEUG_RUN_MAIN") != "true":
        app.logger.info("[scheduler] Debug reloader secondary process: scheduler skipped.")
        return None

    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        func=run_reminder_job,
        args=[app],
        trigger=CronTrigger(hour=app.config.get("REMINDER_CRON_HOUR", 0), minute=0, timezone="UTC"),
        id="due_reminder_job",
        replace_existing=True,
        max_instances=1,        # never overlap two sweeps
        coalesce=True,          # missed runs collapse into one
        misfire_grace_time=600
    )

    scheduler.start()
    app.logger.info("[scheduler] Due reminder job started (daily).")

    app.extensions["apscheduler"] = scheduler
    return scheduler
