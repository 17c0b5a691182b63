"""
Background scheduler for the daily login attempt cleanup.

The ledger itself knows nothing about timing; this module owns the cron job
and runs the cleanup inside an app context.
"""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from security.bruteforce import StorageUnavailable, get_ledger

CLEANUP_JOB_ID = "login_attempt_cleanup"


def run_login_attempt_cleanup(app) -> int:
    with app.app_context():
        try:
            deleted = get_ledger().cleanup()
        except StorageUnavailable as exc:
            app.logger.error("Login attempt cleanup failed: %s", exc)
            raise
        app.logger.info("Login attempt cleanup: %d rows deleted", deleted)
        return deleted


def init_scheduler(app):
    """Start the cleanup scheduler once per app. Returns the scheduler."""
    scheduler = app.extensions.get("scheduler")
    if scheduler is not None:
        return scheduler

    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        run_login_attempt_cleanup,
        CronTrigger(hour=app.config.get("LOGIN_ATTEMPT_CLEANUP_HOUR", 3), minute=0, timezone="UTC"),
        args=[app],
        id=CLEANUP_JOB_ID,
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    scheduler.start()
    app.extensions["scheduler"] = scheduler
    app.logger.info("Scheduler started")
    return scheduler
