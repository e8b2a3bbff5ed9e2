"""APScheduler setup and job registration."""

from __future__ import annotations

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from cad_api.config import settings
from cad_api.jobs.invite_cleanup import invite_code_cleanup

scheduler = AsyncIOScheduler(timezone=settings.timezone)


def register_jobs() -> None:
    """Register all periodic jobs if not already present."""
    if scheduler.get_job("invite_code_cleanup") is None:
        scheduler.add_job(
            invite_code_cleanup,
            CronTrigger(hour=3, minute=0, timezone=settings.timezone),
            id="invite_code_cleanup",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
