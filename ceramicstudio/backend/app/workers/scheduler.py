import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from ..config import get_settings
from ..core.calendar_date import CalendarDate
from ..db.session import SessionLocal
from ..services import waitlist_service

logger = logging.getLogger(__name__)


def process_waitlists() -> None:
    settings = get_settings()
    today = CalendarDate.today(settings.timezone)
    now = CalendarDate.local_time(settings.timezone)
    with SessionLocal() as db:
        for course in waitlist_service.courses_with_pending_entries(db):
            outcome = waitlist_service.process_waitlist(
                db, course, today, settings.waitlist_horizon_days, now
            )
            if outcome:
                logger.info(
                    "Waitlist entry processed",
                    extra={
                        "course_id": course.id,
                        "entry_id": outcome.entry.id,
                        "action": outcome.action.value,
                    },
                )


def get_scheduler() -> AsyncIOScheduler:
    settings = get_settings()
    scheduler = AsyncIOScheduler(timezone=settings.timezone)
    scheduler.add_job(
        process_waitlists, "interval", minutes=settings.waitlist_process_interval_min
    )
    return scheduler
