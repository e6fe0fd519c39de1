import os
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from lms.core.capabilities import SchemaCapabilities
from lms.core.config import settings
from lms.core.database import Database
from lms.services.deadline import deadline_service
from lms.services.ministry import ministry_service
from lms.utils.logger import setup_logger

logger = setup_logger(__name__, "scheduler.log")


def refresh_overdue_flags_job(database: Database, capabilities: SchemaCapabilities):
    db = database.session()
    try:
        changed = deadline_service.refresh_overdue_flags(db, capabilities=capabilities)
        db.commit()
        logger.info(f"Overdue refresh complete: {changed} enrollment(s) changed")
    except Exception as e:
        db.rollback()
        logger.error(f"Error refreshing overdue flags: {e}")
    finally:
        db.close()


def refresh_ministry_stats_job(database: Database, capabilities: SchemaCapabilities):
    db = database.session()
    try:
        result = ministry_service.refresh_ministry_course_stats(db, capabilities=capabilities)
        db.commit()
        logger.info(f"Ministry course stats rebuilt: {result.rows_written} row(s)")
    except Exception as e:
        db.rollback()
        logger.error(f"Error rebuilding ministry course stats: {e}")
    finally:
        db.close()


def start_scheduler(database: Database, capabilities: SchemaCapabilities) -> Optional[AsyncIOScheduler]:
    if os.getenv("TESTING") == "true":
        logger.info("Scheduler disabled in test environment")
        return None
    if not settings.SCHEDULER_ENABLED:
        logger.info("Scheduler disabled by configuration")
        return None

    scheduler = AsyncIOScheduler()
    if capabilities.deadlines:
        scheduler.add_job(
            refresh_overdue_flags_job,
            'interval',
            minutes=settings.OVERDUE_REFRESH_INTERVAL_MINUTES,
            args=[database, capabilities],
            id='refresh_overdue_flags',
            name='Refresh Enrollment Overdue Flags',
            replace_existing=True
        )
    if capabilities.ministry_course_stats:
        scheduler.add_job(
            refresh_ministry_stats_job,
            'cron',
            hour=settings.MINISTRY_STATS_REFRESH_HOUR,
            minute=0,
            args=[database, capabilities],
            id='refresh_ministry_course_stats',
            name='Rebuild Ministry Course Stats',
            replace_existing=True
        )
    scheduler.start()
    logger.info(f"Scheduler started with {len(scheduler.get_jobs())} job(s)")
    return scheduler


def stop_scheduler(scheduler: Optional[AsyncIOScheduler]):
    if scheduler is not None and scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler stopped")
