"""APScheduler setup for the dashboard's maintenance jobs"""

from typing import Callable, List, Optional

from apscheduler.executors.asyncio import AsyncIOExecutor
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from botpanel.config import Settings
from botpanel.jobs.keep_alive import keep_alive_job
from botpanel.jobs.stats_refresh import stats_refresh_job
from botpanel.services.chat_client import ChatClient
from botpanel.services.stats_service import StatsService
from botpanel.utils.logger import get_logger

logger = get_logger(__name__)

KEEP_ALIVE_JOB = "keep_alive"
STATS_REFRESH_JOB = "stats_refresh"


class SchedulerService:
    """
    Runs the keep-alive ping and the statistics refresh on the event loop.

    Jobs are held in memory and are re-registered on every start, the same as
    the rest of the dashboard state.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.running = False

    def initialize(self):
        self.scheduler = AsyncIOScheduler(
            jobstores={"default": MemoryJobStore()},
            executors={"default": AsyncIOExecutor()},
            job_defaults={
                "coalesce": True,
                "max_instances": 1,
                "misfire_grace_time": 300,
            },
            timezone="UTC",
        )
        logger.debug("Scheduler initialized")

    def schedule_maintenance(
        self,
        stats_service: StatsService,
        get_chat_client: Callable[[], Optional[ChatClient]],
    ) -> List[str]:
        """Register the jobs enabled in settings; returns their ids"""
        if self.settings.keep_alive_enabled:
            self.add_interval_job(
                keep_alive_job,
                minutes=self.settings.keep_alive_interval_minutes,
                job_id=KEEP_ALIVE_JOB,
                kwargs={
                    "url": self.settings.keep_alive_url,
                    "timeout": self.settings.keep_alive_timeout,
                    "get_chat_client": get_chat_client,
                },
            )

        if self.settings.stats_refresh_enabled:
            self.add_interval_job(
                stats_refresh_job,
                minutes=self.settings.stats_refresh_interval_minutes,
                job_id=STATS_REFRESH_JOB,
                kwargs={"stats_service": stats_service, "get_chat_client": get_chat_client},
            )

        return self.job_ids()

    def add_interval_job(self, func, minutes: int, job_id: str, **kwargs):
        if not self.scheduler:
            raise RuntimeError("Scheduler not initialized. Call initialize() first.")

        self.scheduler.add_job(
            func,
            trigger=IntervalTrigger(minutes=minutes),
            id=job_id,
            replace_existing=True,
            **kwargs,
        )
        logger.info(f"Job scheduled: {job_id} every {minutes} min")

    def remove_job(self, job_id: str):
        if not self.scheduler:
            raise RuntimeError("Scheduler not initialized. Call initialize() first.")

        try:
            self.scheduler.remove_job(job_id)
            logger.info(f"Job removed: {job_id}")
        except Exception as e:
            logger.error(f"Failed to remove job {job_id}: {e}")

    def job_ids(self) -> List[str]:
        if not self.scheduler:
            return []
        return [job.id for job in self.scheduler.get_jobs()]

    def start(self):
        if not self.scheduler:
            raise RuntimeError("Scheduler not initialized. Call initialize() first.")

        self.scheduler.start()
        self.running = True
        logger.info(f"Scheduler started with jobs: {', '.join(self.job_ids()) or 'none'}")

    def stop(self):
        """Shut down without waiting for running jobs"""
        if not (self.scheduler and self.running):
            return

        try:
            self.scheduler.shutdown(wait=False)
        except Exception as e:
            logger.error(f"Failed to stop scheduler: {e}")
        finally:
            self.running = False
            logger.info("Scheduler stopped")
