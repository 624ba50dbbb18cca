"""
ProAce Predictions Background Scheduler Service

Runs the match lock job with APScheduler: upcoming matches whose start time
has passed are moved to ongoing, which closes them for predictions.
"""

import atexit
import logging
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app import db
from app.services.entity_store import EntityStore
from app.services.match_service import MatchService

logger = logging.getLogger(__name__)


class SchedulerService:
    """Manages background scheduling for match locking"""

    def __init__(self, app=None):
        self.scheduler = None
        self.app = app
        self.is_running = False
        self.lock_stats = {
            "last_run": None,
            "total_runs": 0,
            "failed_runs": 0,
            "last_error": None,
            "matches_locked": 0,
        }

        if app:
            self.init_app(app)

    def init_app(self, app):
        """Initialize scheduler with Flask app"""
        self.app = app
        self.scheduler = BackgroundScheduler(daemon=True, timezone="UTC")

        # Register shutdown
        atexit.register(self.shutdown)

        # Start scheduler if enabled
        if app.config.get("SCHEDULER_ENABLED", True):
            self.start()

    def start(self):
        """Start the background scheduler"""
        if self.is_running:
            return

        try:
            self.scheduler.remove_all_jobs()
            self._add_core_jobs()
            self.scheduler.start()
            self.is_running = True

            logger.info("Scheduler started successfully")

        except Exception as e:
            logger.error(f"Failed to start scheduler: {e}")
            raise

    def stop(self):
        """Stop the background scheduler"""
        if not self.is_running:
            return

        try:
            self.scheduler.shutdown(wait=False)
            self.is_running = False
            logger.info("Scheduler stopped")

        except Exception as e:
            logger.error(f"Error stopping scheduler: {e}")

    def shutdown(self):
        """Graceful shutdown"""
        self.stop()

    def _add_core_jobs(self):
        """Add core scheduled jobs"""
        self.scheduler.add_job(
            func=self.run_lock_job,
            trigger=IntervalTrigger(
                seconds=self.app.config.get("MATCH_LOCK_INTERVAL", 60)
            ),
            id="lock_started_matches",
            name="Lock Started Matches",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=30,
        )

        logger.info("Core scheduled jobs added")

    def run_lock_job(self, now=None):
        """Lock started matches and commit; returns the number locked"""
        with self.app.app_context():
            try:
                service = MatchService(EntityStore(db.session))
                locked = service.lock_started_matches(now=now)
                db.session.commit()
                self._update_stats(True, len(locked))
                return len(locked)

            except Exception as e:
                db.session.rollback()
                self._update_stats(False)
                self.lock_stats["last_error"] = str(e)
                logger.error(f"Error in match lock job: {e}", exc_info=True)
                return 0

    def _update_stats(self, success, matches_locked=0):
        """Update lock job statistics"""
        self.lock_stats["last_run"] = datetime.now(timezone.utc)
        self.lock_stats["total_runs"] += 1

        if success:
            self.lock_stats["matches_locked"] += matches_locked
            self.lock_stats["last_error"] = None
        else:
            self.lock_stats["failed_runs"] += 1

    def get_status(self):
        """Get scheduler status information"""
        jobs = []
        if self.scheduler:
            for job in self.scheduler.get_jobs():
                next_run = getattr(job, "next_run_time", None)
                jobs.append(
                    {
                        "id": job.id,
                        "name": job.name,
                        "next_run": next_run.isoformat() if next_run else None,
                        "trigger": str(job.trigger),
                    }
                )

        return {"is_running": self.is_running, "jobs": jobs, "stats": self.lock_stats}


# Global scheduler instance
scheduler_service = SchedulerService()
