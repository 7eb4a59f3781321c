"""
Automatic results sync scheduler

Runs in the background with APScheduler. The results job looks for weeks
(and the bowl season) with games past kickoff but without a result, pulls
scores from CFBD, matches them to tracked games and enters them. A daily job
reloads the team alias cache so admin edits made elsewhere are picked up.
"""

import atexit
import logging
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from ats_pickem import alias_cache, db
from ats_pickem.models import BOWL_SCOPE
from ats_pickem.providers.cfbd import CollegeFootballDataProvider
from ats_pickem.services.result_matcher import ResultMatcher
from ats_pickem.services.result_service import ResultService
from ats_pickem.services.team_names import TeamNameNormalizer

logger = logging.getLogger(__name__)


def sync_results_for_scope(provider, normalizer, year, scope, entered_by):
    """
    Fetch, match and enter results for one week or the bowl season.

    Returns:
        (MatchResult, BulkResult)
    """
    if scope == BOWL_SCOPE:
        external_results = provider.get_bowl_results(year)
    else:
        external_results = provider.get_weekly_results(year, scope)

    match_result = ResultMatcher(normalizer).match(year, scope, external_results)
    bulk_result = ResultService().apply_matches(year, scope, match_result, entered_by)

    for unmatched in match_result.unmatched:
        logger.debug(
            f"Unmatched result {unmatched.home_team} vs {unmatched.away_team}: {unmatched.reason}"
        )

    return match_result, bulk_result


class SchedulerService:
    """Manages automatic background scheduling for result syncing"""

    def __init__(self, app=None):
        self.scheduler = None
        self.app = app
        self.provider = None
        self.normalizer = None
        self.is_running = False
        self.sync_stats = {
            "last_sync": None,
            "total_syncs": 0,
            "successful_syncs": 0,
            "failed_syncs": 0,
            "last_error": None,
            "results_entered": 0,
        }

        if app:
            self.init_app(app)

    def init_app(self, app):
        """Initialize scheduler with Flask app"""
        self.app = app
        self.scheduler = BackgroundScheduler(daemon=True, timezone="UTC")
        self.normalizer = TeamNameNormalizer(alias_cache)

        if not app.config.get("CFBD_API_KEY"):
            logger.warning("CFBD_API_KEY not set - scheduler will not start")
            return

        self.provider = CollegeFootballDataProvider.from_config(app.config)

        # Register shutdown
        atexit.register(self.shutdown)

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

        self.scheduler.shutdown(wait=False)
        self.is_running = False
        logger.info("Scheduler stopped")

    def shutdown(self):
        """Graceful shutdown"""
        self.stop()

    def _add_core_jobs(self):
        """Add core scheduled jobs"""
        minutes = self.app.config.get("RESULTS_SYNC_MINUTES", 30)
        refresh_hour = self.app.config.get("ALIAS_REFRESH_HOUR", 4)

        self.scheduler.add_job(
            func=self._sync_results,
            trigger=IntervalTrigger(minutes=minutes),
            id="sync_results",
            name="Sync Game Results",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=300,
        )

        self.scheduler.add_job(
            func=self._refresh_aliases,
            trigger=CronTrigger(hour=refresh_hour, minute=0),
            id="refresh_aliases",
            name="Refresh Team Alias Cache",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=3600,
        )

        logger.info("Core scheduled jobs added")

    def _sync_results(self):
        """Enter results for every scope with locked but unresolved games"""
        with self.app.app_context():
            try:
                year = self.app.config["SEASON_YEAR"]
                entered_by = self.app.config.get("SYSTEM_USER_ID", "results-sync")
                service = ResultService()

                scopes = list(service.unresolved_locked_weeks(year))
                if service.has_unresolved_locked_bowls(year):
                    scopes.append(BOWL_SCOPE)

                if not scopes:
                    return  # Nothing is waiting on a result

                entered = 0
                for scope in scopes:
                    match_result, bulk_result = sync_results_for_scope(
                        self.provider, self.normalizer, year, scope, entered_by
                    )
                    entered += bulk_result.entered
                    logger.info(
                        f"Results sync {year} {scope}: {bulk_result.entered} entered, "
                        f"{len(match_result.unmatched)} unmatched, "
                        f"{match_result.already_resolved_count} already resolved"
                    )

                self._update_stats(True, entered)

            except Exception as e:
                db.session.rollback()
                self._update_stats(False)
                self.sync_stats["last_error"] = str(e)
                logger.error(f"Error in results sync: {e}", exc_info=True)

    def _refresh_aliases(self):
        with self.app.app_context():
            try:
                self.normalizer.refresh()
            except Exception as e:
                logger.error(f"Error refreshing team aliases: {e}", exc_info=True)

    def _update_stats(self, success, results_entered=0):
        """Update sync statistics"""
        self.sync_stats["last_sync"] = datetime.now(timezone.utc)
        self.sync_stats["total_syncs"] += 1

        if success:
            self.sync_stats["successful_syncs"] += 1
            self.sync_stats["results_entered"] += results_entered
            self.sync_stats["last_error"] = None
        else:
            self.sync_stats["failed_syncs"] += 1

    def get_status(self):
        """Get scheduler status information"""
        jobs = []
        if self.scheduler:
            for job in self.scheduler.get_jobs():
                next_run = job.next_run_time
                jobs.append(
                    {
                        "id": job.id,
                        "name": job.name,
                        "next_run": next_run.isoformat() if next_run else None,
                        "trigger": str(job.trigger),
                    }
                )

        return {"is_running": self.is_running, "jobs": jobs, "stats": self.sync_stats}

    def force_sync(self, sync_type="results"):
        """Manually trigger a job"""
        if sync_type == "results":
            self._sync_results()
        elif sync_type == "aliases":
            self._refresh_aliases()
        else:
            raise ValueError(f"Unknown sync type: {sync_type}")


# Global scheduler instance
scheduler_service = SchedulerService()
