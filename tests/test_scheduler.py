# tests/test_scheduler.py
import pytest

from ats_pickem.models import BOWL_SCOPE
from ats_pickem.providers.base import ExternalGameResult
from ats_pickem.services.scheduler_service import SchedulerService, sync_results_for_scope

YEAR = 2025


class FakeProvider:
    def __init__(self, weekly=None, bowls=None, error=None):
        self.weekly = weekly or {}
        self.bowls = bowls or []
        self.error = error
        self.requested = []

    def get_weekly_results(self, year, week):
        self.requested.append(week)
        if self.error:
            raise self.error
        return self.weekly.get(week, [])

    def get_bowl_results(self, year):
        self.requested.append(BOWL_SCOPE)
        return self.bowls


def _final(home, away, home_score, away_score):
    return ExternalGameResult(home, away, home_score, away_score, True)


def _scheduler(app, provider, normalizer):
    service = SchedulerService()
    service.app = app
    service.provider = provider
    service.normalizer = normalizer
    return service


def test_sync_results_for_week(normalizer, make_game, past):
    game = make_game("Florida State", "South Florida", -10.5, past)
    provider = FakeProvider(weekly={1: [_final("USF", "FSU", 10, 35)]})

    match_result, bulk_result = sync_results_for_scope(
        provider, normalizer, YEAR, 1, "results-sync"
    )

    assert bulk_result.entered == 1
    assert match_result.unmatched == []
    assert (game.favorite_score, game.underdog_score) == (35, 10)
    assert game.spread_winner_name == "Florida State"
    assert game.resolved_by == "results-sync"


def test_sync_results_for_bowls(normalizer, make_bowl_game, past):
    game = make_bowl_game("Ohio State", "Miami", -3, past)
    provider = FakeProvider(bowls=[_final("Miami FL", "Ohio St", 24, 21)])

    _, bulk_result = sync_results_for_scope(
        provider, normalizer, YEAR, BOWL_SCOPE, "results-sync"
    )

    assert bulk_result.entered == 1
    assert game.outright_winner_name == "Miami"
    assert provider.requested == [BOWL_SCOPE]


def test_scheduled_sync_only_visits_waiting_scopes(
    app, normalizer, make_game, make_bowl_game, past, future
):
    make_game("Florida State", "South Florida", -10.5, past, week=3)
    make_game("Ohio State", "Miami", -6, future, week=4)
    make_bowl_game("Alabama", "Auburn", -7.5, future)
    provider = FakeProvider(weekly={3: [_final("FSU", "USF", 31, 14)]})
    scheduler = _scheduler(app, provider, normalizer)

    scheduler.force_sync("results")

    assert provider.requested == [3]
    assert scheduler.sync_stats["successful_syncs"] == 1
    assert scheduler.sync_stats["results_entered"] == 1


def test_scheduled_sync_does_nothing_when_all_resolved(app, normalizer, make_game, future):
    make_game("Florida State", "South Florida", -10.5, future)
    provider = FakeProvider()
    scheduler = _scheduler(app, provider, normalizer)

    scheduler.force_sync("results")

    assert provider.requested == []
    assert scheduler.sync_stats["total_syncs"] == 0


def test_scheduled_sync_records_failures(app, normalizer, make_game, past):
    make_game("Florida State", "South Florida", -10.5, past)
    provider = FakeProvider(error=RuntimeError("CFBD unavailable"))
    scheduler = _scheduler(app, provider, normalizer)

    scheduler.force_sync("results")

    assert scheduler.sync_stats["failed_syncs"] == 1
    assert scheduler.sync_stats["last_error"] == "CFBD unavailable"


def test_force_sync_rejects_unknown_type(app):
    with pytest.raises(ValueError):
        SchedulerService().force_sync("standings")


def test_scheduler_needs_api_key(app):
    app.config["CFBD_API_KEY"] = None
    scheduler = SchedulerService(app)

    assert scheduler.is_running is False
    assert scheduler.provider is None
    assert scheduler.get_status()["jobs"] == []
