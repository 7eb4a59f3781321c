# tests/test_result_service.py
from datetime import timedelta

import pytest

from ats_pickem.models import BOWL_SCOPE, Game
from ats_pickem.services.result_matcher import MatchedResult, MatchResult
from ats_pickem.services.result_service import GameResultInput, ResultService

YEAR = 2025


def test_enter_result_scores_the_spread(make_game, past):
    game = make_game("Alabama", "Auburn", -7.5, past)

    updated = ResultService().enter_result(game.id, 24, 17, "admin@example.com")

    assert updated.spread_winner_name == "Auburn"
    assert updated.is_push is False
    assert updated.has_result is True
    assert updated.resolved_by == "admin@example.com"
    assert updated.resolved_at is not None


def test_enter_result_push(make_game, past):
    game = make_game("Ohio State", "Michigan", -7, past)

    updated = ResultService().enter_result(game.id, 27, 20, "admin")

    assert updated.spread_winner_name is None
    assert updated.is_push is True
    assert updated.has_result is True


def test_scores_without_outcome_are_not_a_result(make_game, past):
    game = make_game("Alabama", "Auburn", -7.5, past)
    game.favorite_score = 10
    game.underdog_score = 3

    assert game.has_result is False


def test_reentry_overwrites_result(make_game, past):
    game = make_game("Georgia", "Florida", -3.5, past)
    service = ResultService()

    service.enter_result(game.id, 28, 24, "admin")
    updated = service.enter_result(game.id, 20, 24, "other-admin")

    assert updated.spread_winner_name == "Florida"
    assert (updated.favorite_score, updated.underdog_score) == (20, 24)
    assert updated.resolved_by == "other-admin"


def test_negative_score_is_rejected(make_game, past, session):
    game = make_game("Alabama", "Auburn", -7.5, past)

    with pytest.raises(ValueError, match="negative"):
        ResultService().enter_result(game.id, -1, 10, "admin")

    assert session.get(Game, game.id).has_result is False


def test_missing_game_returns_none(app):
    assert ResultService().enter_result(9999, 10, 7, "admin") is None


def test_bowl_result_sets_outright_winner(make_bowl_game, past):
    game = make_bowl_game("Ohio State", "Oregon", -2.5, past)

    updated = ResultService().enter_result(game.id, 31, 30, "admin", scope=BOWL_SCOPE)

    assert updated.spread_winner_name == "Oregon"
    assert updated.outright_winner_name == "Ohio State"


def test_bulk_entry_reports_partial_failures(make_game, past, session):
    g1 = make_game("Alabama", "Auburn", -7.5, past)
    g2 = make_game("Georgia", "Florida", -3, past)
    other_week = make_game("Texas", "Rice", -28.5, past, week=2)

    result = ResultService().bulk_enter_results(
        YEAR,
        1,
        [
            GameResultInput(g1.id, 35, 10),
            GameResultInput(g2.id, -3, 10),
            GameResultInput(other_week.id, 42, 7),
            GameResultInput(9999, 7, 0),
        ],
        "admin",
    )

    assert result.entered == 1
    assert result.success is False
    reasons = {f.item_ref: f.reason for f in result.failed}
    assert reasons == {
        g2.id: "Scores cannot be negative",
        other_week.id: "Game not found or not for this week",
        9999: "Game not found or not for this week",
    }
    assert session.get(Game, g1.id).spread_winner_name == "Alabama"
    assert session.get(Game, other_week.id).has_result is False


def test_bulk_entry_for_bowls(make_bowl_game, past):
    game = make_bowl_game("Georgia", "Notre Dame", -1.5, past)

    result = ResultService().bulk_enter_results(
        YEAR, BOWL_SCOPE, [GameResultInput(game.id, 10, 23)], "admin"
    )

    assert result.to_dict() == {"entered": 1, "failed": []}
    assert game.outright_winner_name == "Notre Dame"


def test_apply_matches(make_game, past):
    game = make_game("Alabama", "Auburn", -7.5, past)
    matches = MatchResult(matched=[MatchedResult(game.id, 21, 20)])

    result = ResultService().apply_matches(YEAR, 1, matches, "results-sync")

    assert result.entered == 1
    assert game.spread_winner_name == "Auburn"
    assert game.resolved_by == "results-sync"


def test_unresolved_locked_weeks(make_game, past, future):
    make_game("Alabama", "Auburn", -7.5, past, week=1)
    resolved = make_game("Georgia", "Florida", -3, past, week=2)
    make_game("Texas", "Rice", -28.5, future, week=3)
    service = ResultService()
    service.enter_result(resolved.id, 10, 3, "admin")

    assert service.unresolved_locked_weeks(YEAR) == [1]
    assert service.unresolved_locked_weeks(YEAR, now=past + timedelta(days=10)) == [1, 3]


def test_unresolved_locked_bowls(make_bowl_game, past, future):
    game = make_bowl_game("Ohio State", "Oregon", -2.5, past)
    make_bowl_game("Georgia", "Notre Dame", -1.5, future)
    service = ResultService()

    assert service.has_unresolved_locked_bowls(YEAR) is True

    service.enter_result(game.id, 28, 14, "admin", scope=BOWL_SCOPE)
    assert service.has_unresolved_locked_bowls(YEAR) is False


def test_get_results_lists_whole_week(make_game, past, future):
    make_game("Alabama", "Auburn", -7.5, past)
    make_game("Texas", "Rice", -28.5, future)

    assert len(ResultService().get_results(YEAR, 1)) == 2
