# tests/test_pick_service.py
from ats_pickem.models import Pick
from ats_pickem.services.pick_service import (
    DUPLICATE_GAME_ERROR,
    PickService,
    PickSubmission,
)

YEAR = 2025


def test_accepts_picks_for_open_games(make_user, make_game, future):
    user = make_user()
    game1 = make_game("Alabama", "Auburn", -7.5, future)
    game2 = make_game("Georgia", "Florida", -3, future)

    result = PickService().submit(
        user.id,
        YEAR,
        1,
        [PickSubmission(game1.id, "Auburn"), PickSubmission(game2.id, "Georgia")],
    )

    assert result.success is True
    assert result.accepted == 2
    assert result.rejected == []
    assert {p.selected_team for p in Pick.query.filter_by(user_id=user.id)} == {
        "Auburn",
        "Georgia",
    }


def test_each_item_is_judged_on_its_own(make_user, make_game, future, past):
    user = make_user()
    open_game = make_game("Alabama", "Auburn", -7.5, future)
    started = make_game("Georgia", "Florida", -3, past)
    other = make_game("Texas", "Rice", -28.5, future)

    result = PickService().submit(
        user.id,
        YEAR,
        1,
        [
            PickSubmission(open_game.id, "Alabama"),
            PickSubmission(started.id, "Florida"),
            PickSubmission(other.id, "Oklahoma"),
            PickSubmission(9999, "Alabama"),
        ],
    )

    assert result.success is True
    assert result.accepted == 1
    reasons = {r.item_ref: r.reason for r in result.rejected}
    assert reasons[started.id].startswith("Game is locked")
    assert reasons[other.id].startswith("Invalid team selection")
    assert reasons[9999] == "Game not found"
    assert Pick.query.count() == 1


def test_game_from_another_week_is_not_found(make_user, make_game, future):
    user = make_user()
    week2_game = make_game("Alabama", "Auburn", -7.5, future, week=2)

    result = PickService().submit(user.id, YEAR, 1, [PickSubmission(week2_game.id, "Alabama")])

    assert result.accepted == 0
    assert result.rejected[0].reason == "Game not found"


def test_team_selection_is_exact(make_user, make_game, future):
    user = make_user()
    game = make_game("Alabama", "Auburn", -7.5, future)

    result = PickService().submit(user.id, YEAR, 1, [PickSubmission(game.id, "alabama")])

    assert result.accepted == 0
    assert result.rejected[0].reason == (
        "Invalid team selection. Must be 'Alabama' or 'Auburn'"
    )


def test_game_named_twice_keeps_first_item(make_user, make_game, future):
    user = make_user()
    game = make_game("Alabama", "Auburn", -7.5, future)

    result = PickService().submit(
        user.id,
        YEAR,
        1,
        [PickSubmission(game.id, "Auburn"), PickSubmission(game.id, "Alabama")],
    )

    assert result.accepted == 1
    assert result.rejected[0].reason == DUPLICATE_GAME_ERROR
    assert Pick.query.one().selected_team == "Auburn"


def test_resubmission_replaces_pick(make_user, make_game, future):
    user = make_user()
    game = make_game("Alabama", "Auburn", -7.5, future)
    service = PickService()

    service.submit(user.id, YEAR, 1, [PickSubmission(game.id, "Alabama")])
    first = Pick.query.one()
    assert first.updated_at is None

    result = service.submit(user.id, YEAR, 1, [PickSubmission(game.id, "Auburn")])

    assert result.accepted == 1
    pick = Pick.query.one()
    assert pick.selected_team == "Auburn"
    assert pick.updated_at is not None


def test_locked_game_keeps_previous_pick(make_user, make_game, future, session):
    user = make_user()
    game = make_game("Alabama", "Auburn", -7.5, future)
    service = PickService()
    service.submit(user.id, YEAR, 1, [PickSubmission(game.id, "Alabama")])

    # Kickoff moves into the past
    game.kickoff_time = game.kickoff_time.replace(year=2000)
    session.commit()

    result = service.submit(user.id, YEAR, 1, [PickSubmission(game.id, "Auburn")])

    assert result.accepted == 0
    assert Pick.query.one().selected_team == "Alabama"


def test_empty_batch(make_user):
    user = make_user()

    result = PickService().submit(user.id, YEAR, 1, [])

    assert result.success is True
    assert result.accepted == 0
    assert result.rejected == []


def test_users_picks_are_separate(make_user, make_game, future):
    alice = make_user("Alice")
    bob = make_user("Bob")
    game = make_game("Alabama", "Auburn", -7.5, future)
    service = PickService()

    service.submit(alice.id, YEAR, 1, [PickSubmission(game.id, "Alabama")])
    service.submit(bob.id, YEAR, 1, [PickSubmission(game.id, "Auburn")])

    assert [p.selected_team for p in service.get_user_picks(alice.id, YEAR, 1)] == ["Alabama"]
    assert [p.selected_team for p in service.get_user_picks(bob.id, YEAR, 1)] == ["Auburn"]


def test_season_picks_span_weeks(make_user, make_game, future):
    user = make_user()
    week1 = make_game("Alabama", "Auburn", -7.5, future, week=1)
    week2 = make_game("Georgia", "Florida", -3, future, week=2)
    service = PickService()

    service.submit(user.id, YEAR, 2, [PickSubmission(week2.id, "Florida")])
    service.submit(user.id, YEAR, 1, [PickSubmission(week1.id, "Alabama")])

    assert [p.week for p in service.get_user_season_picks(user.id, YEAR)] == [1, 2]


def test_submission_result_to_dict(make_user):
    user = make_user()

    result = PickService().submit(user.id, YEAR, 1, [PickSubmission(42, "Alabama")])

    assert result.to_dict() == {
        "success": True,
        "accepted": 0,
        "rejected": [{"game_id": 42, "reason": "Game not found"}],
        "error": None,
    }
