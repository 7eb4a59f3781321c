# tests/test_bowl_picks.py
from ats_pickem.models import BOWL_SCOPE, BowlPick
from ats_pickem.services.pick_service import (
    DUPLICATE_CONFIDENCE_ERROR,
    DUPLICATE_GAME_ERROR,
    PickService,
    PickSubmission,
)

YEAR = 2025


def _bowl_pick(game, team, confidence, outright=None):
    return PickSubmission(game.id, team, confidence, outright or team)


def _confidences(user_id):
    return {
        p.bowl_game_id: p.confidence_points
        for p in BowlPick.query.filter_by(user_id=user_id)
    }


def test_accepts_distinct_confidence_values(make_user, make_bowl_game, future):
    user = make_user()
    g1 = make_bowl_game("Ohio State", "Oregon", -2.5, future)
    g2 = make_bowl_game("Georgia", "Notre Dame", -1.5, future)

    result = PickService().submit(
        user.id,
        YEAR,
        BOWL_SCOPE,
        [_bowl_pick(g1, "Oregon", 2, "Ohio State"), _bowl_pick(g2, "Georgia", 1)],
    )

    assert result.success is True
    assert result.accepted == 2
    assert _confidences(user.id) == {g1.id: 2, g2.id: 1}


def test_duplicate_confidence_rejects_whole_batch(make_user, make_bowl_game, future):
    user = make_user()
    g1 = make_bowl_game("Ohio State", "Oregon", -2.5, future)
    g2 = make_bowl_game("Georgia", "Notre Dame", -1.5, future)

    result = PickService().submit(
        user.id,
        YEAR,
        BOWL_SCOPE,
        [_bowl_pick(g1, "Oregon", 3), _bowl_pick(g2, "Georgia", 3)],
    )

    assert result.success is False
    assert result.error == DUPLICATE_CONFIDENCE_ERROR
    assert result.accepted == 0
    assert len(result.rejected) == 2
    assert BowlPick.query.count() == 0


def test_duplicate_with_stored_pick_rejects_batch(make_user, make_bowl_game, future):
    user = make_user()
    g1 = make_bowl_game("Ohio State", "Oregon", -2.5, future)
    g2 = make_bowl_game("Georgia", "Notre Dame", -1.5, future)
    service = PickService()
    service.submit(user.id, YEAR, BOWL_SCOPE, [_bowl_pick(g1, "Oregon", 5)])

    result = service.submit(user.id, YEAR, BOWL_SCOPE, [_bowl_pick(g2, "Georgia", 5)])

    assert result.success is False
    assert _confidences(user.id) == {g1.id: 5}


def test_confidence_values_can_be_swapped(make_user, make_bowl_game, future):
    user = make_user()
    g1 = make_bowl_game("Ohio State", "Oregon", -2.5, future)
    g2 = make_bowl_game("Georgia", "Notre Dame", -1.5, future)
    service = PickService()
    service.submit(
        user.id, YEAR, BOWL_SCOPE, [_bowl_pick(g1, "Oregon", 1), _bowl_pick(g2, "Georgia", 2)]
    )

    result = service.submit(
        user.id, YEAR, BOWL_SCOPE, [_bowl_pick(g1, "Oregon", 2), _bowl_pick(g2, "Georgia", 1)]
    )

    assert result.success is True
    assert result.accepted == 2
    assert _confidences(user.id) == {g1.id: 2, g2.id: 1}
    assert BowlPick.query.count() == 2


def test_rejected_locked_item_keeps_its_value(
    make_user, make_bowl_game, future, past, session
):
    user = make_user()
    locked = make_bowl_game("Ohio State", "Oregon", -2.5, past)
    open_game = make_bowl_game("Georgia", "Notre Dame", -1.5, future)
    session.add(
        BowlPick(
            user_id=user.id,
            bowl_game_id=locked.id,
            year=YEAR,
            spread_pick="Oregon",
            confidence_points=3,
            outright_winner_pick="Oregon",
        )
    )
    session.commit()

    # The locked pick can't move off 3, so giving 3 to another game collides
    result = PickService().submit(
        user.id,
        YEAR,
        BOWL_SCOPE,
        [_bowl_pick(locked, "Oregon", 5), _bowl_pick(open_game, "Georgia", 3)],
    )

    assert result.success is False
    assert result.error == DUPLICATE_CONFIDENCE_ERROR
    assert _confidences(user.id) == {locked.id: 3}


def test_locked_item_rejected_without_collision(make_user, make_bowl_game, future, past):
    user = make_user()
    locked = make_bowl_game("Ohio State", "Oregon", -2.5, past)
    open_game = make_bowl_game("Georgia", "Notre Dame", -1.5, future)

    result = PickService().submit(
        user.id,
        YEAR,
        BOWL_SCOPE,
        [_bowl_pick(locked, "Oregon", 1), _bowl_pick(open_game, "Georgia", 2)],
    )

    assert result.success is True
    assert result.accepted == 1
    assert result.rejected[0].item_ref == locked.id
    assert result.rejected[0].reason.startswith("Game is locked")
    assert _confidences(user.id) == {open_game.id: 2}


def test_invalid_outright_pick(make_user, make_bowl_game, future):
    user = make_user()
    game = make_bowl_game("Ohio State", "Oregon", -2.5, future)

    result = PickService().submit(
        user.id, YEAR, BOWL_SCOPE, [PickSubmission(game.id, "Oregon", 1, "Texas")]
    )

    assert result.accepted == 0
    assert result.rejected[0].reason.startswith("Invalid outright winner pick")


def test_outright_pick_is_required(make_user, make_bowl_game, future):
    user = make_user()
    game = make_bowl_game("Ohio State", "Oregon", -2.5, future)

    result = PickService().submit(
        user.id, YEAR, BOWL_SCOPE, [PickSubmission(game.id, "Oregon", 1)]
    )

    assert result.accepted == 0
    assert result.rejected[0].reason.startswith("Invalid outright winner pick")


def test_confidence_must_be_positive_integer(make_user, make_bowl_game, future):
    user = make_user()
    g1 = make_bowl_game("Ohio State", "Oregon", -2.5, future)
    g2 = make_bowl_game("Georgia", "Notre Dame", -1.5, future)
    g3 = make_bowl_game("Texas", "Clemson", -4, future)

    result = PickService().submit(
        user.id,
        YEAR,
        BOWL_SCOPE,
        [
            _bowl_pick(g1, "Oregon", 0),
            _bowl_pick(g2, "Georgia", -2),
            _bowl_pick(g3, "Texas", None),
        ],
    )

    assert result.accepted == 0
    assert {r.reason for r in result.rejected} == {
        "Confidence points must be a positive integer"
    }
    assert BowlPick.query.count() == 0


def test_game_named_twice_counts_once(make_user, make_bowl_game, future):
    user = make_user()
    game = make_bowl_game("Ohio State", "Oregon", -2.5, future)

    result = PickService().submit(
        user.id,
        YEAR,
        BOWL_SCOPE,
        [_bowl_pick(game, "Oregon", 1), _bowl_pick(game, "Ohio State", 2)],
    )

    assert result.success is True
    assert result.accepted == 1
    assert [(r.item_ref, r.reason) for r in result.rejected] == [
        (game.id, DUPLICATE_GAME_ERROR)
    ]
    assert _confidences(user.id) == {game.id: 1}
    assert BowlPick.query.one().spread_pick == "Oregon"


def test_bowl_games_are_not_weekly_games(make_user, make_game, future):
    user = make_user()
    weekly = make_game("Alabama", "Auburn", -7.5, future)

    result = PickService().submit(user.id, YEAR, BOWL_SCOPE, [_bowl_pick(weekly, "Alabama", 1)])

    assert result.rejected[0].reason == "Game not found"


def test_users_with_bowl_picks(make_user, make_bowl_game, future):
    alice = make_user("Alice")
    bob = make_user("Bob")
    make_user("Carol")
    game = make_bowl_game("Ohio State", "Oregon", -2.5, future)
    service = PickService()

    service.submit(alice.id, YEAR, BOWL_SCOPE, [_bowl_pick(game, "Oregon", 1)])
    service.submit(bob.id, YEAR, BOWL_SCOPE, [_bowl_pick(game, "Ohio State", 1)])

    assert service.users_with_bowl_picks(YEAR) == [alice.id, bob.id]
    assert [p.confidence_points for p in service.get_user_bowl_picks(alice.id, YEAR)] == [1]
