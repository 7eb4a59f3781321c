# tests/test_models.py
from datetime import datetime, timezone

from ats_pickem.models import BowlPick, Pick, User
from ats_pickem.utils.timezone_utils import ensure_utc, format_kickoff


def test_get_or_create_user(app):
    user = User.get_or_create("sub-123", email="fan@example.com", display_name="Fan")
    again = User.get_or_create("sub-123", display_name="Big Fan")

    assert again.id == user.id
    assert again.display_name == "Big Fan"
    assert again.email == "fan@example.com"
    assert User.query.count() == 1


def test_display_name_is_escaped(app):
    user = User.get_or_create("sub-1", display_name=" <b>Bold</b> ")

    assert user.display_name == "&lt;b&gt;Bold&lt;/b&gt;"


def test_pick_is_win(make_user, make_game, past, session):
    user = make_user()
    game = make_game("Alabama", "Auburn", -7.5, past)
    pick = Pick(user_id=user.id, game_id=game.id, selected_team="Alabama", year=2025, week=1)
    session.add(pick)
    session.commit()

    assert pick.is_win is None

    game.record_result(35, 10, "admin")
    session.commit()
    assert pick.is_win is True
    assert pick.to_dict()["is_win"] is True


def test_deleting_user_removes_their_picks(make_user, make_game, make_bowl_game, past, session):
    user = make_user()
    other = make_user()
    game = make_game("Alabama", "Auburn", -7.5, past)
    bowl = make_bowl_game("Ohio State", "Oregon", -2.5, past)
    session.add_all(
        [
            Pick(user_id=user.id, game_id=game.id, selected_team="Alabama", year=2025, week=1),
            Pick(user_id=other.id, game_id=game.id, selected_team="Auburn", year=2025, week=1),
            BowlPick(
                user_id=user.id,
                bowl_game_id=bowl.id,
                year=2025,
                spread_pick="Oregon",
                confidence_points=1,
                outright_winner_pick="Oregon",
            ),
        ]
    )
    session.commit()

    session.delete(user)
    session.commit()

    assert [p.user_id for p in Pick.query.all()] == [other.id]
    assert BowlPick.query.count() == 0


def test_game_to_dict(make_game, past):
    game = make_game("Alabama", "Auburn", -7.5, past)
    game.record_result(24, 17, "admin")

    data = game.to_dict()

    assert data["spread_winner"] == "Auburn"
    assert data["is_locked"] is True
    assert data["week"] == 1
    assert data["kickoff_time"].endswith("+00:00")


def test_ensure_utc():
    naive = datetime(2025, 9, 6, 19, 30)

    assert ensure_utc(naive) == datetime(2025, 9, 6, 19, 30, tzinfo=timezone.utc)
    assert ensure_utc(None) is None


def test_format_kickoff_uses_app_timezone(app):
    app.config["TIMEZONE"] = "America/New_York"

    formatted = format_kickoff(datetime(2025, 9, 6, 23, 30, tzinfo=timezone.utc))

    assert formatted == "Sat 09/06 at 07:30 PM EDT"
    assert format_kickoff(None) == "TBD"
