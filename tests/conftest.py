# tests/conftest.py
from datetime import datetime, timedelta, timezone

import pytest

from ats_pickem import create_app, db
from ats_pickem.models import BowlGame, Game, TeamAlias, User
from ats_pickem.services.team_names import TeamNameNormalizer
from ats_pickem.utils.alias_cache import AliasCache

YEAR = 2025


@pytest.fixture()
def app():
    app = create_app("testing")
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def session(app):
    return db.session


@pytest.fixture()
def cli_runner(app):
    return app.test_cli_runner()


@pytest.fixture()
def future():
    """A kickoff comfortably in the future"""
    return datetime.now(timezone.utc) + timedelta(days=3)


@pytest.fixture()
def past():
    """A kickoff that has already happened"""
    return datetime.now(timezone.utc) - timedelta(hours=4)


@pytest.fixture()
def make_user(session):
    counter = {"n": 0}

    def _make_user(display_name=None, is_admin=False):
        counter["n"] += 1
        user = User(
            external_id=f"ext-{counter['n']}",
            email=f"user{counter['n']}@example.com",
            display_name=display_name or f"User {counter['n']}",
            is_admin=is_admin,
        )
        session.add(user)
        session.commit()
        return user

    return _make_user


@pytest.fixture()
def make_game(session):
    def _make_game(favorite, underdog, line, kickoff, week=1, year=YEAR):
        game = Game(
            year=year,
            week=week,
            favorite_name=favorite,
            underdog_name=underdog,
            line=line,
            kickoff_time=kickoff,
        )
        session.add(game)
        session.commit()
        return game

    return _make_game


@pytest.fixture()
def make_bowl_game(session):
    counter = {"n": 0}

    def _make_bowl_game(favorite, underdog, line, kickoff, bowl_name=None, year=YEAR):
        counter["n"] += 1
        game = BowlGame(
            year=year,
            game_number=counter["n"],
            bowl_name=bowl_name or f"Bowl {counter['n']}",
            favorite_name=favorite,
            underdog_name=underdog,
            line=line,
            kickoff_time=kickoff,
        )
        session.add(game)
        session.commit()
        return game

    return _make_bowl_game


@pytest.fixture()
def alias_pairs():
    return [
        ("USF", "South Florida"),
        ("South Florida", "South Florida"),
        ("FSU", "Florida State"),
        ("Florida St.", "Florida State"),
        ("Ohio St", "Ohio State"),
        ("Miami FL", "Miami"),
    ]


@pytest.fixture()
def normalizer(alias_pairs):
    """Normalizer over an isolated in-memory alias table"""
    return TeamNameNormalizer(AliasCache(loader=lambda: list(alias_pairs)))


@pytest.fixture()
def db_normalizer(session, alias_pairs):
    """Normalizer backed by the team_aliases table"""
    for alias, canonical in alias_pairs:
        session.add(TeamAlias(alias=alias, canonical_name=canonical))
    session.commit()
    return TeamNameNormalizer(AliasCache())
