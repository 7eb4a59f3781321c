"""
Game catalog: weekly and bowl games, their lines, kickoffs and lock state.

Games only enter the system (or get their line revised) through
GameCatalog.sync_from_source, which upserts from a line source such as an
uploaded sheet or the CFBD provider.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from ats_pickem import db
from ats_pickem.models import BowlGame, Game, is_bowl_scope, model_for_scope
from ats_pickem.utils.timezone_utils import ensure_utc

logger = logging.getLogger(__name__)


@dataclass
class GameLineInput:
    """One weekly game from a line source"""

    favorite: str
    underdog: str
    line: float
    kickoff: datetime


@dataclass
class BowlGameLineInput:
    """One bowl game from a line source, keyed by its game number"""

    game_number: int
    bowl_name: str
    favorite: str
    underdog: str
    line: float
    kickoff: datetime


def lines_from_external(external_lines):
    """Weekly sync items from provider lines; games without a kickoff are dropped"""
    return [
        GameLineInput(line.favorite, line.underdog, line.line, line.kickoff)
        for line in external_lines
        if line.kickoff is not None
    ]


def bowl_lines_from_external(external_lines):
    """Bowl sync items numbered 1..n in kickoff order; stored matchups keep their own number"""
    scheduled = sorted(
        (line for line in external_lines if line.kickoff is not None),
        key=lambda line: ensure_utc(line.kickoff),
    )
    return [
        BowlGameLineInput(
            game_number=number,
            bowl_name=line.bowl_name,
            favorite=line.favorite,
            underdog=line.underdog,
            line=line.line,
            kickoff=line.kickoff,
        )
        for number, line in enumerate(scheduled, start=1)
    ]


def _matchup_key(first, second):
    """Order-independent key for a pair of team names"""
    return tuple(sorted((first.casefold(), second.casefold())))


def _to_db_datetime(value):
    """Store kickoffs as naive UTC so every backend compares them the same way"""
    return ensure_utc(value).replace(tzinfo=None)


class GameCatalog:
    """Owns scheduled games for weekly and bowl scopes"""

    def __init__(self, normalizer=None):
        self.normalizer = normalizer

    def _normalize(self, name):
        name = (name or "").strip()
        if self.normalizer is None:
            return name
        return self.normalizer.normalize(name)

    def get_game(self, game_id, scope=None):
        """Look up a weekly game (any week) or, for the bowl scope, a bowl game"""
        model = model_for_scope(scope)
        return db.session.get(model, game_id)

    def is_locked(self, game_id, scope=None, now=None):
        """True once kickoff has passed, None when the game does not exist"""
        game = self.get_game(game_id, scope)
        if game is None:
            return None
        return game.is_locked(now)

    def get_games_for(self, year, scope):
        """Games for a week (ordered by kickoff) or the bowl season (by game number)"""
        if is_bowl_scope(scope):
            return (
                BowlGame.query.filter_by(year=year)
                .order_by(BowlGame.game_number)
                .all()
            )

        return (
            Game.query.filter_by(year=year, week=scope)
            .order_by(Game.kickoff_time, Game.id)
            .all()
        )

    def available_weeks(self, year):
        """Week numbers that have at least one game"""
        rows = (
            db.session.query(Game.week)
            .filter(Game.year == year)
            .distinct()
            .order_by(Game.week)
            .all()
        )
        return [week for (week,) in rows]

    def total_bowl_games(self, year):
        return BowlGame.query.filter_by(year=year).count()

    def sync_from_source(self, year, scope, items):
        """
        Upsert games from a line source.

        Existing games get their line and kickoff revised and keep any
        result. Running the same batch twice creates no duplicates.

        Returns:
            Number of games created or updated
        """
        items = list(items)
        if not items:
            logger.info(f"No games to sync for {year} {self._scope_label(scope)}")
            return 0

        try:
            if is_bowl_scope(scope):
                synced = self._sync_bowl_games(year, items)
            else:
                synced = self._sync_week_games(year, scope, items)

            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info(f"Synced {synced} games for {year} {self._scope_label(scope)}")
        return synced

    def _apply_line(self, game, favorite, underdog, item):
        """Revise line and kickoff; a flipped favorite carries its score along"""
        if game.favorite_name.casefold() != favorite.casefold():
            game.favorite_score, game.underdog_score = (
                game.underdog_score,
                game.favorite_score,
            )
        game.favorite_name = favorite
        game.underdog_name = underdog
        game.line = float(item.line)
        game.kickoff_time = _to_db_datetime(item.kickoff)

    def _sync_week_games(self, year, week, items):
        existing_games = Game.query.filter_by(year=year, week=week).all()
        existing_by_matchup = {
            _matchup_key(game.favorite_name, game.underdog_name): game
            for game in existing_games
        }

        synced = 0
        processed = set()

        for item in items:
            favorite = self._normalize(item.favorite)
            underdog = self._normalize(item.underdog)

            if not favorite or not underdog or favorite.casefold() == underdog.casefold():
                logger.warning(
                    f"Skipping invalid matchup '{item.favorite}' vs '{item.underdog}' for week {week}"
                )
                continue

            key = _matchup_key(favorite, underdog)
            if key in processed:
                logger.warning(
                    f"Duplicate game detected in sync batch: {favorite} vs {underdog} "
                    f"(original: {item.favorite} vs {item.underdog}). Skipping."
                )
                continue
            processed.add(key)

            game = existing_by_matchup.get(key)
            if game is not None:
                self._apply_line(game, favorite, underdog, item)
                logger.debug(f"Updated game {favorite} vs {underdog} for week {week}")
            else:
                game = Game(
                    year=year,
                    week=week,
                    favorite_name=favorite,
                    underdog_name=underdog,
                    line=float(item.line),
                    kickoff_time=_to_db_datetime(item.kickoff),
                )
                db.session.add(game)
                existing_by_matchup[key] = game
                logger.debug(f"Created game {favorite} vs {underdog} for week {week}")

            synced += 1

        return synced

    def _sync_bowl_games(self, year, items):
        existing_games = BowlGame.query.filter_by(year=year).all()
        existing_by_matchup = {
            _matchup_key(game.favorite_name, game.underdog_name): game
            for game in existing_games
        }
        taken_numbers = {game.game_number for game in existing_games}

        synced = 0
        processed = set()

        for item in items:
            favorite = self._normalize(item.favorite)
            underdog = self._normalize(item.underdog)

            if not favorite or not underdog or favorite.casefold() == underdog.casefold():
                logger.warning(
                    f"Skipping invalid bowl matchup '{item.favorite}' vs '{item.underdog}'"
                )
                continue

            key = _matchup_key(favorite, underdog)
            if key in processed:
                logger.warning(
                    f"Duplicate bowl game detected in sync batch: {favorite} vs {underdog}. Skipping."
                )
                continue
            processed.add(key)

            # Stored matchups keep their number so bowl picks stay on the same game
            game = existing_by_matchup.get(key)
            if game is not None:
                if item.bowl_name and not game.bowl_name:
                    game.bowl_name = item.bowl_name
                self._apply_line(game, favorite, underdog, item)
                logger.debug(f"Updated bowl game {game.game_number} for year {year}")
            else:
                game_number = item.game_number
                if game_number in taken_numbers:
                    game_number = max(taken_numbers) + 1
                    logger.info(
                        f"Bowl game number {item.game_number} is taken for {year}; "
                        f"{favorite} vs {underdog} becomes game {game_number}"
                    )
                taken_numbers.add(game_number)

                game = BowlGame(
                    year=year,
                    game_number=game_number,
                    bowl_name=item.bowl_name or "",
                    favorite_name=favorite,
                    underdog_name=underdog,
                    line=float(item.line),
                    kickoff_time=_to_db_datetime(item.kickoff),
                )
                db.session.add(game)
                existing_by_matchup[key] = game
                logger.debug(f"Created bowl game {game_number} for year {year}")

            synced += 1

        return synced

    @staticmethod
    def _scope_label(scope):
        return "bowl season" if is_bowl_scope(scope) else f"week {scope}"
