"""
Result entry for weekly and bowl games.

Scores are entered by an admin (one game or a bulk sheet) or by the results
sync job. Each entry recomputes the spread winner and overwrites any earlier
result for the game.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from ats_pickem import db
from ats_pickem.models import BowlGame, Game, is_bowl_scope, model_for_scope
from ats_pickem.services.game_service import GameCatalog
from ats_pickem.services.pick_service import RejectedItem

logger = logging.getLogger(__name__)


@dataclass
class GameResultInput:
    game_id: int
    favorite_score: int
    underdog_score: int


@dataclass
class BulkResult:
    entered: int = 0
    failed: List[RejectedItem] = field(default_factory=list)

    @property
    def success(self):
        return not self.failed

    def to_dict(self):
        return {
            "entered": self.entered,
            "failed": [{"game_id": f.item_ref, "reason": f.reason} for f in self.failed],
        }


class ResultService:
    """Records final scores and spread outcomes"""

    def __init__(self, catalog=None):
        self.catalog = catalog or GameCatalog()

    def enter_result(self, game_id, favorite_score, underdog_score, entered_by, scope=None):
        """
        Enter the final score for one game.

        Returns:
            The updated game, or None when it does not exist

        Raises:
            ValueError: if either score is negative
        """
        if favorite_score < 0 or underdog_score < 0:
            raise ValueError("Scores cannot be negative")

        game = db.session.get(model_for_scope(scope), game_id)
        if game is None:
            logger.warning(f"Game {game_id} not found for result entry")
            return None

        try:
            game.record_result(favorite_score, underdog_score, entered_by)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info(
            f"Result entered for game {game_id}: {game.favorite_name} {favorite_score} - "
            f"{game.underdog_name} {underdog_score}, spread winner: "
            f"{game.spread_winner_name or 'N/A'}, push: {game.is_push}"
        )
        return game

    def bulk_enter_results(self, year, scope, items, entered_by):
        """Enter many results; bad items are reported without stopping the batch"""
        items = list(items)
        result = BulkResult()

        if not items:
            logger.info(f"No results to enter for {year} {scope}")
            return result

        model = model_for_scope(scope)
        query = model.query.filter(
            model.id.in_({item.game_id for item in items}), model.year == year
        )
        if not is_bowl_scope(scope):
            query = query.filter(Game.week == scope)
        games = {game.id: game for game in query}

        try:
            for item in items:
                game = games.get(item.game_id)
                if game is None:
                    result.failed.append(
                        RejectedItem(item.game_id, "Game not found or not for this week")
                    )
                    logger.warning(
                        f"Game {item.game_id} not found for {year} {scope} during bulk result entry"
                    )
                    continue

                if item.favorite_score < 0 or item.underdog_score < 0:
                    result.failed.append(
                        RejectedItem(item.game_id, "Scores cannot be negative")
                    )
                    continue

                game.record_result(item.favorite_score, item.underdog_score, entered_by)
                result.entered += 1

            if result.entered:
                db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info(
            f"Bulk result entry for {year} {scope}: {result.entered} entered, "
            f"{len(result.failed)} failed"
        )
        return result

    def apply_matches(self, year, scope, match_result, entered_by):
        """Feed matched provider results into bulk entry"""
        items = [
            GameResultInput(m.game_id, m.favorite_score, m.underdog_score)
            for m in match_result.matched
        ]
        return self.bulk_enter_results(year, scope, items, entered_by)

    def get_results(self, year, scope):
        """All games for the scope, resolved or not"""
        return self.catalog.get_games_for(year, scope)

    def unresolved_locked_weeks(self, year, now=None):
        """Weeks with at least one game past kickoff but without a result"""
        games = Game.query.filter(
            Game.year == year,
            Game.spread_winner_name.is_(None),
            Game.is_push.is_(False),
        ).all()
        return sorted({game.week for game in games if game.is_locked(now)})

    def has_unresolved_locked_bowls(self, year, now=None):
        games = BowlGame.query.filter(
            BowlGame.year == year,
            BowlGame.spread_winner_name.is_(None),
            BowlGame.is_push.is_(False),
        ).all()
        return any(game.is_locked(now) for game in games)
