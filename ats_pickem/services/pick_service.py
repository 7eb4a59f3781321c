"""
Pick submission for weekly games and the bowl confidence pool.

A submission is a batch of picks. Each pick is accepted or rejected on its
own (missing game, locked game, invalid team, a game named twice) and the
caller gets a SubmissionResult listing the rejections; the first item for a
game wins. The one exception is the bowl confidence rule: confidence values
must stay distinct across a user's season, and a batch that would break that
is rejected as a whole.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional

from ats_pickem import db
from ats_pickem.models import BowlGame, BowlPick, Game, Pick, is_bowl_scope
from ats_pickem.utils.logging_config import ContextualLogger
from ats_pickem.utils.timezone_utils import format_kickoff, get_utc_time

DUPLICATE_CONFIDENCE_ERROR = "Confidence points must be unique for each pick"
DUPLICATE_GAME_ERROR = "Duplicate game in submission"


@dataclass
class PickSubmission:
    game_id: int
    selection: str
    confidence: Optional[int] = None
    outright_pick: Optional[str] = None


@dataclass
class RejectedItem:
    item_ref: int
    reason: str


@dataclass
class SubmissionResult:
    accepted: int = 0
    rejected: List[RejectedItem] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def success(self):
        """False only when the whole batch was refused"""
        return self.error is None

    @classmethod
    def batch_failure(cls, picks, reason):
        return cls(
            accepted=0,
            rejected=[RejectedItem(p.game_id, reason) for p in picks],
            error=reason,
        )

    def to_dict(self):
        return {
            "success": self.success,
            "accepted": self.accepted,
            "rejected": [
                {"game_id": r.item_ref, "reason": r.reason} for r in self.rejected
            ],
            "error": self.error,
        }


def _is_positive_int(value):
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _has_duplicates(values):
    return any(count > 1 for count in Counter(values).values())


class PickService:
    """Validates and stores pick batches"""

    def submit(self, user_id, year, scope, picks):
        """
        Submit a batch of picks for a week (scope is the week number) or for
        the bowl season (scope is BOWL_SCOPE).

        Business-rule violations never raise; database errors do.
        """
        picks = list(picks)
        log = ContextualLogger(
            __name__, {"user_id": user_id, "year": year, "scope": scope}
        )

        if not picks:
            log.info("No picks to submit")
            return SubmissionResult()

        try:
            if is_bowl_scope(scope):
                result = self._submit_bowl(user_id, year, picks, log)
            else:
                result = self._submit_weekly(user_id, year, scope, picks, log)
        except Exception:
            db.session.rollback()
            raise

        log.info(
            f"Pick submission: {result.accepted} accepted, {len(result.rejected)} rejected"
        )
        return result

    def _check_game(self, game, item):
        """First failing rule for an item, or None when the pick is playable"""
        if game is None:
            return "Game not found"

        if game.is_locked():
            return f"Game is locked (kickoff: {format_kickoff(game.kickoff_time)})"

        if not game.is_team_in_game(item.selection):
            return (
                f"Invalid team selection. Must be '{game.favorite_name}' "
                f"or '{game.underdog_name}'"
            )

        return None

    def _submit_weekly(self, user_id, year, week, picks, log):
        game_ids = {p.game_id for p in picks}
        games = {
            game.id: game
            for game in Game.query.filter(
                Game.id.in_(game_ids), Game.year == year, Game.week == week
            )
        }
        existing = {
            pick.game_id: pick
            for pick in Pick.query.filter(
                Pick.user_id == user_id, Pick.game_id.in_(game_ids)
            )
        }

        result = SubmissionResult()
        seen = set()

        for item in picks:
            if item.game_id in seen:
                reason = DUPLICATE_GAME_ERROR
            else:
                seen.add(item.game_id)
                reason = self._check_game(games.get(item.game_id), item)

            if reason:
                result.rejected.append(RejectedItem(item.game_id, reason))
                log.warning(f"Pick rejected for game {item.game_id}: {reason}")
                continue

            pick = existing.get(item.game_id)
            if pick is not None:
                pick.selected_team = item.selection
                pick.updated_at = get_utc_time()
                log.debug(f"Updated pick for game {item.game_id}")
            else:
                pick = Pick(
                    user_id=user_id,
                    game_id=item.game_id,
                    selected_team=item.selection,
                    submitted_at=get_utc_time(),
                    year=year,
                    week=week,
                )
                db.session.add(pick)
                existing[item.game_id] = pick
                log.debug(f"Created pick for game {item.game_id}")

            result.accepted += 1

        if result.accepted:
            db.session.commit()

        return result

    def _submit_bowl(self, user_id, year, picks, log):
        game_ids = {p.game_id for p in picks}
        stored = BowlPick.query.filter_by(user_id=user_id, year=year).all()
        stored_by_game = {pick.bowl_game_id: pick for pick in stored}

        # Whole-batch gate: incoming values plus stored values that are not being replaced
        incoming = [p.confidence for p in picks if p.confidence is not None]
        kept = [
            pick.confidence_points
            for pick in stored
            if pick.bowl_game_id not in game_ids
        ]
        if _has_duplicates(incoming + kept):
            log.warning("Bowl submission rejected: duplicate confidence points")
            return SubmissionResult.batch_failure(picks, DUPLICATE_CONFIDENCE_ERROR)

        games = {
            game.id: game
            for game in BowlGame.query.filter(
                BowlGame.id.in_(game_ids), BowlGame.year == year
            )
        }

        accepted = {}
        rejected = []
        seen = set()

        for item in picks:
            game = games.get(item.game_id)
            if item.game_id in seen:
                reason = DUPLICATE_GAME_ERROR
            else:
                seen.add(item.game_id)
                reason = self._check_game(game, item)

            if reason is None and not game.is_team_in_game(item.outright_pick):
                reason = (
                    f"Invalid outright winner pick. Must be '{game.favorite_name}' "
                    f"or '{game.underdog_name}'"
                )

            if reason is None and not _is_positive_int(item.confidence):
                reason = "Confidence points must be a positive integer"

            if reason:
                rejected.append(RejectedItem(item.game_id, reason))
                log.warning(f"Bowl pick rejected for game {item.game_id}: {reason}")
                continue

            accepted[item.game_id] = item

        # A rejected item keeps its stored value, which may now collide
        final_values = [
            pick.confidence_points
            for game_id, pick in stored_by_game.items()
            if game_id not in accepted
        ]
        final_values.extend(item.confidence for item in accepted.values())
        if _has_duplicates(final_values):
            log.warning(
                "Bowl submission rejected: accepted picks collide with stored confidence points"
            )
            return SubmissionResult.batch_failure(picks, DUPLICATE_CONFIDENCE_ERROR)

        now = get_utc_time()
        for game_id, item in accepted.items():
            pick = stored_by_game.get(game_id)
            if pick is not None:
                pick.spread_pick = item.selection
                pick.confidence_points = item.confidence
                pick.outright_winner_pick = item.outright_pick
                pick.updated_at = now
                log.debug(f"Updated bowl pick for game {game_id}")
            else:
                db.session.add(
                    BowlPick(
                        user_id=user_id,
                        bowl_game_id=game_id,
                        year=year,
                        spread_pick=item.selection,
                        confidence_points=item.confidence,
                        outright_winner_pick=item.outright_pick,
                        submitted_at=now,
                    )
                )
                log.debug(f"Created bowl pick for game {game_id}")

        if accepted:
            db.session.commit()

        return SubmissionResult(accepted=len(accepted), rejected=rejected)

    def get_user_picks(self, user_id, year, week):
        return (
            Pick.query.join(Game)
            .filter(Pick.user_id == user_id, Pick.year == year, Pick.week == week)
            .order_by(Game.kickoff_time, Game.id)
            .all()
        )

    def get_user_season_picks(self, user_id, year):
        return (
            Pick.query.join(Game)
            .filter(Pick.user_id == user_id, Pick.year == year)
            .order_by(Pick.week, Game.kickoff_time, Game.id)
            .all()
        )

    def get_user_bowl_picks(self, user_id, year):
        return (
            BowlPick.query.join(BowlGame)
            .filter(BowlPick.user_id == user_id, BowlPick.year == year)
            .order_by(BowlGame.game_number)
            .all()
        )

    def users_with_bowl_picks(self, year):
        rows = (
            db.session.query(BowlPick.user_id)
            .filter(BowlPick.year == year)
            .distinct()
            .order_by(BowlPick.user_id)
            .all()
        )
        return [user_id for (user_id,) in rows]
