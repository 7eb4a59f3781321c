"""
Leaderboards computed on demand from games and picks.

Weekly scoring: a covered pick is a win, a push is half a win for everyone who
picked the game (and counts in pushes, never in losses), anything else on a
decided game is a loss. Games without a result are ignored.

Bowl scoring: a covered spread pick earns its confidence points; pushes and
losses earn nothing.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from flask import current_app, has_app_context
from sqlalchemy import or_

from ats_pickem import db
from ats_pickem.models import BowlGame, BowlPick, Game, Pick, User
from ats_pickem.utils.scoring import (
    calculate_bowl_points,
    calculate_pick_score,
    win_percentage,
)

logger = logging.getLogger(__name__)

DEFAULT_PICKS_PER_WEEK = 6


@dataclass
class WeeklyStandingsEntry:
    user_id: int
    display_name: str
    wins: float = 0.0
    losses: int = 0
    pushes: int = 0
    win_percentage: float = 0.0


@dataclass
class SeasonStandingsEntry:
    user_id: int
    display_name: str
    total_wins: float = 0.0
    total_losses: int = 0
    total_pushes: int = 0
    win_percentage: float = 0.0
    weeks_played: int = 0
    perfect_weeks: int = 0


@dataclass
class BowlStandingsEntry:
    user_id: int
    display_name: str
    spread_points: int = 0
    spread_wins: int = 0
    spread_losses: int = 0
    spread_pushes: int = 0
    outright_wins: int = 0
    games_completed: int = 0
    total_games: int = 0
    max_possible_points: int = 0


@dataclass
class UserPickResult:
    game_id: int
    favorite: str
    underdog: str
    line: float
    selected_team: str
    spread_winner: Optional[str]
    is_push: bool
    has_result: bool
    is_win: Optional[bool] = None  # None until decided, and for a push


@dataclass
class UserWeekHistory:
    week: int
    wins: float = 0.0
    losses: int = 0
    pushes: int = 0
    is_perfect: bool = False
    picks: List[UserPickResult] = field(default_factory=list)


@dataclass
class UserSeasonHistory:
    user_id: int
    display_name: str
    year: int
    total_wins: float = 0.0
    total_losses: int = 0
    total_pushes: int = 0
    win_percentage: float = 0.0
    weeks: List[UserWeekHistory] = field(default_factory=list)


@dataclass
class BowlPickDetail:
    game_number: int
    bowl_name: str
    favorite: str
    underdog: str
    line: float
    spread_pick: str
    confidence_points: int
    outright_winner_pick: str
    has_result: bool
    favorite_score: Optional[int] = None
    underdog_score: Optional[int] = None
    spread_winner: Optional[str] = None
    actual_outright_winner: Optional[str] = None
    is_push: bool = False
    spread_correct: Optional[bool] = None
    outright_correct: Optional[bool] = None
    points_earned: int = 0


@dataclass
class BowlUserHistory:
    user_id: int
    display_name: str
    year: int
    total_points: int = 0
    max_possible_points: int = 0
    picks: List[BowlPickDetail] = field(default_factory=list)


class _WeekTally:
    """Running win/loss/push counts for one user and one week"""

    def __init__(self):
        self.wins = 0.0
        self.full_wins = 0
        self.losses = 0
        self.pushes = 0

    @property
    def decided(self):
        return self.full_wins + self.losses + self.pushes

    def add(self, pick):
        """Count a pick on a resolved game; returns True/False/None like Pick.is_win"""
        score = calculate_pick_score(pick)
        self.wins += score

        if pick.game.is_push:
            self.pushes += 1
            return None
        if score:
            self.full_wins += 1
            return True
        self.losses += 1
        return False

    def is_perfect(self, picks_per_week):
        return self.decided == picks_per_week and self.full_wins == picks_per_week


def _has_result_clause(model):
    return or_(model.spread_winner_name.isnot(None), model.is_push.is_(True))


class StandingsService:
    def __init__(self, picks_per_week=None):
        if picks_per_week is None and has_app_context():
            picks_per_week = current_app.config.get("PICKS_PER_WEEK")
        self.picks_per_week = picks_per_week or DEFAULT_PICKS_PER_WEEK

    def _resolved_picks(self, year, week=None):
        query = (
            Pick.query.join(Game, Pick.game_id == Game.id)
            .join(User, Pick.user_id == User.id)
            .filter(Pick.year == year, _has_result_clause(Game))
        )
        if week is not None:
            query = query.filter(Pick.week == week)
        return query.all()

    def weekly_standings(self, year, week):
        tallies = {}
        users = {}

        for pick in self._resolved_picks(year, week):
            users[pick.user_id] = pick.user
            tallies.setdefault(pick.user_id, _WeekTally()).add(pick)

        entries = [
            WeeklyStandingsEntry(
                user_id=user_id,
                display_name=users[user_id].display_name,
                wins=tally.wins,
                losses=tally.losses,
                pushes=tally.pushes,
                win_percentage=win_percentage(tally.wins, tally.losses, tally.pushes),
            )
            for user_id, tally in tallies.items()
        ]
        entries.sort(key=lambda e: (-e.wins, e.losses, e.display_name))

        logger.info(
            f"Generated weekly standings for {year} week {week}: {len(entries)} entries"
        )
        return entries

    def season_standings(self, year):
        weeks_by_user = {}
        users = {}

        for pick in self._resolved_picks(year):
            users[pick.user_id] = pick.user
            user_weeks = weeks_by_user.setdefault(pick.user_id, {})
            user_weeks.setdefault(pick.week, _WeekTally()).add(pick)

        entries = []
        for user_id, weeks in weeks_by_user.items():
            entry = SeasonStandingsEntry(
                user_id=user_id,
                display_name=users[user_id].display_name,
                weeks_played=len(weeks),
            )
            for tally in weeks.values():
                entry.total_wins += tally.wins
                entry.total_losses += tally.losses
                entry.total_pushes += tally.pushes
                if tally.is_perfect(self.picks_per_week):
                    entry.perfect_weeks += 1

            entry.win_percentage = win_percentage(
                entry.total_wins, entry.total_losses, entry.total_pushes
            )
            entries.append(entry)

        entries.sort(key=lambda e: (-e.total_wins, -e.win_percentage, e.display_name))

        logger.info(f"Generated season standings for {year}: {len(entries)} entries")
        return entries

    def bowl_standings(self, year):
        games = BowlGame.query.filter_by(year=year).all()
        total_games = len(games)
        games_completed = sum(1 for game in games if game.has_result)

        picks = (
            BowlPick.query.join(User, BowlPick.user_id == User.id)
            .filter(BowlPick.year == year)
            .all()
        )

        entries = {}
        for pick in picks:
            entry = entries.get(pick.user_id)
            if entry is None:
                entry = entries[pick.user_id] = BowlStandingsEntry(
                    user_id=pick.user_id,
                    display_name=pick.user.display_name,
                    games_completed=games_completed,
                    total_games=total_games,
                )

            entry.max_possible_points += pick.confidence_points

            game = pick.bowl_game
            if game is None or not game.has_result:
                continue

            if game.is_push:
                entry.spread_pushes += 1
            elif pick.spread_pick == game.spread_winner_name:
                entry.spread_wins += 1
            else:
                entry.spread_losses += 1
            entry.spread_points += calculate_bowl_points(pick)

            if game.outright_winner_name == pick.outright_winner_pick:
                entry.outright_wins += 1

        standings = sorted(
            entries.values(),
            key=lambda e: (-e.spread_points, -e.spread_wins, -e.outright_wins),
        )

        logger.info(f"Generated bowl standings for {year}: {len(standings)} entries")
        return standings

    def bowl_user_history(self, user_id, year):
        """Per-pick bowl breakdown for a user, None when the user does not exist"""
        user = db.session.get(User, user_id)
        if user is None:
            logger.warning(f"User {user_id} not found for bowl history")
            return None

        picks = (
            BowlPick.query.join(BowlGame, BowlPick.bowl_game_id == BowlGame.id)
            .filter(BowlPick.user_id == user_id, BowlPick.year == year)
            .order_by(BowlGame.game_number)
            .all()
        )

        history = BowlUserHistory(
            user_id=user.id, display_name=user.display_name, year=year
        )

        for pick in picks:
            game = pick.bowl_game
            detail = BowlPickDetail(
                game_number=game.game_number,
                bowl_name=game.bowl_name,
                favorite=game.favorite_name,
                underdog=game.underdog_name,
                line=game.line,
                spread_pick=pick.spread_pick,
                confidence_points=pick.confidence_points,
                outright_winner_pick=pick.outright_winner_pick,
                has_result=game.has_result,
            )
            history.max_possible_points += pick.confidence_points

            if game.has_result:
                detail.favorite_score = game.favorite_score
                detail.underdog_score = game.underdog_score
                detail.spread_winner = game.spread_winner_name
                detail.actual_outright_winner = game.outright_winner_name
                detail.is_push = bool(game.is_push)
                # A push is neither right nor wrong
                if not game.is_push:
                    detail.spread_correct = pick.spread_pick == game.spread_winner_name
                detail.outright_correct = (
                    pick.outright_winner_pick == game.outright_winner_name
                )
                detail.points_earned = calculate_bowl_points(pick)
                history.total_points += detail.points_earned

            history.picks.append(detail)

        return history

    def user_season_history(self, user_id, year):
        """Weekly picks for a user grouped by week, None when the user does not exist"""
        user = db.session.get(User, user_id)
        if user is None:
            logger.warning(f"User {user_id} not found for season history")
            return None

        picks = (
            Pick.query.join(Game, Pick.game_id == Game.id)
            .filter(Pick.user_id == user_id, Pick.year == year)
            .order_by(Pick.week, Game.kickoff_time, Game.id)
            .all()
        )

        history = UserSeasonHistory(
            user_id=user.id, display_name=user.display_name, year=year
        )
        weeks = {}

        for pick in picks:
            game = pick.game
            week = weeks.get(pick.week)
            if week is None:
                week = weeks[pick.week] = (UserWeekHistory(week=pick.week), _WeekTally())
            week_history, tally = week

            result = UserPickResult(
                game_id=game.id,
                favorite=game.favorite_name,
                underdog=game.underdog_name,
                line=game.line,
                selected_team=pick.selected_team,
                spread_winner=game.spread_winner_name,
                is_push=bool(game.is_push),
                has_result=game.has_result,
            )
            if game.has_result:
                result.is_win = tally.add(pick)
            week_history.picks.append(result)

        for week_history, tally in weeks.values():
            week_history.wins = tally.wins
            week_history.losses = tally.losses
            week_history.pushes = tally.pushes
            week_history.is_perfect = tally.is_perfect(self.picks_per_week)

            history.total_wins += tally.wins
            history.total_losses += tally.losses
            history.total_pushes += tally.pushes
            history.weeks.append(week_history)

        history.win_percentage = win_percentage(
            history.total_wins, history.total_losses, history.total_pushes
        )

        logger.info(
            f"Generated season history for user {user_id} year {year}: "
            f"{len(history.weeks)} weeks, {history.total_wins} wins"
        )
        return history
