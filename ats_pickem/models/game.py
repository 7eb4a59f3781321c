from datetime import datetime, timezone

from ats_pickem import db
from ats_pickem.utils.timezone_utils import ensure_utc, get_utc_time

# Scope for bowl-season operations; weekly operations use the week number
BOWL_SCOPE = "bowl"


def is_bowl_scope(scope):
    return scope == BOWL_SCOPE


class SpreadGameMixin:
    """Columns and behavior shared by weekly and bowl games"""

    id = db.Column(db.Integer, primary_key=True)
    year = db.Column(db.Integer, nullable=False, index=True)

    # Teams as entered by an admin or the external line source
    favorite_name = db.Column(db.String(100), nullable=False)
    underdog_name = db.Column(db.String(100), nullable=False)

    # Point spread relative to the favorite (<= 0, 0 is a pick'em)
    line = db.Column(db.Float, nullable=False, default=0.0)

    # Game timing (UTC)
    kickoff_time = db.Column(db.DateTime, nullable=False)

    # Result
    favorite_score = db.Column(db.Integer)
    underdog_score = db.Column(db.Integer)
    spread_winner_name = db.Column(db.String(100))
    is_push = db.Column(db.Boolean, nullable=False, default=False)
    resolved_at = db.Column(db.DateTime)
    resolved_by = db.Column(db.String(100))

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @property
    def has_result(self):
        """Scores alone are not a result; a winner or a push is"""
        return self.spread_winner_name is not None or bool(self.is_push)

    def is_locked(self, now=None):
        """Picks lock at kickoff, exact equality included"""
        now = ensure_utc(now) if now is not None else get_utc_time()
        return now >= ensure_utc(self.kickoff_time)

    def is_team_in_game(self, team_name):
        return team_name in (self.favorite_name, self.underdog_name)

    def record_result(self, favorite_score, underdog_score, entered_by):
        """Store final scores and the spread outcome, replacing any earlier result"""
        from ats_pickem.utils.scoring import calculate_spread_winner

        winner, is_push = calculate_spread_winner(
            self.favorite_name,
            self.underdog_name,
            self.line,
            favorite_score,
            underdog_score,
        )

        self.favorite_score = favorite_score
        self.underdog_score = underdog_score
        self.spread_winner_name = winner
        self.is_push = is_push
        self.resolved_at = get_utc_time()
        self.resolved_by = str(entered_by) if entered_by is not None else None

    def _base_dict(self):
        return {
            "id": self.id,
            "year": self.year,
            "favorite": self.favorite_name,
            "underdog": self.underdog_name,
            "line": self.line,
            "kickoff_time": (
                ensure_utc(self.kickoff_time).isoformat() if self.kickoff_time else None
            ),
            "favorite_score": self.favorite_score,
            "underdog_score": self.underdog_score,
            "spread_winner": self.spread_winner_name,
            "is_push": bool(self.is_push),
            "has_result": self.has_result,
            "is_locked": self.is_locked(),
            "resolved_at": (
                ensure_utc(self.resolved_at).isoformat() if self.resolved_at else None
            ),
            "resolved_by": self.resolved_by,
        }


class Game(SpreadGameMixin, db.Model):
    __tablename__ = "games"

    week = db.Column(db.Integer, nullable=False)

    # Relationships
    picks = db.relationship(
        "Pick", backref="game", lazy="dynamic", cascade="all, delete-orphan"
    )

    # Indexes
    __table_args__ = (
        db.UniqueConstraint(
            "year", "week", "favorite_name", "underdog_name", name="unique_week_matchup"
        ),
        db.Index("idx_game_year_week", "year", "week"),
        db.CheckConstraint("favorite_name != underdog_name", name="different_teams"),
    )

    def __repr__(self):
        return f"<Game {self.favorite_name} {self.line} vs {self.underdog_name} Week {self.week}>"

    def to_dict(self):
        data = self._base_dict()
        data["week"] = self.week
        return data


class BowlGame(SpreadGameMixin, db.Model):
    __tablename__ = "bowl_games"

    game_number = db.Column(db.Integer, nullable=False)
    bowl_name = db.Column(db.String(150), nullable=False, default="")
    outright_winner_name = db.Column(db.String(100))

    # Relationships
    picks = db.relationship(
        "BowlPick", backref="bowl_game", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.UniqueConstraint("year", "game_number", name="unique_bowl_game_number"),
        db.CheckConstraint(
            "favorite_name != underdog_name", name="bowl_different_teams"
        ),
    )

    def __repr__(self):
        return f"<BowlGame #{self.game_number} {self.bowl_name}>"

    def record_result(self, favorite_score, underdog_score, entered_by):
        from ats_pickem.utils.scoring import calculate_outright_winner

        super().record_result(favorite_score, underdog_score, entered_by)
        self.outright_winner_name = calculate_outright_winner(
            self.favorite_name, self.underdog_name, favorite_score, underdog_score
        )

    def to_dict(self):
        data = self._base_dict()
        data["game_number"] = self.game_number
        data["bowl_name"] = self.bowl_name
        data["outright_winner"] = self.outright_winner_name
        return data


def model_for_scope(scope):
    """Game model backing a weekly (week number) or bowl scope"""
    return BowlGame if is_bowl_scope(scope) else Game
