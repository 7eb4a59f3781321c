from datetime import datetime, timezone

from ats_pickem import db
from ats_pickem.utils.timezone_utils import ensure_utc


class Pick(db.Model):
    __tablename__ = "picks"

    id = db.Column(db.Integer, primary_key=True)

    # Pick identification
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    game_id = db.Column(db.Integer, db.ForeignKey("games.id"), nullable=False)

    # Denormalized for weekly lookups
    year = db.Column(db.Integer, nullable=False)
    week = db.Column(db.Integer, nullable=False)

    # Pick details
    selected_team = db.Column(db.String(100), nullable=False)

    # Timestamps
    submitted_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = db.Column(db.DateTime)  # Set on resubmission only

    # Constraints and indexes
    __table_args__ = (
        db.UniqueConstraint("user_id", "game_id", name="unique_user_game_pick"),
        db.Index("idx_pick_user_year_week", "user_id", "year", "week"),
        db.Index("idx_pick_game", "game_id"),
    )

    def __repr__(self):
        return f"<Pick user_id={self.user_id} game_id={self.game_id} team={self.selected_team}>"

    @property
    def is_win(self):
        """True/False once the game is decided, None for a push or no result"""
        if not self.game or not self.game.has_result or self.game.is_push:
            return None
        return self.game.spread_winner_name == self.selected_team

    def to_dict(self):
        """Convert pick to dictionary for API responses"""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "game_id": self.game_id,
            "year": self.year,
            "week": self.week,
            "selected_team": self.selected_team,
            "is_win": self.is_win,
            "submitted_at": (
                ensure_utc(self.submitted_at).isoformat() if self.submitted_at else None
            ),
            "updated_at": (
                ensure_utc(self.updated_at).isoformat() if self.updated_at else None
            ),
        }


class BowlPick(db.Model):
    __tablename__ = "bowl_picks"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    bowl_game_id = db.Column(db.Integer, db.ForeignKey("bowl_games.id"), nullable=False)
    year = db.Column(db.Integer, nullable=False)

    # Pick details
    spread_pick = db.Column(db.String(100), nullable=False)
    confidence_points = db.Column(db.Integer, nullable=False)
    outright_winner_pick = db.Column(db.String(100), nullable=False)

    # Timestamps
    submitted_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = db.Column(db.DateTime)

    # Confidence uniqueness per (user, year) is enforced by PickService so that
    # two picks can swap values inside one submission.
    __table_args__ = (
        db.UniqueConstraint("user_id", "bowl_game_id", name="unique_user_bowl_pick"),
        db.Index("idx_bowl_pick_user_year", "user_id", "year"),
        db.CheckConstraint("confidence_points > 0", name="positive_confidence"),
    )

    def __repr__(self):
        return f"<BowlPick user_id={self.user_id} game_id={self.bowl_game_id} confidence={self.confidence_points}>"

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "bowl_game_id": self.bowl_game_id,
            "year": self.year,
            "spread_pick": self.spread_pick,
            "confidence_points": self.confidence_points,
            "outright_winner_pick": self.outright_winner_pick,
            "submitted_at": (
                ensure_utc(self.submitted_at).isoformat() if self.submitted_at else None
            ),
            "updated_at": (
                ensure_utc(self.updated_at).isoformat() if self.updated_at else None
            ),
        }
