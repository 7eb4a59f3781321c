from datetime import datetime, timezone

from sqlalchemy import func

from ats_pickem import db


class TeamAlias(db.Model):
    __tablename__ = "team_aliases"

    id = db.Column(db.Integer, primary_key=True)

    # Lookup key, unique regardless of case
    alias = db.Column(db.String(100), nullable=False)
    canonical_name = db.Column(db.String(100), nullable=False, index=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(db.DateTime, onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.Index("idx_team_alias_lower", func.lower(alias), unique=True),
    )

    def __repr__(self):
        return f"<TeamAlias {self.alias} -> {self.canonical_name}>"

    @staticmethod
    def find(alias):
        return TeamAlias.query.filter(
            func.lower(TeamAlias.alias) == alias.strip().lower()
        ).first()

    @staticmethod
    def upsert(alias, canonical_name):
        """Create or repoint an alias; the caller commits and refreshes the cache"""
        alias = alias.strip()
        canonical_name = canonical_name.strip()

        row = TeamAlias.find(alias)
        if row is None:
            row = TeamAlias(alias=alias, canonical_name=canonical_name)
            db.session.add(row)
        else:
            row.canonical_name = canonical_name
        return row

    def to_dict(self):
        return {"alias": self.alias, "canonical_name": self.canonical_name}
