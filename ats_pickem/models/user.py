from datetime import datetime, timezone

from ats_pickem import db


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    # Opaque subject id handed over by the identity provider
    external_id = db.Column(db.String(255), unique=True, nullable=False, index=True)
    email = db.Column(db.String(120), index=True)
    display_name = db.Column(db.String(100), nullable=False)

    # Account status
    is_active = db.Column(db.Boolean, default=True)
    is_admin = db.Column(db.Boolean, default=False)  # May enter results

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    last_login = db.Column(db.DateTime)

    # Relationships
    picks = db.relationship(
        "Pick",
        backref="user",
        lazy="dynamic",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    bowl_picks = db.relationship(
        "BowlPick",
        backref="user",
        lazy="dynamic",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<User {self.display_name}>"

    def set_display_name(self, display_name):
        """Set display name with sanitization"""
        import html

        if display_name:
            self.display_name = html.escape(display_name.strip())

    @staticmethod
    def get_or_create(external_id, email=None, display_name=None):
        """Find the user for an authenticated identity, creating it on first login"""
        user = User.query.filter_by(external_id=external_id).first()

        if user is None:
            user = User(external_id=external_id, email=email)
            user.set_display_name(display_name or email or external_id)
            db.session.add(user)
        else:
            # Keep profile fields in step with the identity provider
            if email:
                user.email = email
            if display_name:
                user.set_display_name(display_name)

        user.last_login = datetime.now(timezone.utc)
        db.session.commit()
        return user

    def to_dict(self):
        return {
            "id": self.id,
            "display_name": self.display_name,
            "email": self.email,
            "is_admin": bool(self.is_admin),
            "is_active": bool(self.is_active),
        }
