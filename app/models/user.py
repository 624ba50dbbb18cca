from datetime import datetime, timezone

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from app import db


class User(UserMixin, db.Model):
    __tablename__ = "users"

    ROLES = ("user", "admin")
    UPDATABLE_FIELDS = frozenset(
        {"display_name", "email", "profile_image", "role", "password_hash"}
    )

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # Profile information
    display_name = db.Column(db.String(100))
    email = db.Column(db.String(120))
    profile_image = db.Column(db.String(500))

    role = db.Column(
        db.Enum(*ROLES, name="user_role"), nullable=False, default="user"
    )

    # Running total, only adjusted by the scoring engine
    points = db.Column(db.Integer, nullable=False, default=0)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (db.Index("idx_user_points", "points"),)

    def __repr__(self):
        return f"<User {self.username}>"

    def set_password(self, password):
        """Set password hash"""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Check password against hash"""
        return check_password_hash(self.password_hash, password)

    def set_display_name(self, display_name):
        """Set display name with sanitization"""
        import html

        if display_name:
            self.display_name = html.escape(display_name.strip())
        else:
            self.display_name = None

    @property
    def is_admin(self):
        return self.role == "admin"

    @property
    def full_name(self):
        """Return display name or username"""
        return self.display_name or self.username

    def to_dict(self, include_private=False):
        """Convert user to dictionary for API responses"""
        data = {
            "id": self.id,
            "username": self.username,
            "display_name": self.display_name,
            "profile_image": self.profile_image,
            "role": self.role,
            "points": self.points or 0,
        }
        if include_private:
            data["email"] = self.email
            data["created_at"] = (
                self.created_at.isoformat() if self.created_at else None
            )
        return data
