from app import db


class Team(db.Model):
    __tablename__ = "teams"

    # Only the logo may change once a team exists
    UPDATABLE_FIELDS = frozenset({"logo_url"})

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    logo_url = db.Column(db.String(500))

    # Admin-added ad hoc teams, as opposed to the seeded canonical ones
    is_custom = db.Column(db.Boolean, nullable=False, default=False)

    def __repr__(self):
        return f"<Team {self.name}>"

    def to_dict(self):
        """Convert team to dictionary for API responses"""
        return {
            "id": self.id,
            "name": self.name,
            "logo_url": self.logo_url,
            "is_custom": self.is_custom,
        }
