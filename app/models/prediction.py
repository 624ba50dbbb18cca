from datetime import datetime, timezone

from app import db


class Prediction(db.Model):
    __tablename__ = "predictions"

    # created_at and points_earned are owned by the store and scoring engine
    UPDATABLE_FIELDS = frozenset(
        {"predicted_toss_winner_id", "predicted_match_winner_id"}
    )

    id = db.Column(db.Integer, primary_key=True)

    # No foreign keys: predictions outlive deleted users (orphaned by design
    # of the admin delete) and are removed explicitly with their match
    user_id = db.Column(db.Integer, nullable=False)
    match_id = db.Column(db.Integer, nullable=False)

    # Prediction details
    predicted_toss_winner_id = db.Column(db.Integer)
    predicted_match_winner_id = db.Column(db.Integer)

    # Results (written by the scoring engine)
    points_earned = db.Column(db.Integer, nullable=False, default=0)

    # Timestamps
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    match = db.relationship(
        "Match",
        primaryjoin="foreign(Prediction.match_id) == Match.id",
        lazy="joined",
        viewonly=True,
    )
    user = db.relationship(
        "User", primaryjoin="foreign(Prediction.user_id) == User.id", viewonly=True
    )
    predicted_toss_winner = db.relationship(
        "Team",
        primaryjoin="foreign(Prediction.predicted_toss_winner_id) == Team.id",
        viewonly=True,
    )
    predicted_match_winner = db.relationship(
        "Team",
        primaryjoin="foreign(Prediction.predicted_match_winner_id) == Team.id",
        viewonly=True,
    )

    # Constraints and indexes
    __table_args__ = (
        db.UniqueConstraint("user_id", "match_id", name="unique_user_match_prediction"),
        db.Index("idx_prediction_match", "match_id"),
        db.Index("idx_prediction_created", "created_at"),
    )

    def __repr__(self):
        return f"<Prediction user_id={self.user_id} match_id={self.match_id}>"

    def to_dict(self, include_match=False):
        """Convert prediction to dictionary for API responses"""
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "match_id": self.match_id,
            "predicted_toss_winner_id": self.predicted_toss_winner_id,
            "predicted_match_winner_id": self.predicted_match_winner_id,
            "points_earned": self.points_earned or 0,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

        if include_match:
            data["match"] = self.match.to_dict() if self.match else None
            data["predicted_toss_winner"] = (
                self.predicted_toss_winner.to_dict()
                if self.predicted_toss_winner
                else None
            )
            data["predicted_match_winner"] = (
                self.predicted_match_winner.to_dict()
                if self.predicted_match_winner
                else None
            )

        return data
