from datetime import datetime, timezone

from app import db


class PointsLedgerEntry(db.Model):
    """Append-only audit record of a points delta awarded to a user"""

    __tablename__ = "points_ledger"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=False)
    match_id = db.Column(db.Integer, nullable=False)

    # Delta, not a running total
    points = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.String(255), nullable=False)

    timestamp = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        db.UniqueConstraint(
            "user_id", "match_id", "reason", name="unique_user_match_reason"
        ),
        db.Index("idx_ledger_user", "user_id"),
        db.Index("idx_ledger_match", "match_id"),
    )

    def __repr__(self):
        return f"<PointsLedgerEntry user_id={self.user_id} match_id={self.match_id} points={self.points}>"

    def to_dict(self):
        """Convert entry to dictionary for API responses"""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "match_id": self.match_id,
            "points": self.points,
            "reason": self.reason,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }
