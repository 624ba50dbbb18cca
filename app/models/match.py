from datetime import datetime, timezone

from app import db


class Match(db.Model):
    __tablename__ = "matches"

    STATUSES = ("upcoming", "ongoing", "completed")

    # Fields editable through a general match update; results go through
    # record_match_result so that scoring always follows them
    UPDATABLE_FIELDS = frozenset(
        {"tournament_name", "team1_id", "team2_id", "location", "match_date", "status"}
    )
    RESULT_FIELDS = frozenset(
        {
            "toss_winner_id",
            "match_winner_id",
            "team1_score",
            "team2_score",
            "result_summary",
        }
    )

    id = db.Column(db.Integer, primary_key=True)

    # Fixture details
    tournament_name = db.Column(db.String(200), nullable=False)
    team1_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)
    team2_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)
    location = db.Column(db.String(200), nullable=False)
    match_date = db.Column(db.DateTime, nullable=False)

    # upcoming -> ongoing -> completed
    status = db.Column(
        db.Enum(*STATUSES, name="match_status"), nullable=False, default="upcoming"
    )

    # Result (set on completion)
    toss_winner_id = db.Column(db.Integer, db.ForeignKey("teams.id"))
    match_winner_id = db.Column(db.Integer, db.ForeignKey("teams.id"))
    team1_score = db.Column(db.String(100))
    team2_score = db.Column(db.String(100))
    result_summary = db.Column(db.String(500))

    # Set once when the scoring pass claims the match
    points_calculated_at = db.Column(db.DateTime)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    team1 = db.relationship("Team", foreign_keys=[team1_id], lazy="joined")
    team2 = db.relationship("Team", foreign_keys=[team2_id], lazy="joined")
    toss_winner = db.relationship("Team", foreign_keys=[toss_winner_id])
    match_winner = db.relationship("Team", foreign_keys=[match_winner_id])

    __table_args__ = (
        db.Index("idx_match_status", "status"),
        db.Index("idx_match_date", "match_date"),
        db.CheckConstraint("team1_id != team2_id", name="different_teams"),
    )

    def __repr__(self):
        return f'<Match {self.team1.name if self.team1 else "TBD"} vs {self.team2.name if self.team2 else "TBD"} ({self.status})>'

    @property
    def team_ids(self):
        return (self.team1_id, self.team2_id)

    def has_team(self, team_id):
        """Check if a team plays in this match"""
        return team_id is not None and team_id in self.team_ids

    @property
    def is_upcoming(self):
        return self.status == "upcoming"

    @property
    def is_completed(self):
        return self.status == "completed"

    @property
    def has_result(self):
        """Both toss and match winners are recorded"""
        return self.toss_winner_id is not None and self.match_winner_id is not None

    @property
    def is_scored(self):
        return self.points_calculated_at is not None

    def has_started(self, now=None):
        """Check if the scheduled start time has passed"""
        if not self.match_date:
            return False
        now = now or datetime.now(timezone.utc)
        match_date = self.match_date

        # If match_date is timezone-naive, assume it's in UTC
        if match_date.tzinfo is None:
            match_date = match_date.replace(tzinfo=timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        return now >= match_date

    def to_dict(self):
        """Convert match to dictionary for API responses"""
        return {
            "id": self.id,
            "tournament_name": self.tournament_name,
            "team1_id": self.team1_id,
            "team2_id": self.team2_id,
            "team1": self.team1.to_dict() if self.team1 else None,
            "team2": self.team2.to_dict() if self.team2 else None,
            "location": self.location,
            "match_date": self.match_date.isoformat() if self.match_date else None,
            "status": self.status,
            "toss_winner_id": self.toss_winner_id,
            "match_winner_id": self.match_winner_id,
            "toss_winner": self.toss_winner.to_dict() if self.toss_winner else None,
            "match_winner": (
                self.match_winner.to_dict() if self.match_winner else None
            ),
            "team1_score": self.team1_score,
            "team2_score": self.team2_score,
            "result_summary": self.result_summary,
        }
