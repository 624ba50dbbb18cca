"""
Entity store for the prediction core.

Thin persistence layer over a SQLAlchemy session: lookups by id and by
foreign key, creation, partial updates and deletes for users, teams,
matches, predictions, ledger entries and site settings. It does not score,
rank or enforce lifecycle rules; callers do. Writes are flushed, never
committed, so a caller can group several writes into one transaction.
"""

from datetime import datetime, timezone

from sqlalchemy import case, func

from app.errors import (
    MatchNotFound,
    PredictionNotFound,
    TeamNotFound,
    UserNotFound,
    ValidationError,
)
from app.models import (
    Match,
    PointsLedgerEntry,
    Prediction,
    SiteSetting,
    Team,
    User,
)


def _apply_fields(instance, fields, allowed):
    """Merge a partial update into an instance, rejecting unknown fields"""
    unknown = set(fields) - set(allowed)
    if unknown:
        raise ValidationError(
            f"Unknown fields for {instance.__class__.__name__}: "
            + ", ".join(sorted(unknown))
        )
    for name, value in fields.items():
        setattr(instance, name, value)
    return instance


class EntityStore:
    def __init__(self, session):
        self.session = session

    # Users

    def get_user(self, user_id):
        return self.session.get(User, user_id)

    def get_user_by_username(self, username):
        """Case-insensitive username lookup"""
        if not username:
            return None
        return (
            self.session.query(User)
            .filter(func.lower(User.username) == username.strip().lower())
            .first()
        )

    def list_users(self):
        return self.session.query(User).order_by(User.id).all()

    def create_user(
        self, username, password, display_name=None, email=None, role="user"
    ):
        user = User(username=username.strip(), email=email or None, role=role, points=0)
        user.set_display_name(display_name)
        user.set_password(password)
        self.session.add(user)
        self.session.flush()
        return user

    def update_user(self, user_id, **fields):
        user = self.get_user(user_id)
        if not user:
            raise UserNotFound(f"User with id {user_id} not found")
        _apply_fields(user, fields, User.UPDATABLE_FIELDS)
        self.session.flush()
        return user

    def increment_user_points(self, user_id, points):
        """Atomically add to a user's running total; returns False if absent"""
        updated = (
            self.session.query(User)
            .filter(User.id == user_id)
            .update({User.points: User.points + points}, synchronize_session="fetch")
        )
        return updated == 1

    def set_user_points(self, user_id, points):
        """Overwrite a user's running total (ledger rebuilds only)"""
        user = self.get_user(user_id)
        if not user:
            raise UserNotFound(f"User with id {user_id} not found")
        user.points = points
        self.session.flush()
        return user

    def delete_user(self, user_id):
        """Delete a user; their predictions and ledger entries are kept"""
        user = self.get_user(user_id)
        if not user:
            raise UserNotFound(f"User with id {user_id} not found")
        self.session.delete(user)
        self.session.flush()

    # Teams

    def get_team(self, team_id):
        return self.session.get(Team, team_id)

    def get_team_by_name(self, name):
        return (
            self.session.query(Team)
            .filter(func.lower(Team.name) == name.strip().lower())
            .first()
        )

    def list_teams(self):
        return self.session.query(Team).order_by(Team.name).all()

    def create_team(self, name, logo_url=None, is_custom=True):
        team = Team(name=name.strip(), logo_url=logo_url or None, is_custom=is_custom)
        self.session.add(team)
        self.session.flush()
        return team

    def update_team(self, team_id, **fields):
        team = self.get_team(team_id)
        if not team:
            raise TeamNotFound(f"Team with id {team_id} not found")
        _apply_fields(team, fields, Team.UPDATABLE_FIELDS)
        self.session.flush()
        return team

    # Matches

    def get_match(self, match_id):
        return self.session.get(Match, match_id)

    def list_matches(self, status=None):
        """List matches: ongoing, then upcoming soonest first, then completed
        most recent first"""
        query = self.session.query(Match)
        if status:
            query = query.filter(Match.status == status)

        status_rank = case(
            (Match.status == "ongoing", 0),
            (Match.status == "upcoming", 1),
            else_=2,
        )
        matches = query.order_by(status_rank, Match.match_date, Match.id).all()

        # Everything except upcoming is shown most recent first
        upcoming = [m for m in matches if m.status == "upcoming"]
        ongoing = [m for m in matches if m.status == "ongoing"]
        completed = [m for m in matches if m.status == "completed"]
        ongoing.reverse()
        completed.reverse()
        return ongoing + upcoming + completed

    def create_match(
        self,
        tournament_name,
        team1_id,
        team2_id,
        location,
        match_date,
        status="upcoming",
    ):
        match = Match(
            tournament_name=tournament_name,
            team1_id=team1_id,
            team2_id=team2_id,
            location=location,
            match_date=match_date,
            status=status,
        )
        self.session.add(match)
        self.session.flush()
        return match

    def update_match(self, match_id, **fields):
        match = self.get_match(match_id)
        if not match:
            raise MatchNotFound(f"Match with id {match_id} not found")
        _apply_fields(
            match, fields, Match.UPDATABLE_FIELDS | Match.RESULT_FIELDS
        )
        self.session.flush()
        return match

    def claim_match_for_scoring(self, match_id, now=None):
        """Mark a match as scored unless it already is; returns True on claim"""
        now = now or datetime.now(timezone.utc)
        claimed = (
            self.session.query(Match)
            .filter(Match.id == match_id, Match.points_calculated_at.is_(None))
            .update({Match.points_calculated_at: now}, synchronize_session="fetch")
        )
        return claimed == 1

    def list_matches_to_lock(self, now):
        """Upcoming matches whose scheduled start has passed"""
        return (
            self.session.query(Match)
            .filter(Match.status == "upcoming", Match.match_date <= now)
            .order_by(Match.match_date)
            .all()
        )

    def delete_match(self, match_id):
        """Delete a match together with its predictions"""
        match = self.get_match(match_id)
        if not match:
            raise MatchNotFound(f"Match with id {match_id} not found")
        self.session.query(Prediction).filter(Prediction.match_id == match_id).delete(
            synchronize_session="fetch"
        )
        self.session.delete(match)
        self.session.flush()

    # Predictions

    def get_prediction(self, prediction_id):
        return self.session.get(Prediction, prediction_id)

    def get_prediction_for(self, user_id, match_id):
        return (
            self.session.query(Prediction)
            .filter_by(user_id=user_id, match_id=match_id)
            .first()
        )

    def list_predictions(self, user_id=None, match_id=None, created_since=None):
        query = self.session.query(Prediction)
        if user_id is not None:
            query = query.filter(Prediction.user_id == user_id)
        if match_id is not None:
            query = query.filter(Prediction.match_id == match_id)
        if created_since is not None:
            query = query.filter(Prediction.created_at >= created_since)
        return query.order_by(Prediction.id).all()

    def create_prediction(
        self, user_id, match_id, predicted_toss_winner_id, predicted_match_winner_id
    ):
        prediction = Prediction(
            user_id=user_id,
            match_id=match_id,
            predicted_toss_winner_id=predicted_toss_winner_id,
            predicted_match_winner_id=predicted_match_winner_id,
            created_at=datetime.now(timezone.utc),
            points_earned=0,
        )
        self.session.add(prediction)
        self.session.flush()
        return prediction

    def update_prediction(self, prediction_id, **fields):
        prediction = self.get_prediction(prediction_id)
        if not prediction:
            raise PredictionNotFound(f"Prediction with id {prediction_id} not found")
        _apply_fields(prediction, fields, Prediction.UPDATABLE_FIELDS)
        self.session.flush()
        return prediction

    def set_prediction_points(self, prediction_id, points):
        """Overwrite the points earned by a prediction"""
        prediction = self.get_prediction(prediction_id)
        if not prediction:
            raise PredictionNotFound(f"Prediction with id {prediction_id} not found")
        prediction.points_earned = points
        self.session.flush()
        return prediction

    def prediction_stats_by_user(self, since=None, until=None):
        """Per-user count of predictions and sum of points earned

        Returns:
            dict mapping user_id to (prediction_count, points_sum)
        """
        query = self.session.query(
            Prediction.user_id,
            func.count(Prediction.id),
            func.coalesce(func.sum(Prediction.points_earned), 0),
        )
        if since is not None:
            query = query.filter(Prediction.created_at >= since)
        if until is not None:
            query = query.filter(Prediction.created_at <= until)

        rows = query.group_by(Prediction.user_id).all()
        return {user_id: (int(count), int(total)) for user_id, count, total in rows}

    # Points ledger (append-only)

    def append_ledger_entry(self, user_id, match_id, points, reason):
        entry = PointsLedgerEntry(
            user_id=user_id,
            match_id=match_id,
            points=points,
            reason=reason,
            timestamp=datetime.now(timezone.utc),
        )
        self.session.add(entry)
        self.session.flush()
        return entry

    def list_ledger_entries(self, user_id=None, match_id=None):
        query = self.session.query(PointsLedgerEntry)
        if user_id is not None:
            query = query.filter(PointsLedgerEntry.user_id == user_id)
        if match_id is not None:
            query = query.filter(PointsLedgerEntry.match_id == match_id)
        return query.order_by(PointsLedgerEntry.id).all()

    def ledger_totals_by_user(self):
        rows = (
            self.session.query(
                PointsLedgerEntry.user_id, func.sum(PointsLedgerEntry.points)
            )
            .group_by(PointsLedgerEntry.user_id)
            .all()
        )
        return {user_id: int(total or 0) for user_id, total in rows}

    # Site settings

    def get_setting(self, key):
        setting = self.session.query(SiteSetting).filter_by(key=key).first()
        return setting.value if setting else None

    def update_setting(self, key, value):
        """Insert or update a setting"""
        setting = self.session.query(SiteSetting).filter_by(key=key).first()
        if setting:
            setting.value = value
        else:
            setting = SiteSetting(key=key, value=value)
            self.session.add(setting)
        self.session.flush()
        return setting
