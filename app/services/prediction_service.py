"""
Prediction intake.

Accepts a user's toss and match winner prediction while the match is still
upcoming. A user holds at most one prediction per match: a second
submission overwrites the picks of the first.
"""

import logging

from sqlalchemy.exc import IntegrityError

from app.errors import InvalidTeamSelection, MatchNotFound, PredictionsClosed, UserNotFound

logger = logging.getLogger(__name__)

STATUS_ORDER = {"upcoming": 0, "ongoing": 1, "completed": 2}


class PredictionService:
    def __init__(self, store):
        self.store = store

    def submit_prediction(
        self, user_id, match_id, predicted_toss_winner_id, predicted_match_winner_id
    ):
        """Create or update the user's prediction for a match

        Raises:
            MatchNotFound: match_id does not resolve
            PredictionsClosed: the match is no longer upcoming
            InvalidTeamSelection: a pick is not one of the match's teams
        """
        match = self.store.get_match(match_id)
        if not match:
            raise MatchNotFound(f"Match with id {match_id} not found")

        if not match.is_upcoming:
            raise PredictionsClosed("Predictions are closed for this match")

        for label, team_id in (
            ("toss winner", predicted_toss_winner_id),
            ("match winner", predicted_match_winner_id),
        ):
            if not match.has_team(team_id):
                raise InvalidTeamSelection(
                    f"Predicted {label} must be one of the two teams in the match"
                )

        if not self.store.get_user(user_id):
            raise UserNotFound(f"User with id {user_id} not found")

        existing = self.store.get_prediction_for(user_id, match_id)
        if existing:
            return self._overwrite(
                existing, predicted_toss_winner_id, predicted_match_winner_id
            )

        # The unique (user_id, match_id) constraint settles concurrent
        # first submissions; the loser falls back to the update path
        session = self.store.session
        try:
            with session.begin_nested():
                prediction = self.store.create_prediction(
                    user_id,
                    match_id,
                    predicted_toss_winner_id,
                    predicted_match_winner_id,
                )
        except IntegrityError:
            existing = self.store.get_prediction_for(user_id, match_id)
            if not existing:
                raise
            return self._overwrite(
                existing, predicted_toss_winner_id, predicted_match_winner_id
            )

        logger.info(
            f"Prediction {prediction.id} created for user {user_id} on match {match_id}"
        )
        return prediction

    def _overwrite(self, prediction, toss_winner_id, match_winner_id):
        prediction = self.store.update_prediction(
            prediction.id,
            predicted_toss_winner_id=toss_winner_id,
            predicted_match_winner_id=match_winner_id,
        )
        logger.info(
            f"Prediction {prediction.id} updated for user {prediction.user_id} "
            f"on match {prediction.match_id}"
        )
        return prediction

    def get_user_predictions(self, user_id):
        """User's predictions for existing matches, upcoming first then by date"""
        predictions = [
            p for p in self.store.list_predictions(user_id=user_id) if p.match
        ]
        predictions.sort(
            key=lambda p: (STATUS_ORDER.get(p.match.status, 3), p.match.match_date)
        )
        return predictions

    def get_all_predictions(self):
        return self.store.list_predictions()
