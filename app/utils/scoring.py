"""
Scoring Engine for ProAce Predictions

Awards points for a completed match: one point for the correct toss winner
and one for the correct match winner, so a prediction earns 0, 1 or 2.
Each award bumps the user's running total and appends a ledger entry.

For aggregated standings see app/services/leaderboard.py
"""

import logging

from app.errors import MatchAlreadyScored, MatchNotCompleted, MatchNotFound

logger = logging.getLogger(__name__)

TOSS_POINTS = 1
MATCH_POINTS = 1


def calculate_prediction_score(prediction, match):
    """
    Calculate score for a single prediction.

    Returns:
        (points, reasons) where points is 0, 1 or 2 and reasons lists the
        correct sub-predictions in human-readable form

    Args:
        prediction: Prediction being scored
        match: the completed Match it belongs to
    """
    points = 0
    reasons = []

    if (
        match.toss_winner_id is not None
        and prediction.predicted_toss_winner_id == match.toss_winner_id
    ):
        points += TOSS_POINTS
        reasons.append("Correct toss prediction")

    if (
        match.match_winner_id is not None
        and prediction.predicted_match_winner_id == match.match_winner_id
    ):
        points += MATCH_POINTS
        reasons.append("Correct match prediction")

    return points, reasons


class ScoringEngine:
    """Scores every prediction of a completed match exactly once"""

    def __init__(self, store):
        self.store = store

    def calculate_points(self, match_id):
        """Score all predictions for a completed match

        The match is claimed before any award is written, so a second call
        for the same match raises MatchAlreadyScored instead of paying out
        twice. Nothing is committed here; the caller commits the whole pass.

        Returns:
            dict summary with predictions_scored and points_awarded
        """
        match = self.store.get_match(match_id)
        if not match:
            raise MatchNotFound(f"Match with id {match_id} not found")

        if not match.is_completed or not match.has_result:
            raise MatchNotCompleted(f"Match with id {match_id} is not completed")

        if not self.store.claim_match_for_scoring(match_id):
            logger.warning(f"Refusing to re-score match {match_id}: already scored")
            raise MatchAlreadyScored(
                f"Points for match {match_id} have already been calculated"
            )

        predictions = self.store.list_predictions(match_id=match_id)
        logger.info(f"Scoring {len(predictions)} predictions for match {match_id}")

        points_awarded = 0
        winners = 0
        for prediction in predictions:
            points, reasons = calculate_prediction_score(prediction, match)
            if points <= 0:
                continue

            self.store.set_prediction_points(prediction.id, points)
            entry = self.add_points_to_user(
                prediction.user_id, points, match_id, ", ".join(reasons)
            )
            if entry:
                points_awarded += points
                winners += 1

        logger.info(
            f"Match {match_id} scored: {winners} users awarded {points_awarded} points"
        )
        return {
            "match_id": match_id,
            "predictions_scored": len(predictions),
            "users_awarded": winners,
            "points_awarded": points_awarded,
        }

    def add_points_to_user(self, user_id, points, match_id, reason):
        """Add points to a user's total and record them in the ledger

        A missing user is logged and skipped so the rest of the match can
        still be scored.

        Returns:
            the new PointsLedgerEntry, or None if the user does not exist
        """
        if not self.store.increment_user_points(user_id, points):
            logger.warning(
                f"Skipping {points} points for missing user {user_id} (match {match_id})"
            )
            return None

        return self.store.append_ledger_entry(user_id, match_id, points, reason)
