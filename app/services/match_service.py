"""
Match administration: fixtures, status changes and result recording.

Recording a result completes the match and runs the scoring pass in the
same unit of work, so a committed result always has its points applied.
"""

import logging
from datetime import datetime, timezone

from app.errors import (
    InvalidStateError,
    InvalidTeamSelection,
    MatchAlreadyScored,
    MatchNotFound,
    TeamNotFound,
    ValidationError,
)
from app.utils.scoring import ScoringEngine

logger = logging.getLogger(__name__)

STATUS_SEQUENCE = ("upcoming", "ongoing", "completed")


class MatchService:
    def __init__(self, store, scoring_engine=None):
        self.store = store
        self.scoring = scoring_engine or ScoringEngine(store)

    def _get_match(self, match_id):
        match = self.store.get_match(match_id)
        if not match:
            raise MatchNotFound(f"Match with id {match_id} not found")
        return match

    def _validate_teams(self, team1_id, team2_id):
        if team1_id == team2_id:
            raise ValidationError("A match needs two different teams")
        for team_id in (team1_id, team2_id):
            if not self.store.get_team(team_id):
                raise TeamNotFound(f"Team with id {team_id} not found")

    def create_match(self, tournament_name, team1_id, team2_id, location, match_date):
        self._validate_teams(team1_id, team2_id)
        match = self.store.create_match(
            tournament_name=tournament_name,
            team1_id=team1_id,
            team2_id=team2_id,
            location=location,
            match_date=match_date,
        )
        logger.info(f"Match {match.id} created: {tournament_name}")
        return match

    def update_match(self, match_id, **fields):
        """General fixture edit; results must go through record_match_result"""
        match = self._get_match(match_id)

        unknown = set(fields) - match.UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(
                "Unknown fields for Match: " + ", ".join(sorted(unknown))
            )

        teams_changed = any(
            name in fields and fields[name] != getattr(match, name)
            for name in ("team1_id", "team2_id")
        )
        if teams_changed:
            # Predictions and results refer to the current pair of teams
            if not match.is_upcoming:
                raise InvalidStateError(
                    f"Cannot change the teams of a {match.status} match"
                )
            if self.store.list_predictions(match_id=match_id):
                raise InvalidStateError(
                    "Cannot change the teams of a match that has predictions"
                )
            self._validate_teams(
                fields.get("team1_id", match.team1_id),
                fields.get("team2_id", match.team2_id),
            )

        status = fields.get("status")
        if status is not None and status != match.status:
            if status not in STATUS_SEQUENCE:
                raise ValidationError(f"Unknown match status '{status}'")
            if status == "completed":
                raise InvalidStateError(
                    "Matches are completed by recording their result"
                )
            if STATUS_SEQUENCE.index(status) < STATUS_SEQUENCE.index(match.status):
                raise InvalidStateError(
                    f"Cannot move a match from {match.status} back to {status}"
                )

        return self.store.update_match(match_id, **fields)

    def start_match(self, match_id):
        """Move an upcoming match to ongoing, closing predictions"""
        match = self._get_match(match_id)
        if not match.is_upcoming:
            raise InvalidStateError("Only upcoming matches can be changed to ongoing")
        return self.store.update_match(match_id, status="ongoing")

    def record_match_result(
        self,
        match_id,
        toss_winner_id,
        match_winner_id,
        team1_score=None,
        team2_score=None,
        result_summary=None,
    ):
        """Complete a match with its result and score its predictions

        Returns:
            (match, scoring summary)
        """
        match = self._get_match(match_id)

        if match.toss_winner_id is not None or match.match_winner_id is not None:
            raise MatchAlreadyScored(
                f"Result for match {match_id} has already been recorded"
            )

        if toss_winner_id is None or match_winner_id is None:
            raise ValidationError("Both toss winner and match winner are required")

        for label, team_id in (
            ("Toss winner", toss_winner_id),
            ("Match winner", match_winner_id),
        ):
            if not match.has_team(team_id):
                raise InvalidTeamSelection(
                    f"{label} must be one of the two teams in the match"
                )

        match = self.store.update_match(
            match_id,
            status="completed",
            toss_winner_id=toss_winner_id,
            match_winner_id=match_winner_id,
            team1_score=team1_score,
            team2_score=team2_score,
            result_summary=result_summary,
        )
        logger.info(f"Result recorded for match {match_id}")

        summary = self.scoring.calculate_points(match_id)
        return match, summary

    def delete_match(self, match_id):
        self.store.delete_match(match_id)
        logger.info(f"Match {match_id} deleted with its predictions")

    def lock_started_matches(self, now=None):
        """Move every upcoming match whose start time has passed to ongoing

        Returns:
            list of locked matches
        """
        now = now or datetime.now(timezone.utc)
        locked = []
        for match in self.store.list_matches_to_lock(now):
            self.store.update_match(match.id, status="ongoing")
            locked.append(match)

        if locked:
            logger.info(
                f"Locked {len(locked)} started matches: "
                + ", ".join(str(m.id) for m in locked)
            )
        return locked
