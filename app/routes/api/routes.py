import logging
from functools import wraps

from flask import jsonify, request
from flask_login import current_user, login_required

from app import db
from app.errors import MatchNotFound, TeamNotFound
from app.forms.auth import ChangePasswordForm, EditProfileForm
from app.forms.matches import (
    MatchForm,
    MatchResultForm,
    MatchStatusForm,
    MatchUpdateForm,
    SettingForm,
    TeamForm,
)
from app.forms.predictions import PredictionForm
from app.routes.api import bp
from app.routes.helpers import admin_required, get_store, submitted_fields, validate_form
from app.services import (
    LeaderboardService,
    MatchService,
    PredictionService,
    SettingsService,
    UserService,
)
from app.services.leaderboard import resolve_timeframe
from app.utils.cache_utils import cached_query, invalidate_leaderboard_cache

logger = logging.getLogger(__name__)


def add_security_headers(f):
    """Keep API responses out of shared caches"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        response = f(*args, **kwargs)
        if hasattr(response, "headers"):
            response.headers["Cache-Control"] = (
                "no-store, no-cache, must-revalidate, max-age=0"
            )
        return response

    return decorated_function


def _get_match_or_404(match_id):
    match = get_store().get_match(match_id)
    if not match:
        raise MatchNotFound(f"Match with id {match_id} not found")
    return match


@cached_query("leaderboard")
def _leaderboard_rows(timeframe):
    return LeaderboardService(get_store()).get_leaderboard(timeframe)


# Teams


@bp.route("/teams")
def teams():
    """Get all teams"""
    return jsonify([team.to_dict() for team in get_store().list_teams()])


@bp.route("/teams", methods=["POST"])
@admin_required
def create_team():
    form = validate_form(TeamForm, "Invalid team data")
    store = get_store()

    team = store.create_team(
        name=form.name.data.strip(),
        logo_url=form.logo_url.data or None,
        is_custom=form.is_custom.data,
    )
    db.session.commit()

    logger.info(f"Team '{team.name}' created by {current_user.username}")
    return jsonify(team.to_dict()), 201


@bp.route("/teams/<int:team_id>")
def team(team_id):
    team = get_store().get_team(team_id)
    if not team:
        raise TeamNotFound(f"Team with id {team_id} not found")
    return jsonify(team.to_dict())


# Matches


@bp.route("/matches")
def matches():
    """List matches, optionally filtered by ?status="""
    status = request.args.get("status")
    return jsonify([m.to_dict() for m in get_store().list_matches(status=status)])


@bp.route("/matches", methods=["POST"])
@admin_required
def create_match():
    form = validate_form(MatchForm, "Invalid match data")

    match = MatchService(get_store()).create_match(
        tournament_name=form.tournament_name.data.strip(),
        team1_id=form.team1_id.data,
        team2_id=form.team2_id.data,
        location=form.location.data.strip(),
        match_date=form.match_date.data,
    )
    db.session.commit()
    return jsonify(match.to_dict()), 201


@bp.route("/matches/<int:match_id>")
def match(match_id):
    return jsonify(_get_match_or_404(match_id).to_dict())


@bp.route("/matches/<int:match_id>", methods=["PATCH"])
@admin_required
def update_match(match_id):
    """Edit a fixture; status 'completed' records the submitted result"""
    form = validate_form(MatchUpdateForm, "Invalid match data")
    fields = submitted_fields(form)
    service = MatchService(get_store())

    completing = fields.get("status") == "completed"
    if completing:
        fields.pop("status")

    if fields:
        service.update_match(match_id, **fields)

    summary = None
    if completing:
        result = validate_form(MatchResultForm, "Invalid match result")
        _, summary = service.record_match_result(
            match_id,
            toss_winner_id=result.toss_winner_id.data,
            match_winner_id=result.match_winner_id.data,
            team1_score=result.team1_score.data or None,
            team2_score=result.team2_score.data or None,
            result_summary=result.result_summary.data or None,
        )

    db.session.commit()
    if summary is not None:
        invalidate_leaderboard_cache()

    data = _get_match_or_404(match_id).to_dict()
    if summary is not None:
        data["scoring"] = summary
    return jsonify(data)


@bp.route("/matches/<int:match_id>", methods=["DELETE"])
@admin_required
def delete_match(match_id):
    MatchService(get_store()).delete_match(match_id)
    db.session.commit()
    invalidate_leaderboard_cache()
    return "", 204


@bp.route("/matches/<int:match_id>/result", methods=["POST"])
@admin_required
def record_result(match_id):
    """Record a match result and award points for it"""
    form = validate_form(MatchResultForm, "Invalid match result")

    match, summary = MatchService(get_store()).record_match_result(
        match_id,
        toss_winner_id=form.toss_winner_id.data,
        match_winner_id=form.match_winner_id.data,
        team1_score=form.team1_score.data or None,
        team2_score=form.team2_score.data or None,
        result_summary=form.result_summary.data or None,
    )
    db.session.commit()
    invalidate_leaderboard_cache()

    logger.info(
        f"Result for match {match_id} recorded by {current_user.username}: "
        f"{summary['points_awarded']} points to {summary['users_awarded']} users"
    )
    return jsonify({"match": match.to_dict(), "scoring": summary})


@bp.route("/matches/<int:match_id>/status", methods=["PATCH"])
@admin_required
def update_match_status(match_id):
    """Start a match so no further predictions are accepted"""
    validate_form(MatchStatusForm, "Invalid status")

    match = MatchService(get_store()).start_match(match_id)
    db.session.commit()
    return jsonify(match.to_dict())


# Predictions


@bp.route("/predictions")
@login_required
@add_security_headers
def predictions():
    """Current user's predictions with their matches"""
    user_predictions = PredictionService(get_store()).get_user_predictions(
        current_user.id
    )
    return jsonify([p.to_dict(include_match=True) for p in user_predictions])


@bp.route("/predictions", methods=["POST"])
@login_required
def submit_prediction():
    form = validate_form(PredictionForm, "Invalid prediction")

    prediction = PredictionService(get_store()).submit_prediction(
        current_user.id,
        form.match_id.data,
        form.predicted_toss_winner_id.data,
        form.predicted_match_winner_id.data,
    )
    db.session.commit()
    invalidate_leaderboard_cache()
    return jsonify(prediction.to_dict())


# Leaderboard


@bp.route("/leaderboard")
def leaderboard():
    """Ranked standings for ?timeframe=weekly|monthly|all-time"""
    timeframe = resolve_timeframe(request.args.get("timeframe"))
    return jsonify(_leaderboard_rows(timeframe))


# Profile


@bp.route("/profile", methods=["PATCH"])
@login_required
def update_profile():
    form = validate_form(EditProfileForm, "Invalid profile data")
    fields = submitted_fields(form)

    user = UserService(get_store()).update_profile(current_user.id, **fields)
    db.session.commit()
    invalidate_leaderboard_cache()
    return jsonify(user.to_dict(include_private=True))


@bp.route("/profile/change-password", methods=["POST"])
@login_required
def change_password():
    form = validate_form(ChangePasswordForm, "Invalid password data")

    UserService(get_store()).change_password(
        current_user.id, form.current_password.data, form.new_password.data
    )
    db.session.commit()
    return jsonify({"success": True, "message": "Password changed successfully"})


# Site settings


@bp.route("/settings/<key>")
def get_setting(key):
    return jsonify({"key": key, "value": SettingsService(get_store()).get_setting(key)})


@bp.route("/settings/<key>", methods=["PUT"])
@admin_required
def update_setting(key):
    form = validate_form(SettingForm, "Value is required")

    setting = SettingsService(get_store()).update_setting(key, form.value.data)
    db.session.commit()

    logger.info(f"Setting '{setting.key}' updated by {current_user.username}")
    return jsonify(setting.to_dict())
