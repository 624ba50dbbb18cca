import logging

from flask import jsonify, request
from flask_login import current_user

from app import db
from app.forms.auth import AdminUserForm
from app.routes.admin import bp
from app.routes.helpers import admin_required, get_store, submitted_fields, validate_form
from app.services import PredictionService, UserService
from app.utils.cache_utils import invalidate_leaderboard_cache

logger = logging.getLogger(__name__)


@bp.route("/users")
@admin_required
def users():
    """All users with their private details"""
    return jsonify([u.to_dict(include_private=True) for u in get_store().list_users()])


@bp.route("/users/<int:user_id>", methods=["PATCH"])
@admin_required
def update_user(user_id):
    form = validate_form(AdminUserForm, "Invalid user data")
    fields = submitted_fields(form)

    user = UserService(get_store()).admin_update_user(user_id, **fields)
    db.session.commit()
    invalidate_leaderboard_cache()

    logger.info(
        f"User {user.username} updated by {current_user.username}: "
        + ", ".join(sorted(fields))
    )
    return jsonify(user.to_dict(include_private=True))


@bp.route("/users/<int:user_id>", methods=["DELETE"])
@admin_required
def delete_user(user_id):
    UserService(get_store()).delete_user(user_id, acting_user_id=current_user.id)
    db.session.commit()
    invalidate_leaderboard_cache()
    return "", 204


@bp.route("/predictions")
@admin_required
def predictions():
    """Every prediction in the system"""
    all_predictions = PredictionService(get_store()).get_all_predictions()
    return jsonify([p.to_dict(include_match=True) for p in all_predictions])


@bp.route("/ledger")
@admin_required
def ledger():
    """Points ledger, optionally for one user (?user_id=)"""
    user_id = request.args.get("user_id", type=int)
    entries = get_store().list_ledger_entries(user_id=user_id)
    return jsonify([entry.to_dict() for entry in entries])
