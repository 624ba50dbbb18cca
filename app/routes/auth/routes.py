import logging

from flask import jsonify
from flask_login import current_user, login_required, login_user, logout_user

from app import db, limiter, login_manager
from app.forms.auth import LoginForm, RegistrationForm
from app.routes.auth import bp
from app.routes.helpers import get_store, validate_form
from app.services import UserService

logger = logging.getLogger(__name__)


@login_manager.user_loader
def load_user(user_id):
    return get_store().get_user(int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"error": "unauthorized", "message": "Unauthorized"}), 401


@bp.route("/register", methods=["POST"])
@limiter.limit("5 per hour")
def register():
    form = validate_form(RegistrationForm, "Invalid registration data")

    user = UserService(get_store()).register(
        username=form.username.data,
        password=form.password.data,
        display_name=form.display_name.data,
        email=form.email.data,
    )
    db.session.commit()

    login_user(user)
    return jsonify(user.to_dict(include_private=True)), 201


@bp.route("/login", methods=["POST"])
@limiter.limit("10 per minute")
def login():
    form = validate_form(LoginForm, "Invalid login data")

    user = UserService(get_store()).authenticate(
        form.username.data, form.password.data
    )
    if not user:
        logger.info(f"Failed login for username '{form.username.data}'")
        return (
            jsonify({"error": "unauthorized", "message": "Invalid username or password"}),
            401,
        )

    login_user(user, remember=form.remember_me.data)
    return jsonify(user.to_dict(include_private=True))


@bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return "", 204


@bp.route("/me")
@login_required
def me():
    return jsonify(current_user.to_dict(include_private=True))
