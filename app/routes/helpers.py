from functools import wraps

from flask import abort, request
from flask_login import current_user, login_required

from app import db
from app.errors import ValidationError
from app.services import EntityStore


def get_store():
    """Entity store bound to the request's database session"""
    return EntityStore(db.session)


def admin_required(f):
    """Require an authenticated administrator"""

    @wraps(f)
    @login_required
    def decorated_function(*args, **kwargs):
        if not current_user.is_admin:
            abort(403)
        return f(*args, **kwargs)

    return decorated_function


def validate_form(form_class, message="Invalid data"):
    """Validate the request body with a form, raising ValidationError"""
    form = form_class()
    if not form.validate():
        raise ValidationError(message, errors=form.errors)
    return form


def submitted_fields(form):
    """Data of the form fields present in the request body (for PATCH)"""
    payload = request.get_json(silent=True)
    if payload is None:
        payload = request.form
    return {
        name: field.data
        for name, field in form._fields.items()
        if name in payload
    }
