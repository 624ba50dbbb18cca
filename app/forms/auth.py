import html

from flask_wtf import FlaskForm
from sqlalchemy import func
from wtforms import BooleanField, PasswordField, StringField
from wtforms.validators import (
    AnyOf,
    DataRequired,
    Email,
    Length,
    Optional,
    Regexp,
    URL,
    ValidationError,
)

from app.models.user import User

PASSWORD_VALIDATORS = [
    DataRequired(),
    Length(min=8, message="Password must be at least 8 characters long"),
    Regexp(
        r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).*$",
        message="Password must contain at least one uppercase letter, one lowercase letter, and one number",
    ),
]


def sanitize_input(text):
    """Sanitize user input to prevent XSS"""
    if not text:
        return text
    return html.escape(text.strip())


class LoginForm(FlaskForm):
    username = StringField(
        "Username", validators=[DataRequired(), Length(min=3, max=80)]
    )
    password = PasswordField("Password", validators=[DataRequired()])
    remember_me = BooleanField("Remember Me")


class RegistrationForm(FlaskForm):
    username = StringField(
        "Username",
        validators=[
            DataRequired(),
            Length(
                min=3, max=80, message="Username must be between 3 and 80 characters"
            ),
            Regexp(
                r"^[a-zA-Z0-9_.-]+$",
                message="Username can only contain letters, numbers, dots, underscores, and hyphens",
            ),
        ],
    )
    email = StringField("Email", validators=[Optional(), Email(), Length(max=120)])
    display_name = StringField(
        "Display Name (Optional)",
        validators=[
            Optional(),
            Length(max=100),
            Regexp(
                r"^[a-zA-Z0-9 _.-]*$",
                message="Display name contains invalid characters",
            ),
        ],
    )
    password = PasswordField("Password", validators=PASSWORD_VALIDATORS)

    def validate_username(self, username):
        user = User.query.filter(
            func.lower(User.username) == username.data.strip().lower()
        ).first()
        if user:
            raise ValidationError(
                "Username already exists. Please choose a different username."
            )


class EditProfileForm(FlaskForm):
    display_name = StringField(
        "Display Name",
        validators=[
            Optional(),
            Length(max=100),
            Regexp(
                r"^[a-zA-Z0-9 _.-]*$",
                message="Display name contains invalid characters",
            ),
        ],
    )
    email = StringField("Email", validators=[Optional(), Email(), Length(max=120)])
    profile_image = StringField(
        "Profile Image URL", validators=[Optional(), URL(), Length(max=500)]
    )


class ChangePasswordForm(FlaskForm):
    current_password = PasswordField("Current Password", validators=[DataRequired()])
    new_password = PasswordField("New Password", validators=PASSWORD_VALIDATORS)


class AdminUserForm(FlaskForm):
    """Partial user update by an administrator"""

    role = StringField("Role", validators=[Optional(), AnyOf(User.ROLES)])
    display_name = StringField(
        "Display Name",
        validators=[
            Optional(),
            Length(max=100),
            Regexp(
                r"^[a-zA-Z0-9 _.-]*$",
                message="Display name contains invalid characters",
            ),
        ],
    )
    email = StringField("Email", validators=[Optional(), Email(), Length(max=120)])
