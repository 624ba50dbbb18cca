"""
Account management: registration, profiles, admin user edits and seeding.
"""

import logging

from app.errors import InvalidStateError, UserNotFound, ValidationError
from app.models import User

logger = logging.getLogger(__name__)

CANONICAL_TEAMS = [
    ("India", "/assets/flags/india.svg"),
    ("Australia", "/assets/flags/australia.svg"),
    ("England", "/assets/flags/england.svg"),
    ("New Zealand", "/assets/flags/new-zealand.svg"),
    ("Pakistan", "/assets/flags/pakistan.svg"),
    ("South Africa", "/assets/flags/south-africa.svg"),
    ("West Indies", "/assets/flags/west-indies.svg"),
    ("Sri Lanka", "/assets/flags/sri-lanka.svg"),
    ("Bangladesh", "/assets/flags/bangladesh.svg"),
    ("Afghanistan", "/assets/flags/afghanistan.svg"),
]


class UserService:
    def __init__(self, store):
        self.store = store

    def _get_user(self, user_id):
        user = self.store.get_user(user_id)
        if not user:
            raise UserNotFound(f"User with id {user_id} not found")
        return user

    def register(self, username, password, display_name=None, email=None, role="user"):
        if self.store.get_user_by_username(username):
            raise ValidationError(
                "Username already taken", errors={"username": ["Username already taken"]}
            )
        user = self.store.create_user(
            username, password, display_name=display_name, email=email, role=role
        )
        logger.info(f"User {user.username} registered")
        return user

    def authenticate(self, username, password):
        """Return the user for valid credentials, else None"""
        user = self.store.get_user_by_username(username)
        if user and user.check_password(password):
            return user
        return None

    def update_profile(self, user_id, display_name=None, email=None, profile_image=None):
        user = self._get_user(user_id)
        if display_name is not None:
            user.set_display_name(display_name)
        fields = {}
        if email is not None:
            fields["email"] = email or None
        if profile_image is not None:
            fields["profile_image"] = profile_image or None
        return self.store.update_user(user.id, **fields)

    def change_password(self, user_id, current_password, new_password):
        user = self._get_user(user_id)
        if not user.check_password(current_password):
            raise ValidationError(
                "Current password is incorrect",
                errors={"current_password": ["Current password is incorrect"]},
            )
        user.set_password(new_password)
        self.store.update_user(user.id, password_hash=user.password_hash)
        logger.info(f"Password changed for user {user.username}")
        return user

    def admin_update_user(self, user_id, **fields):
        """Admin edit of role, display name or email"""
        allowed = {"role", "display_name", "email"}
        unknown = set(fields) - allowed
        if unknown:
            raise ValidationError(
                "Unknown fields for User: " + ", ".join(sorted(unknown))
            )
        if "role" in fields and fields["role"] not in User.ROLES:
            raise ValidationError(f"Unknown role '{fields['role']}'")

        user = self._get_user(user_id)
        if "display_name" in fields:
            user.set_display_name(fields.pop("display_name"))
        return self.store.update_user(user.id, **fields)

    def delete_user(self, user_id, acting_user_id=None):
        if acting_user_id is not None and user_id == acting_user_id:
            raise InvalidStateError("Administrators cannot delete their own account")
        self.store.delete_user(user_id)
        logger.info(f"User {user_id} deleted")

    def ensure_admin(self, username, password, email=None):
        """Create the seed administrator if missing; returns (user, created)"""
        user = self.store.get_user_by_username(username)
        if user:
            return user, False
        user = self.store.create_user(
            username,
            password,
            display_name="Administrator",
            email=email,
            role="admin",
        )
        logger.info(f"Admin user {username} created")
        return user, True

    def seed_teams(self):
        """Create the canonical teams that do not exist yet"""
        created = []
        for name, logo_url in CANONICAL_TEAMS:
            if not self.store.get_team_by_name(name):
                created.append(
                    self.store.create_team(name, logo_url=logo_url, is_custom=False)
                )
        return created
