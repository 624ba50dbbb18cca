import pytest

from app.errors import InvalidStateError, ValidationError
from app.services import SettingsService, UserService
from app.services.user_service import CANONICAL_TEAMS
from tests.conftest import PASSWORD


@pytest.fixture
def users(store):
    return UserService(store)


def test_register_and_authenticate(users):
    user = users.register("alice", PASSWORD, display_name="<Alice>")

    assert user.display_name == "&lt;Alice&gt;"
    assert user.role == "user"
    assert users.authenticate("ALICE", PASSWORD) == user
    assert users.authenticate("alice", "Wrong1234") is None

    with pytest.raises(ValidationError):
        users.register("Alice", PASSWORD)


def test_admin_cannot_delete_self(users, admin):
    with pytest.raises(InvalidStateError):
        users.delete_user(admin.id, acting_user_id=admin.id)


def test_ensure_admin_is_idempotent(users):
    admin, created = users.ensure_admin("root", PASSWORD)
    again, created_again = users.ensure_admin("root", PASSWORD)

    assert created and not created_again
    assert again == admin
    assert admin.is_admin


def test_seed_teams_skips_existing(users, store):
    store.create_team("India")

    created = users.seed_teams()

    assert len(created) == len(CANONICAL_TEAMS) - 1
    assert all(not team.is_custom for team in created)
    assert users.seed_teams() == []


def test_settings_fall_back_to_config(app, store):
    settings = SettingsService(store)

    assert settings.get_setting("siteTitle") == app.config["SITE_TITLE"]
    assert settings.get_setting("unknown") is None

    settings.update_setting("siteTitle", "Cricket Cup")
    assert settings.get_setting("siteTitle") == "Cricket Cup"

    with pytest.raises(ValidationError):
        settings.update_setting("siteTitle", "  ")


def test_seed_default_settings(app, store):
    settings = SettingsService(store)
    store.update_setting("siteTitle", "Custom")

    assert sorted(settings.seed_defaults()) == ["siteDescription", "siteLogo"]
    assert store.get_setting("siteTitle") == "Custom"


def test_admin_display_name_edits_are_sanitized(users, make_user):
    user = make_user("alice")

    updated = users.admin_update_user(user.id, display_name=" <b>Ali</b> ", role="admin")

    assert updated.display_name == "&lt;b&gt;Ali&lt;/b&gt;"
    assert updated.role == "admin"
