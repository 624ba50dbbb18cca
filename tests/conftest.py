from datetime import datetime, timedelta, timezone

import pytest

from app import create_app, db
from app.services import EntityStore

PASSWORD = "Secret123"


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return EntityStore(db.session)


@pytest.fixture
def teams(store):
    """India and Australia"""
    return store.create_team("India", is_custom=False), store.create_team(
        "Australia", is_custom=False
    )


@pytest.fixture
def make_user(store):
    def _make_user(username, role="user", points=0):
        user = store.create_user(username, PASSWORD, role=role)
        if points:
            store.set_user_points(user.id, points)
        return user

    return _make_user


@pytest.fixture
def make_match(store, teams):
    def _make_match(status="upcoming", starts_in=timedelta(days=1)):
        india, australia = teams
        return store.create_match(
            tournament_name="World Cup",
            team1_id=india.id,
            team2_id=australia.id,
            location="Mumbai",
            match_date=datetime.now(timezone.utc) + starts_in,
            status=status,
        )

    return _make_match


@pytest.fixture
def admin(make_user):
    return make_user("admin", role="admin")


def login(client, username, password=PASSWORD):
    response = client.post(
        "/auth/login", json={"username": username, "password": password}
    )
    assert response.status_code == 200, response.get_json()
    return response
