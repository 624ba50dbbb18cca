from datetime import timedelta

from app import cache, db
from app.models import Prediction, User
from tests.conftest import PASSWORD, login


def test_register_login_and_me(client):
    response = client.post(
        "/auth/register",
        json={"username": "alice", "password": PASSWORD, "display_name": "Alice"},
    )
    assert response.status_code == 201
    assert response.get_json()["username"] == "alice"

    login(client, "alice")
    me = client.get("/auth/me").get_json()
    assert me["display_name"] == "Alice"
    assert me["points"] == 0


def test_register_rejects_weak_password_and_duplicates(client, make_user):
    make_user("alice")
    db.session.commit()

    response = client.post(
        "/auth/register", json={"username": "bob", "password": "short"}
    )
    assert response.status_code == 400
    assert "password" in response.get_json()["errors"]

    response = client.post(
        "/auth/register", json={"username": "ALICE", "password": PASSWORD}
    )
    assert response.status_code == 400
    assert response.get_json()["error"] == "validation_error"


def test_bad_login_is_unauthorized(client, make_user):
    make_user("alice")
    db.session.commit()

    response = client.post(
        "/auth/login", json={"username": "alice", "password": "Wrong1234"}
    )
    assert response.status_code == 401


def test_predictions_require_login(client):
    response = client.post("/api/predictions", json={})
    assert response.status_code == 401
    assert response.get_json()["error"] == "unauthorized"


def test_submit_and_list_predictions(client, make_user, make_match):
    user = make_user("alice")
    match = make_match()
    db.session.commit()
    login(client, "alice")

    payload = {
        "match_id": match.id,
        "predicted_toss_winner_id": match.team1_id,
        "predicted_match_winner_id": match.team2_id,
    }
    assert client.post("/api/predictions", json=payload).status_code == 200

    payload["predicted_match_winner_id"] = match.team1_id
    assert client.post("/api/predictions", json=payload).status_code == 200

    assert Prediction.query.filter_by(user_id=user.id).count() == 1
    listed = client.get("/api/predictions").get_json()
    assert len(listed) == 1
    assert listed[0]["predicted_match_winner_id"] == match.team1_id
    assert listed[0]["match"]["id"] == match.id


def test_prediction_errors_map_to_status_codes(client, store, make_user, make_match):
    make_user("alice")
    closed = make_match(status="ongoing")
    open_match = make_match()
    england = store.create_team("England")
    db.session.commit()
    login(client, "alice")

    def submit(match_id, toss, winner):
        return client.post(
            "/api/predictions",
            json={
                "match_id": match_id,
                "predicted_toss_winner_id": toss,
                "predicted_match_winner_id": winner,
            },
        )

    response = submit(closed.id, closed.team1_id, closed.team1_id)
    assert response.status_code == 400
    assert response.get_json()["error"] == "invalid_state"

    response = submit(open_match.id, england.id, open_match.team1_id)
    assert response.status_code == 400
    assert response.get_json()["error"] == "invalid_selection"

    response = submit(999, 1, 2)
    assert response.status_code == 404
    assert response.get_json()["error"] == "not_found"

    response = client.post("/api/predictions", json={"match_id": open_match.id})
    assert response.status_code == 400
    assert response.get_json()["error"] == "validation_error"


def test_admin_records_result_and_leaderboard_updates(
    client, admin, make_user, teams, make_match
):
    india, australia = teams
    alice = make_user("alice")
    bob = make_user("bob")
    match = make_match()
    db.session.commit()

    login(client, "alice")
    client.post(
        "/api/predictions",
        json={
            "match_id": match.id,
            "predicted_toss_winner_id": india.id,
            "predicted_match_winner_id": australia.id,
        },
    )

    login(client, "admin")
    response = client.patch(f"/api/matches/{match.id}/status", json={"status": "ongoing"})
    assert response.status_code == 200

    response = client.post(
        f"/api/matches/{match.id}/result",
        json={"toss_winner_id": india.id, "match_winner_id": india.id},
    )
    assert response.status_code == 200
    assert response.get_json()["scoring"]["points_awarded"] == 1

    response = client.post(
        f"/api/matches/{match.id}/result",
        json={"toss_winner_id": india.id, "match_winner_id": india.id},
    )
    assert response.status_code == 400
    assert db.session.get(User, alice.id).points == 1

    rows = client.get("/api/leaderboard?timeframe=weekly").get_json()
    assert rows[0]["id"] == alice.id
    assert rows[0]["correct_predictions"] == 1
    assert rows[0]["total_matches"] == 1
    assert {row["id"] for row in rows} == {admin.id, alice.id, bob.id}

    ledger = client.get(f"/admin/ledger?user_id={alice.id}").get_json()
    assert [entry["points"] for entry in ledger] == [1]


def test_patch_to_completed_records_the_result(client, admin, teams, make_match):
    india, _ = teams
    match = make_match(status="ongoing")
    db.session.commit()
    login(client, "admin")

    response = client.patch(
        f"/api/matches/{match.id}",
        json={
            "status": "completed",
            "toss_winner_id": india.id,
            "match_winner_id": india.id,
            "result_summary": "India won by 5 wickets",
        },
    )

    assert response.status_code == 200
    data = response.get_json()
    assert data["status"] == "completed"
    assert data["scoring"]["predictions_scored"] == 0


def test_admin_match_crud(client, admin, teams):
    india, australia = teams
    db.session.commit()
    login(client, "admin")

    response = client.post(
        "/api/matches",
        json={
            "tournament_name": "Champions Trophy",
            "team1_id": india.id,
            "team2_id": australia.id,
            "location": "Lahore",
            "match_date": "2026-11-02T09:30:00Z",
        },
    )
    assert response.status_code == 201
    match_id = response.get_json()["id"]

    response = client.patch(f"/api/matches/{match_id}", json={"location": "Karachi"})
    assert response.get_json()["location"] == "Karachi"

    assert client.delete(f"/api/matches/{match_id}").status_code == 204
    assert client.get(f"/api/matches/{match_id}").status_code == 404


def test_non_admins_cannot_manage_matches(client, make_user, make_match):
    make_user("alice")
    match = make_match()
    db.session.commit()
    login(client, "alice")

    response = client.delete(f"/api/matches/{match.id}")
    assert response.status_code == 403
    assert client.get("/admin/users").status_code == 403


def test_public_reads(client, make_match):
    make_match()
    make_match(status="completed", starts_in=timedelta(days=-1))
    db.session.commit()

    assert len(client.get("/api/teams").get_json()) == 2
    assert len(client.get("/api/matches").get_json()) == 2
    assert len(client.get("/api/matches?status=upcoming").get_json()) == 1
    assert client.get("/api/leaderboard?timeframe=yearly").status_code == 200


def test_settings(client, app, admin):
    db.session.commit()

    default = client.get("/api/settings/siteTitle").get_json()
    assert default["value"] == app.config["SITE_TITLE"]

    login(client, "admin")
    response = client.put("/api/settings/siteTitle", json={"value": "Cricket Cup"})
    assert response.status_code == 200
    assert client.get("/api/settings/siteTitle").get_json()["value"] == "Cricket Cup"

    response = client.put("/api/settings/siteTitle", json={"value": ""})
    assert response.status_code == 400


def test_profile_and_password_change(client, make_user):
    make_user("alice")
    db.session.commit()
    login(client, "alice")

    response = client.patch("/api/profile", json={"display_name": "Ali"})
    assert response.get_json()["display_name"] == "Ali"

    response = client.post(
        "/api/profile/change-password",
        json={"current_password": "Wrong1234", "new_password": "Newpass123"},
    )
    assert response.status_code == 400

    response = client.post(
        "/api/profile/change-password",
        json={"current_password": PASSWORD, "new_password": "Newpass123"},
    )
    assert response.status_code == 200
    login(client, "alice", "Newpass123")


def test_admin_user_management(client, admin, make_user):
    alice = make_user("alice")
    db.session.commit()
    login(client, "admin")

    response = client.patch(f"/admin/users/{alice.id}", json={"role": "admin"})
    assert response.get_json()["role"] == "admin"

    response = client.patch(f"/admin/users/{alice.id}", json={"role": "owner"})
    assert response.status_code == 400

    assert client.delete(f"/admin/users/{admin.id}").status_code == 400
    assert client.delete(f"/admin/users/{alice.id}").status_code == 204
    assert client.delete(f"/admin/users/{alice.id}").status_code == 404


def test_leaderboard_cache_follows_predictions_and_deletes(
    client, app, admin, make_user, make_match
):
    cache.init_app(app, config={"CACHE_TYPE": "SimpleCache"})
    alice = make_user("alice")
    match = make_match()
    db.session.commit()

    def alice_row():
        rows = client.get("/api/leaderboard?timeframe=weekly").get_json()
        return next(row for row in rows if row["id"] == alice.id)

    assert alice_row()["total_matches"] == 0

    login(client, "alice")
    response = client.post(
        "/api/predictions",
        json={
            "match_id": match.id,
            "predicted_toss_winner_id": match.team1_id,
            "predicted_match_winner_id": match.team2_id,
        },
    )
    assert response.status_code == 200
    assert alice_row()["total_matches"] == 1

    login(client, "admin")
    assert client.delete(f"/api/matches/{match.id}").status_code == 204
    assert alice_row()["total_matches"] == 0
