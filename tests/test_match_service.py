from datetime import datetime, timedelta, timezone

import pytest

from app import db
from app.errors import (
    InvalidStateError,
    InvalidTeamSelection,
    MatchAlreadyScored,
    TeamNotFound,
    ValidationError,
)
from app.services import MatchService
from app.services.scheduler_service import SchedulerService


@pytest.fixture
def service(store):
    return MatchService(store)


def test_create_match_validates_teams(service, teams):
    india, australia = teams
    kickoff = datetime.now(timezone.utc) + timedelta(days=2)

    match = service.create_match("Asia Cup", india.id, australia.id, "Dubai", kickoff)
    assert match.status == "upcoming"

    with pytest.raises(ValidationError):
        service.create_match("Asia Cup", india.id, india.id, "Dubai", kickoff)
    with pytest.raises(TeamNotFound):
        service.create_match("Asia Cup", india.id, 999, "Dubai", kickoff)


def test_record_result_completes_and_scores(service, store, make_user, teams, make_match):
    india, australia = teams
    user = make_user("alice")
    match = make_match(status="ongoing")
    store.create_prediction(user.id, match.id, india.id, australia.id)

    match, summary = service.record_match_result(
        match.id,
        india.id,
        india.id,
        team1_score="287/6",
        team2_score="251",
        result_summary="India won by 36 runs",
    )

    assert match.status == "completed"
    assert match.is_scored
    assert match.result_summary == "India won by 36 runs"
    assert summary["points_awarded"] == 1
    assert store.get_user(user.id).points == 1


def test_record_result_rejects_bad_input(service, store, teams, make_match):
    match = make_match(status="ongoing")
    england = store.create_team("England")

    with pytest.raises(InvalidTeamSelection):
        service.record_match_result(match.id, england.id, match.team1_id)
    with pytest.raises(ValidationError):
        service.record_match_result(match.id, None, match.team1_id)

    assert store.get_match(match.id).status == "ongoing"


def test_result_cannot_be_recorded_twice(service, store, make_user, teams, make_match):
    india, australia = teams
    user = make_user("alice")
    match = make_match(status="ongoing")
    store.create_prediction(user.id, match.id, india.id, india.id)
    service.record_match_result(match.id, india.id, india.id)

    with pytest.raises(MatchAlreadyScored):
        service.record_match_result(match.id, australia.id, australia.id)

    assert store.get_user(user.id).points == 2


def test_update_match_status_rules(service, make_match):
    match = make_match()

    assert service.update_match(match.id, status="ongoing").status == "ongoing"
    with pytest.raises(InvalidStateError):
        service.update_match(match.id, status="upcoming")
    with pytest.raises(InvalidStateError):
        service.update_match(match.id, status="completed")
    with pytest.raises(ValidationError):
        service.update_match(match.id, toss_winner_id=match.team1_id)


def test_start_match_only_from_upcoming(service, make_match):
    match = make_match()

    assert service.start_match(match.id).status == "ongoing"
    with pytest.raises(InvalidStateError):
        service.start_match(match.id)


def test_lock_started_matches(service, make_match):
    started = make_match(starts_in=timedelta(minutes=-5))
    future = make_match(starts_in=timedelta(hours=2))

    locked = service.lock_started_matches()

    assert locked == [started]
    assert started.status == "ongoing"
    assert future.status == "upcoming"


def test_scheduler_lock_job_commits(app, store, make_match):
    started = make_match(starts_in=timedelta(minutes=-5))
    db.session.commit()

    scheduler = SchedulerService()
    scheduler.app = app

    assert scheduler.run_lock_job() == 1
    assert store.get_match(started.id).status == "ongoing"
    assert scheduler.lock_stats["total_runs"] == 1
    assert scheduler.lock_stats["matches_locked"] == 1


def test_teams_can_change_before_any_prediction(service, store, make_match):
    match = make_match()
    england = store.create_team("England")

    updated = service.update_match(match.id, team1_id=england.id)

    assert updated.team_ids == (england.id, match.team2_id)


def test_teams_are_locked_once_predicted(service, store, make_user, teams, make_match):
    india, _ = teams
    user = make_user("alice")
    match = make_match()
    england = store.create_team("England")
    store.create_prediction(user.id, match.id, india.id, india.id)

    with pytest.raises(InvalidStateError):
        service.update_match(match.id, team1_id=england.id)

    # Resubmitting the current teams is not a change
    service.update_match(match.id, team1_id=india.id, location="Pune")
    assert store.get_match(match.id).team1_id == india.id


def test_teams_of_a_scored_match_cannot_change(service, store, make_user, teams, make_match):
    india, _ = teams
    user = make_user("alice")
    match = make_match(status="ongoing")
    england = store.create_team("England")
    store.create_prediction(user.id, match.id, india.id, india.id)
    service.record_match_result(match.id, india.id, india.id)

    with pytest.raises(InvalidStateError):
        service.update_match(match.id, team1_id=england.id)

    match = store.get_match(match.id)
    assert match.has_team(match.toss_winner_id)
    assert match.has_team(match.match_winner_id)
