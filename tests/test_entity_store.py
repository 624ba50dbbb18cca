import pytest

from app.errors import MatchNotFound, PredictionNotFound, UserNotFound, ValidationError


def test_lookups_return_none_for_missing_ids(store):
    assert store.get_user(999) is None
    assert store.get_team(999) is None
    assert store.get_match(999) is None
    assert store.get_prediction(999) is None


def test_create_prediction_stamps_created_at_and_zero_points(store, make_user, make_match):
    user = make_user("alice")
    match = make_match()

    prediction = store.create_prediction(
        user.id, match.id, match.team1_id, match.team2_id
    )

    assert prediction.id is not None
    assert prediction.created_at is not None
    assert prediction.points_earned == 0


def test_update_merges_fields_and_rejects_unknown_ones(store, make_match, teams):
    match = make_match()

    updated = store.update_match(match.id, location="Chennai")
    assert updated.location == "Chennai"
    assert updated.tournament_name == "World Cup"

    with pytest.raises(ValidationError):
        store.update_match(match.id, points_calculated_at=None)


def test_update_missing_entities_raise_not_found(store):
    with pytest.raises(MatchNotFound):
        store.update_match(999, location="Nowhere")
    with pytest.raises(UserNotFound):
        store.update_user(999, display_name="Ghost")
    with pytest.raises(PredictionNotFound):
        store.update_prediction(999, predicted_toss_winner_id=1)


def test_delete_match_removes_its_predictions(store, make_user, make_match):
    user = make_user("alice")
    match = make_match()
    other = make_match()
    store.create_prediction(user.id, match.id, match.team1_id, match.team1_id)
    kept = store.create_prediction(user.id, other.id, other.team2_id, other.team2_id)

    store.delete_match(match.id)

    assert store.get_match(match.id) is None
    assert store.list_predictions(match_id=match.id) == []
    assert store.list_predictions(user_id=user.id) == [kept]


def test_delete_missing_entities_raise_not_found(store):
    with pytest.raises(MatchNotFound):
        store.delete_match(999)
    with pytest.raises(UserNotFound):
        store.delete_user(999)


def test_list_matches_filters_and_orders_by_status(store, make_match):
    from datetime import timedelta

    later = make_match(starts_in=timedelta(days=3))
    sooner = make_match(starts_in=timedelta(days=1))
    live = make_match(status="ongoing", starts_in=timedelta(hours=-1))
    done = make_match(status="completed", starts_in=timedelta(days=-2))

    assert store.list_matches() == [live, sooner, later, done]
    assert store.list_matches(status="upcoming") == [sooner, later]


def test_increment_user_points(store, make_user):
    user = make_user("alice")

    assert store.increment_user_points(user.id, 2) is True
    assert store.increment_user_points(999, 2) is False
    assert store.get_user(user.id).points == 2


def test_get_user_by_username_is_case_insensitive(store, make_user):
    user = make_user("Alice")
    assert store.get_user_by_username("alice") == user


def test_update_setting_upserts(store):
    assert store.get_setting("siteTitle") is None

    store.update_setting("siteTitle", "ProAce")
    store.update_setting("siteTitle", "ProAce Cricket")

    assert store.get_setting("siteTitle") == "ProAce Cricket"
