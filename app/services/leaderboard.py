"""
Leaderboard aggregation.

Users are ranked by their lifetime points. The accuracy columns are scoped
to the selected timeframe and count predictions by creation time:

- total_matches: predictions made in the window, finished or not
- correct_predictions: sum of points_earned over those predictions

Ties on points are broken by correct_predictions; remaining ties keep
user id order.
"""

from datetime import datetime, timedelta, timezone

TIMEFRAME_WINDOWS = {
    "weekly": timedelta(days=7),
    "monthly": timedelta(days=30),
    "all-time": None,
}
DEFAULT_TIMEFRAME = "all-time"


def resolve_timeframe(timeframe):
    """Normalize a timeframe name, falling back to all-time"""
    if timeframe in TIMEFRAME_WINDOWS:
        return timeframe
    return DEFAULT_TIMEFRAME


def timeframe_bounds(timeframe, now=None):
    """Get the (since, until) creation-time window for a timeframe

    Returns (None, None) for all-time.
    """
    window = TIMEFRAME_WINDOWS[resolve_timeframe(timeframe)]
    if window is None:
        return None, None
    now = now or datetime.now(timezone.utc)
    return now - window, now


class LeaderboardService:
    def __init__(self, store):
        self.store = store

    def get_leaderboard(self, timeframe=DEFAULT_TIMEFRAME, now=None):
        """Get ranked standings of all users for a timeframe

        Args:
            timeframe: 'weekly', 'monthly' or 'all-time'; anything else is
                treated as 'all-time'
            now: reference time for the rolling windows (defaults to now)
        """
        since, until = timeframe_bounds(timeframe, now)
        stats = self.store.prediction_stats_by_user(since=since, until=until)

        leaderboard = []
        for user in self.store.list_users():
            total_matches, correct_predictions = stats.get(user.id, (0, 0))
            leaderboard.append(
                {
                    "id": user.id,
                    "username": user.username,
                    "display_name": user.display_name,
                    "profile_image": user.profile_image,
                    "points": user.points or 0,
                    "correct_predictions": correct_predictions,
                    "total_matches": total_matches,
                }
            )

        # Sort by lifetime points (descending), then by windowed points
        # (descending); sort is stable so equal rows keep id order
        leaderboard.sort(
            key=lambda x: (x["points"], x["correct_predictions"]), reverse=True
        )

        return leaderboard

    def get_user_rank(self, user_id, timeframe=DEFAULT_TIMEFRAME, now=None):
        """1-based position of a user, or None if absent"""
        for position, entry in enumerate(
            self.get_leaderboard(timeframe, now=now), start=1
        ):
            if entry["id"] == user_id:
                return position
        return None
