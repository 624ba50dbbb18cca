from .entity_store import EntityStore
from .leaderboard import LeaderboardService
from .match_service import MatchService
from .prediction_service import PredictionService
from .settings_service import SettingsService
from .user_service import UserService

__all__ = [
    "EntityStore",
    "LeaderboardService",
    "MatchService",
    "PredictionService",
    "SettingsService",
    "UserService",
]
