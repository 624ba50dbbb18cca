from app import db  # noqa: F401 - imported for model imports

from .match import Match
from .points_ledger import PointsLedgerEntry
from .prediction import Prediction
from .site_setting import SiteSetting
from .team import Team
from .user import User

__all__ = [
    "User",
    "Team",
    "Match",
    "Prediction",
    "PointsLedgerEntry",
    "SiteSetting",
]
