"""
Typed failures raised by the prediction core.

Every error carries the HTTP status the API layer answers with, so the
boundary can translate them without inspecting messages.
"""


class PredictionError(Exception):
    """Base class for recoverable domain failures"""

    status_code = 400
    code = "error"

    def __init__(self, message=None):
        self.message = message or self.__class__.__doc__ or self.code
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.code, "message": self.message}


class NotFoundError(PredictionError):
    """Entity not found"""

    status_code = 404
    code = "not_found"


class MatchNotFound(NotFoundError):
    """Match not found"""


class UserNotFound(NotFoundError):
    """User not found"""


class TeamNotFound(NotFoundError):
    """Team not found"""


class PredictionNotFound(NotFoundError):
    """Prediction not found"""


class InvalidStateError(PredictionError):
    """Operation not allowed in the current state"""

    code = "invalid_state"


class PredictionsClosed(InvalidStateError):
    """Predictions are closed for this match"""


class MatchNotCompleted(InvalidStateError):
    """Match result is not fully recorded"""


class MatchAlreadyScored(InvalidStateError):
    """Points for this match have already been calculated"""


class InvalidSelectionError(PredictionError):
    """Selected team is not part of this match"""

    code = "invalid_selection"


class InvalidTeamSelection(InvalidSelectionError):
    """Predicted team must be one of the two teams in the match"""


class ValidationError(PredictionError):
    """Invalid input data"""

    code = "validation_error"

    def __init__(self, message=None, errors=None):
        super().__init__(message)
        self.errors = errors or {}

    def to_dict(self):
        data = super().to_dict()
        if self.errors:
            data["errors"] = self.errors
        return data
