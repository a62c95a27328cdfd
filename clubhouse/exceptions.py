"""Exception hierarchy for the clubhouse core.

Exception tree:
    ClubhouseError
    +-- ValidationError                (bad match config or stat update)
    |   +-- MatchCompletedError        (match already finished)
    |   +-- InningsNotClosedError      (outcome requested before innings 2)
    +-- UnknownPlayerError             (player not in the batting roster)
    +-- NotFoundError
    |   +-- ClubNotFoundError
    |   +-- PlayerNotFoundError
    |   +-- MatchNotFoundError
    +-- DuplicatePlayerError           (name already taken in the club)
    +-- PersistenceFailure             (transactional write failed, rolled back)
    +-- AggregationInputInconsistency  (stored rows do not reconcile)
"""

from typing import Optional


class ClubhouseError(Exception):
    """Base exception for all clubhouse errors."""

    pass


class ValidationError(ClubhouseError):
    """Input failed validation. Nothing was mutated.

    ``errors`` holds field-level problems as ``{"field": ..., "message": ...}``
    dicts so callers can re-prompt for the specific field.
    """

    def __init__(self, message: str, *, errors: Optional[list] = None):
        self.errors = errors or []
        super().__init__(message)


class MatchCompletedError(ValidationError):
    """The match is already completed; its result is final."""

    pass


class InningsNotClosedError(ValidationError):
    """An outcome was requested while the first innings is still in play."""

    pass


class UnknownPlayerError(ClubhouseError):
    """A stat update referenced a player outside the batting team's roster."""

    def __init__(self, player_id: str, team_name: Optional[str] = None):
        self.player_id = player_id
        self.team_name = team_name
        where = f" for {team_name}" if team_name else ""
        super().__init__(f"Player {player_id} is not in the batting roster{where}")


class NotFoundError(ClubhouseError):
    """A requested record does not exist (or belongs to another club)."""

    pass


class ClubNotFoundError(NotFoundError):
    pass


class PlayerNotFoundError(NotFoundError):
    pass


class MatchNotFoundError(NotFoundError):
    pass


class DuplicatePlayerError(ClubhouseError):
    """A player with this name already exists in the club."""

    pass


class PersistenceFailure(ClubhouseError):
    """Writing to the store failed and the transaction was rolled back.

    Safe to retry: match writes are idempotent on the match id.
    """

    pass


class AggregationInputInconsistency(ClubhouseError):
    """Stored stat rows do not agree with their parent match.

    Raised instead of producing averages from data that is known to be wrong.
    """

    def __init__(self, message: str, *, match_id: Optional[str] = None):
        self.match_id = match_id
        super().__init__(message)
