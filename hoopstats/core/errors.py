"""
Game rule exception hierarchy.

Every failure the live-game core can report is a ``GameRuleError`` carrying
one ``ErrorKind``. Callers branch on the kind, never on the message.

Exception Hierarchy:
    GameRuleError (base)
    ├── InvalidStateError
    ├── InvalidRosterSizeError
    ├── InvalidLineupSizeError
    ├── PlayerNotOnRosterError
    ├── PlayerNotOnCourtError
    ├── PlayerNotEligibleError
    ├── QuarterLimitReachedError
    ├── NoActionToUndoError
    ├── NotFoundError
    ├── DependentRecordsError
    └── InvalidActionError

All validation happens before any mutation, so raising one of these means
nothing was written.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Error kinds exposed to API clients."""
    INVALID_STATE = "InvalidState"
    INVALID_ROSTER_SIZE = "InvalidRosterSize"
    INVALID_LINEUP_SIZE = "InvalidLineupSize"
    PLAYER_NOT_ON_ROSTER = "PlayerNotOnRoster"
    PLAYER_NOT_ON_COURT = "PlayerNotOnCourt"
    PLAYER_NOT_ELIGIBLE = "PlayerNotEligible"
    QUARTER_LIMIT_REACHED = "QuarterLimitReached"
    NO_ACTION_TO_UNDO = "NoActionToUndo"
    NOT_FOUND = "NotFound"
    DEPENDENT_RECORDS_EXIST = "DependentRecordsExist"
    INVALID_ACTION = "InvalidAction"


# HTTP status per kind; anything not listed is a 400
HTTP_STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_STATE: 409,
    ErrorKind.DEPENDENT_RECORDS_EXIST: 409,
}


class GameRuleError(Exception):
    """
    Base exception for all game rule violations.

    Attributes:
        kind: The ErrorKind clients branch on
        message: Human-readable error message
        context: Identifiers involved (game_id, player_id, ...)
    """

    kind: ErrorKind = ErrorKind.INVALID_STATE

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_KIND.get(self.kind, 400)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.kind.value,
            "detail": self.message,
            "context": self.context,
        }

    def __repr__(self):
        return f"{type(self).__name__}(kind={self.kind.value}, message={self.message!r})"


class InvalidStateError(GameRuleError):
    """Operation not allowed in the game's current status."""
    kind = ErrorKind.INVALID_STATE


class InvalidRosterSizeError(GameRuleError):
    kind = ErrorKind.INVALID_ROSTER_SIZE


class InvalidLineupSizeError(GameRuleError):
    kind = ErrorKind.INVALID_LINEUP_SIZE


class PlayerNotOnRosterError(GameRuleError):
    kind = ErrorKind.PLAYER_NOT_ON_ROSTER


class PlayerNotOnCourtError(GameRuleError):
    kind = ErrorKind.PLAYER_NOT_ON_COURT


class PlayerNotEligibleError(GameRuleError):
    """Player cannot enter the game (off team, already on court, or same as outgoing)."""
    kind = ErrorKind.PLAYER_NOT_ELIGIBLE


class QuarterLimitReachedError(GameRuleError):
    kind = ErrorKind.QUARTER_LIMIT_REACHED


class NoActionToUndoError(GameRuleError):
    kind = ErrorKind.NO_ACTION_TO_UNDO


class NotFoundError(GameRuleError):
    """Referenced team, player or game does not exist."""
    kind = ErrorKind.NOT_FOUND

    @classmethod
    def for_entity(cls, entity: str, entity_id: str) -> "NotFoundError":
        return cls(f"{entity} {entity_id} not found", {f"{entity.lower()}_id": entity_id})


class DependentRecordsError(GameRuleError):
    """Delete blocked because other records still reference the entity."""
    kind = ErrorKind.DEPENDENT_RECORDS_EXIST


class InvalidActionError(GameRuleError):
    """Malformed stat action (unknown type, or shot without an outcome)."""
    kind = ErrorKind.INVALID_ACTION
