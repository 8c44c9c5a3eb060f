"""
Live game state machine.

Pure transitions over an immutable ``GameState``. Each function validates
its preconditions against the state it is given and returns a new state;
nothing is mutated and nothing is persisted here. ``GameService`` loads the
latest row, runs a transition and writes the result back.

Status flow (monotonic, ``completed`` is terminal):

    not_started --start()--> in_progress --complete()--> completed

Roster and lineups can only be edited while not_started. Once the game is
live the on-court five only changes through ``record_substitution``.
"""
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional, Set, Tuple

from hoopstats.core.errors import (
    InvalidStateError,
    InvalidRosterSizeError,
    InvalidLineupSizeError,
    PlayerNotOnRosterError,
    PlayerNotOnCourtError,
    PlayerNotEligibleError,
    QuarterLimitReachedError,
)
from hoopstats.utils.timezone import utc_now

MIN_ROSTER_SIZE = 5
MAX_ROSTER_SIZE = 15
LINEUP_SIZE = 5
FIRST_QUARTER = 1
LAST_QUARTER = 4


class GameStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class GameState:
    """Snapshot of everything the state machine owns for one game."""
    game_id: str
    team_id: str
    status: GameStatus = GameStatus.NOT_STARTED
    roster: Tuple[str, ...] = ()
    starting_lineup: Tuple[str, ...] = ()
    current_lineup: Tuple[str, ...] = ()
    current_quarter: int = FIRST_QUARTER
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def bench(self) -> Tuple[str, ...]:
        """Roster players not currently on court, in roster order."""
        on_court = set(self.current_lineup)
        return tuple(p for p in self.roster if p not in on_court)

    def _context(self, **extra) -> dict:
        return {"game_id": self.game_id, "status": self.status.value, **extra}


@dataclass(frozen=True)
class SubstitutionEvent:
    """An accepted substitution, ready to be appended to the audit trail."""
    game_id: str
    quarter: int
    player_out: str
    player_in: str
    timestamp: datetime


def _require_status(state: GameState, expected: GameStatus, action: str) -> None:
    if state.status != expected:
        raise InvalidStateError(
            f"Cannot {action}: game is {state.status.value}, expected {expected.value}",
            state._context(),
        )


def _distinct(player_ids: Iterable[str]) -> Tuple[Tuple[str, ...], bool]:
    ids = tuple(player_ids)
    return ids, len(set(ids)) == len(ids)


def set_roster(
    state: GameState,
    player_ids: Iterable[str],
    team_player_ids: Set[str],
) -> GameState:
    """
    Replace the roster before tip-off.

    Args:
        state: Current game state
        player_ids: New roster (5-15 distinct ids)
        team_player_ids: Ids of every player on the game's team

    Raises:
        InvalidStateError: Game already started
        InvalidRosterSizeError: Size out of [5, 15] or duplicate ids
        PlayerNotEligibleError: An id is not a player of the game's team
    """
    _require_status(state, GameStatus.NOT_STARTED, "modify roster")

    roster, unique = _distinct(player_ids)
    if not MIN_ROSTER_SIZE <= len(roster) <= MAX_ROSTER_SIZE:
        raise InvalidRosterSizeError(
            f"Roster must have between {MIN_ROSTER_SIZE} and {MAX_ROSTER_SIZE} players, got {len(roster)}",
            state._context(size=len(roster)),
        )
    if not unique:
        raise InvalidRosterSizeError(
            "Roster contains duplicate players", state._context(size=len(roster))
        )

    foreign = [p for p in roster if p not in team_player_ids]
    if foreign:
        raise PlayerNotEligibleError(
            "Some players do not belong to this team",
            state._context(team_id=state.team_id, player_ids=foreign),
        )

    # A lineup that no longer fits the roster is dropped rather than left dangling
    if set(state.starting_lineup) <= set(roster):
        return replace(state, roster=roster)
    return replace(state, roster=roster, starting_lineup=(), current_lineup=())


def set_starting_lineup(state: GameState, player_ids: Iterable[str]) -> GameState:
    """
    Pick the five starters; the current lineup starts out identical.

    Raises:
        InvalidStateError: Game already started, or roster not set yet
        InvalidLineupSizeError: Not exactly 5 distinct ids
        PlayerNotOnRosterError: A starter is not on the roster
    """
    _require_status(state, GameStatus.NOT_STARTED, "modify lineup")
    if not state.roster:
        raise InvalidStateError(
            "Roster must be set before defining starting lineup", state._context()
        )

    lineup, unique = _distinct(player_ids)
    if len(lineup) != LINEUP_SIZE or not unique:
        raise InvalidLineupSizeError(
            f"Starting lineup must have exactly {LINEUP_SIZE} different players",
            state._context(size=len(lineup)),
        )

    roster = set(state.roster)
    missing = [p for p in lineup if p not in roster]
    if missing:
        raise PlayerNotOnRosterError(
            "Starting lineup players must be on the roster",
            state._context(player_ids=missing),
        )

    return replace(state, starting_lineup=lineup, current_lineup=lineup)


def start(state: GameState, now: Optional[datetime] = None) -> GameState:
    """
    Tip off: not_started -> in_progress, quarter 1.

    Raises:
        InvalidStateError: Already started/completed, or no starting lineup
    """
    _require_status(state, GameStatus.NOT_STARTED, "start game")
    if len(state.starting_lineup) != LINEUP_SIZE:
        raise InvalidStateError(
            "Starting lineup must be set before starting the game", state._context()
        )

    return replace(
        state,
        status=GameStatus.IN_PROGRESS,
        started_at=now or utc_now(),
        current_quarter=FIRST_QUARTER,
        current_lineup=state.starting_lineup,
    )


def next_quarter(state: GameState) -> GameState:
    """
    Advance the quarter by one.

    Raises:
        InvalidStateError: Game not in progress
        QuarterLimitReachedError: Already in the 4th quarter
    """
    _require_status(state, GameStatus.IN_PROGRESS, "advance quarter")
    if state.current_quarter >= LAST_QUARTER:
        raise QuarterLimitReachedError(
            f"Game is already in quarter {LAST_QUARTER}",
            state._context(quarter=state.current_quarter),
        )
    return replace(state, current_quarter=state.current_quarter + 1)


def record_substitution(
    state: GameState,
    player_out: str,
    player_in: str,
    now: Optional[datetime] = None,
) -> Tuple[GameState, SubstitutionEvent]:
    """
    Swap one on-court player for a bench player.

    The incoming player takes the outgoing player's slot. Either both the
    lineup change and the event are returned, or an error is raised and the
    given state is untouched.

    Raises:
        InvalidStateError: Game not in progress
        PlayerNotEligibleError: Same player in and out, incoming player off
            the roster or already on court
        PlayerNotOnCourtError: Outgoing player is not on court
    """
    _require_status(state, GameStatus.IN_PROGRESS, "substitute")
    context = state._context(player_out=player_out, player_in=player_in)

    if player_out == player_in:
        raise PlayerNotEligibleError("A player cannot substitute for themself", context)
    if player_out not in state.current_lineup:
        raise PlayerNotOnCourtError("Player going out is not on the court", context)
    if player_in not in state.roster:
        raise PlayerNotEligibleError("Player coming in is not on the roster", context)
    if player_in in state.current_lineup:
        raise PlayerNotEligibleError("Player coming in is already on the court", context)

    lineup = tuple(player_in if p == player_out else p for p in state.current_lineup)
    event = SubstitutionEvent(
        game_id=state.game_id,
        quarter=state.current_quarter,
        player_out=player_out,
        player_in=player_in,
        timestamp=now or utc_now(),
    )
    return replace(state, current_lineup=lineup), event


def complete(state: GameState, now: Optional[datetime] = None) -> GameState:
    """
    Final buzzer: in_progress -> completed. Irreversible.

    Raises:
        InvalidStateError: Game not in progress
    """
    _require_status(state, GameStatus.IN_PROGRESS, "complete game")
    return replace(state, status=GameStatus.COMPLETED, completed_at=now or utc_now())
