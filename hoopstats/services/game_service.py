"""
Game Service: persisted games and their live state transitions.

Every transition is one read-modify-write:

    1. Re-read the game row with a row lock (never a cached copy)
    2. Build a GameState and run the pure transition from game_state
    3. Copy the new state onto the row (plus the substitution record, if any)
    4. Commit

A rule violation raised in step 2 rolls the session back, so neither the
game row nor the audit trail can end up half-written.
"""
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from hoopstats.core.errors import DependentRecordsError, NotFoundError
from hoopstats.core.metrics import game_transitions_total, substitutions_total
from hoopstats.models import Game, Substitution
from hoopstats.repositories import (
    GameRepository,
    GameStatsRepository,
    PlayerRepository,
    SubstitutionRepository,
    TeamRepository,
)
from hoopstats.services import game_state
from hoopstats.services.base_service import BaseService
from hoopstats.services.game_state import GameState, GameStatus
from hoopstats.utils.timezone import to_utc_naive, utc_now

logger = logging.getLogger(__name__)

# Fields a plain update may touch; everything else goes through a transition
EDITABLE_FIELDS = ("opponent", "game_date", "location", "notes")


def to_state(game: Game) -> GameState:
    """Snapshot a game row as an immutable GameState."""
    return GameState(
        game_id=game.id,
        team_id=game.team_id,
        status=GameStatus(game.status),
        roster=tuple(game.roster or ()),
        starting_lineup=tuple(game.starting_lineup or ()),
        current_lineup=tuple(game.current_lineup or ()),
        current_quarter=game.current_quarter or game_state.FIRST_QUARTER,
        started_at=game.started_at,
        completed_at=game.completed_at,
    )


def apply_state(game: Game, state: GameState) -> Game:
    """Write a GameState back onto its row. JSON columns get fresh lists."""
    game.status = state.status.value
    game.roster = list(state.roster)
    game.starting_lineup = list(state.starting_lineup)
    game.current_lineup = list(state.current_lineup)
    game.current_quarter = state.current_quarter
    game.started_at = state.started_at
    game.completed_at = state.completed_at
    game.updated_at = utc_now()
    return game


class GameService(BaseService):
    """Service for games and the live game state machine."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.games = GameRepository(db)
        self.teams = TeamRepository(db)
        self.players = PlayerRepository(db)
        self.substitutions = SubstitutionRepository(db)
        self.stats = GameStatsRepository(db)

    # ========================================================================
    # CRUD
    # ========================================================================

    def get_game(self, game_id: str) -> Game:
        game = self.games.find_by_id(game_id)
        if not game:
            raise NotFoundError.for_entity("Game", game_id)
        return game

    def list_games(
        self,
        status: Optional[str] = None,
        team_id: Optional[str] = None,
    ) -> List[Game]:
        """All games, optionally filtered by status and/or team."""
        if status is not None:
            status = GameStatus(status).value
        return self.games.find_filtered(status=status, team_id=team_id)

    def create_game(
        self,
        team_id: str,
        opponent: str,
        game_date: Optional[datetime] = None,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Game:
        """Schedule a game for an existing team. It starts not_started in quarter 1."""
        with self._guard("create_game", team_id=team_id):
            if not self.teams.exists(team_id):
                raise NotFoundError.for_entity("Team", team_id)

            game = self.games.create(
                team_id=team_id,
                opponent=opponent,
                game_date=to_utc_naive(game_date),
                location=location,
                notes=notes,
                status=GameStatus.NOT_STARTED.value,
                roster=[],
                starting_lineup=[],
                current_lineup=[],
                current_quarter=game_state.FIRST_QUARTER,
            )
            self.games.save()

        self.games.refresh(game)
        logger.info(f"Created game {game.id} vs {opponent}", extra={"game_id": game.id, "team_id": team_id})
        return game

    def update_game(self, game_id: str, changes: Dict[str, Any]) -> Game:
        """
        Edit descriptive fields of a game.

        Args:
            changes: Subset of opponent/game_date/location/notes; other keys ignored
        """
        with self._guard("update_game", game_id=game_id):
            game = self.games.get_for_update(game_id)
            if not game:
                raise NotFoundError.for_entity("Game", game_id)

            for key in EDITABLE_FIELDS:
                if key in changes:
                    value = changes[key]
                    if key == "game_date":
                        value = to_utc_naive(value)
                    setattr(game, key, value)
            game.updated_at = utc_now()
            self.games.save()

        self.games.refresh(game)
        return game

    def delete_game(self, game_id: str) -> None:
        """Delete a game with no recorded stats and no substitutions."""
        with self._guard("delete_game", game_id=game_id):
            game = self.games.get_for_update(game_id)
            if not game:
                raise NotFoundError.for_entity("Game", game_id)

            if self.stats.game_has_stats(game_id) or self.substitutions.game_has_substitutions(game_id):
                raise DependentRecordsError(
                    "Cannot delete game with recorded stats or substitutions",
                    {"game_id": game_id},
                )

            self.db.delete(game)
            self.games.save()

        logger.info(f"Deleted game {game_id}", extra={"game_id": game_id})

    def list_substitutions(self, game_id: str) -> List[Substitution]:
        """Audit trail of a game, oldest first."""
        self.get_game(game_id)
        return self.substitutions.find_by_game(game_id)

    # ========================================================================
    # State machine
    # ========================================================================

    def _transition(
        self,
        game_id: str,
        name: str,
        apply: Callable[[GameState], GameState],
    ) -> Game:
        with self._guard(name, game_id=game_id):
            game = self.games.get_for_update(game_id)
            if not game:
                raise NotFoundError.for_entity("Game", game_id)

            state = apply(to_state(game))
            apply_state(game, state)
            self.games.save()

        game_transitions_total.labels(transition=name).inc()
        logger.info(
            f"Game {game_id}: {name} -> {state.status.value} Q{state.current_quarter}",
            extra={"game_id": game_id, "transition": name},
        )
        self.games.refresh(game)
        return game

    def set_roster(self, game_id: str, player_ids: Sequence[str]) -> Game:
        """Replace the roster of a not-started game (5-15 players of its team)."""
        def apply(state: GameState) -> GameState:
            return game_state.set_roster(
                state, player_ids, self.players.ids_for_team(state.team_id)
            )

        return self._transition(game_id, "set_roster", apply)

    def set_starting_lineup(self, game_id: str, player_ids: Sequence[str]) -> Game:
        return self._transition(
            game_id,
            "set_starting_lineup",
            lambda state: game_state.set_starting_lineup(state, player_ids),
        )

    def start_game(self, game_id: str) -> Game:
        return self._transition(game_id, "start", game_state.start)

    def next_quarter(self, game_id: str) -> Game:
        return self._transition(game_id, "next_quarter", game_state.next_quarter)

    def complete_game(self, game_id: str) -> Game:
        return self._transition(game_id, "complete", game_state.complete)

    def record_substitution(
        self,
        game_id: str,
        player_out: str,
        player_in: str,
    ) -> Tuple[Game, Substitution]:
        """
        Swap an on-court player for a bench player.

        The lineup change and the audit record are committed together or
        not at all.

        Returns:
            (updated game, new substitution record)
        """
        log_extra = {"game_id": game_id, "player_out": player_out, "player_in": player_in}
        with self._guard("record_substitution", **log_extra):
            game = self.games.get_for_update(game_id)
            if not game:
                raise NotFoundError.for_entity("Game", game_id)

            state, event = game_state.record_substitution(to_state(game), player_out, player_in)
            apply_state(game, state)
            substitution = self.substitutions.append(
                game_id=event.game_id,
                quarter=event.quarter,
                player_out=event.player_out,
                player_in=event.player_in,
                timestamp=event.timestamp,
            )
            self.games.save()

        substitutions_total.inc()
        logger.info(
            f"Game {game_id} Q{event.quarter}: {player_out} out, {player_in} in",
            extra=log_extra,
        )
        self.games.refresh(game)
        self.substitutions.refresh(substitution)
        return game, substitution
