"""
Stats Service: persisted stat ledger, game box scores and career stats.

Recording and undoing follow the same locked read-modify-write as game
transitions. The game row is locked first (its status gates recording),
then the (game, player) stats row. Counters and action_history are written
in the same UPDATE so they can never disagree.

A stats row only exists while its history is non-empty: the first action
creates it, and an undo that empties it deletes it.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from hoopstats.core.errors import (
    InvalidStateError,
    NoActionToUndoError,
    NotFoundError,
    PlayerNotOnCourtError,
    PlayerNotOnRosterError,
)
from hoopstats.core.metrics import stat_actions_recorded_total, stat_actions_undone_total
from hoopstats.models import Game, GameStats, Player
from hoopstats.repositories import GameRepository, GameStatsRepository, PlayerRepository
from hoopstats.services import stat_ledger
from hoopstats.services.base_service import BaseService
from hoopstats.services.career_aggregator import CareerStats, compute_career_stats, summarize_game
from hoopstats.services.game_state import GameStatus
from hoopstats.services.stat_ledger import ActionType, BoxScore, LedgerEntry
from hoopstats.utils.timezone import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayerGameStats:
    """Current stats of one player in one game. Zero-valued when nothing is recorded."""
    game_id: str
    player_id: str
    box: BoxScore = field(default_factory=BoxScore)
    history: Tuple[LedgerEntry, ...] = ()

    @property
    def has_stats(self) -> bool:
        return bool(self.history)

    @property
    def last_action(self) -> Optional[LedgerEntry]:
        return self.history[-1] if self.history else None

    def to_dict(self, precision: Optional[int] = 1) -> Dict[str, Any]:
        return {
            "game_id": self.game_id,
            "player_id": self.player_id,
            "has_stats": self.has_stats,
            "action_count": len(self.history),
            "last_action": self.last_action.to_dict() if self.last_action else None,
            **self.box.to_dict(precision),
        }


def _history_of(row: Optional[GameStats]) -> Tuple[LedgerEntry, ...]:
    if row is None:
        return ()
    return tuple(LedgerEntry.from_dict(entry) for entry in (row.action_history or []))


def _snapshot(game_id: str, player_id: str, row: Optional[GameStats]) -> PlayerGameStats:
    if row is None:
        return PlayerGameStats(game_id=game_id, player_id=player_id)
    return PlayerGameStats(
        game_id=game_id,
        player_id=player_id,
        box=BoxScore.from_row(row),
        history=_history_of(row),
    )


class StatsService(BaseService):
    """Service for recording, undoing and reading stats."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.games = GameRepository(db)
        self.players = PlayerRepository(db)
        self.stats = GameStatsRepository(db)

    def _get_game(self, game_id: str, for_update: bool = False) -> Game:
        game = self.games.get_for_update(game_id) if for_update else self.games.find_by_id(game_id)
        if not game:
            raise NotFoundError.for_entity("Game", game_id)
        return game

    def _get_player(self, player_id: str) -> Player:
        player = self.players.find_by_id(player_id)
        if not player:
            raise NotFoundError.for_entity("Player", player_id)
        return player

    def _write(self, row: GameStats, box: BoxScore, history: Tuple[LedgerEntry, ...]) -> None:
        for name, value in box.counters().items():
            setattr(row, name, value)
        row.action_history = [entry.to_dict() for entry in history]
        row.updated_at = utc_now()

    # ========================================================================
    # Ledger
    # ========================================================================

    def record_action(
        self,
        game_id: str,
        player_id: str,
        action_type: ActionType | str,
        made: Optional[bool] = None,
    ) -> PlayerGameStats:
        """
        Record one stat action for a player in a live game.

        Raises:
            NotFoundError: Game or player does not exist
            InvalidStateError: Game is not in progress
            PlayerNotOnRosterError: Player is not on the game roster
            PlayerNotOnCourtError: Player is on the bench
            InvalidActionError: Unknown action type, or shot without ``made``
        """
        with self._guard("record_action", game_id=game_id, player_id=player_id):
            game = self._get_game(game_id, for_update=True)
            self._get_player(player_id)

            if game.status != GameStatus.IN_PROGRESS.value:
                raise InvalidStateError(
                    f"Cannot record stats: game is {game.status}",
                    {"game_id": game_id, "status": game.status},
                )
            if player_id not in (game.roster or []):
                raise PlayerNotOnRosterError(
                    "Player is not on the game roster",
                    {"game_id": game_id, "player_id": player_id},
                )
            if player_id not in (game.current_lineup or []):
                raise PlayerNotOnCourtError(
                    "Player is not currently on the court",
                    {"game_id": game_id, "player_id": player_id},
                )

            entry = stat_ledger.make_entry(action_type, made=made, quarter=game.current_quarter)

            row = self.stats.find_by_game_and_player(game_id, player_id, for_update=True)
            box = BoxScore.from_row(row) if row else BoxScore()
            box, history = stat_ledger.record_action(box, _history_of(row), entry)

            if row is None:
                row = self.stats.create(game_id=game_id, player_id=player_id)
            self._write(row, box, history)
            self.stats.save()

        stat_actions_recorded_total.labels(action_type=entry.action_type.value).inc()
        logger.info(
            f"Recorded {entry.action_type.value}"
            + (f" ({'made' if entry.made else 'missed'})" if entry.action_type.is_shot else "")
            + f" in Q{entry.quarter}",
            extra={"game_id": game_id, "player_id": player_id},
        )
        return PlayerGameStats(game_id=game_id, player_id=player_id, box=box, history=history)

    def undo_last_action(self, game_id: str, player_id: str) -> PlayerGameStats:
        """
        Remove the player's most recent action in the game.

        Returns:
            Updated stats; ``has_stats`` is False once the log is empty

        Raises:
            NotFoundError: Game or player does not exist
            NoActionToUndoError: Nothing recorded for this player in this game
        """
        with self._guard("undo_last_action", game_id=game_id, player_id=player_id):
            self._get_game(game_id, for_update=True)
            self._get_player(player_id)

            row =self.stats.find_by_game_and_player(game_id, player_id, for_update=True)
            history = _history_of(row)
            if not history:
                raise NoActionToUndoError(
                    "No actions to undo", {"game_id": game_id, "player_id": player_id}
                )

            box, history, removed = stat_ledger.undo_last_action(BoxScore.from_row(row), history)
            if history:
                self._write(row, box, history)
            else:
                self.db.delete(row)
            self.stats.save()

        stat_actions_undone_total.labels(action_type=removed.action_type.value).inc()
        logger.info(
            f"Undid {removed.action_type.value}, {len(history)} actions left",
            extra={"game_id": game_id, "player_id": player_id},
        )
        return PlayerGameStats(game_id=game_id, player_id=player_id, box=box, history=history)

    def get_stats(self, game_id: str, player_id: str) -> PlayerGameStats:
        """Current stats of a player in a game (zero snapshot if none recorded)."""
        self._get_game(game_id)
        self._get_player(player_id)
        row = self.stats.find_by_game_and_player(game_id, player_id)
        return _snapshot(game_id, player_id, row)

    # ========================================================================
    # Aggregates
    # ========================================================================

    def get_game_box_score(self, game_id: str) -> Dict[str, Any]:
        """Every player's stats in a game plus team totals."""
        game = self._get_game(game_id)
        rows = self.stats.list_by_game(game_id)

        players: List[Dict[str, Any]] = []
        boxes: Dict[str, BoxScore] = {}
        for row in rows:
            snapshot = _snapshot(game_id, row.player_id, row)
            boxes[row.player_id] = snapshot.box
            players.append({
                **snapshot.to_dict(),
                "player_name": row.player.display_name if row.player else None,
            })

        return {
            "game_id": game_id,
            "status": game.status,
            "current_quarter": game.current_quarter,
            "players": players,
            "team_totals": summarize_game(boxes),
        }

    def get_career_stats(self, player_id: str) -> CareerStats:
        """Career stats of a player over completed games only."""
        self._get_player(player_id)
        rows = self.stats.list_completed_by_player(player_id)
        return compute_career_stats(player_id, [BoxScore.from_row(row) for row in rows])
