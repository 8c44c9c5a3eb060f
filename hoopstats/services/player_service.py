"""
Player Service for player CRUD.

A player's team is fixed at creation. Deleting a player is blocked once they
have recorded stats or appear on any game roster of their team.
"""
import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from hoopstats.core.errors import DependentRecordsError, NotFoundError
from hoopstats.models import Player
from hoopstats.repositories import (
    GameRepository,
    GameStatsRepository,
    PlayerRepository,
    TeamRepository,
)
from hoopstats.services.base_service import BaseService

logger = logging.getLogger(__name__)

# team_id is not editable; players are never transferred
EDITABLE_FIELDS = (
    "first_name", "last_name", "nickname", "position",
    "height", "weight", "age", "gender", "grade",
)


class PlayerService(BaseService):
    """Service for player management."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.players = PlayerRepository(db)
        self.teams = TeamRepository(db)
        self.games = GameRepository(db)
        self.stats = GameStatsRepository(db)

    def get_player(self, player_id: str) -> Player:
        player = self.players.find_by_id(player_id)
        if not player:
            raise NotFoundError.for_entity("Player", player_id)
        return player

    def list_by_team(self, team_id: str) -> List[Player]:
        if not self.teams.exists(team_id):
            raise NotFoundError.for_entity("Team", team_id)
        return self.players.find_by_team(team_id)

    def create_player(self, team_id: str, **fields: Any) -> Player:
        """
        Create a player under an existing team.

        Args:
            team_id: Owning team
            **fields: first_name, last_name and any optional attributes
        """
        with self._guard("create_player", team_id=team_id):
            if not self.teams.exists(team_id):
                raise NotFoundError.for_entity("Team", team_id)

            player = self.players.create(
                team_id=team_id,
                **{k: v for k, v in fields.items() if k in EDITABLE_FIELDS},
            )
            self.players.save()

        self.players.refresh(player)
        logger.info(
            f"Created player {player.full_name}",
            extra={"player_id": player.id, "team_id": team_id},
        )
        return player

    def update_player(self, player_id: str, changes: Dict[str, Any]) -> Player:
        with self._guard("update_player", player_id=player_id):
            self.get_player(player_id)
            player = self.players.update(
                player_id, **{k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
            )
            self.players.save()

        self.players.refresh(player)
        return player

    def delete_player(self, player_id: str) -> None:
        """
        Delete a player.

        Raises:
            NotFoundError: Player does not exist
            DependentRecordsError: Player has stats or is on a game roster
        """
        with self._guard("delete_player", player_id=player_id):
            player = self.get_player(player_id)
            if self.stats.player_has_stats(player_id):
                raise DependentRecordsError(
                    "Cannot delete player with existing stats", {"player_id": player_id}
                )
            if self.games.player_on_any_roster(player.team_id, player_id):
                raise DependentRecordsError(
                    "Cannot delete player who is on a game roster", {"player_id": player_id}
                )
            self.players.delete(player_id)
            self.players.save()

        logger.info(f"Deleted player {player_id}", extra={"player_id": player_id})
