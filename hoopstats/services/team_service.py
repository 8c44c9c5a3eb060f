"""
Team Service for team CRUD.

Deletes are blocked while the team still has players or games.
"""
import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from hoopstats.core.errors import DependentRecordsError, NotFoundError
from hoopstats.models import Team
from hoopstats.repositories import TeamRepository
from hoopstats.services.base_service import BaseService

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "coach", "season", "league")


class TeamService(BaseService):
    """Service for team management."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.teams = TeamRepository(db)

    def list_teams(self) -> List[Team]:
        return self.teams.find_all(order_by="name")

    def get_team(self, team_id: str) -> Team:
        team = self.teams.find_by_id(team_id)
        if not team:
            raise NotFoundError.for_entity("Team", team_id)
        return team

    def create_team(self, name: str, coach=None, season=None, league=None) -> Team:
        with self._guard("create_team", team_name=name):
            team = self.teams.create(name=name, coach=coach, season=season, league=league)
            self.teams.save()

        self.teams.refresh(team)
        logger.info(f"Created team {team.id} ({name})", extra={"team_id": team.id})
        return team

    def update_team(self, team_id: str, changes: Dict[str, Any]) -> Team:
        with self._guard("update_team", team_id=team_id):
            self.get_team(team_id)
            team = self.teams.update(
                team_id, **{k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
            )
            self.teams.save()

        self.teams.refresh(team)
        return team

    def delete_team(self, team_id: str) -> None:
        """
        Delete a team.

        Raises:
            NotFoundError: Team does not exist
            DependentRecordsError: Team still has players or games
        """
        with self._guard("delete_team", team_id=team_id):
            self.get_team(team_id)
            if self.teams.has_players(team_id) or self.teams.has_games(team_id):
                raise DependentRecordsError(
                    "Cannot delete team with players or games", {"team_id": team_id}
                )
            self.teams.delete(team_id)
            self.teams.save()

        logger.info(f"Deleted team {team_id}", extra={"team_id": team_id})
