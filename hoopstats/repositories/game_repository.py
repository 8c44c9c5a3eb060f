"""
Game Repository for game data access.

Usage:
    repo = GameRepository(db)
    game = repo.get_for_update(game_id)   # before any state transition
    live = repo.find_filtered(status="in_progress")
"""
from typing import Optional, List

from sqlalchemy import desc

from hoopstats.models import Game
from hoopstats.repositories.base import BaseRepository


class GameRepository(BaseRepository[Game]):
    """Repository for game data access."""

    def __init__(self, db):
        super().__init__(Game, db)

    def find_filtered(
        self,
        status: Optional[str] = None,
        team_id: Optional[str] = None,
    ) -> List[Game]:
        """
        List games in one query, newest first.

        Args:
            status: Optional status filter (not_started, in_progress, completed)
            team_id: Optional owning team filter
        """
        query = self.db.query(Game)
        if status:
            query = query.filter(Game.status == status)
        if team_id:
            query = query.filter(Game.team_id == team_id)
        return query.order_by(desc(Game.game_date), desc(Game.created_at)).all()

    def player_on_any_roster(self, team_id: str, player_id: str) -> bool:
        """Whether a player appears on the roster of any of the team's games."""
        rosters = self.db.query(Game.roster).filter(Game.team_id == team_id).all()
        return any(player_id in (roster or []) for (roster,) in rosters)
