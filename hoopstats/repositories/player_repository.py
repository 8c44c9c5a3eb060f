"""
Player Repository for player data access.

Usage:
    repo = PlayerRepository(db)
    players = repo.find_by_team(team_id)
    eligible = repo.ids_for_team(team_id)
"""
from typing import List, Set

from hoopstats.models import Player
from hoopstats.repositories.base import BaseRepository


class PlayerRepository(BaseRepository[Player]):
    """Repository for player data access."""

    def __init__(self, db):
        super().__init__(Player, db)

    def find_by_team(self, team_id: str) -> List[Player]:
        """Players of a team ordered by last then first name."""
        return self.db.query(Player).filter(
            Player.team_id == team_id
        ).order_by(Player.last_name, Player.first_name).all()

    def ids_for_team(self, team_id: str) -> Set[str]:
        """Ids of every player on a team (the pool a game roster is drawn from)."""
        rows = self.db.query(Player.id).filter(Player.team_id == team_id).all()
        return {row[0] for row in rows}
