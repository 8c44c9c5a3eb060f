"""
Team Repository for team data access.

Usage:
    repo = TeamRepository(db)
    teams = repo.find_all(order_by="name")
"""
from hoopstats.models import Team, Player, Game
from hoopstats.repositories.base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    """Repository for team data access."""

    def __init__(self, db):
        super().__init__(Team, db)

    def has_players(self, team_id: str) -> bool:
        return self.db.query(Player.id).filter(Player.team_id == team_id).first() is not None

    def has_games(self, team_id: str) -> bool:
        return self.db.query(Game.id).filter(Game.team_id == team_id).first() is not None
