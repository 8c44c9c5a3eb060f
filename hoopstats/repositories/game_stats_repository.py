"""
GameStats Repository for per-(game, player) box scores.

Usage:
    repo = GameStatsRepository(db)
    row = repo.find_by_game_and_player(game_id, player_id, for_update=True)
    box_scores = repo.list_by_game(game_id)
    career_rows = repo.list_completed_by_player(player_id)
"""
from typing import Optional, List

from hoopstats.models import Game, GameStats
from hoopstats.repositories.base import BaseRepository


class GameStatsRepository(BaseRepository[GameStats]):
    """Repository for game stats data access."""

    def __init__(self, db):
        super().__init__(GameStats, db)

    def find_by_game_and_player(
        self,
        game_id: str,
        player_id: str,
        for_update: bool = False,
    ) -> Optional[GameStats]:
        """
        Find the stats row of a player in a game.

        Args:
            for_update: Lock the row and refresh any cached instance
        """
        query = self.db.query(GameStats).filter(
            GameStats.game_id == game_id,
            GameStats.player_id == player_id
        )
        if for_update:
            query = query.populate_existing().with_for_update()
        return query.first()

    def list_by_game(self, game_id: str) -> List[GameStats]:
        """All stats rows of a game (box score)."""
        return self.db.query(GameStats).filter(
            GameStats.game_id == game_id
        ).order_by(GameStats.created_at).all()

    def list_completed_by_player(self, player_id: str) -> List[GameStats]:
        """Stats rows of a player restricted to completed games."""
        return self.db.query(GameStats).join(
            Game, Game.id == GameStats.game_id
        ).filter(
            GameStats.player_id == player_id,
            Game.status == "completed"
        ).order_by(Game.completed_at).all()

    def game_has_stats(self, game_id: str) -> bool:
        return self.exists_where(GameStats.game_id == game_id)

    def player_has_stats(self, player_id: str) -> bool:
        return self.exists_where(GameStats.player_id == player_id)
