"""
Repository layer for data access.

Usage:
    from hoopstats.repositories import GameRepository
    from hoopstats.core.database import SessionLocal

    db = SessionLocal()
    game_repo = GameRepository(db)
    game = game_repo.find_by_id(game_id)
    db.close()
"""

from hoopstats.repositories.base import BaseRepository
from hoopstats.repositories.team_repository import TeamRepository
from hoopstats.repositories.player_repository import PlayerRepository
from hoopstats.repositories.game_repository import GameRepository
from hoopstats.repositories.game_stats_repository import GameStatsRepository
from hoopstats.repositories.substitution_repository import SubstitutionRepository

__all__ = [
    "BaseRepository",
    "TeamRepository",
    "PlayerRepository",
    "GameRepository",
    "GameStatsRepository",
    "SubstitutionRepository",
]
