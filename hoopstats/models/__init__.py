"""
Database models.

Usage:
    from hoopstats.models import Team, Player, Game, GameStats, Substitution
"""

from hoopstats.models.models import (
    Base,
    Team,
    Player,
    Game,
    Substitution,
    GameStats,
)

__all__ = [
    "Base",
    "Team",
    "Player",
    "Game",
    "Substitution",
    "GameStats",
]
