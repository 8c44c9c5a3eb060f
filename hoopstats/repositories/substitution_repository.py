"""
Substitution Repository.

Substitutions are an append-only audit trail: this repository only adds and
reads, it never updates or deletes.
"""
from datetime import datetime
from typing import List

from hoopstats.models import Substitution
from hoopstats.repositories.base import BaseRepository


class SubstitutionRepository(BaseRepository[Substitution]):
    """Repository for the substitution audit trail."""

    def __init__(self, db):
        super().__init__(Substitution, db)

    def append(
        self,
        game_id: str,
        quarter: int,
        player_out: str,
        player_in: str,
        timestamp: datetime,
    ) -> Substitution:
        """Add one substitution record (committed with the game update)."""
        return self.create(
            game_id=game_id,
            quarter=quarter,
            player_out=player_out,
            player_in=player_in,
            timestamp=timestamp,
            created_at=timestamp,
        )

    def find_by_game(self, game_id: str) -> List[Substitution]:
        """Substitutions of a game in the order they happened."""
        return self.db.query(Substitution).filter(
            Substitution.game_id == game_id
        ).order_by(Substitution.timestamp, Substitution.created_at).all()

    def game_has_substitutions(self, game_id: str) -> bool:
        return self.exists_where(Substitution.game_id == game_id)
