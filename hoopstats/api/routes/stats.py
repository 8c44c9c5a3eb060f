"""
Stats routes: record/undo actions, box scores and career stats.

Percentages in every payload are rounded to one decimal.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hoopstats.core.database import get_db
from hoopstats.services.stat_ledger import ActionType
from hoopstats.services.stats_service import StatsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stats", tags=["stats"])


class RecordActionRequest(BaseModel):
    """One stat event for a player in a live game."""
    player_id: str
    action_type: str = Field(
        ...,
        description="One of: " + ", ".join(a.value for a in ActionType),
    )
    made: Optional[bool] = Field(None, description="Required for shots, ignored otherwise")


@router.post("/games/{game_id}/actions", status_code=201)
async def record_action(game_id: str, request: RecordActionRequest, db: Session = Depends(get_db)):
    """
    Record an action and return the player's updated stats.

    Shots always count an attempt and count a make only when ``made`` is true.
    """
    stats = StatsService(db).record_action(
        game_id, request.player_id, request.action_type, made=request.made
    )
    return stats.to_dict()


@router.delete("/games/{game_id}/actions/{player_id}")
async def undo_last_action(game_id: str, player_id: str, db: Session = Depends(get_db)):
    """
    Undo the player's most recent action in the game.

    Returns the updated stats; ``has_stats`` is false once nothing is left.
    """
    return StatsService(db).undo_last_action(game_id, player_id).to_dict()


@router.get("/games/{game_id}/players/{player_id}")
async def get_player_game_stats(game_id: str, player_id: str, db: Session = Depends(get_db)):
    """Current stats of a player in a game (all zeros if nothing recorded)."""
    return StatsService(db).get_stats(game_id, player_id).to_dict()


@router.get("/games/{game_id}")
async def get_game_box_score(game_id: str, db: Session = Depends(get_db)):
    """Box score: every player with stats in the game plus team totals."""
    return StatsService(db).get_game_box_score(game_id)


@router.get("/players/{player_id}/career")
async def get_career_stats(player_id: str, db: Session = Depends(get_db)):
    """Career totals, per-game averages and shooting percentages over completed games."""
    return StatsService(db).get_career_stats(player_id).as_dict()
