"""
Game routes: CRUD plus the live game state machine.

State transitions:
    PUT  /games/{id}/roster            - replace roster (not_started only)
    PUT  /games/{id}/starting-lineup   - pick the five starters
    POST /games/{id}/start             - not_started -> in_progress
    POST /games/{id}/next-quarter      - quarter + 1 (max 4)
    POST /games/{id}/substitution      - swap an on-court player for a bench player
    POST /games/{id}/complete          - in_progress -> completed

Rule violations are returned as {"error": <kind>, "detail": ..., "context": ...}.
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from hoopstats.core.database import get_db
from hoopstats.models import Game, Substitution
from hoopstats.services.game_service import GameService
from hoopstats.services.game_state import GameStatus
from hoopstats.utils.timezone import isoformat_utc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/games", tags=["games"])


class GameCreate(BaseModel):
    """Request to schedule a game."""
    team_id: str = Field(..., description="Owning team ID")
    opponent: str = Field(..., min_length=1, max_length=255)
    game_date: Optional[datetime] = Field(None, description="Tip-off (ISO format)")
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None

    @field_validator("opponent")
    @classmethod
    def opponent_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class GameUpdate(BaseModel):
    """Partial update of descriptive fields. Live state is not editable here."""
    opponent: Optional[str] = Field(None, min_length=1, max_length=255)
    game_date: Optional[datetime] = None
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None

    @field_validator("opponent")
    @classmethod
    def opponent_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class PlayerIdsRequest(BaseModel):
    """Roster or lineup as a list of player IDs."""
    player_ids: List[str]


class SubstitutionRequest(BaseModel):
    player_out: str = Field(..., description="Player leaving the court")
    player_in: str = Field(..., description="Bench player entering")


def game_to_dict(game: Game) -> dict:
    return {
        "id": game.id,
        "team_id": game.team_id,
        "opponent": game.opponent,
        "game_date": isoformat_utc(game.game_date),
        "location": game.location,
        "notes": game.notes,
        "status": game.status,
        "roster": list(game.roster or []),
        "starting_lineup": list(game.starting_lineup or []),
        "current_lineup": list(game.current_lineup or []),
        "current_quarter": game.current_quarter,
        "started_at": isoformat_utc(game.started_at),
        "completed_at": isoformat_utc(game.completed_at),
        "created_at": isoformat_utc(game.created_at),
        "updated_at": isoformat_utc(game.updated_at),
    }


def substitution_to_dict(substitution: Substitution) -> dict:
    return {
        "id": substitution.id,
        "game_id": substitution.game_id,
        "quarter": substitution.quarter,
        "player_out": substitution.player_out,
        "player_in": substitution.player_in,
        "timestamp": isoformat_utc(substitution.timestamp),
    }


def _game_list(games: List[Game]) -> dict:
    return {"games": [game_to_dict(g) for g in games], "count": len(games)}


# ============================================================================
# CRUD
# ============================================================================

@router.get("/")
async def list_games(
    status: Optional[GameStatus] = Query(None, description="Filter by status"),
    team_id: Optional[str] = Query(None, description="Filter by team"),
    db: Session = Depends(get_db)
):
    """List games newest first, optionally filtered by status and/or team."""
    games = GameService(db).list_games(
        status=status.value if status else None,
        team_id=team_id,
    )
    return _game_list(games)


@router.post("/", status_code=201)
async def create_game(request: GameCreate, db: Session = Depends(get_db)):
    """Schedule a game for an existing team. It starts not_started in quarter 1."""
    game = GameService(db).create_game(
        team_id=request.team_id,
        opponent=request.opponent,
        game_date=request.game_date,
        location=request.location,
        notes=request.notes,
    )
    return game_to_dict(game)


@router.get("/team/{team_id}")
async def list_team_games(team_id: str, db: Session = Depends(get_db)):
    return _game_list(GameService(db).list_games(team_id=team_id))


@router.get("/status/{status}")
async def list_games_by_status(status: GameStatus, db: Session = Depends(get_db)):
    return _game_list(GameService(db).list_games(status=status.value))


@router.get("/{game_id}")
async def get_game(game_id: str, db: Session = Depends(get_db)):
    return game_to_dict(GameService(db).get_game(game_id))


@router.put("/{game_id}")
async def update_game(game_id: str, request: GameUpdate, db: Session = Depends(get_db)):
    """Update opponent, date, location or notes."""
    changes = request.model_dump(exclude_unset=True)
    if changes.get("opponent", "") is None:
        changes.pop("opponent")
    return game_to_dict(GameService(db).update_game(game_id, changes))


@router.delete("/{game_id}", status_code=204)
async def delete_game(game_id: str, db: Session = Depends(get_db)):
    """Delete a game. Fails with 409 once it has stats or substitutions."""
    GameService(db).delete_game(game_id)


@router.get("/{game_id}/substitutions")
async def list_substitutions(game_id: str, db: Session = Depends(get_db)):
    """Substitution audit trail, oldest first."""
    substitutions = GameService(db).list_substitutions(game_id)
    return {
        "game_id": game_id,
        "substitutions": [substitution_to_dict(s) for s in substitutions],
        "count": len(substitutions),
    }


# ============================================================================
# State machine
# ============================================================================

@router.put("/{game_id}/roster")
async def set_roster(game_id: str, request: PlayerIdsRequest, db: Session = Depends(get_db)):
    """Replace the roster (5-15 players of the game's team)."""
    return game_to_dict(GameService(db).set_roster(game_id, request.player_ids))


@router.put("/{game_id}/starting-lineup")
async def set_starting_lineup(game_id: str, request: PlayerIdsRequest, db: Session = Depends(get_db)):
    """Pick exactly five roster players as starters."""
    return game_to_dict(GameService(db).set_starting_lineup(game_id, request.player_ids))


@router.post("/{game_id}/start")
async def start_game(game_id: str, db: Session = Depends(get_db)):
    return game_to_dict(GameService(db).start_game(game_id))


@router.post("/{game_id}/next-quarter")
async def next_quarter(game_id: str, db: Session = Depends(get_db)):
    """Advance to the next quarter. Fails with QuarterLimitReached in the 4th."""
    return game_to_dict(GameService(db).next_quarter(game_id))


@router.post("/{game_id}/substitution", status_code=201)
async def record_substitution(game_id: str, request: SubstitutionRequest, db: Session = Depends(get_db)):
    """Swap an on-court player for a bench player and record it."""
    game, substitution = GameService(db).record_substitution(
        game_id, request.player_out, request.player_in
    )
    return {
        "game": game_to_dict(game),
        "substitution": substitution_to_dict(substitution),
    }


@router.post("/{game_id}/complete")
async def complete_game(game_id: str, db: Session = Depends(get_db)):
    """End the game. Irreversible."""
    return game_to_dict(GameService(db).complete_game(game_id))
