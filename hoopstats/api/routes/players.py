"""
Player routes.

Players are created under a team and stay on it; updates never change team_id.
"""
import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from hoopstats.core.database import get_db
from hoopstats.models import Player
from hoopstats.services.player_service import PlayerService
from hoopstats.utils.timezone import isoformat_utc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/players", tags=["players"])

Position = Literal["PG", "SG", "SF", "PF", "C"]
Gender = Literal["M", "F"]


class PlayerFields(BaseModel):
    """Optional player attributes shared by create and update."""
    nickname: Optional[str] = Field(None, max_length=100)
    position: Optional[Position] = None
    height: Optional[int] = Field(None, gt=0, description="Height in cm")
    weight: Optional[int] = Field(None, gt=0, description="Weight in kg")
    age: Optional[int] = Field(None, ge=5, le=100)
    gender: Optional[Gender] = None
    grade: Optional[str] = Field(None, max_length=50)


class PlayerCreate(PlayerFields):
    """Request to create a player on a team."""
    team_id: str = Field(..., description="Owning team ID")
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class PlayerUpdate(PlayerFields):
    """Partial player update; only fields present in the body are changed."""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


def player_to_dict(player: Player) -> dict:
    return {
        "id": player.id,
        "team_id": player.team_id,
        "first_name": player.first_name,
        "last_name": player.last_name,
        "nickname": player.nickname,
        "display_name": player.display_name,
        "position": player.position,
        "height": player.height,
        "weight": player.weight,
        "age": player.age,
        "gender": player.gender,
        "grade": player.grade,
        "created_at": isoformat_utc(player.created_at),
        "updated_at": isoformat_utc(player.updated_at),
    }


@router.post("/", status_code=201)
async def create_player(request: PlayerCreate, db: Session = Depends(get_db)):
    """Create a player under an existing team (404 if the team does not exist)."""
    fields = request.model_dump(exclude={"team_id"}, exclude_none=True)
    player = PlayerService(db).create_player(request.team_id, **fields)
    return player_to_dict(player)


@router.get("/team/{team_id}")
async def list_team_players(team_id: str, db: Session = Depends(get_db)):
    """Players of a team ordered by last name."""
    players = PlayerService(db).list_by_team(team_id)
    return {"players": [player_to_dict(p) for p in players], "count": len(players)}


@router.get("/{player_id}")
async def get_player(player_id: str, db: Session = Depends(get_db)):
    return player_to_dict(PlayerService(db).get_player(player_id))


@router.put("/{player_id}")
async def update_player(player_id: str, request: PlayerUpdate, db: Session = Depends(get_db)):
    """Update player details. Omitted fields are left as they are; null clears optional ones."""
    changes = request.model_dump(exclude_unset=True)
    for required in ("first_name", "last_name"):
        if changes.get(required, "") is None:
            changes.pop(required)
    return player_to_dict(PlayerService(db).update_player(player_id, changes))


@router.delete("/{player_id}", status_code=204)
async def delete_player(player_id: str, db: Session = Depends(get_db)):
    """
    Delete a player.

    Fails with 409 DependentRecordsExist once the player has stats or is on a game roster.
    """
    PlayerService(db).delete_player(player_id)
