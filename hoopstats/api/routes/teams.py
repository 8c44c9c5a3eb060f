"""
Team routes.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from hoopstats.core.database import get_db
from hoopstats.models import Team
from hoopstats.services.team_service import TeamService
from hoopstats.utils.timezone import isoformat_utc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/teams", tags=["teams"])


def _not_blank(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class TeamCreate(BaseModel):
    """Request to create a team."""
    name: str = Field(..., min_length=1, max_length=255, description="Team name")
    coach: Optional[str] = Field(None, max_length=255)
    season: Optional[str] = Field(None, max_length=20, description="Season label (e.g., 2025-26)")
    league: Optional[str] = Field(None, max_length=255)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _not_blank(v)


class TeamUpdate(BaseModel):
    """Partial team update; only fields present in the body are changed."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    coach: Optional[str] = Field(None, max_length=255)
    season: Optional[str] = Field(None, max_length=20)
    league: Optional[str] = Field(None, max_length=255)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return _not_blank(v) if v is not None else v


def team_to_dict(team: Team) -> dict:
    return {
        "id": team.id,
        "name": team.name,
        "coach": team.coach,
        "season": team.season,
        "league": team.league,
        "created_at": isoformat_utc(team.created_at),
        "updated_at": isoformat_utc(team.updated_at),
    }


@router.get("/")
async def list_teams(db: Session = Depends(get_db)):
    """List all teams ordered by name."""
    teams = TeamService(db).list_teams()
    return {"teams": [team_to_dict(t) for t in teams], "count": len(teams)}


@router.post("/", status_code=201)
async def create_team(request: TeamCreate, db: Session = Depends(get_db)):
    """Create a team."""
    team = TeamService(db).create_team(
        name=request.name,
        coach=request.coach,
        season=request.season,
        league=request.league,
    )
    return team_to_dict(team)


@router.get("/{team_id}")
async def get_team(team_id: str, db: Session = Depends(get_db)):
    return team_to_dict(TeamService(db).get_team(team_id))


@router.put("/{team_id}")
async def update_team(team_id: str, request: TeamUpdate, db: Session = Depends(get_db)):
    """Update team details. Omitted fields are left as they are."""
    changes = request.model_dump(exclude_unset=True)
    # name is required on the row; null leaves it unchanged
    if changes.get("name", "") is None:
        changes.pop("name")
    return team_to_dict(TeamService(db).update_team(team_id, changes))


@router.delete("/{team_id}", status_code=204)
async def delete_team(team_id: str, db: Session = Depends(get_db)):
    """
    Delete a team.

    Fails with 409 DependentRecordsExist while the team has players or games.
    """
    TeamService(db).delete_team(team_id)
