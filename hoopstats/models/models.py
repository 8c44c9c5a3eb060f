"""
Database models for the basketball stats tracker.

Rosters and lineups are stored as JSON arrays of player ids on the game row;
a game exclusively owns them. The per-(game, player) action log lives next
to the box-score counters on the game_stats row so both are written in the
same UPDATE.
"""
import uuid

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text, Index, UniqueConstraint, JSON
from sqlalchemy.orm import relationship, declarative_base

from hoopstats.utils.timezone import utc_now

Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())


class Team(Base):
    """A team owned by the user (one per season, typically)."""
    __tablename__ = "teams"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False, index=True)
    coach = Column(String(255), nullable=True)
    season = Column(String(20), nullable=True)  # e.g. "2025-26"
    league = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now)

    # Relationships (no cascade - deletes are blocked while dependents exist)
    players = relationship("Player", back_populates="team")
    games = relationship("Game", back_populates="team")


class Player(Base):
    """A player. team_id is fixed at creation; there is no transfer operation."""
    __tablename__ = "players"

    id = Column(String(36), primary_key=True, default=new_id)
    team_id = Column(String(36), ForeignKey("teams.id"), nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    nickname = Column(String(100), nullable=True)
    position = Column(String(20), nullable=True)  # PG, SG, SF, PF, C
    height = Column(Integer, nullable=True)  # cm
    weight = Column(Integer, nullable=True)  # kg
    age = Column(Integer, nullable=True)
    gender = Column(String(1), nullable=True)  # M or F
    grade = Column(String(50), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now)

    team = relationship("Team", back_populates="players")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def display_name(self) -> str:
        if self.nickname:
            return f"{self.nickname} ({self.full_name})"
        return self.full_name


class Game(Base):
    """A game against an opponent, with its live state."""
    __tablename__ = "games"

    id = Column(String(36), primary_key=True, default=new_id)
    team_id = Column(String(36), ForeignKey("teams.id"), nullable=False, index=True)
    opponent = Column(String(255), nullable=False)
    game_date = Column(DateTime, nullable=True, index=True)
    location = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    # Live state
    status = Column(String(20), nullable=False, index=True, default="not_started")  # not_started, in_progress, completed
    roster = Column(JSON, nullable=False, default=list)  # player ids, 0 or 5-15
    starting_lineup = Column(JSON, nullable=False, default=list)  # exactly 5 once set
    current_lineup = Column(JSON, nullable=False, default=list)  # exactly 5 once set
    current_quarter = Column(Integer, nullable=False, default=1)  # 1-4
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now)

    team = relationship("Team", back_populates="games")
    substitutions = relationship(
        "Substitution", back_populates="game", order_by="Substitution.timestamp"
    )
    stats = relationship("GameStats", back_populates="game")

    __table_args__ = (
        Index('ix_games_team_status', 'team_id', 'status'),
    )


class Substitution(Base):
    """Audit record of one accepted substitution. Never updated or deleted."""
    __tablename__ = "substitutions"

    id = Column(String(36), primary_key=True, default=new_id)
    game_id = Column(String(36), ForeignKey("games.id"), nullable=False, index=True)
    quarter = Column(Integer, nullable=False)
    player_out = Column(String(36), ForeignKey("players.id"), nullable=False)
    player_in = Column(String(36), ForeignKey("players.id"), nullable=False)
    timestamp = Column(DateTime, nullable=False, default=utc_now)
    created_at = Column(DateTime, nullable=False, default=utc_now)

    game = relationship("Game", back_populates="substitutions")


class GameStats(Base):
    """
    Box score of one player in one game.

    The row exists only while action_history is non-empty. Counters always
    equal the fold of action_history.
    """
    __tablename__ = "game_stats"

    id = Column(String(36), primary_key=True, default=new_id)
    game_id = Column(String(36), ForeignKey("games.id"), nullable=False, index=True)
    player_id = Column(String(36), ForeignKey("players.id"), nullable=False, index=True)

    # Shooting
    free_throws_made = Column(Integer, nullable=False, default=0)
    free_throws_attempted = Column(Integer, nullable=False, default=0)
    two_points_made = Column(Integer, nullable=False, default=0)
    two_points_attempted = Column(Integer, nullable=False, default=0)
    three_points_made = Column(Integer, nullable=False, default=0)
    three_points_attempted = Column(Integer, nullable=False, default=0)

    # Everything else
    offensive_rebounds = Column(Integer, nullable=False, default=0)
    defensive_rebounds = Column(Integer, nullable=False, default=0)
    assists = Column(Integer, nullable=False, default=0)
    steals = Column(Integer, nullable=False, default=0)
    blocks = Column(Integer, nullable=False, default=0)
    turnovers = Column(Integer, nullable=False, default=0)
    personal_fouls = Column(Integer, nullable=False, default=0)

    # Ordered ledger entries, oldest first
    action_history = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now)

    game = relationship("Game", back_populates="stats")
    player = relationship("Player")

    __table_args__ = (
        UniqueConstraint('game_id', 'player_id', name='uq_game_stats_game_player'),
    )
