"""
Career aggregation over completed-game box scores.

Shooting percentages are computed from summed made/attempted across games,
never by averaging per-game percentages:

    Game 1: 1/1 FT (100%)   Game 2: 0/3 FT (0%)
    Career FT% = 1/4 = 25%  (not the 50% a per-game mean would give)

Everything here returns full precision; ``as_dict`` rounds for display.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from hoopstats.services.stat_ledger import BoxScore


def _per_game(total: int, games_played: int) -> float:
    if games_played == 0:
        return 0.0
    return total / games_played


@dataclass(frozen=True)
class CareerStats:
    """Totals and per-game averages of one player."""
    player_id: str
    games_played: int = 0
    totals: BoxScore = field(default_factory=BoxScore)

    @property
    def total_points(self) -> int:
        return self.totals.points

    @property
    def total_rebounds(self) -> int:
        return self.totals.total_rebounds

    @property
    def points_per_game(self) -> float:
        return _per_game(self.totals.points, self.games_played)

    @property
    def rebounds_per_game(self) -> float:
        return _per_game(self.totals.total_rebounds, self.games_played)

    @property
    def assists_per_game(self) -> float:
        return _per_game(self.totals.assists, self.games_played)

    @property
    def field_goal_percentage(self) -> float:
        return self.totals.field_goal_percentage

    @property
    def free_throw_percentage(self) -> float:
        return self.totals.free_throw_percentage

    @property
    def three_point_percentage(self) -> float:
        return self.totals.three_point_percentage

    def as_dict(self, precision: Optional[int] = 1) -> Dict[str, Any]:
        def rounded(value: float) -> float:
            return value if precision is None else round(value, precision)

        return {
            "player_id": self.player_id,
            "games_played": self.games_played,
            "totals": {
                "points": self.total_points,
                "rebounds": self.total_rebounds,
                "assists": self.totals.assists,
                "steals": self.totals.steals,
                "blocks": self.totals.blocks,
                "turnovers": self.totals.turnovers,
                "personal_fouls": self.totals.personal_fouls,
            },
            "averages": {
                "points": rounded(self.points_per_game),
                "rebounds": rounded(self.rebounds_per_game),
                "assists": rounded(self.assists_per_game),
            },
            "percentages": {
                "field_goal": rounded(self.field_goal_percentage),
                "free_throw": rounded(self.free_throw_percentage),
                "three_point": rounded(self.three_point_percentage),
            },
        }


def sum_box_scores(box_scores: Iterable[BoxScore]) -> BoxScore:
    total = BoxScore()
    for box in box_scores:
        total = total + box
    return total


def compute_career_stats(player_id: str, box_scores: Iterable[BoxScore]) -> CareerStats:
    """
    Fold a player's completed-game box scores into career stats.

    Args:
        player_id: Player the box scores belong to
        box_scores: One box score per completed game with recorded stats

    Returns:
        CareerStats; a player with no games gets zeros everywhere
    """
    box_scores = list(box_scores)
    return CareerStats(
        player_id=player_id,
        games_played=len(box_scores),
        totals=sum_box_scores(box_scores),
    )


def summarize_game(box_scores: Dict[str, BoxScore]) -> Dict[str, Any]:
    """
    Team totals for one game's box score.

    Args:
        box_scores: player_id -> that player's box score in the game
    """
    totals = sum_box_scores(box_scores.values())
    return {
        "players_with_stats": len(box_scores),
        "points": totals.points,
        "total_rebounds": totals.total_rebounds,
        "assists": totals.assists,
        "steals": totals.steals,
        "blocks": totals.blocks,
        "turnovers": totals.turnovers,
        "personal_fouls": totals.personal_fouls,
        "field_goals": f"{totals.field_goals_made}/{totals.field_goals_attempted}",
        "field_goal_percentage": round(totals.field_goal_percentage, 1),
        "free_throws": f"{totals.free_throws_made}/{totals.free_throws_attempted}",
        "free_throw_percentage": round(totals.free_throw_percentage, 1),
        "three_points": f"{totals.three_points_made}/{totals.three_points_attempted}",
        "three_point_percentage": round(totals.three_point_percentage, 1),
    }
