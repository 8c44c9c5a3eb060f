"""
Unit tests for career aggregation.
"""
import pytest

from hoopstats.services.career_aggregator import compute_career_stats, summarize_game
from hoopstats.services.stat_ledger import BoxScore


class TestComputeCareerStats:
    """Totals, averages and aggregate percentages."""

    def test_no_games_is_all_zeros(self):
        career = compute_career_stats("p1", [])

        assert career.games_played == 0
        assert career.points_per_game == 0
        assert career.rebounds_per_game == 0
        assert career.assists_per_game == 0
        assert career.field_goal_percentage == 0
        assert career.free_throw_percentage == 0

    def test_totals_and_averages(self):
        games = [
            BoxScore(two_points_made=4, two_points_attempted=8, defensive_rebounds=3, assists=2),
            BoxScore(three_points_made=1, three_points_attempted=4, free_throws_made=2,
                     free_throws_attempted=2, offensive_rebounds=1, assists=5),
        ]
        career = compute_career_stats("p1", games)

        assert career.games_played == 2
        assert career.total_points == 8 + 3 + 2
        assert career.total_rebounds == 4
        assert career.totals.assists == 7
        assert career.points_per_game == pytest.approx(6.5)
        assert career.assists_per_game == pytest.approx(3.5)

    def test_percentages_from_summed_attempts(self):
        games = [
            BoxScore(free_throws_made=1, free_throws_attempted=1),
            BoxScore(free_throws_made=0, free_throws_attempted=3),
        ]
        career = compute_career_stats("p1", games)

        # 1/4, not the mean of 100% and 0%
        assert career.free_throw_percentage == pytest.approx(25.0)

    def test_full_precision_until_presented(self):
        games = [BoxScore(two_points_made=1), BoxScore(), BoxScore()]
        career = compute_career_stats("p1", games)

        assert career.points_per_game == pytest.approx(2 / 3)
        assert career.as_dict()["averages"]["points"] == 0.7
        assert career.as_dict(precision=None)["averages"]["points"] == pytest.approx(2 / 3)

    def test_as_dict_shape(self):
        data = compute_career_stats("p9", [BoxScore(steals=2, blocks=1, turnovers=3)]).as_dict()

        assert data["player_id"] == "p9"
        assert data["games_played"] == 1
        assert data["totals"]["steals"] == 2
        assert data["totals"]["blocks"] == 1
        assert data["totals"]["turnovers"] == 3
        assert set(data["percentages"]) == {"field_goal", "free_throw", "three_point"}


class TestSummarizeGame:
    """Team totals for a game box score."""

    def test_team_totals(self):
        summary = summarize_game({
            "p1": BoxScore(two_points_made=2, two_points_attempted=3, assists=1),
            "p2": BoxScore(three_points_made=1, three_points_attempted=3, free_throws_made=1,
                           free_throws_attempted=2),
        })

        assert summary["players_with_stats"] == 2
        assert summary["points"] == 4 + 3 + 1
        assert summary["field_goals"] == "3/6"
        assert summary["field_goal_percentage"] == 50.0
        assert summary["free_throw_percentage"] == 50.0

    def test_empty_game(self):
        summary = summarize_game({})
        assert summary["points"] == 0
        assert summary["field_goal_percentage"] == 0
