"""
Tests for StatsService: recording, undo, box scores and career stats.
"""
import pytest

from hoopstats.core.errors import (
    InvalidActionError,
    InvalidStateError,
    NoActionToUndoError,
    NotFoundError,
    PlayerNotOnCourtError,
    PlayerNotOnRosterError,
)
from hoopstats.models import GameStats
from hoopstats.services.game_service import GameService
from hoopstats.services.player_service import PlayerService
from hoopstats.services.stat_ledger import ActionType
from hoopstats.services.stats_service import StatsService


def start_game(db_session, game, player_ids):
    service = GameService(db_session)
    service.set_roster(game.id, player_ids)
    service.set_starting_lineup(game.id, player_ids[:5])
    return service.start_game(game.id)


class TestRecordAction:
    """Recording preconditions and persistence."""

    def test_free_throw_scenario(self, db_session, live_game, player_ids):
        service = StatsService(db_session)
        player = player_ids[0]

        service.record_action(live_game.id, player, ActionType.FREE_THROW, made=True)
        stats = service.record_action(live_game.id, player, ActionType.FREE_THROW, made=False)
        assert (stats.box.free_throws_made, stats.box.free_throws_attempted) == (1, 2)

        stats = service.undo_last_action(live_game.id, player)
        assert (stats.box.free_throws_made, stats.box.free_throws_attempted) == (1, 1)

        row = db_session.query(GameStats).filter_by(game_id=live_game.id, player_id=player).one()
        assert (row.free_throws_made, row.free_throws_attempted) == (1, 1)
        assert len(row.action_history) == 1

    def test_entries_carry_quarter(self, db_session, live_game, player_ids):
        GameService(db_session).next_quarter(live_game.id)
        stats = StatsService(db_session).record_action(live_game.id, player_ids[1], "steal")

        assert stats.last_action.quarter == 2
        assert stats.last_action.action_type == ActionType.STEAL

    def test_requires_game_in_progress(self, db_session, game, player_ids):
        with pytest.raises(InvalidStateError):
            StatsService(db_session).record_action(game.id, player_ids[0], ActionType.ASSIST)

    def test_rejected_after_completion(self, db_session, live_game, player_ids):
        GameService(db_session).complete_game(live_game.id)
        with pytest.raises(InvalidStateError):
            StatsService(db_session).record_action(live_game.id, player_ids[0], ActionType.ASSIST)

    def test_unknown_game_and_player(self, db_session, live_game):
        service = StatsService(db_session)
        with pytest.raises(NotFoundError):
            service.record_action("missing", "also-missing", ActionType.BLOCK)
        with pytest.raises(NotFoundError):
            service.record_action(live_game.id, "missing", ActionType.BLOCK)

    def test_player_not_on_roster(self, db_session, live_game, team):
        extra = PlayerService(db_session).create_player(team.id, first_name="Late", last_name="Addition")
        with pytest.raises(PlayerNotOnRosterError):
            StatsService(db_session).record_action(live_game.id, extra.id, ActionType.ASSIST)

    def test_bench_player_rejected(self, db_session, live_game, player_ids):
        with pytest.raises(PlayerNotOnCourtError) as exc_info:
            StatsService(db_session).record_action(live_game.id, player_ids[6], ActionType.ASSIST)

        assert exc_info.value.context == {"game_id": live_game.id, "player_id": player_ids[6]}
        assert db_session.query(GameStats).count() == 0

    def test_on_court_follows_substitutions(self, db_session, live_game, player_ids):
        service = StatsService(db_session)
        GameService(db_session).record_substitution(live_game.id, player_ids[0], player_ids[6])

        assert service.record_action(live_game.id, player_ids[6], ActionType.ASSIST).box.assists == 1
        with pytest.raises(PlayerNotOnCourtError):
            service.record_action(live_game.id, player_ids[0], ActionType.ASSIST)

    def test_shot_without_outcome_persists_nothing(self, db_session, live_game, player_ids):
        with pytest.raises(InvalidActionError):
            StatsService(db_session).record_action(live_game.id, player_ids[0], ActionType.TWO_POINT)
        assert db_session.query(GameStats).count() == 0


class TestUndo:
    """Undo and the empty-log lifecycle."""

    def test_nothing_to_undo(self, db_session, live_game, player_ids):
        with pytest.raises(NoActionToUndoError):
            StatsService(db_session).undo_last_action(live_game.id, player_ids[0])

    def test_undo_last_entry_deletes_row(self, db_session, live_game, player_ids):
        service = StatsService(db_session)
        service.record_action(live_game.id, player_ids[0], ActionType.THREE_POINT, made=True)

        stats = service.undo_last_action(live_game.id, player_ids[0])

        assert stats.has_stats is False
        assert stats.box.is_empty()
        assert db_session.query(GameStats).count() == 0
        with pytest.raises(NoActionToUndoError):
            service.undo_last_action(live_game.id, player_ids[0])

    def test_undo_after_substituted_out(self, db_session, live_game, player_ids):
        service = StatsService(db_session)
        service.record_action(live_game.id, player_ids[0], ActionType.STEAL)
        GameService(db_session).record_substitution(live_game.id, player_ids[0], player_ids[5])

        stats = service.undo_last_action(live_game.id, player_ids[0])
        assert stats.has_stats is False

    def test_undo_only_touches_that_player(self, db_session, live_game, player_ids):
        service = StatsService(db_session)
        service.record_action(live_game.id, player_ids[0], ActionType.ASSIST)
        service.record_action(live_game.id, player_ids[1], ActionType.ASSIST)

        service.undo_last_action(live_game.id, player_ids[0])

        assert service.get_stats(live_game.id, player_ids[1]).box.assists == 1


class TestReads:
    """get_stats, box score and career stats."""

    def test_get_stats_without_actions(self, db_session, live_game, player_ids):
        stats = StatsService(db_session).get_stats(live_game.id, player_ids[0])

        assert stats.has_stats is False
        data = stats.to_dict()
        assert data["points"] == 0
        assert data["field_goal_percentage"] == 0

    def test_game_box_score(self, db_session, live_game, player_ids):
        service = StatsService(db_session)
        service.record_action(live_game.id, player_ids[0], ActionType.TWO_POINT, made=True)
        service.record_action(live_game.id, player_ids[1], ActionType.THREE_POINT, made=True)
        service.record_action(live_game.id, player_ids[1], ActionType.FREE_THROW, made=False)

        box_score = service.get_game_box_score(live_game.id)

        assert len(box_score["players"]) == 2
        assert box_score["team_totals"]["points"] == 5
        assert box_score["team_totals"]["free_throws"] == "0/1"
        assert box_score["players"][0]["player_name"]

    def test_career_counts_completed_games_only(self, db_session, make_game, player_ids):
        stats = StatsService(db_session)
        games = GameService(db_session)
        player = player_ids[0]

        first = start_game(db_session, make_game("First"), player_ids)
        stats.record_action(first.id, player, ActionType.TWO_POINT, made=True)
        stats.record_action(first.id, player, ActionType.FREE_THROW, made=True)
        games.complete_game(first.id)

        second = start_game(db_session, make_game("Second"), player_ids)
        stats.record_action(second.id, player, ActionType.THREE_POINT, made=True)
        stats.record_action(second.id, player, ActionType.FREE_THROW, made=False)
        stats.record_action(second.id, player, ActionType.FREE_THROW, made=False)
        stats.record_action(second.id, player, ActionType.FREE_THROW, made=False)
        games.complete_game(second.id)

        live = start_game(db_session, make_game("Third"), player_ids)
        stats.record_action(live.id, player, ActionType.THREE_POINT, made=True)

        career = stats.get_career_stats(player)

        assert career.games_played == 2
        assert career.total_points == 2 + 1 + 3
        assert career.points_per_game == pytest.approx(3.0)
        assert career.free_throw_percentage == pytest.approx(25.0)

    def test_career_without_games(self, db_session, player_ids):
        career = StatsService(db_session).get_career_stats(player_ids[0])
        assert career.games_played == 0
        assert career.points_per_game == 0

    def test_career_unknown_player(self, db_session):
        with pytest.raises(NotFoundError):
            StatsService(db_session).get_career_stats("missing")
