"""
HTTP endpoint integration tests for the hoopstats API.

These tests verify that FastAPI endpoints:
- Return correct HTTP status codes
- Report rule violations as {"error": <kind>, "detail": ..., "context": ...}
- Validate request payloads at the boundary
- Enforce the API key when one is configured

Uses FastAPI TestClient for in-memory HTTP testing.
"""
import uuid

import pytest
from fastapi.testclient import TestClient

API = "/api/v1"


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def api_team(test_client: TestClient) -> dict:
    response = test_client.post(f"{API}/teams/", json={"name": "Riverside Hawks", "coach": "Dana Ortiz"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def api_players(test_client: TestClient, api_team) -> list:
    players = []
    for i in range(8):
        response = test_client.post(f"{API}/players/", json={
            "team_id": api_team["id"],
            "first_name": f"Player{i}",
            "last_name": f"Number{i}",
            "position": "SF",
        })
        assert response.status_code == 201
        players.append(response.json())
    return players


@pytest.fixture
def api_game(test_client: TestClient, api_team) -> dict:
    response = test_client.post(f"{API}/games/", json={
        "team_id": api_team["id"],
        "opponent": "Lakeside Lions",
        "game_date": "2025-11-01T18:00:00Z",
        "location": "Home gym",
    })
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def api_live_game(test_client: TestClient, api_game, api_players) -> dict:
    ids = [p["id"] for p in api_players]
    game_id = api_game["id"]
    assert test_client.put(f"{API}/games/{game_id}/roster", json={"player_ids": ids}).status_code == 200
    assert test_client.put(
        f"{API}/games/{game_id}/starting-lineup", json={"player_ids": ids[:5]}
    ).status_code == 200
    response = test_client.post(f"{API}/games/{game_id}/start")
    assert response.status_code == 200
    return response.json()


def record(client: TestClient, game_id: str, player_id: str, action_type: str, made=None):
    body = {"player_id": player_id, "action_type": action_type}
    if made is not None:
        body["made"] = made
    return client.post(f"{API}/stats/games/{game_id}/actions", json=body)


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

class TestRootAndHealthEndpoints:
    """Test root and health check endpoints."""

    def test_root_endpoint(self, test_client: TestClient):
        response = test_client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "running"
        assert data["endpoints"]["games"] == "/api/v1/games"

    def test_health_endpoint(self, test_client: TestClient):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_api_health_reports_counts(self, test_client: TestClient, api_live_game):
        response = test_client.get("/api/health")

        assert response.status_code == 200
        counts = response.json()["components"]["database"]["counts"]
        assert counts["teams"] == 1
        assert counts["players"] == 8
        assert counts["live_games"] == 1

    def test_correlation_id_echoed(self, test_client: TestClient):
        response = test_client.get("/health", headers={"X-Correlation-ID": "abc-123"})
        assert response.headers["X-Correlation-ID"] == "abc-123"

    def test_correlation_id_generated(self, test_client: TestClient):
        response = test_client.get("/health")
        assert response.headers["X-Correlation-ID"]


# =============================================================================
# AUTHENTICATION
# =============================================================================

class TestApiKey:
    """X-API-Key is enforced once API_KEY is configured."""

    @pytest.fixture
    def api_key(self, monkeypatch):
        from hoopstats.core.config import settings
        monkeypatch.setattr(settings, "API_KEY", "courtside")
        return "courtside"

    def test_open_without_configured_key(self, test_client: TestClient):
        assert test_client.get(f"{API}/teams/").status_code == 200

    def test_missing_key(self, test_client: TestClient, api_key):
        assert test_client.get(f"{API}/teams/").status_code == 401

    def test_wrong_key(self, test_client: TestClient, api_key):
        response = test_client.get(f"{API}/teams/", headers={"X-API-Key": "nope"})
        assert response.status_code == 403

    def test_valid_key(self, test_client: TestClient, api_key):
        response = test_client.get(f"{API}/teams/", headers={"X-API-Key": api_key})
        assert response.status_code == 200

    def test_health_is_public(self, test_client: TestClient, api_key):
        assert test_client.get("/health").status_code == 200


# =============================================================================
# TEAMS & PLAYERS
# =============================================================================

class TestTeamEndpoints:
    """Team CRUD over HTTP."""

    def test_create_and_list(self, test_client: TestClient, api_team):
        response = test_client.get(f"{API}/teams/")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["teams"][0]["name"] == "Riverside Hawks"

    def test_blank_name_rejected(self, test_client: TestClient):
        response = test_client.post(f"{API}/teams/", json={"name": "   "})
        assert response.status_code == 422

    def test_partial_update(self, test_client: TestClient, api_team):
        response = test_client.put(f"{API}/teams/{api_team['id']}", json={"league": "Metro"})

        assert response.status_code == 200
        data = response.json()
        assert data["league"] == "Metro"
        assert data["coach"] == "Dana Ortiz"

    def test_not_found(self, test_client: TestClient):
        response = test_client.get(f"{API}/teams/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"] == "NotFound"

    def test_delete_with_players_blocked(self, test_client: TestClient, api_team, api_players):
        response = test_client.delete(f"{API}/teams/{api_team['id']}")

        assert response.status_code == 409
        assert response.json()["error"] == "DependentRecordsExist"

    def test_delete_empty_team(self, test_client: TestClient, api_team):
        assert test_client.delete(f"{API}/teams/{api_team['id']}").status_code == 204
        assert test_client.get(f"{API}/teams/{api_team['id']}").status_code == 404


class TestPlayerEndpoints:
    """Player CRUD over HTTP."""

    def test_list_by_team(self, test_client: TestClient, api_team, api_players):
        response = test_client.get(f"{API}/players/team/{api_team['id']}")

        assert response.status_code == 200
        assert response.json()["count"] == 8

    def test_create_for_missing_team(self, test_client: TestClient):
        response = test_client.post(f"{API}/players/", json={
            "team_id": str(uuid.uuid4()), "first_name": "No", "last_name": "Team",
        })
        assert response.status_code == 404

    @pytest.mark.parametrize("field,value", [
        ("age", 3),
        ("height", 0),
        ("gender", "X"),
        ("position", "GK"),
    ])
    def test_invalid_attributes(self, test_client: TestClient, api_team, field, value):
        response = test_client.post(f"{API}/players/", json={
            "team_id": api_team["id"], "first_name": "Bad", "last_name": "Input", field: value,
        })
        assert response.status_code == 422

    def test_nickname_in_display_name(self, test_client: TestClient, api_players):
        player_id = api_players[0]["id"]
        response = test_client.put(f"{API}/players/{player_id}", json={"nickname": "Ace"})

        assert response.status_code == 200
        assert response.json()["display_name"] == "Ace (Player0 Number0)"


# =============================================================================
# GAMES
# =============================================================================

class TestGameEndpoints:
    """Game CRUD and the state machine over HTTP."""

    def test_new_game(self, api_game):
        assert api_game["status"] == "not_started"
        assert api_game["current_quarter"] == 1
        assert api_game["game_date"] == "2025-11-01T18:00:00Z"

    def test_start_scenario(self, api_live_game, api_players):
        assert api_live_game["status"] == "in_progress"
        assert api_live_game["current_quarter"] == 1
        assert api_live_game["current_lineup"] == [p["id"] for p in api_players[:5]]

    def test_roster_too_small(self, test_client: TestClient, api_game, api_players):
        ids = [p["id"] for p in api_players[:4]]
        response = test_client.put(f"{API}/games/{api_game['id']}/roster", json={"player_ids": ids})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "InvalidRosterSize"
        assert body["context"]["game_id"] == api_game["id"]

    def test_lineup_player_not_on_roster(self, test_client: TestClient, api_game, api_players):
        ids = [p["id"] for p in api_players]
        game_id = api_game["id"]
        test_client.put(f"{API}/games/{game_id}/roster", json={"player_ids": ids[:6]})

        response = test_client.put(
            f"{API}/games/{game_id}/starting-lineup", json={"player_ids": ids[:4] + [ids[7]]}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "PlayerNotOnRoster"

    def test_start_without_lineup(self, test_client: TestClient, api_game):
        response = test_client.post(f"{API}/games/{api_game['id']}/start")

        assert response.status_code == 409
        assert response.json()["error"] == "InvalidState"

    def test_quarter_limit(self, test_client: TestClient, api_live_game):
        game_id = api_live_game["id"]
        for expected in (2, 3, 4):
            response = test_client.post(f"{API}/games/{game_id}/next-quarter")
            assert response.json()["current_quarter"] == expected

        response = test_client.post(f"{API}/games/{game_id}/next-quarter")
        assert response.status_code == 400
        assert response.json()["error"] == "QuarterLimitReached"

    def test_substitution(self, test_client: TestClient, api_live_game, api_players):
        game_id = api_live_game["id"]
        out_id, in_id = api_players[0]["id"], api_players[6]["id"]

        response = test_client.post(
            f"{API}/games/{game_id}/substitution", json={"player_out": out_id, "player_in": in_id}
        )

        assert response.status_code == 201
        data = response.json()
        assert out_id not in data["game"]["current_lineup"]
        assert in_id in data["game"]["current_lineup"]
        assert data["substitution"]["quarter"] == 1

        trail = test_client.get(f"{API}/games/{game_id}/substitutions").json()
        assert trail["count"] == 1

    def test_substitution_player_not_on_court(self, test_client: TestClient, api_live_game, api_players):
        game_id = api_live_game["id"]
        response = test_client.post(f"{API}/games/{game_id}/substitution", json={
            "player_out": api_players[5]["id"], "player_in": api_players[6]["id"],
        })

        assert response.status_code == 400
        assert response.json()["error"] == "PlayerNotOnCourt"
        game = test_client.get(f"{API}/games/{game_id}").json()
        assert game["current_lineup"] == api_live_game["current_lineup"]
        assert test_client.get(f"{API}/games/{game_id}/substitutions").json()["count"] == 0

    def test_list_filters(self, test_client: TestClient, api_live_game, api_team):
        test_client.post(f"{API}/games/", json={"team_id": api_team["id"], "opponent": "Second"})

        assert test_client.get(f"{API}/games/").json()["count"] == 2
        live = test_client.get(f"{API}/games/", params={"status": "in_progress"}).json()
        assert [g["id"] for g in live["games"]] == [api_live_game["id"]]
        assert test_client.get(f"{API}/games/status/not_started").json()["count"] == 1
        assert test_client.get(f"{API}/games/team/{api_team['id']}").json()["count"] == 2

    def test_invalid_status_filter(self, test_client: TestClient):
        assert test_client.get(f"{API}/games/", params={"status": "paused"}).status_code == 422

    def test_complete(self, test_client: TestClient, api_live_game):
        game_id = api_live_game["id"]
        response = test_client.post(f"{API}/games/{game_id}/complete")

        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert test_client.post(f"{API}/games/{game_id}/complete").status_code == 409


# =============================================================================
# STATS
# =============================================================================

class TestStatsEndpoints:
    """Recording, undo, box score and career over HTTP."""

    def test_free_throw_scenario(self, test_client: TestClient, api_live_game, api_players):
        game_id, player_id = api_live_game["id"], api_players[0]["id"]

        record(test_client, game_id, player_id, "freeThrow", made=True)
        response = record(test_client, game_id, player_id, "freeThrow", made=False)
        assert response.status_code == 201
        data = response.json()
        assert (data["free_throws_made"], data["free_throws_attempted"]) == (1, 2)
        assert data["free_throw_percentage"] == 50.0

        response = test_client.delete(f"{API}/stats/games/{game_id}/actions/{player_id}")
        assert response.status_code == 200
        data = response.json()
        assert (data["free_throws_made"], data["free_throws_attempted"]) == (1, 1)
        assert data["has_stats"] is True

    def test_undo_to_empty(self, test_client: TestClient, api_live_game, api_players):
        game_id, player_id = api_live_game["id"], api_players[0]["id"]
        record(test_client, game_id, player_id, "block")

        data = test_client.delete(f"{API}/stats/games/{game_id}/actions/{player_id}").json()
        assert data["has_stats"] is False
        assert data["blocks"] == 0

        response = test_client.delete(f"{API}/stats/games/{game_id}/actions/{player_id}")
        assert response.status_code == 400
        assert response.json()["error"] == "NoActionToUndo"

    def test_shot_requires_made(self, test_client: TestClient, api_live_game, api_players):
        response = record(test_client, api_live_game["id"], api_players[0]["id"], "twoPoint")

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidAction"

    def test_unknown_action_type(self, test_client: TestClient, api_live_game, api_players):
        response = record(test_client, api_live_game["id"], api_players[0]["id"], "alleyOop", made=True)

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "InvalidAction"
        assert data["context"] == {"action_type": "alleyOop"}

    def test_bench_player_rejected(self, test_client: TestClient, api_live_game, api_players):
        response = record(test_client, api_live_game["id"], api_players[6]["id"], "assist")

        assert response.status_code == 400
        assert response.json()["error"] == "PlayerNotOnCourt"

    def test_recording_before_start(self, test_client: TestClient, api_game, api_players):
        response = record(test_client, api_game["id"], api_players[0]["id"], "assist")

        assert response.status_code == 409
        assert response.json()["error"] == "InvalidState"

    def test_player_stats_without_actions(self, test_client: TestClient, api_live_game, api_players):
        response = test_client.get(
            f"{API}/stats/games/{api_live_game['id']}/players/{api_players[0]['id']}"
        )

        assert response.status_code == 200
        data = response.json()
        assert data["has_stats"] is False
        assert data["points"] == 0
        assert data["field_goal_percentage"] == 0

    def test_points_formula(self, test_client: TestClient, api_live_game, api_players):
        game_id, player_id = api_live_game["id"], api_players[1]["id"]
        for action_type, made in [("freeThrow", True), ("twoPoint", True), ("threePoint", True),
                                  ("threePoint", False), ("offensiveRebound", None)]:
            record(test_client, game_id, player_id, action_type, made=made)

        data = test_client.get(f"{API}/stats/games/{game_id}/players/{player_id}").json()

        assert data["points"] == data["free_throws_made"] + 2 * data["two_points_made"] + 3 * data["three_points_made"]
        assert data["points"] == 6
        assert data["total_rebounds"] == 1
        assert data["field_goal_percentage"] == 66.7

    def test_box_score(self, test_client: TestClient, api_live_game, api_players):
        game_id = api_live_game["id"]
        record(test_client, game_id, api_players[0]["id"], "twoPoint", made=True)
        record(test_client, game_id, api_players[1]["id"], "assist")

        data = test_client.get(f"{API}/stats/games/{game_id}").json()

        assert len(data["players"]) == 2
        assert data["team_totals"]["points"] == 2
        assert data["team_totals"]["assists"] == 1

    def test_career(self, test_client: TestClient, api_live_game, api_players):
        game_id, player_id = api_live_game["id"], api_players[0]["id"]
        record(test_client, game_id, player_id, "threePoint", made=True)
        record(test_client, game_id, player_id, "freeThrow", made=False)

        before = test_client.get(f"{API}/stats/players/{player_id}/career").json()
        assert before["games_played"] == 0

        test_client.post(f"{API}/games/{game_id}/complete")
        career = test_client.get(f"{API}/stats/players/{player_id}/career").json()

        assert career["games_played"] == 1
        assert career["totals"]["points"] == 3
        assert career["averages"]["points"] == 3.0
        assert career["percentages"]["free_throw"] == 0

    def test_delete_game_with_stats_blocked(self, test_client: TestClient, api_live_game, api_players):
        record(test_client, api_live_game["id"], api_players[0]["id"], "steal")

        response = test_client.delete(f"{API}/games/{api_live_game['id']}")
        assert response.status_code == 409


# =============================================================================
# ASYNC CLIENT
# =============================================================================

class TestAsyncClient:
    """The same API driven through httpx.AsyncClient."""

    @pytest.mark.asyncio
    async def test_full_game_flow(self, async_client, team, player_ids):
        game = (await async_client.post(
            f"{API}/games/", json={"team_id": team.id, "opponent": "Async Aces"}
        )).json()
        game_id = game["id"]

        await async_client.put(f"{API}/games/{game_id}/roster", json={"player_ids": player_ids})
        await async_client.put(f"{API}/games/{game_id}/starting-lineup", json={"player_ids": player_ids[:5]})
        response = await async_client.post(f"{API}/games/{game_id}/start")
        assert response.json()["status"] == "in_progress"

        response = await async_client.post(
            f"{API}/stats/games/{game_id}/actions",
            json={"player_id": player_ids[0], "action_type": "threePoint", "made": True},
        )
        assert response.status_code == 201
        assert response.json()["points"] == 3

        response = await async_client.post(f"{API}/games/{game_id}/complete")
        assert response.json()["status"] == "completed"
