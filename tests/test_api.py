"""
End-to-end tests for the HTTP API, using an in-memory database shared across requests.

Run with: pytest tests/test_api.py -v
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from clubhouse.database import Base, get_db
from clubhouse.gateway import PersistenceGateway
from clubhouse.auth.utils import create_access_token, PLAYER_TOKEN
from clubhouse.api.matches import active_matches
from clubhouse.exceptions import PersistenceFailure


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine)
    engine.dispose()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    active_matches.clear()
    yield TestClient(app)
    app.dependency_overrides.clear()
    active_matches.clear()


@pytest.fixture
def club_id(session_factory):
    db = session_factory()
    club_id = PersistenceGateway(db).create_club("Riverside CC").id
    db.close()
    return club_id


@pytest.fixture
def admin(club_id):
    token = create_access_token("admin-1", club_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def roster(client, admin):
    """Four players: Arjun and Bilal for Lions, Dev and Eoin for Tigers"""
    ids = {}
    for name in ("Arjun", "Bilal", "Dev", "Eoin"):
        response = client.post("/api/players", json={"name": name}, headers=admin)
        assert response.status_code == 201
        ids[name] = response.json()["id"]
    return ids


def match_config(roster, **overrides):
    config = {
        "team_a_name": "Lions",
        "team_b_name": "Tigers",
        "team_a_player_ids": [roster["Arjun"], roster["Bilal"]],
        "team_b_player_ids": [roster["Dev"], roster["Eoin"]],
        "overs": 5,
        "toss_winner": "Lions",
        "toss_decision": "bat",
        "match_id": "live-1",
        "match_date": "2024-05-01",
    }
    config.update(overrides)
    return config


class TestAuth:

    def test_bad_token(self, client):
        response = client.get("/api/players", headers={"Authorization": "Bearer nonsense"})
        assert response.status_code == 401

    def test_player_token_cannot_manage_club(self, client, club_id):
        token = create_access_token("p-1", club_id, PLAYER_TOKEN)
        response = client.get("/api/players", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


class TestPlayersApi:

    def test_list(self, client, admin, roster):
        response = client.get("/api/players", headers=admin)
        assert [p["name"] for p in response.json()] == ["Arjun", "Bilal", "Dev", "Eoin"]

    def test_duplicate(self, client, admin, roster):
        response = client.post("/api/players", json={"name": "Arjun"}, headers=admin)
        assert response.status_code == 409

    def test_blank_name(self, client, admin):
        response = client.post("/api/players", json={"name": ""}, headers=admin)
        assert response.status_code == 422

    def test_rename_and_delete(self, client, admin, roster):
        response = client.put(f"/api/players/{roster['Eoin']}", json={"name": "Eoin M"}, headers=admin)
        assert response.json()["name"] == "Eoin M"

        assert client.delete(f"/api/players/{roster['Eoin']}", headers=admin).status_code == 200
        assert client.get(f"/api/players/stats/{roster['Eoin']}", headers=admin).status_code == 404

    def test_other_club_player_is_not_found(self, client, session_factory, roster):
        db = session_factory()
        other_id = PersistenceGateway(db).create_club("Hillside CC").id
        db.close()
        other_admin = {"Authorization": f"Bearer {create_access_token('admin-2', other_id)}"}

        response = client.get(f"/api/players/stats/{roster['Arjun']}", headers=other_admin)
        assert response.status_code == 404


class TestLiveScoring:
    """Scoring a match one update at a time"""

    def test_full_match(self, client, admin, roster):
        response = client.post("/api/matches/live", json=match_config(roster), headers=admin)
        assert response.status_code == 201
        state = response.json()
        assert state["batting_team"] == "Lions"
        assert state["innings_complete"] is False

        client.put(f"/api/matches/live/live-1/players/{roster['Arjun']}", json={"runs": 14, "fours": 2}, headers=admin)
        response = client.post("/api/matches/live/live-1/advance", headers=admin)
        assert response.json()["target"] == 15
        assert response.json()["batting_team"] == "Tigers"

        response = client.put(f"/api/matches/live/live-1/players/{roster['Dev']}", json={"runs": 15}, headers=admin)
        state = response.json()
        assert state["is_completed"] is True
        assert state["winner"] == "Tigers"
        assert state["man_of_match_name"] == "Dev"
        assert state["is_persisted"] is True

        matches = client.get("/api/matches", headers=admin).json()
        assert [m["id"] for m in matches] == ["live-1"]
        assert matches[0]["man_of_match"] == "Dev"
        assert "live-1" not in active_matches

    def test_save_is_idempotent(self, client, admin, roster):
        client.post("/api/matches/live", json=match_config(roster), headers=admin)
        client.post("/api/matches/live/live-1/advance", headers=admin)
        client.post("/api/matches/live/live-1/advance", headers=admin)

        assert client.post("/api/matches/live/live-1/save", headers=admin).json() == {"id": "live-1"}
        assert len(client.get("/api/matches", headers=admin).json()) == 1

    def test_unfinished_match_cannot_be_saved(self, client, admin, roster):
        client.post("/api/matches/live", json=match_config(roster), headers=admin)
        response = client.post("/api/matches/live/live-1/save", headers=admin)
        assert response.status_code == 422

    def test_fielding_player_update_rejected(self, client, admin, roster):
        client.post("/api/matches/live", json=match_config(roster), headers=admin)
        response = client.put(f"/api/matches/live/live-1/players/{roster['Dev']}", json={"runs": 3}, headers=admin)
        assert response.status_code == 400

    def test_saved_match_leaves_live_store(self, client, admin, roster):
        client.post("/api/matches/live", json=match_config(roster), headers=admin)
        client.post("/api/matches/live/live-1/advance", headers=admin)
        client.post("/api/matches/live/live-1/advance", headers=admin)

        assert active_matches == {}
        assert client.get("/api/matches/live/live-1", headers=admin).status_code == 404
        response = client.put(f"/api/matches/live/live-1/players/{roster['Dev']}", json={"runs": 3}, headers=admin)
        assert response.status_code == 404
        assert client.get("/api/matches/live-1", headers=admin).status_code == 200

    def test_string_runs_rejected(self, client, admin, roster):
        client.post("/api/matches/live", json=match_config(roster), headers=admin)
        response = client.put(f"/api/matches/live/live-1/players/{roster['Arjun']}", json={"runs": "4"}, headers=admin)
        assert response.status_code == 422

    def test_invalid_config_reports_fields(self, client, admin, roster):
        response = client.post("/api/matches/live", json=match_config(roster, overs=0, toss_winner="Bears"), headers=admin)

        assert response.status_code == 422
        assert {e["field"] for e in response.json()["errors"]} == {"overs", "toss_winner"}

    def test_discard(self, client, admin, roster):
        client.post("/api/matches/live", json=match_config(roster), headers=admin)
        assert client.delete("/api/matches/live/live-1", headers=admin).status_code == 200
        assert client.get("/api/matches/live/live-1", headers=admin).status_code == 404

    def test_failed_save_can_be_retried(self, client, admin, roster, monkeypatch):
        real_insert = PersistenceGateway.insert_match_with_stats

        def offline(self, match, stat_rows):
            raise PersistenceFailure("database unavailable")

        monkeypatch.setattr(PersistenceGateway, "insert_match_with_stats", offline)
        client.post("/api/matches/live", json=match_config(roster), headers=admin)
        client.post("/api/matches/live/live-1/advance", headers=admin)
        response = client.post("/api/matches/live/live-1/advance", headers=admin)

        assert response.status_code == 503
        assert response.json()["detail"] == "Save failed, please retry"
        state = client.get("/api/matches/live/live-1", headers=admin).json()
        assert state["is_completed"] is True
        assert state["is_persisted"] is False

        # Completed but unsaved matches still refuse updates
        response = client.put(f"/api/matches/live/live-1/players/{roster['Dev']}", json={"runs": 3}, headers=admin)
        assert response.status_code == 422

        monkeypatch.setattr(PersistenceGateway, "insert_match_with_stats", real_insert)
        assert client.post("/api/matches/live/live-1/save", headers=admin).json() == {"id": "live-1"}
        assert "live-1" not in active_matches
        assert client.get("/api/matches/live-1", headers=admin).status_code == 200


class TestScoresheetApi:
    """Saving a whole match at once"""

    def scoresheet(self, roster):
        return {
            "config": match_config(roster, match_id="sheet-1"),
            "scores": [
                {"player_id": roster["Arjun"], "runs": 22, "sixes": 2},
                {"player_id": roster["Bilal"], "runs": 3, "wickets": 1},
                {"player_id": roster["Dev"], "runs": 10},
                {"player_id": roster["Eoin"], "runs": 4, "wickets": 1},
            ],
        }

    def test_save_and_read_back(self, client, admin, roster):
        response = client.post("/api/matches", json=self.scoresheet(roster), headers=admin)
        assert response.status_code == 201
        assert response.json() == {"id": "sheet-1"}

        match = client.get("/api/matches/sheet-1", headers=admin).json()
        assert match["team_a_score"] == 25
        assert match["team_b_score"] == 14
        assert match["winner"] == "Lions"
        assert match["man_of_match"] == "Arjun"

        rows = client.get("/api/matches/sheet-1/stats", headers=admin).json()
        assert len(rows) == 4

    def test_resubmitting_does_not_duplicate(self, client, admin, roster):
        client.post("/api/matches", json=self.scoresheet(roster), headers=admin)
        client.post("/api/matches", json=self.scoresheet(roster), headers=admin)
        assert len(client.get("/api/matches", headers=admin).json()) == 1

    def test_stats_endpoints(self, client, admin, roster):
        client.post("/api/matches", json=self.scoresheet(roster), headers=admin)

        stats = client.get("/api/players/stats/all", headers=admin).json()
        assert [s["player"]["name"] for s in stats] == ["Arjun", "Dev", "Eoin", "Bilal"]
        assert stats[0]["batting_average"] == "22.00"
        assert stats[0]["boundaries"]["sixes"] == 2

        top = client.get("/api/players/stats/top?metric=total_wickets", headers=admin).json()
        assert [s["player"]["name"] for s in top] == ["Bilal", "Eoin"]

        assert client.get("/api/players/stats/top?metric=nope", headers=admin).status_code == 400

        detailed = client.get(f"/api/players/{roster['Dev']}/detailed-stats", headers=admin).json()
        assert detailed["win_percentage"] == "0.0%"
        assert detailed["recent_matches"][0]["match"]["winner"] == "Lions"

        history = client.get(f"/api/players/{roster['Dev']}/history?limit=1", headers=admin).json()
        assert [h["match_id"] for h in history] == ["sheet-1"]

    def test_history_limit_must_be_positive(self, client, admin, club_id, roster):
        client.post("/api/matches", json=self.scoresheet(roster), headers=admin)
        assert client.get(f"/api/players/{roster['Dev']}/history?limit=-1", headers=admin).status_code == 422
        assert client.get(f"/api/players/{roster['Dev']}/history?limit=0", headers=admin).status_code == 422

        me = {"Authorization": f"Bearer {create_access_token(roster['Dev'], club_id, PLAYER_TOKEN)}"}
        assert client.get("/api/me/history?limit=0", headers=me).status_code == 422

    def test_reconcile(self, client, admin, roster):
        client.post("/api/matches", json=self.scoresheet(roster), headers=admin)
        response = client.get("/api/matches/sheet-1/reconcile", headers=admin)
        assert response.json() == {"id": "sheet-1", "consistent": True}

    def test_reconcile_after_player_deleted(self, client, admin, roster):
        client.post("/api/matches", json=self.scoresheet(roster), headers=admin)
        client.delete(f"/api/players/{roster['Arjun']}", headers=admin)

        response = client.get("/api/matches/sheet-1/reconcile", headers=admin)
        assert response.status_code == 500
        assert response.json()["match_id"] == "sheet-1"

        # Career reads still work for the rest of the team
        stats = client.get(f"/api/players/stats/{roster['Bilal']}", headers=admin).json()
        assert stats["total_runs"] == 3

    def test_delete_match(self, client, admin, roster):
        client.post("/api/matches", json=self.scoresheet(roster), headers=admin)
        assert client.delete("/api/matches/sheet-1", headers=admin).status_code == 200
        assert client.get("/api/matches/sheet-1", headers=admin).status_code == 404
        assert client.get("/api/players/stats/all", headers=admin).json() == []

    def test_player_views_own_stats(self, client, admin, club_id, roster):
        client.post("/api/matches", json=self.scoresheet(roster), headers=admin)
        token = create_access_token(roster["Arjun"], club_id, PLAYER_TOKEN)
        me = {"Authorization": f"Bearer {token}"}

        detailed = client.get("/api/me/detailed-stats", headers=me).json()
        assert detailed["player"]["name"] == "Arjun"
        assert detailed["man_of_match_count"] == 1
        assert len(client.get("/api/me/history", headers=me).json()) == 1

    def test_club_summary(self, client, admin, roster):
        client.post("/api/matches", json=self.scoresheet(roster), headers=admin)
        summary = client.get("/api/club/summary", headers=admin).json()

        assert summary["club"]["name"] == "Riverside CC"
        assert summary["player_count"] == 4
        assert summary["match_count"] == 1
        assert summary["last_activity"] == "2024-05-01"


def test_health(client):
    assert client.get("/api/health").json() == {"status": "healthy"}
