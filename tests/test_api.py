"""HTTP flows through the FastAPI app."""

from __future__ import annotations

import sys
from pathlib import Path

import anyio
import httpx
import pytest
from fastapi.testclient import TestClient

sys.path.append(str(Path(__file__).resolve().parents[1]))

import app as app_module
from find_words_game.state import WordDefinition
from find_words_game.state.manager import GameStateManager
from find_words_game.state.storage import SnapshotStorage


@pytest.fixture
def manager(tmp_path, monkeypatch) -> GameStateManager:
    manager = GameStateManager(SnapshotStorage(tmp_path / "state.json"))
    monkeypatch.setattr(app_module, "STATE_MANAGER", manager)
    return manager


@pytest.fixture
def client(manager, validator, monkeypatch) -> TestClient:
    monkeypatch.setattr(app_module, "VALIDATOR", validator)
    return TestClient(app_module.app)


def _create(client: TestClient, letters: str = "CABTSXXXX", difficulty: str = "easy") -> str:
    response = client.post("/games", json={"difficulty": difficulty, "letters": list(letters)})
    assert response.status_code == 200
    return response.json()["game"]["id"]


def _start(client: TestClient) -> str:
    game_id = _create(client)
    assert client.post(f"/games/{game_id}/start").json()["game"]["state"] == 1
    return game_id


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}
    assert client.head("/healthz").status_code == 200


def test_create_game(client, manager):
    response = client.post("/games", json={"difficulty": "easy", "letters": list("CABTSXXXX")})
    game = response.json()["game"]
    assert game["state"] == 0
    assert game["letters"] == list("CABTSXXXX")
    assert game["timeRemaining"] == 120
    assert game["settings"]["difficulty"] == 0
    assert manager.get(game["id"]) is not None


def test_create_game_with_defaults(client):
    game = client.post("/games").json()["game"]
    assert len(game["letters"]) == 12
    assert game["timeRemaining"] == 90


def test_create_game_rejects_bad_input(client):
    assert client.post("/games", json={"difficulty": "brutal"}).status_code == 422
    assert client.post("/games", json={"letters": ["AB"]}).status_code == 422
    assert client.post("/games", json={"letters": list("CAB1")}).status_code == 422
    assert client.post("/games", json={"letters": ["C", "A", "\u00df"]}).status_code == 422
    assert client.post("/games", content=b"{nope", headers={"Content-Type": "application/json"}).status_code == 400


def test_unknown_game_is_404(client):
    assert client.get("/games/missing").status_code == 404
    assert client.post("/games/missing/start").status_code == 404
    assert client.post("/games/missing/submit", json={"word": "cab"}).status_code == 404


def test_select_and_submit(client):
    game_id = _start(client)
    for index in (0, 1, 2):
        response = client.post(f"/games/{game_id}/select", json={"index": index})
    assert response.json()["game"]["currentInput"] == "CAB"

    body = client.post(f"/games/{game_id}/submit").json()
    assert body["success"] is True
    assert body["message"] == "Word found! +10 points (+10s time)"
    assert body["totalScore"] == 10
    assert body["game"]["timeRemaining"] == 130
    assert body["word"]["text"] == "CAB"
    assert [event["kind"] for event in body["events"]] == ["word_found", "time_bonus"]
    assert body["combo"]["level"] == 1


def test_selection_endpoints(client):
    game_id = _start(client)
    client.post(f"/games/{game_id}/select", json={"index": 3})
    client.post(f"/games/{game_id}/select", json={"index": 1})
    assert client.post(f"/games/{game_id}/deselect").json()["game"]["currentInput"] == "T"
    assert client.post(f"/games/{game_id}/clear").json()["game"]["selectedLetterIndices"] == []
    assert client.post(f"/games/{game_id}/select", json={}).status_code == 422


def test_submit_typed_words(client):
    game_id = _start(client)
    assert client.post(f"/games/{game_id}/submit", json={"word": "bat"}).json()["success"] is True

    repeat = client.post(f"/games/{game_id}/submit", json={"word": "BAT"}).json()
    assert repeat["success"] is False
    assert repeat["reason"] == "already found"

    missing = client.post(f"/games/{game_id}/submit", json={"word": "zzz"}).json()
    assert missing["success"] is False
    assert missing["reason"] == "cannot form"
    assert missing["events"] == [{"kind": "error", "value": 0, "detail": "cannot form"}]

    unknown = client.post(f"/games/{game_id}/submit", json={"word": "sab"}).json()
    assert unknown["reason"] == "not a word"


def test_submit_before_start(client):
    game_id = _create(client)
    body = client.post(f"/games/{game_id}/submit", json={"word": "cab"}).json()
    assert body["success"] is False
    assert body["reason"] == "game not active"


def test_pause_resume_and_tick(client):
    game_id = _start(client)
    assert client.post(f"/games/{game_id}/pause").json()["game"]["state"] == 2
    assert client.post(f"/games/{game_id}/pause").json()["game"]["state"] == 2
    assert client.post(f"/games/{game_id}/tick").json()["game"]["timeRemaining"] == 120
    assert client.post(f"/games/{game_id}/resume").json()["game"]["state"] == 1
    assert client.post(f"/games/{game_id}/tick").json()["game"]["timeRemaining"] == 119
    assert client.post(f"/games/{game_id}/tick", json={"timeRemaining": 500}).json()["game"]["timeRemaining"] == 119
    assert client.post(f"/games/{game_id}/tick", json={"timeRemaining": "soon"}).status_code == 422


def test_game_over_records_high_score(client, manager):
    game_id = _start(client)
    client.post(f"/games/{game_id}/submit", json={"word": "stab"})
    finished = client.post(f"/games/{game_id}/tick", json={"timeRemaining": 0}).json()["game"]
    assert finished["state"] == 3
    assert finished["endTime"] is not None

    scores = client.get("/high_scores").json()["scores"]
    assert len(scores) == 1
    assert scores[0]["score"] == 20
    assert scores[0]["longestWord"] == "STAB"
    assert scores[0]["duration"] == "00:00"
    assert client.get("/high_scores", params={"difficulty": "hard"}).json()["scores"] == []
    assert manager.storage.load_current_game() is None


def test_end_endpoint(client):
    game_id = _start(client)
    body = client.post(f"/games/{game_id}/end").json()
    assert body["game"]["state"] == 3
    assert client.post(f"/games/{game_id}/end").json()["game"]["state"] == 3


def test_hints_and_stats(client):
    game_id = _start(client)
    client.post(f"/games/{game_id}/submit", json={"word": "cab"})
    assert client.get(f"/games/{game_id}/hints").json() == {"hints": ["ACT", "BAT", "CAT"]}
    assert client.get(f"/games/{game_id}/hints", params={"limit": 1}).json() == {"hints": ["ACT"]}

    stats = client.get(f"/games/{game_id}/stats").json()
    assert stats["totalWords"] == 1
    assert stats["totalScore"] == 10
    assert stats["wordsByLength"] == {"3": 1}
    assert stats["combo"]["maxLevel"] == 1
    assert "Words found: 1" in stats["summary"]

    state = client.get(f"/games/{game_id}").json()
    assert state["game"]["foundWords"][0]["text"] == "CAB"


def test_delete_game(client, manager):
    game_id = _start(client)
    assert client.delete(f"/games/{game_id}").status_code == 204
    assert manager.get(game_id) is None
    assert manager.storage.load_current_game() is None
    assert client.get(f"/games/{game_id}").status_code == 404
    assert client.delete(f"/games/{game_id}").status_code == 404


class _HeldDefinitions:
    """Definition lookup that blocks until the test lets it finish."""

    def __init__(self) -> None:
        self.started = anyio.Event()
        self.release = anyio.Event()

    async def get_definition(self, word: str) -> WordDefinition:
        self.started.set()
        await self.release.wait()
        return WordDefinition(word=word.lower(), meanings=("A taxi.",), part_of_speech="noun")


@pytest.mark.anyio
async def test_submit_commits_word_before_definition_arrives(manager, validator, monkeypatch):
    monkeypatch.setattr(app_module, "VALIDATOR", validator)
    definitions = _HeldDefinitions()
    monkeypatch.setattr(app_module, "DEFINITIONS", definitions)
    responses = {}

    transport = httpx.ASGITransport(app=app_module.app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        created = await client.post(
            "/games",
            json={"difficulty": "easy", "letters": list("CABTSXXXX"), "settings": {"learningModeEnabled": True}},
        )
        game_id = created.json()["game"]["id"]
        await client.post(f"/games/{game_id}/start")

        async def submit() -> None:
            responses["submit"] = await client.post(f"/games/{game_id}/submit", json={"word": "cab"})

        async with anyio.create_task_group() as tg:
            tg.start_soon(submit)
            await definitions.started.wait()
            with anyio.fail_after(2):
                during = (await client.get(f"/games/{game_id}")).json()["game"]
                ticked = (await client.post(f"/games/{game_id}/tick")).json()["game"]
            definitions.release.set()

        final = (await client.get(f"/games/{game_id}")).json()["game"]

    assert [word["text"] for word in during["foundWords"]] == ["CAB"]
    assert during["foundWords"][0]["definition"] is None
    assert during["timeRemaining"] == 130
    assert ticked["timeRemaining"] == 129

    body = responses["submit"].json()
    assert body["success"] is True
    assert body["word"]["definition"]["meanings"] == ["A taxi."]
    assert body["word"]["isLearned"] is True
    assert final["timeRemaining"] == 129
    assert final["foundWords"][0]["definition"]["meanings"] == ["A taxi."]
    assert final["foundWords"][0]["score"] == 10
    assert [entry.word for entry in manager.storage.load_learned_words()] == ["CAB"]
    manager.reset()
