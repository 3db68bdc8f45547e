from __future__ import annotations

import pytest

fastapi = pytest.importorskip("fastapi")

from fastapi.testclient import TestClient

from connectevo.api import create_app

QUICK_TRAINING = {
    "seed": 3,
    "batches": 1,
    "generations_per_batch": 2,
    "population_size": 6,
    "elite_count": 2,
    "training_depth": 1,
    "max_plies": 8,
}


@pytest.fixture()
def client() -> TestClient:
    app = create_app()
    return TestClient(app)


def pieces(body) -> int:
    return sum(1 for row in body["state"]["rows"] for v in row if v)


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_training_session_steps_generations(client: TestClient) -> None:
    session = client.post("/training", json=QUICK_TRAINING).json()
    assert session["generation"] == 0
    assert session["total_generations"] == 2

    res = client.post(f"/training/{session['id']}/generation")
    assert res.status_code == 200
    body = res.json()
    assert body["generation"] == 1
    assert len(body["champion"]["genome"]) == 4
    assert body["stats"]["generation"] == 0
    preview = body["exhibitions"][0]
    assert preview["start"]["legal"] == list(range(7))
    assert preview["end_reason"] in {"win", "draw"}
    assert sum(1 for row in preview["board"]["rows"] for v in row if v) == preview["plies"]
    if preview["end_reason"] == "win":
        assert preview["board"]["winner"] == preview["winner"]


def test_training_batch_sets_best_agent(client: TestClient) -> None:
    session = client.post("/training", json=QUICK_TRAINING).json()
    body = client.post(f"/training/{session['id']}/batch").json()
    assert body["finished"] is True
    assert body["best_agent"] is not None
    res = client.post(f"/training/{session['id']}/batch")
    assert res.status_code == 400


def test_generation_and_batch_steps_share_counters(client: TestClient) -> None:
    session = client.post("/training", json=QUICK_TRAINING).json()
    body = client.post(f"/training/{session['id']}/generation").json()
    assert body["generation"] == 1
    assert body["batch"] == 0
    assert body["best_agent"] is None

    body = client.post(f"/training/{session['id']}/batch").json()
    assert body["generation"] == 2
    assert body["batch"] == 1
    assert body["finished"] is True
    assert body["best_agent"] is not None
    assert [ex["generation"] for ex in body["exhibitions"]] == [1, 2]

    assert client.post(f"/training/{session['id']}/generation").status_code == 400
    assert client.post(f"/training/{session['id']}/batch").status_code == 400
    assert client.get(f"/training/{session['id']}").json()["generation"] == 2


def test_generation_steps_alone_finish_training(client: TestClient) -> None:
    session = client.post("/training", json=QUICK_TRAINING).json()
    client.post(f"/training/{session['id']}/generation")
    body = client.post(f"/training/{session['id']}/generation").json()
    assert body["finished"] is True
    assert body["best_agent"]["genome"] == body["exhibitions"][-1]["champion"]
    res = client.post(f"/training/{session['id']}/generation")
    assert res.status_code == 400


def test_invalid_training_config_is_rejected(client: TestClient) -> None:
    res = client.post("/training", json={**QUICK_TRAINING, "population_size": 0})
    assert res.status_code == 400


def test_unknown_ids_return_404(client: TestClient) -> None:
    assert client.get("/training/nope").status_code == 404
    assert client.get("/match/nope").status_code == 404


def test_human_move_gets_agent_reply(client: TestClient) -> None:
    match = client.post("/match", json={"difficulty": "easy", "genome": [1, 1, 1, 1]}).json()
    assert match["human"] == 1
    assert match["depth"] == 2
    assert pieces(match) == 0

    res = client.post(f"/match/{match['id']}/move", json={"column": 3})
    assert res.status_code == 200
    body = res.json()
    assert pieces(body) == 2
    assert body["turn"] == 1
    assert body["last_agent_move"] is not None


def test_agent_moves_first_when_human_second(client: TestClient) -> None:
    match = client.post("/match", json={"difficulty": 2, "human_first": False}).json()
    assert match["human"] == 2
    assert pieces(match) == 1
    assert match["last_agent_move"] == 3


def test_invalid_column_is_rejected(client: TestClient) -> None:
    match = client.post("/match", json={"difficulty": "easy"}).json()
    res = client.post(f"/match/{match['id']}/move", json={"column": 9})
    assert res.status_code == 400


def test_bad_difficulty_and_genome_are_rejected(client: TestClient) -> None:
    assert client.post("/match", json={"difficulty": "nightmare"}).status_code == 400
    assert client.post("/match", json={"genome": [1, 2, 3]}).status_code == 400


def test_match_against_trained_champion(client: TestClient) -> None:
    session = client.post("/training", json=QUICK_TRAINING).json()
    client.post(f"/training/{session['id']}/batch")
    trained = client.get(f"/training/{session['id']}").json()
    match = client.post(
        "/match", json={"difficulty": "easy", "training_id": session["id"]}
    ).json()
    assert match["agent"]["genome"] == trained["best_agent"]["genome"]


def test_finished_match_rejects_moves(client: TestClient) -> None:
    match = client.post("/match", json={"difficulty": "easy", "genome": [0, 0, 0, 0]}).json()
    match_id = match["id"]
    body = match
    for _ in range(30):
        if body["finished"]:
            break
        column = body["state"]["legal"][0]
        body = client.post(f"/match/{match_id}/move", json={"column": column}).json()
    assert body["finished"]
    res = client.post(f"/match/{match_id}/move", json={"column": 6})
    assert res.status_code == 400
