"""HTTP tests for card review and card CRUD endpoints."""

import uuid
from datetime import datetime, timedelta

import aiosqlite
import pytest

from notemate.routers import cards as cards_router
from notemate.routers import decks as decks_router
from notemate.services import review as review_service


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture
def card(client):
    deck = client.post("/decks/", json={"name": "Test Deck"}).json()
    r = client.post(f"/decks/{deck['id']}/cards", json={"prompt": "Test Card", "answer": "Answer"})
    return r.json()


def _review(client, card_id, result):
    return client.post(f"/cards/{card_id}/review", json={"result": result})


def test_gotit_promotes_card(client, card, clock):
    r = _review(client, card["id"], "gotit")
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["card"]["leitner"]["box"] == 2
    assert _ts(body["card"]["leitner"]["next_review_at"]) == clock.now + timedelta(days=2)
    assert body["card"]["stats"] == {"correct": 1, "incorrect": 0}


def test_again_resets_card(client, card, clock):
    _review(client, card["id"], "gotit")
    _review(client, card["id"], "gotit")
    r = _review(client, card["id"], "again")
    assert r.status_code == 200
    reviewed = r.json()["card"]
    assert reviewed["leitner"]["box"] == 1
    assert _ts(reviewed["leitner"]["next_review_at"]) == clock.now + timedelta(days=1)
    assert reviewed["stats"] == {"correct": 2, "incorrect": 1}


def test_review_is_persisted(client, card):
    _review(client, card["id"], "gotit")
    stored = client.get(f"/cards/{card['id']}").json()
    assert stored["leitner"]["box"] == 2
    assert stored["stats"]["correct"] == 1


def test_box_never_exceeds_five(client, card, clock):
    boxes = []
    for _ in range(6):
        boxes.append(_review(client, card["id"], "gotit").json()["card"]["leitner"]["box"])
    assert boxes == [2, 3, 4, 5, 5, 5]


@pytest.mark.parametrize(
    "request_kwargs",
    [
        {"json": {"result": "invalid"}},
        {"json": {}},
        {"json": {"result": None}},
        {"json": {"result": 1}},
        {"json": {"result": True}},
        {"json": {"result": ["gotit"]}},
        {"json": {"result": {"x": 1}}},
        {},
    ],
    ids=["unknown", "missing", "null", "int", "bool", "list", "object", "no-body"],
)
def test_invalid_result_rejected_without_mutation(client, card, request_kwargs):
    r = client.post(f"/cards/{card['id']}/review", **request_kwargs)
    assert r.status_code == 400
    assert r.json()["detail"] == {
        "error": "validation",
        "message": "result must be 'again' or 'gotit'",
    }
    assert client.get(f"/cards/{card['id']}").json() == card


def test_review_invalid_card_id(client):
    r = _review(client, "invalid-id", "gotit")
    assert r.status_code == 400
    assert r.json()["detail"]["message"] == "invalid card id"


def test_review_unknown_card(client):
    r = _review(client, str(uuid.uuid4()), "gotit")
    assert r.status_code == 404
    assert r.json()["detail"] == {"error": "not_found", "message": "card not found"}


def test_edit_card_content_keeps_schedule(client, card):
    _review(client, card["id"], "gotit")
    r = client.patch(f"/cards/{card['id']}", json={"prompt": "New prompt", "choices": ["x"]})
    assert r.status_code == 200
    edited = r.json()
    assert edited["prompt"] == "New prompt"
    assert edited["answer"] == "Answer"
    assert edited["choices"] == ["x"]
    assert edited["leitner"]["box"] == 2
    assert edited["stats"]["correct"] == 1


def test_edit_ignores_scheduling_fields(client, card):
    r = client.patch(f"/cards/{card['id']}", json={"leitner": {"box": 5}})
    assert r.status_code == 200
    assert r.json()["leitner"]["box"] == 1


def test_edit_unknown_card(client):
    r = client.patch(f"/cards/{uuid.uuid4()}", json={"prompt": "x"})
    assert r.status_code == 404


def test_delete_card(client, card):
    assert client.delete(f"/cards/{card['id']}").status_code == 204
    assert client.get(f"/cards/{card['id']}").status_code == 404
    assert client.delete(f"/cards/{card['id']}").status_code == 404
    assert client.delete("/cards/invalid-id").status_code == 400


def _failing_store(*args, **kwargs):
    raise aiosqlite.OperationalError("disk I/O error")


async def _async_failing_store(*args, **kwargs):
    _failing_store()


def test_card_lookup_storage_failure(client, card, monkeypatch):
    monkeypatch.setattr(cards_router, "get_flashcard", _async_failing_store)
    r = client.get(f"/cards/{card['id']}")
    assert r.status_code == 503
    assert r.json()["detail"]["error"] == "storage"


def test_card_creation_storage_failure(client, card, monkeypatch):
    monkeypatch.setattr(decks_router, "create_flashcard", _async_failing_store)
    r = client.post(f"/decks/{card['deck_id']}/cards", json={"prompt": "Q", "answer": "A"})
    assert r.status_code == 503
    assert r.json()["detail"]["error"] == "storage"


def test_review_storage_failure(client, card, monkeypatch):
    monkeypatch.setattr(review_service, "compare_and_set_review_state", _async_failing_store)
    r = _review(client, card["id"], "gotit")
    assert r.status_code == 503
    assert r.json()["detail"] == {
        "error": "storage",
        "message": f"storage failure while saving review of card {card['id']}",
    }
