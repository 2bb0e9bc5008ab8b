import importlib

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_llm_client, get_preferences_store, get_record_store
from fakes import FailingProvider
from llm.llm_client import LLMClient

EMAIL_CLIENT = (
    'Here are the tasks:\n'
    '[{"text": "Email the client", "priority": 1, "category": "general", "dueDate": null}]'
)


@pytest.fixture
def make_client(store, prefs_store, fake_provider_factory):
    mod = importlib.import_module("api.main")

    def _make(completion: str = EMAIL_CLIENT, provider=None):
        llm = LLMClient(provider=provider or fake_provider_factory(completion))
        mod.app.dependency_overrides[get_record_store] = lambda: store
        mod.app.dependency_overrides[get_preferences_store] = lambda: prefs_store
        mod.app.dependency_overrides[get_llm_client] = lambda: llm
        return TestClient(mod.app)

    yield _make
    mod.app.dependency_overrides.clear()


def test_extract_into_active_folder_scenario(make_client):
    client = make_client()

    r = client.post("/folders", json={"name": "Work", "color": "#3366ff"})
    assert r.status_code == 200
    work = r.json()["folder"]
    assert work["color"] == "#3366ff"

    r = client.put("/preferences", json={"view": "all", "folder_id": work["id"]})
    assert r.status_code == 200

    r = client.post(
        "/tasks/extract",
        json={"text": "Email the client tomorrow, high priority", "folder_id": work["id"]},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    task = body["tasks"][0]
    assert task["folder_id"] == work["id"]
    assert task["priority"] == 1
    assert task["status"] == "todo"
    assert task["completed"] is False

    board = client.get("/board").json()["board"]
    assert board["title"] == "Work"
    assert board["counts"][work["id"]] == 1
    assert [t["id"] for t in board["tasks"]] == [task["id"]]


def test_extract_without_json_is_422(make_client):
    r = make_client("I have no idea.").post("/tasks/extract", json={"text": "hello"})
    assert r.status_code == 422
    assert r.json()["error_kind"] == "NoExtractableJSON"
    assert r.json()["success"] is False


def test_extract_upstream_failure_is_502(make_client):
    client = make_client(provider=FailingProvider(ConnectionError("down")))
    r = client.post("/tasks/extract", json={"text": "hello"})
    assert r.status_code == 502
    assert r.json()["error_kind"] == "UpstreamError"


def test_extract_missing_text_is_validation_error(make_client):
    r = make_client().post("/tasks/extract", json={})
    assert r.status_code == 400
    assert r.json()["error_kind"] == "ValidationError"


def test_malformed_task_body_is_validation_error(make_client):
    r = make_client().post("/tasks", json={"text": "x", "priority": "high"})
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["error_kind"] == "ValidationError"
    assert body["details"]["errors"][0]["loc"][-1] == "priority"


def test_null_extract_text_is_validation_error(make_client):
    r = make_client().post("/tasks/extract", json={"text": None})
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert r.json()["error_kind"] == "ValidationError"


def test_task_lifecycle(make_client):
    client = make_client()

    created = client.post("/tasks", json={"text": "Prepare demo", "priority": 1}).json()["task"]
    assert created["status"] == "todo"

    r = client.post(f"/tasks/{created['id']}/status", json={"status": "inProgress"})
    assert r.json()["task"]["status"] == "inProgress"

    r = client.post(f"/tasks/{created['id']}/status", json={"status": "later"})
    assert r.status_code == 400
    assert r.json()["error_kind"] == "InvalidStatus"

    r = client.post(f"/tasks/{created['id']}/flag")
    assert r.json()["task"]["flagged"] is True

    r = client.put(f"/tasks/{created['id']}", json={"category": "project"})
    assert r.json()["task"]["category"] == "project"
    assert r.json()["task"]["flagged"] is True

    r = client.post(f"/tasks/{created['id']}/complete")
    assert r.json()["task"]["completed"] is True
    assert r.json()["task"]["status"] == "done"

    board = client.get("/board", params={"view": "kanban"}).json()["board"]
    assert [len(c["tasks"]) for c in board["columns"]] == [0, 0, 1]
    assert board["counts"]["all"] == 0
    assert board["counts"]["completed"] == 1

    assert client.delete(f"/tasks/{created['id']}").status_code == 200
    r = client.delete(f"/tasks/{created['id']}")
    assert r.status_code == 404
    assert r.json()["error_kind"] == "NotFound"


def test_delete_folder_unfiles_tasks(make_client):
    client = make_client()
    folder = client.post("/folders", json={"name": "Home"}).json()["folder"]
    task = client.post("/tasks", json={"text": "Fix sink"}).json()["task"]

    r = client.post(f"/tasks/{task['id']}/folder", json={"folder_id": folder["id"]})
    assert r.json()["task"]["folder"]["name"] == "Home"

    folders = client.get("/folders").json()["folders"]
    assert folders[0]["task_count"] == 1

    assert client.delete(f"/folders/{folder['id']}").json()["success"] is True
    assert client.get("/folders").json()["folders"] == []
    assert client.get("/tasks").json()["tasks"][0]["folder_id"] is None


def test_folder_name_required(make_client):
    client = make_client()
    r = client.post("/folders", json={"name": "  "})
    assert r.status_code == 400
    r = client.post("/folders", json={"color": "#3366ff"})
    assert r.status_code == 400
    assert r.json()["error_kind"] == "ValidationError"


def test_board_rejects_unknown_view(make_client):
    r = make_client().get("/board", params={"view": "calendar"})
    assert r.status_code == 400
