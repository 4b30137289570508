import json

import pytest

from task_organizer.errors import AIErrorReason, AIServiceError

TWO_TASKS = json.dumps([
    {"title": "Call the dentist", "priority": "Low", "category": "Personal"},
    {"title": "Finish Q1 report", "priority": "High", "category": "Work"},
])


@pytest.fixture
def client(make_client, fake_provider_factory):
    return make_client(fake_provider_factory(TWO_TASKS))


def _parse(client, headers, notes="Call the dentist. Finish the Q1 report by Friday."):
    return client.post("/api/tasks/parse", json={"rawNotes": notes}, headers=headers)


# --- auth ---

def test_register_then_login(client, register):
    headers, user = register(client, email="Ada@Example.com")
    assert user["email"] == "ada@example.com"

    r = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "secret123"})
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Login successful"
    assert body["user"]["id"] == user["id"]
    assert body["token"]


def test_duplicate_registration_rejected(client, register):
    register(client)
    r = client.post(
        "/api/auth/register",
        json={"email": "user@example.com", "password": "another1", "name": "Someone"},
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Email already registered"


def test_login_wrong_password(client, register):
    register(client)
    r = client.post("/api/auth/login", json={"email": "user@example.com", "password": "wrong-pass"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid credentials"


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "not-an-email", "password": "secret123", "name": "Test"},
        {"email": "a@example.com", "password": "123", "name": "Test"},
        {"email": "a@example.com", "password": "secret123", "name": " x "},
    ],
)
def test_register_validation(client, payload):
    assert client.post("/api/auth/register", json=payload).status_code == 422


def test_requests_without_token_are_rejected(client):
    r = client.get("/api/tasks")
    assert r.status_code == 401
    assert r.json()["detail"] == "Authentication required"

    r = client.get("/api/tasks", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid or expired token"


# --- parse ---

def test_parse_returns_enriched_tasks(client, register):
    headers, _ = register(client)

    r = _parse(client, headers)

    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Tasks parsed successfully"
    first, second = body["tasks"]
    assert first["title"] == "Call the dentist"
    assert first["priority"] == "Low"
    assert first["status"] == "pending"
    assert first["category"]["name"] == "Personal"
    assert first["category"]["color"] == "#10B981"
    assert first["completedAt"] is None
    assert "createdAt" in first
    assert second["category"]["name"] == "Work"


def test_parse_with_no_tasks(make_client, fake_provider_factory, register):
    client = make_client(fake_provider_factory("There is nothing to do."))
    headers, _ = register(client)

    r = _parse(client, headers, "just thinking out loud")

    assert r.status_code == 200
    assert r.json() == {"message": "No tasks parsed", "tasks": []}
    notes = client.get("/api/notes", headers=headers).json()["notes"]
    assert [n["text"] for n in notes] == ["just thinking out loud"]


@pytest.mark.parametrize("notes", ["", "   ", "ab", "x" * 5001])
def test_parse_rejects_bad_input(client, register, notes):
    headers, _ = register(client)
    assert _parse(client, headers, notes).status_code == 422


def test_parse_unconfigured_provider_is_503(make_client, fake_provider_factory, register):
    provider = fake_provider_factory(configured=False)
    client = make_client(provider)
    headers, _ = register(client)

    r = _parse(client, headers)

    assert r.status_code == 503
    assert r.json()["reason"] == "unconfigured"
    assert provider.calls == []
    assert client.services.task_store.raw_notes == []


@pytest.mark.parametrize(
    "reason",
    [AIErrorReason.MODEL_UNAVAILABLE, AIErrorReason.UNAUTHORIZED, AIErrorReason.PROVIDER_ERROR],
)
def test_parse_provider_failures_are_502(make_client, fake_provider_factory, register, reason):
    client = make_client(fake_provider_factory(error=AIServiceError(reason, "upstream said no")))
    headers, _ = register(client)

    r = _parse(client, headers)

    assert r.status_code == 502
    assert r.json() == {"detail": "upstream said no", "reason": reason.value}
    assert len(client.services.task_store.raw_notes) == 1


def test_parse_malformed_output_in_strict_mode(make_client, fake_provider_factory, register):
    client = make_client(fake_provider_factory("[oops]"), strict_ai_output=True)
    headers, _ = register(client)

    r = _parse(client, headers)

    assert r.status_code == 502
    assert r.json()["reason"] == "malformed_output"


# --- task CRUD ---

def test_list_and_filter_tasks(client, register):
    headers, _ = register(client)
    _parse(client, headers)

    all_tasks = client.get("/api/tasks", headers=headers).json()["tasks"]
    assert len(all_tasks) == 2

    high = client.get("/api/tasks", params={"priority": "High"}, headers=headers).json()["tasks"]
    assert [t["title"] for t in high] == ["Finish Q1 report"]

    personal = client.get("/api/tasks", params={"category": "Personal"}, headers=headers).json()["tasks"]
    assert [t["title"] for t in personal] == ["Call the dentist"]

    assert client.get("/api/tasks", params={"status": "archived"}, headers=headers).status_code == 422


def test_tasks_are_scoped_to_owner(client, register):
    alice, _ = register(client, email="alice@example.com")
    bob, _ = register(client, email="bob@example.com")
    task_id = _parse(client, alice).json()["tasks"][0]["id"]

    assert client.get("/api/tasks", headers=bob).json()["tasks"] == []
    r = client.patch(f"/api/tasks/{task_id}", json={"status": "completed"}, headers=bob)
    assert r.status_code == 404
    assert client.delete(f"/api/tasks/{task_id}", headers=bob).status_code == 404


def test_create_task_manually(client, register):
    headers, _ = register(client)
    r = client.post(
        "/api/tasks",
        json={"title": "  Book team offsite ", "priority": "High", "category": "Meetings"},
        headers=headers,
    )
    assert r.status_code == 201
    task = r.json()["task"]
    assert task["title"] == "Book team offsite"
    assert task["category"]["name"] == "Meetings"
    assert task["status"] == "pending"


def test_complete_and_reopen_task(client, register):
    headers, _ = register(client)
    task_id = _parse(client, headers).json()["tasks"][0]["id"]

    r = client.patch(f"/api/tasks/{task_id}", json={"status": "completed"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["message"] == "Task updated successfully"
    assert r.json()["task"]["completedAt"] is not None

    r = client.patch(f"/api/tasks/{task_id}", json={"status": "pending"}, headers=headers)
    assert r.json()["task"]["completedAt"] is None
    assert r.json()["task"]["status"] == "pending"


def test_patch_validation(client, register):
    headers, _ = register(client)
    task_id = _parse(client, headers).json()["tasks"][0]["id"]

    r = client.patch(f"/api/tasks/{task_id}", json={}, headers=headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "No updates provided"

    assert client.patch(f"/api/tasks/{task_id}", json={"priority": "Urgent"}, headers=headers).status_code == 422
    assert client.patch("/api/tasks/9999", json={"status": "completed"}, headers=headers).status_code == 404


def test_delete_task(client, register):
    headers, _ = register(client)
    task_id = _parse(client, headers).json()["tasks"][0]["id"]

    r = client.delete(f"/api/tasks/{task_id}", headers=headers)
    assert r.status_code == 200
    assert r.json()["message"] == "Task deleted successfully"
    assert client.delete(f"/api/tasks/{task_id}", headers=headers).status_code == 404


def test_categories_listed_by_name(client, register):
    headers, _ = register(client)
    categories = client.get("/api/tasks/categories", headers=headers).json()["categories"]
    assert [c["name"] for c in categories] == ["Admin", "Meetings", "Other", "Personal", "Work"]


# --- ops ---

def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "healthy"
    assert body["storage"] == "memory"
    assert body["llm_configured"] is True


def test_health_degraded_without_credential(make_client, fake_provider_factory):
    client = make_client(fake_provider_factory(configured=False))
    assert client.get("/health").json()["status"] == "degraded"


def test_metrics_exposed_after_parse(client, register):
    headers, _ = register(client)
    _parse(client, headers)

    r = client.get("/metrics")
    assert r.status_code == 200
    assert "taskorg_notes_received_total" in r.text
    assert "taskorg_tasks_parsed_total" in r.text
