"""
Tests for the todo endpoints: CRUD, completion toggling, stats and soft delete.
"""

import pytest

from taskflow.schemas import TodoCreate

from .factories import enum_values, todo_payload


def _create(client, headers, **fields) -> dict:
    response = client.post("/api/v1/todos", json=todo_payload(**fields), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["todo"]


def test_create_defaults(client, auth_headers):
    todo = _create(client, auth_headers, title="Buy milk")
    assert todo["completed"] is False
    assert todo["completedAt"] is None
    assert todo["priority"] == "medium"
    assert todo["category"] == "personal"


@pytest.mark.parametrize("category", enum_values(TodoCreate, "category"))
def test_every_category_is_accepted(client, auth_headers, category):
    assert _create(client, auth_headers, category=category)["category"] == category


@pytest.mark.parametrize("fields", [
    {"priority": "urgent"},
    {"category": "errands"},
    {"description": "x" * 501},
])
def test_validation_errors(client, auth_headers, fields):
    response = client.post("/api/v1/todos", json=todo_payload(**fields), headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Validation failed"


def test_toggle_sets_and_clears_completed_at(client, auth_headers):
    todo = _create(client, auth_headers)

    on = client.patch(f"/api/v1/todos/{todo['id']}/toggle", headers=auth_headers).json()
    assert on["message"] == "Todo completed"
    assert on["todo"]["completed"] is True
    assert on["todo"]["completedAt"] is not None

    off = client.patch(f"/api/v1/todos/{todo['id']}/toggle", headers=auth_headers).json()
    assert off["message"] == "Todo marked as incomplete"
    assert off["todo"]["completed"] is False
    assert off["todo"]["completedAt"] is None


def test_complete_and_incomplete_are_idempotent(client, auth_headers):
    todo = _create(client, auth_headers)
    for _ in range(2):
        data = client.patch(f"/api/v1/todos/{todo['id']}/complete", headers=auth_headers).json()["todo"]
        assert data["completed"] is True and data["completedAt"] is not None
    for _ in range(2):
        data = client.patch(f"/api/v1/todos/{todo['id']}/incomplete", headers=auth_headers).json()["todo"]
        assert data["completed"] is False and data["completedAt"] is None


def test_update(client, auth_headers):
    todo = _create(client, auth_headers)
    response = client.put(f"/api/v1/todos/{todo['id']}", json={"title": "Renamed", "category": "work"},
                          headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["todo"]["title"] == "Renamed"
    assert response.json()["todo"]["category"] == "work"


def test_search_treats_underscore_literally(client, auth_headers):
    _create(client, auth_headers, title="file_name cleanup")
    _create(client, auth_headers, title="filename cleanup")

    data = client.get("/api/v1/todos", params={"search": "file_"}, headers=auth_headers).json()

    assert [t["title"] for t in data["todos"]] == ["file_name cleanup"]


def test_list_filters_by_completion(client, auth_headers):
    done = _create(client, auth_headers, title="done")
    _create(client, auth_headers, title="open")
    client.patch(f"/api/v1/todos/{done['id']}/complete", headers=auth_headers)

    data = client.get("/api/v1/todos", params={"completed": "true"}, headers=auth_headers).json()
    assert [t["title"] for t in data["todos"]] == ["done"]
    assert data["pagination"]["total"] == 1


def test_stats(client, auth_headers):
    a = _create(client, auth_headers, category="work", priority="high")
    _create(client, auth_headers, category="work")
    _create(client, auth_headers, category="health")
    client.patch(f"/api/v1/todos/{a['id']}/complete", headers=auth_headers)

    stats = client.get("/api/v1/todos/stats", headers=auth_headers).json()

    assert stats["total"] == 3
    assert stats["completed"] == 1
    assert stats["pending"] == 2
    assert stats["completionRate"] == 33.33
    assert {c["value"]: c["count"] for c in stats["categoryStats"]} == {"work": 2, "health": 1}


def test_archive_is_soft_and_scoped(client, auth_headers, other_headers):
    todo = _create(client, auth_headers)

    assert client.delete(f"/api/v1/todos/{todo['id']}", headers=other_headers).status_code == 404
    assert client.delete(f"/api/v1/todos/{todo['id']}", headers=auth_headers).status_code == 200
    assert client.get(f"/api/v1/todos/{todo['id']}", headers=auth_headers).status_code == 404
    assert client.get("/api/v1/todos/stats", headers=auth_headers).json()["total"] == 0
