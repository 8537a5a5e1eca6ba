"""
Tests for the analytics endpoints.
"""

import pytest

from .factories import task_payload, todo_payload


def _seed(client, headers):
    for status in ("backlog", "done", "done"):
        client.post("/api/v1/tasks", json=task_payload(status=status, priority="high"), headers=headers)
    todo = client.post("/api/v1/todos", json=todo_payload(), headers=headers).json()["todo"]
    client.patch(f"/api/v1/todos/{todo['id']}/complete", headers=headers)


def test_productivity_today(client, auth_headers):
    _seed(client, auth_headers)

    data = client.get("/api/v1/analytics/productivity", params={"period": "7d"}, headers=auth_headers).json()

    assert data["days"] == 7
    assert len(data["daily"]) == 1
    today = data["daily"][0]
    assert (today["created"], today["completed"]) == (3, 2)
    assert (today["todoCreated"], today["todoCompleted"]) == (1, 1)


def test_productivity_single_series(client, auth_headers):
    _seed(client, auth_headers)

    data = client.get("/api/v1/analytics/productivity", params={"type": "todos"}, headers=auth_headers).json()

    assert data["days"] == 30
    assert data["daily"][0]["created"] == 1
    assert "todoCreated" not in data["daily"][0]


@pytest.mark.parametrize("params", [{"period": "2w"}, {"type": "habits"}])
def test_productivity_rejects_unknown_tokens(client, auth_headers, params):
    response = client.get("/api/v1/analytics/productivity", params=params, headers=auth_headers)
    assert response.status_code == 400


def test_overview(client, auth_headers):
    _seed(client, auth_headers)

    data = client.get("/api/v1/analytics/overview", headers=auth_headers).json()

    assert data["tasks"]["counts"]["done"] == 2
    assert data["tasks"]["total"] == 3
    assert data["todos"]["completionRate"] == 100
    assert len(data["recent"]["todos"]) == 1
    assert data["productivity"]["daily"][0]["created"] == 3


def test_priority_distribution(client, auth_headers):
    _seed(client, auth_headers)

    data = client.get("/api/v1/analytics/priority-distribution", headers=auth_headers).json()

    assert data["tasks"] == [{"value": "high", "count": 3}]
    assert data["todos"] == [{"value": "medium", "count": 1}]


def test_completion_trends(client, auth_headers):
    _seed(client, auth_headers)

    data = client.get("/api/v1/analytics/completion-trends", headers=auth_headers).json()

    assert [t["count"] for t in data["tasks"]] == [2]
    assert [t["count"] for t in data["todos"]] == [1]


def test_empty_account(client, auth_headers):
    data = client.get("/api/v1/analytics/overview", headers=auth_headers).json()
    assert data["tasks"]["total"] == 0
    assert data["todos"]["completionRate"] == 0
    assert data["productivity"]["daily"] == []
