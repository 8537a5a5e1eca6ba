"""
api.py — HTTP client for the TaskFlow API.
Thin httpx wrapper that turns responses into dicts and failures into the
error taxonomy in taskflow.errors. Any httpx.Client can be injected
(FastAPI's TestClient included), which is how the tests drive it.
"""
import logging
from dataclasses import dataclass

import httpx

from taskflow.config import API_URL, API_TIMEOUT_SECONDS
from taskflow.errors import TaskflowError, ValidationError, NotFoundError, TransientError

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@dataclass
class MoveResult:
    ok: bool
    task: dict | None = None
    error: TaskflowError | None = None


class TaskflowClient:
    def __init__(self, base_url: str = API_URL, token: str | None = None,
                 http: httpx.Client | None = None, timeout: float = API_TIMEOUT_SECONDS):
        self.token = token
        self._http = http or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self):
        self._http.close()

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, **kwargs) -> dict:
        try:
            resp = self._http.request(method, f"{API_PREFIX}{path}", headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            raise TransientError(f"{method} {path} failed: {e}") from e

        if resp.is_success:
            try:
                return resp.json()
            except ValueError as e:
                raise TransientError(f"{method} {path} returned a non-JSON body", status_code=resp.status_code) from e

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = body.get("message") or body.get("detail") or resp.reason_phrase

        if resp.status_code == 404:
            raise NotFoundError(message)
        if resp.status_code in (400, 422):
            raise ValidationError(message, body.get("errors"))
        if resp.status_code >= 500:
            raise TransientError(message, status_code=resp.status_code)
        raise TaskflowError(message, status_code=resp.status_code)

    # ── Auth ──────────────────────────────────────────────────────
    def register(self, username: str, password: str, name: str | None = None) -> dict:
        data = self._request("POST", "/auth/register", json={"username": username, "password": password, "name": name})
        self.token = data["token"]
        return data["user"]

    def login(self, username: str, password: str) -> dict:
        data = self._request("POST", "/auth/login", json={"username": username, "password": password})
        self.token = data["token"]
        return data["user"]

    # ── Tasks ─────────────────────────────────────────────────────
    def list_tasks(self, **filters) -> dict:
        params = {k: v for k, v in filters.items() if v is not None}
        return self._request("GET", "/tasks", params=params)

    def get_kanban(self) -> dict:
        return self._request("GET", "/tasks/kanban")

    def create_task(self, data: dict) -> dict:
        return self._request("POST", "/tasks", json=data)["task"]

    def update_task(self, task_id: int, data: dict) -> dict:
        return self._request("PUT", f"/tasks/{task_id}", json=data)["task"]

    def archive_task(self, task_id: int):
        self._request("DELETE", f"/tasks/{task_id}")

    def move_task(self, task_id: int, status: str, order: int) -> MoveResult:
        """PATCH the move. Never raises: failures come back as MoveResult(ok=False)."""
        try:
            data = self._request("PATCH", f"/tasks/{task_id}/move", json={"status": status, "order": order})
        except TaskflowError as e:
            logger.warning("Move of task %s to %s failed: %s", task_id, status, e)
            return MoveResult(ok=False, error=e)
        task = data.get("task") if isinstance(data, dict) else None
        if not task:
            return MoveResult(ok=False, error=TransientError("Move was not confirmed by the server"))
        return MoveResult(ok=True, task=task)

    # ── Todos ─────────────────────────────────────────────────────
    def create_todo(self, data: dict) -> dict:
        return self._request("POST", "/todos", json=data)["todo"]

    def toggle_todo(self, todo_id: int) -> dict:
        return self._request("PATCH", f"/todos/{todo_id}/toggle")["todo"]

    # ── Analytics ─────────────────────────────────────────────────
    def get_productivity(self, period: str = "30d", type: str = "both") -> dict:
        return self._request("GET", "/analytics/productivity", params={"period": period, "type": type})

    def get_overview(self) -> dict:
        return self._request("GET", "/analytics/overview")
