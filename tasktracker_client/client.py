"""HTTP client for the task tracker API.

Wraps the /auth and /tasks endpoints, maps failures onto the shared error
taxonomy, and mirrors the server's query engine so a fetched task list can
be filtered, sorted and summarized locally.
"""

import os
from dataclasses import dataclass
from datetime import datetime
from http import HTTPStatus
from typing import Any
from uuid import UUID

import requests

from apps.core.exceptions import ERRORS_BY_CODE, ERRORS_BY_STATUS, TaskTrackerError, Unauthorized
from apps.tasks.query import TaskFilter, TaskStats, filter_tasks, sort_tasks, task_stats

from .session import Session

DEFAULT_API_URL = "http://localhost:8000/api"

# Python field name -> wire name for task bodies.
_WIRE_FIELDS = {
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "category": "category",
    "due_date": "dueDate",
}


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value)


def _format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class RemoteTask:
    """A task as returned by the API, with the same attribute names as the model."""

    id: UUID
    title: str
    description: str
    status: str
    priority: str
    category: str
    due_date: datetime | None
    owner_id: UUID
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "RemoteTask":
        return cls(
            id=UUID(str(data["_id"])),
            title=data["title"],
            description=data.get("description") or "",
            status=data["status"],
            priority=data["priority"],
            category=data.get("category") or "",
            due_date=_parse_timestamp(data.get("dueDate")),
            owner_id=UUID(str(data["userId"])),
            created_at=_parse_timestamp(data["createdAt"]),
            updated_at=_parse_timestamp(data["updatedAt"]),
        )


@dataclass(frozen=True)
class Dashboard:
    """One dashboard render: the visible tasks plus stats over all tasks."""

    tasks: list[RemoteTask]
    stats: TaskStats


class TaskTrackerClient:
    """Client for the task tracker API."""

    def __init__(self, base_url: str | None = None, timeout: int = 30) -> None:
        """Initialize the client.

        Args:
            base_url: API root, e.g. http://localhost:8000/api. Defaults to
                TASKTRACKER_API_URL.
            timeout: Per-request timeout in seconds
        """
        self.base_url = (base_url or os.getenv("TASKTRACKER_API_URL", DEFAULT_API_URL)).rstrip("/")
        self.timeout = timeout

    def _headers(self, session: Session | None) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if session is not None:
            if not session.is_active:
                msg = "Session is not active. Log in again."
                raise Unauthorized(msg)
            headers["Authorization"] = f"Bearer {session.token}"
        return headers

    def _handle_response(self, response: requests.Response, session: Session | None) -> Any:
        """Return the decoded body or raise the matching error.

        A 401 on an authenticated call also invalidates the session.
        """
        try:
            data = response.json()
        except requests.exceptions.JSONDecodeError:
            data = None

        if response.ok:
            return data

        message = data.get("message") if isinstance(data, dict) else None
        if not message:
            message = f"API error: {response.status_code}"

        if response.status_code == HTTPStatus.UNAUTHORIZED and session is not None:
            session.invalidate()

        code = data.get("error") if isinstance(data, dict) else None
        error_cls = ERRORS_BY_CODE.get(code) or ERRORS_BY_STATUS.get(response.status_code, TaskTrackerError)
        raise error_cls(message)

    def _request(
        self,
        method: str,
        path: str,
        session: Session | None = None,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        response = requests.request(
            method,
            f"{self.base_url}{path}",
            headers=self._headers(session),
            params=params,
            json=json,
            timeout=self.timeout,
        )
        return self._handle_response(response, session)

    # ---- auth ----

    def register(self, name: str, email: str, password: str) -> Session:
        data = self._request("POST", "/auth/register", json={"name": name, "email": email, "password": password})
        return Session.from_auth_response(data)

    def login(self, email: str, password: str) -> Session:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        return Session.from_auth_response(data)

    def refresh(self, session: Session) -> Session:
        """Swap the session's access token for a fresh one, in place."""
        if not session.refresh_token:
            msg = "Session has no refresh token. Log in again."
            raise Unauthorized(msg)
        try:
            data = self._request("POST", "/auth/refresh", json={"refreshToken": session.refresh_token})
        except Unauthorized:
            session.invalidate()
            raise
        session.token = data["token"]
        return session

    def logout(self, session: Session) -> None:
        """Tokens are stateless on the server, so logging out is local."""
        session.invalidate()

    # ---- tasks ----

    @staticmethod
    def _query_params(criteria: TaskFilter | None, sort: str | None = None) -> dict[str, str]:
        params: dict[str, str] = {}
        if criteria is not None:
            for name in ("status", "priority", "category", "search"):
                value = getattr(criteria, name)
                if value:
                    params[name] = value
            if criteria.due_range is not None:
                if criteria.due_range.start is not None:
                    params["due_from"] = _format_timestamp(criteria.due_range.start)
                if criteria.due_range.end is not None:
                    params["due_to"] = _format_timestamp(criteria.due_range.end)
        if sort:
            params["sort"] = sort
        return params

    @staticmethod
    def _task_body(fields: dict[str, Any]) -> dict[str, Any]:
        body = {}
        for name, value in fields.items():
            if name not in _WIRE_FIELDS:
                msg = f"Unknown task field: {name}"
                raise ValueError(msg)
            if isinstance(value, datetime):
                value = _format_timestamp(value)
            body[_WIRE_FIELDS[name]] = value
        return body

    def list_tasks(
        self,
        session: Session,
        criteria: TaskFilter | None = None,
        sort: str | None = None,
    ) -> list[RemoteTask]:
        """Fetch the session owner's tasks, filtered and sorted by the server."""
        data = self._request("GET", "/tasks", session, params=self._query_params(criteria, sort))
        return [RemoteTask.from_wire(item) for item in data]

    def get_task(self, session: Session, task_id: UUID | str) -> RemoteTask:
        return RemoteTask.from_wire(self._request("GET", f"/tasks/{task_id}", session))

    def create_task(self, session: Session, title: str, **fields: Any) -> RemoteTask:
        body = self._task_body({"title": title, **fields})
        return RemoteTask.from_wire(self._request("POST", "/tasks", session, json=body))

    def update_task(self, session: Session, task_id: UUID | str, **fields: Any) -> RemoteTask:
        body = self._task_body(fields)
        return RemoteTask.from_wire(self._request("PUT", f"/tasks/{task_id}", session, json=body))

    def delete_task(self, session: Session, task_id: UUID | str) -> str:
        data = self._request("DELETE", f"/tasks/{task_id}", session)
        return data["message"]

    def task_stats(self, session: Session, criteria: TaskFilter | None = None) -> TaskStats:
        data = self._request("GET", "/tasks/stats", session, params=self._query_params(criteria))
        return TaskStats(
            total=data["total"],
            completed=data["completed"],
            in_progress=data["inProgress"],
            todo=data["todo"],
            high_priority=data["highPriority"],
        )

    def dashboard(
        self,
        session: Session,
        criteria: TaskFilter | None = None,
        sort: str | None = None,
    ) -> Dashboard:
        """Fetch every task once, then filter and sort locally.

        Stats cover the whole task list, not just the visible part.
        """
        tasks = self.list_tasks(session)
        visible = sort_tasks(filter_tasks(tasks, criteria), sort)
        return Dashboard(tasks=visible, stats=task_stats(tasks))
