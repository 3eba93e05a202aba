"""Tests for the API client: session lifecycle, error mapping and local queries."""

from datetime import datetime, timezone
from unittest.mock import Mock, patch
from uuid import uuid4

import requests
from django.test import SimpleTestCase

from apps.core.exceptions import Conflict, NotFound, TaskTrackerError, Unauthorized, ValidationError
from apps.tasks.query import DueRange, TaskFilter

from .client import RemoteTask, TaskTrackerClient
from .session import Session

USER_ID = str(uuid4())


def wire_task(title, created, **fields):
    data = {
        "_id": str(uuid4()),
        "title": title,
        "description": "",
        "status": "todo",
        "priority": "medium",
        "category": "",
        "dueDate": None,
        "userId": USER_ID,
        "createdAt": created,
        "updatedAt": created,
    }
    data.update(fields)
    return data


def fake_response(status_code=200, body=None):
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    if body is None:
        response.json.side_effect = requests.exceptions.JSONDecodeError("no body", "", 0)
    else:
        response.json.return_value = body
    return response


def auth_body(token="access-token"):
    return {
        "token": token,
        "refreshToken": "refresh-token",
        "user": {"id": USER_ID, "name": "Test User", "email": "test@example.com"},
        "message": "Login successful",
    }


class SessionTest(SimpleTestCase):
    def setUp(self):
        self.client = TaskTrackerClient("http://api.test/api/")

    @patch("requests.request")
    def test_login_acquires_session(self, mock_request):
        mock_request.return_value = fake_response(200, auth_body())

        session = self.client.login("test@example.com", "Password123")

        self.assertTrue(session.is_active)
        self.assertEqual(session.user.email, "test@example.com")
        method, url = mock_request.call_args.args
        self.assertEqual((method, url), ("POST", "http://api.test/api/auth/login"))

    @patch("requests.request")
    def test_login_failure_raises_unauthorized(self, mock_request):
        mock_request.return_value = fake_response(401, {"message": "Invalid credentials"})

        with self.assertRaises(Unauthorized) as ctx:
            self.client.login("test@example.com", "wrong")
        self.assertEqual(str(ctx.exception), "Invalid credentials")

    @patch("requests.request")
    def test_duplicate_registration_raises_conflict(self, mock_request):
        mock_request.return_value = fake_response(400, {"message": "User already exists", "error": "Conflict"})

        with self.assertRaises(Conflict) as ctx:
            self.client.register("Test User", "test@example.com", "Password123")
        self.assertEqual(str(ctx.exception), "User already exists")

    @patch("requests.request")
    def test_invalid_registration_raises_validation_error(self, mock_request):
        mock_request.return_value = fake_response(400, {"message": "Invalid email address", "error": "ValidationError"})

        with self.assertRaises(ValidationError):
            self.client.register("Test User", "nope", "Password123")

    @patch("requests.request")
    def test_bearer_token_is_sent(self, mock_request):
        mock_request.return_value = fake_response(200, [])
        session = Session.from_auth_response(auth_body("abc"))

        self.client.list_tasks(session)

        headers = mock_request.call_args.kwargs["headers"]
        self.assertEqual(headers["Authorization"], "Bearer abc")

    @patch("requests.request")
    def test_401_invalidates_session(self, mock_request):
        mock_request.return_value = fake_response(401, {"message": "Unauthorized"})
        session = Session.from_auth_response(auth_body())

        with self.assertRaises(Unauthorized):
            self.client.list_tasks(session)
        self.assertFalse(session.is_active)

        mock_request.reset_mock()
        with self.assertRaises(Unauthorized):
            self.client.list_tasks(session)
        mock_request.assert_not_called()

    def test_logout_invalidates_session(self):
        session = Session.from_auth_response(auth_body())
        self.client.logout(session)
        self.assertFalse(session.is_active)
        self.assertIsNone(session.user)

    @patch("requests.request")
    def test_refresh_updates_token_in_place(self, mock_request):
        mock_request.return_value = fake_response(200, auth_body("new-token"))
        session = Session.from_auth_response(auth_body("old-token"))

        self.client.refresh(session)

        self.assertEqual(session.token, "new-token")
        self.assertEqual(mock_request.call_args.kwargs["json"], {"refreshToken": "refresh-token"})


class TaskCallsTest(SimpleTestCase):
    def setUp(self):
        self.client = TaskTrackerClient("http://api.test/api")
        self.session = Session.from_auth_response(auth_body())

    @patch("requests.request")
    def test_list_sends_filters_as_query_params(self, mock_request):
        mock_request.return_value = fake_response(200, [wire_task("A", "2024-01-01T00:00:00Z")])
        spec = TaskFilter(
            status="todo",
            search="report",
            due_range=DueRange(start=datetime(2024, 1, 1, tzinfo=timezone.utc)),
        )

        tasks = self.client.list_tasks(self.session, spec, sort="priority")

        params = mock_request.call_args.kwargs["params"]
        self.assertEqual(params, {
            "status": "todo",
            "search": "report",
            "due_from": "2024-01-01T00:00:00+00:00",
            "sort": "priority",
        })
        self.assertEqual(tasks[0].title, "A")
        self.assertEqual(tasks[0].created_at, datetime(2024, 1, 1, tzinfo=timezone.utc))

    @patch("requests.request")
    def test_create_uses_wire_names(self, mock_request):
        mock_request.return_value = fake_response(201, wire_task("A", "2024-01-01T00:00:00Z"))
        due = datetime(2024, 12, 31, tzinfo=timezone.utc)

        self.client.create_task(self.session, "A", priority="high", due_date=due)

        self.assertEqual(mock_request.call_args.kwargs["json"], {
            "title": "A",
            "priority": "high",
            "dueDate": "2024-12-31T00:00:00+00:00",
        })

    def test_unknown_field_is_rejected_locally(self):
        with self.assertRaises(ValueError):
            self.client.update_task(self.session, uuid4(), owner="someone")

    @patch("requests.request")
    def test_error_mapping(self, mock_request):
        cases = [
            (400, ValidationError),
            (404, NotFound),
            (500, TaskTrackerError),
        ]
        for status_code, error_cls in cases:
            mock_request.return_value = fake_response(status_code, {"message": "boom"})
            with self.assertRaises(error_cls):
                self.client.get_task(self.session, uuid4())

        mock_request.return_value = fake_response(502)
        with self.assertRaises(TaskTrackerError) as ctx:
            self.client.get_task(self.session, uuid4())
        self.assertEqual(str(ctx.exception), "API error: 502")

    @patch("requests.request")
    def test_stats(self, mock_request):
        mock_request.return_value = fake_response(200, {
            "total": 3, "completed": 1, "inProgress": 1, "todo": 1, "highPriority": 2,
        })
        stats = self.client.task_stats(self.session)
        self.assertEqual(stats.in_progress, 1)
        self.assertEqual(stats.high_priority, 2)

    @patch("requests.request")
    def test_dashboard_filters_and_sorts_locally(self, mock_request):
        mock_request.return_value = fake_response(200, [
            wire_task("Old high", "2024-01-01T00:00:00Z", priority="high"),
            wire_task("New low", "2024-01-03T00:00:00Z", priority="low", status="completed"),
            wire_task("Mid", "2024-01-02T00:00:00Z", description="Call the plumber"),
        ])

        board = self.client.dashboard(self.session, TaskFilter(status="todo"), sort="priority")

        self.assertEqual([t.title for t in board.tasks], ["Old high", "Mid"])
        self.assertEqual(board.stats.total, 3)
        self.assertEqual(board.stats.completed, 1)
        self.assertEqual(mock_request.call_args.kwargs["params"], {})

        board = self.client.dashboard(self.session, TaskFilter(search="PLUMBER"))
        self.assertEqual([t.title for t in board.tasks], ["Mid"])

    def test_remote_task_parses_date_only_due_dates(self):
        task = RemoteTask.from_wire(wire_task("A", "2024-01-01T00:00:00Z", dueDate="2024-12-31"))
        self.assertEqual(task.due_date, datetime(2024, 12, 31))
