"""Python client for the task tracker API."""
from .client import Dashboard, RemoteTask, TaskTrackerClient
from .session import Session, SessionUser

__all__ = ["Dashboard", "RemoteTask", "Session", "SessionUser", "TaskTrackerClient"]
