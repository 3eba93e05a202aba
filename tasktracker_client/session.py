"""Explicit client-side session state."""

from dataclasses import dataclass
from typing import Any
from uuid import UUID


@dataclass(frozen=True)
class SessionUser:
    id: UUID
    name: str
    email: str


@dataclass
class Session:
    """Tokens and user for one signed-in account.

    Acquired from TaskTrackerClient.login/register and passed explicitly
    into every task call. Logging out, or any 401 from the server, clears
    the tokens; an inactive session is refused before a request is made.
    """

    token: str | None
    refresh_token: str | None
    user: SessionUser | None

    @classmethod
    def from_auth_response(cls, data: dict[str, Any]) -> "Session":
        user = data["user"]
        return cls(
            token=data["token"],
            refresh_token=data.get("refreshToken"),
            user=SessionUser(id=UUID(str(user["id"])), name=user.get("name", ""), email=user["email"]),
        )

    @property
    def is_active(self) -> bool:
        return bool(self.token)

    def invalidate(self) -> None:
        self.token = None
        self.refresh_token = None
        self.user = None
