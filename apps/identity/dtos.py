"""DTOs for Identity app."""
from dataclasses import dataclass
from uuid import UUID
from typing import Optional

from ninja import Schema
from pydantic import Field


@dataclass(frozen=True)
class UserDTO:
    id: UUID
    name: str
    email: str
    is_active: bool


class RegisterIn(Schema):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginIn(Schema):
    email: str
    password: str


class RefreshIn(Schema):
    refresh_token: str = Field(..., alias='refreshToken')


class UserOut(Schema):
    id: UUID
    name: str
    email: str


class AuthOut(Schema):
    token: str
    refresh_token: str = Field(..., serialization_alias='refreshToken')
    user: UserOut
    message: str
