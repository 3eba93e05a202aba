"""
Identity API endpoints with JWT authentication.

Provides registration, login, token refresh and the current-user profile.
Tokens are returned in the body and presented back as
"Authorization: Bearer <token>".
"""
from django.http import HttpRequest
from ninja import Router

from apps.core.exceptions import Unauthorized
from .dtos import AuthOut, LoginIn, RefreshIn, RegisterIn, UserOut, UserDTO
from .jwt_auth import JWTAuth, create_access_token, create_token_pair, get_user_from_token
from .services import authenticate_user, register_user, to_user_dto

router = Router(tags=["Auth"])


def _auth_response(user: UserDTO, message: str, refresh_token: str = None) -> dict:
    if refresh_token is None:
        access_token, refresh_token = create_token_pair(user.id)
    else:
        access_token = create_access_token(user.id)
    return {
        "token": access_token,
        "refresh_token": refresh_token,
        "user": user,
        "message": message,
    }


@router.post("/register", response={201: AuthOut}, by_alias=True)
def register(request: HttpRequest, payload: RegisterIn):
    """
    Create an account and sign it in.
    """
    user = register_user(payload.name, payload.email, payload.password)
    return 201, _auth_response(user, "User registered successfully")


@router.post("/login", response=AuthOut, by_alias=True)
def login(request: HttpRequest, payload: LoginIn):
    """
    Exchange email and password for an access/refresh token pair.
    """
    user = authenticate_user(payload.email, payload.password)
    return _auth_response(user, "Login successful")


@router.post("/refresh", response=AuthOut, by_alias=True)
def refresh(request: HttpRequest, payload: RefreshIn):
    """
    Issue a new access token for a valid refresh token.
    """
    user = get_user_from_token(payload.refresh_token, token_type='refresh')
    if user is None:
        raise Unauthorized("Invalid refresh token")
    return _auth_response(to_user_dto(user), "Token refreshed", refresh_token=payload.refresh_token)


@router.get("/me", response=UserOut, auth=JWTAuth())
def get_me(request: HttpRequest):
    """
    Get the authenticated user's profile.
    """
    return to_user_dto(request.auth)
