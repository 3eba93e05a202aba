"""Services for Identity app."""
import logging

from django.contrib.auth import authenticate
from django.db import IntegrityError

from apps.core.exceptions import Conflict, Unauthorized, ValidationError
from .models import User
from .dtos import UserDTO
from .validation import validate_email, validate_name, validate_password

logger = logging.getLogger(__name__)


def to_user_dto(user: User) -> UserDTO:
    return UserDTO(
        id=user.id,
        name=user.name,
        email=user.email,
        is_active=user.is_active,
    )


def get_user_dto(user_id) -> UserDTO | None:
    try:
        return to_user_dto(User.objects.get(id=user_id))
    except User.DoesNotExist:
        return None


def register_user(name: str, email: str, password: str) -> UserDTO:
    """
    Create an account. Email is normalized to lower case and used as the
    username.

    Raises:
        ValidationError: missing or malformed name, email or password
        Conflict: the email is already registered
    """
    name = (name or '').strip()
    email = (email or '').strip().lower()

    if not name or not email or not password:
        raise ValidationError("Name, email and password are required")
    if not validate_name(name):
        raise ValidationError("Name must be at least 2 characters long")
    if not validate_email(email):
        raise ValidationError("Invalid email address")

    check = validate_password(password)
    if not check.valid:
        raise ValidationError(check.errors[0], errors=check.errors)

    if User.objects.filter(email=email).exists():
        raise Conflict("User already exists")

    try:
        user = User.objects.create_user(
            username=email,
            email=email,
            password=password,
            name=name,
        )
    except IntegrityError:
        raise Conflict("User already exists")

    logger.info(f"Registered user {user.id}")
    return to_user_dto(user)


def authenticate_user(email: str, password: str) -> UserDTO:
    """
    Check credentials.

    Raises:
        Unauthorized: unknown email, wrong password or disabled account
    """
    email = (email or '').strip().lower()
    user = authenticate(username=email, password=password)

    if user is None:
        logger.warning("Failed login attempt")
        raise Unauthorized("Invalid credentials")

    return to_user_dto(user)
