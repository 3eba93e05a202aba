"""Registration input checks."""
import re
from dataclasses import dataclass, field
from typing import List

from django.core import validators
from django.core.exceptions import ValidationError as DjangoValidationError

MIN_PASSWORD_LENGTH = 8
MIN_NAME_LENGTH = 2


@dataclass(frozen=True)
class PasswordCheck:
    valid: bool
    errors: List[str] = field(default_factory=list)


def validate_email(email: str) -> bool:
    try:
        validators.validate_email(email)
    except DjangoValidationError:
        return False
    return True


def validate_password(password: str) -> PasswordCheck:
    """Check password strength, reporting every rule that fails."""
    password = password or ''
    errors = []

    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if not re.search(r'[A-Z]', password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r'[a-z]', password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r'[0-9]', password):
        errors.append("Password must contain at least one number")

    return PasswordCheck(valid=not errors, errors=errors)


def validate_name(name: str) -> bool:
    return len((name or '').strip()) >= MIN_NAME_LENGTH
