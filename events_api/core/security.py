"""Security utilities"""

import hashlib
import re
import secrets

from passlib.context import CryptContext

from ..domain.errors import ValidationError


MIN_PASSWORD_LENGTH = 8
MIN_ADMIN_PASSWORD_LENGTH = 12


class PasswordHasher:
    """bcrypt hashing with a configurable cost factor"""

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        """Hash password"""
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """Verify password"""
        return self._context.verify(plain_password, hashed_password)

    def dummy_verify(self) -> None:
        """Spend the same time as a real verification when there is no user to check"""
        self._context.dummy_verify()


def validate_password_strength(password: str, strong: bool = False) -> None:
    """Check the password policy.

    The basic policy only requires a minimum length. Accounts created by an
    administrator must also mix upper case, lower case, digits and symbols.
    """
    min_length = MIN_ADMIN_PASSWORD_LENGTH if strong else MIN_PASSWORD_LENGTH
    if len(password) < min_length:
        raise ValidationError(
            f"Password must be at least {min_length} characters",
            errors=[{"field": "password", "message": f"at least {min_length} characters"}],
        )
    if not strong:
        return

    missing = [
        label
        for label, pattern in (
            ("an upper-case letter", r"[A-Z]"),
            ("a lower-case letter", r"[a-z]"),
            ("a digit", r"\d"),
            ("a symbol", r"[^A-Za-z0-9]"),
        )
        if not re.search(pattern, password)
    ]
    if missing:
        raise ValidationError(
            "Password must contain " + ", ".join(missing),
            errors=[{"field": "password", "message": f"missing {item}"} for item in missing],
        )


def generate_refresh_token() -> str:
    """Generate an opaque refresh token."""
    return secrets.token_urlsafe(48)


def hash_token(token: str) -> str:
    """Digest stored in place of a raw refresh token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
