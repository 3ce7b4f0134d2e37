"""Access and refresh token handling.

Access tokens are short-lived HS256 JWTs carrying the subject and role.
Refresh tokens are opaque random strings; only their SHA-256 digest is
stored, and every use rotates them. Presenting a token that was already
rotated or revoked revokes every live token of its user.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from ...core.clock import utcnow
from ...core.config import Settings, ensure_signing_key
from ...core.security import generate_refresh_token, hash_token
from ...domain.entities.refresh_token import RefreshToken
from ...domain.entities.user import User
from ...domain.enums import UserRole
from ...domain.errors import AuthenticationError, TokenExpiredError, TokenInvalidError, TokenReusedError
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import UserId


logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"


@dataclass(frozen=True)
class IssuedToken:
    token: str = field(repr=False)
    expires_in: int


@dataclass(frozen=True)
class AccessClaims:
    user_id: UserId
    role: UserRole


@dataclass(frozen=True)
class RotatedTokens:
    user: User
    access_token: IssuedToken
    refresh_token: IssuedToken


class TokenService:
    """Issues, verifies, rotates and revokes tokens.

    Writes go through the unit of work it was built with; committing is the
    caller's job.
    """

    def __init__(self, settings: Settings, unit_of_work: IUnitOfWork):
        self._secret = ensure_signing_key(settings)
        self._algorithm = settings.JWT_ALGORITHM
        self._access_ttl = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        self._refresh_ttl = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
        self.unit_of_work = unit_of_work

    def issue_access_token(self, user_id: UserId, role: UserRole) -> IssuedToken:
        """Sign an access token for the user's current role"""
        issued_at = utcnow()
        expires_at = issued_at + self._access_ttl
        claims = {
            "sub": str(user_id),
            "role": role.value,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
            "type": ACCESS_TOKEN_TYPE,
        }
        token = jwt.encode(claims, self._secret, algorithm=self._algorithm)
        return IssuedToken(token=token, expires_in=int(self._access_ttl.total_seconds()))

    async def issue_refresh_token(self, user_id: UserId) -> IssuedToken:
        """Generate and store a new refresh token"""
        raw = generate_refresh_token()
        await self.unit_of_work.refresh_tokens.add(
            RefreshToken.issue(user_id, hash_token(raw), self._refresh_ttl)
        )
        return IssuedToken(token=raw, expires_in=int(self._refresh_ttl.total_seconds()))

    def verify_access_token(self, token: str) -> AccessClaims:
        """Return the verified claims, or raise TokenExpiredError / TokenInvalidError"""
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError:
            raise TokenExpiredError("Access token has expired")
        except JWTError:
            raise TokenInvalidError()

        if payload.get("type") != ACCESS_TOKEN_TYPE:
            raise TokenInvalidError()
        try:
            return AccessClaims(
                user_id=UserId.from_str(payload["sub"]),
                role=UserRole(payload["role"]),
            )
        except (KeyError, TypeError, ValueError):
            raise TokenInvalidError()

    async def rotate_refresh_token(self, presented: str) -> RotatedTokens:
        """Exchange a refresh token for a new access/refresh pair"""
        stored = await self.unit_of_work.refresh_tokens.get_by_hash(hash_token(presented))
        if stored is None:
            raise TokenInvalidError()

        now = utcnow()
        if stored.is_revoked:
            await self._revoke_chain(stored.user_id)
            raise TokenReusedError(stored.user_id)
        if stored.is_expired(now):
            raise TokenExpiredError("Refresh token has expired")

        user = await self.unit_of_work.users.get_by_id(stored.user_id)
        if user is None or not user.is_active:
            raise AuthenticationError("Account not active")

        raw = generate_refresh_token()
        successor = RefreshToken.issue(user.id, hash_token(raw), self._refresh_ttl)
        if not await self.unit_of_work.refresh_tokens.revoke_if_active(stored.id, now, successor.id):
            # Another request rotated this token between our read and our write
            await self._revoke_chain(stored.user_id)
            raise TokenReusedError(stored.user_id)
        await self.unit_of_work.refresh_tokens.add(successor)

        return RotatedTokens(
            user=user,
            access_token=self.issue_access_token(user.id, user.role),
            refresh_token=IssuedToken(token=raw, expires_in=int(self._refresh_ttl.total_seconds())),
        )

    async def revoke(self, presented: Optional[str]) -> None:
        """Revoke a refresh token; unknown or already revoked tokens are ignored"""
        if not presented:
            return
        stored = await self.unit_of_work.refresh_tokens.get_by_hash(hash_token(presented))
        if stored is None:
            return
        await self.unit_of_work.refresh_tokens.revoke_if_active(stored.id, utcnow())

    async def revoke_all_for_user(self, user_id: UserId) -> int:
        return await self._revoke_chain(user_id)

    async def _revoke_chain(self, user_id: UserId) -> int:
        revoked = await self.unit_of_work.refresh_tokens.revoke_all_for_user(user_id, utcnow())
        logger.info("Revoked %d refresh token(s)", revoked, extra={"user_id": str(user_id)})
        return revoked
