"""Refresh token record (only the hash of the token is kept)"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from ...core.clock import ensure_utc, utcnow
from ..value_objects.entity_ids import RefreshTokenId, UserId


@dataclass
class RefreshToken:
    id: RefreshTokenId
    user_id: UserId
    token_hash: str = field(repr=False)
    expires_at: datetime
    created_at: datetime = field(default_factory=utcnow)
    revoked_at: Optional[datetime] = None
    replaced_by_id: Optional[RefreshTokenId] = None

    def __post_init__(self):
        self.expires_at = ensure_utc(self.expires_at)
        self.created_at = ensure_utc(self.created_at)
        self.revoked_at = ensure_utc(self.revoked_at)

    @classmethod
    def issue(cls, user_id: UserId, token_hash: str, ttl: timedelta) -> "RefreshToken":
        now = utcnow()
        return cls(
            id=RefreshTokenId.generate(),
            user_id=user_id,
            token_hash=token_hash,
            expires_at=now + ttl,
            created_at=now,
        )

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) >= self.expires_at
