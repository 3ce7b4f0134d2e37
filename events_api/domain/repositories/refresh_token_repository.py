"""Refresh token repository interface"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from ..entities.refresh_token import RefreshToken
from ..value_objects.entity_ids import RefreshTokenId, UserId


class IRefreshTokenRepository(ABC):

    @abstractmethod
    async def get_by_hash(self, token_hash: str) -> Optional[RefreshToken]:
        pass

    @abstractmethod
    async def add(self, token: RefreshToken) -> RefreshToken:
        pass

    @abstractmethod
    async def revoke_if_active(
        self,
        token_id: RefreshTokenId,
        now: datetime,
        replaced_by_id: Optional[RefreshTokenId] = None,
    ) -> bool:
        """Compare-and-revoke: True only for the caller that revoked it"""
        pass

    @abstractmethod
    async def revoke_all_for_user(self, user_id: UserId, now: datetime) -> int:
        pass
