"""Refresh token repository implementation using SQLAlchemy ORM"""

from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from ...domain.entities.refresh_token import RefreshToken
from ...domain.repositories.refresh_token_repository import IRefreshTokenRepository
from ...domain.value_objects.entity_ids import RefreshTokenId, UserId
from ..orm.refresh_token_model import RefreshTokenModel
from ._errors import translate_integrity_errors


class RefreshTokenRepositoryImpl(IRefreshTokenRepository):

    def __init__(self, session: Session):
        self.session = session

    async def get_by_hash(self, token_hash: str) -> Optional[RefreshToken]:
        model = (
            self.session.query(RefreshTokenModel)
            .populate_existing()
            .filter(RefreshTokenModel.token_hash == token_hash)
            .first()
        )
        return self._map_to_entity(model) if model else None

    async def add(self, token: RefreshToken) -> RefreshToken:
        self.session.add(RefreshTokenModel(
            id=token.id.value,
            user_id=token.user_id.value,
            token_hash=token.token_hash,
            expires_at=token.expires_at,
            created_at=token.created_at,
            revoked_at=token.revoked_at,
            replaced_by_id=token.replaced_by_id.value if token.replaced_by_id else None,
        ))
        with translate_integrity_errors("Refresh token could not be stored"):
            self.session.flush()
        return token

    async def revoke_if_active(
        self,
        token_id: RefreshTokenId,
        now: datetime,
        replaced_by_id: Optional[RefreshTokenId] = None,
    ) -> bool:
        result = self.session.execute(
            update(RefreshTokenModel)
            .where(RefreshTokenModel.id == token_id.value, RefreshTokenModel.revoked_at.is_(None))
            .values(revoked_at=now, replaced_by_id=replaced_by_id.value if replaced_by_id else None)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def revoke_all_for_user(self, user_id: UserId, now: datetime) -> int:
        result = self.session.execute(
            update(RefreshTokenModel)
            .where(RefreshTokenModel.user_id == user_id.value, RefreshTokenModel.revoked_at.is_(None))
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def _map_to_entity(self, model: RefreshTokenModel) -> RefreshToken:
        return RefreshToken(
            id=RefreshTokenId(model.id),
            user_id=UserId(model.user_id),
            token_hash=model.token_hash,
            expires_at=model.expires_at,
            created_at=model.created_at,
            revoked_at=model.revoked_at,
            replaced_by_id=RefreshTokenId(model.replaced_by_id) if model.replaced_by_id else None,
        )
