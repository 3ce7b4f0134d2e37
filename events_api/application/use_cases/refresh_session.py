"""Refresh token rotation use case"""

from typing import Optional

from ...core.logging import get_security_logger
from ...domain.errors import TokenInvalidError, TokenReusedError
from ...domain.repositories.unit_of_work import IUnitOfWork
from ..dtos.user_dtos import AuthResult, UserDto
from ..services.token_service import TokenService


security_logger = get_security_logger()


class RefreshSessionUseCase:

    def __init__(self, unit_of_work: IUnitOfWork, token_service: TokenService):
        self.unit_of_work = unit_of_work
        self.token_service = token_service

    async def execute(self, presented: Optional[str]) -> AuthResult:
        if not presented:
            raise TokenInvalidError("Refresh token missing")

        async with self.unit_of_work:
            try:
                rotated = await self.token_service.rotate_refresh_token(presented)
            except TokenReusedError as e:
                # Keep the chain revocation even though the request fails
                await self.unit_of_work.audit_logs.record(
                    "security.token_reuse",
                    user_id=e.user_id,
                    resource_type="user",
                    resource_id=str(e.user_id),
                )
                await self.unit_of_work.commit()
                security_logger.warning(
                    "Refresh token reuse detected, all sessions revoked",
                    extra={"user_id": str(e.user_id)},
                )
                raise
            await self.unit_of_work.commit()

        return AuthResult(
            user=UserDto.from_entity(rotated.user),
            access_token=rotated.access_token.token,
            expires_in=rotated.access_token.expires_in,
            refresh_token=rotated.refresh_token.token,
            refresh_expires_in=rotated.refresh_token.expires_in,
        )
