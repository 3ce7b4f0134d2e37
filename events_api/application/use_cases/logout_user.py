"""Logout use case"""

from typing import Optional

from ...domain.repositories.unit_of_work import IUnitOfWork
from ..services.token_service import TokenService


class LogoutUserUseCase:
    """Revoke the presented refresh token. Succeeds whatever state the token is in."""

    def __init__(self, unit_of_work: IUnitOfWork, token_service: TokenService):
        self.unit_of_work = unit_of_work
        self.token_service = token_service

    async def execute(self, presented: Optional[str]) -> None:
        async with self.unit_of_work:
            await self.token_service.revoke(presented)
            await self.unit_of_work.commit()
