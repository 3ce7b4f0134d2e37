"""Register user use case"""

import logging

from ...core.security import PasswordHasher, validate_password_strength
from ...domain.entities.user import User
from ...domain.errors import ConflictError
from ...domain.repositories.unit_of_work import IUnitOfWork
from ..dtos.user_dtos import AuthResult, RegisterUserDto, UserDto
from ..services.token_service import TokenService
from ._common import parse_email


logger = logging.getLogger(__name__)


class RegisterUserUseCase:

    def __init__(self, unit_of_work: IUnitOfWork, token_service: TokenService, password_hasher: PasswordHasher):
        self.unit_of_work = unit_of_work
        self.token_service = token_service
        self.password_hasher = password_hasher

    async def execute(self, request: RegisterUserDto) -> AuthResult:
        email = parse_email(request.email)
        validate_password_strength(request.password)
        hashed_password = self.password_hasher.hash(request.password)

        async with self.unit_of_work:
            # Check if user exists
            if await self.unit_of_work.users.exists_by_email(email):
                raise ConflictError("Email already registered")

            user = User.create(
                email=email,
                hashed_password=hashed_password,
                first_name=request.first_name,
                last_name=request.last_name,
                phone=request.phone,
            )
            await self.unit_of_work.users.add(user)
            refresh_token = await self.token_service.issue_refresh_token(user.id)
            await self.unit_of_work.commit()

        logger.info("User registered", extra={"user_id": str(user.id)})
        access_token = self.token_service.issue_access_token(user.id, user.role)
        return AuthResult(
            user=UserDto.from_entity(user),
            access_token=access_token.token,
            expires_in=access_token.expires_in,
            refresh_token=refresh_token.token,
            refresh_expires_in=refresh_token.expires_in,
        )
