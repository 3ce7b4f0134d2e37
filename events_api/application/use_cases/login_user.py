"""Login user use case"""

from ...core.logging import get_security_logger
from ...core.security import PasswordHasher
from ...domain.errors import AuthenticationError, ValidationError
from ...domain.repositories.unit_of_work import IUnitOfWork
from ..dtos.user_dtos import AuthResult, LoginUserDto, UserDto
from ..services.token_service import TokenService
from ._common import parse_email


INVALID_CREDENTIALS = "Invalid email or password"

security_logger = get_security_logger()


class LoginUserUseCase:
    """Check credentials and start a session.

    Unknown emails and wrong passwords produce the same error after the same
    amount of hashing work. The account status is only reported once the
    password has been verified.
    """

    def __init__(self, unit_of_work: IUnitOfWork, token_service: TokenService, password_hasher: PasswordHasher):
        self.unit_of_work = unit_of_work
        self.token_service = token_service
        self.password_hasher = password_hasher

    async def execute(self, request: LoginUserDto) -> AuthResult:
        try:
            email = parse_email(request.email)
        except ValidationError:
            self.password_hasher.dummy_verify()
            raise AuthenticationError(INVALID_CREDENTIALS)

        async with self.unit_of_work:
            user = await self.unit_of_work.users.get_by_email(email)
            if user is None:
                self.password_hasher.dummy_verify()
                security_logger.warning("Login failed", extra={"email": str(email), "reason": "unknown_email"})
                raise AuthenticationError(INVALID_CREDENTIALS)

            if not self.password_hasher.verify(request.password, user.hashed_password):
                security_logger.warning("Login failed", extra={"user_id": str(user.id), "reason": "bad_password"})
                raise AuthenticationError(INVALID_CREDENTIALS)

            if not user.is_active:
                security_logger.warning("Login refused", extra={"user_id": str(user.id), "reason": user.status.value})
                raise AuthenticationError("Account not active")

            user.record_login()
            await self.unit_of_work.users.update(user)
            refresh_token = await self.token_service.issue_refresh_token(user.id)
            await self.unit_of_work.commit()

        access_token = self.token_service.issue_access_token(user.id, user.role)
        return AuthResult(
            user=UserDto.from_entity(user),
            access_token=access_token.token,
            expires_in=access_token.expires_in,
            refresh_token=refresh_token.token,
            refresh_expires_in=refresh_token.expires_in,
        )
