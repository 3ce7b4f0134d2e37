import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import update

from events_api.application.dtos.user_dtos import LoginUserDto, RegisterUserDto
from events_api.application.services.token_service import TokenService
from events_api.application.use_cases.get_user_profile import GetUserProfileUseCase
from events_api.application.use_cases.login_user import LoginUserUseCase
from events_api.application.use_cases.logout_user import LogoutUserUseCase
from events_api.application.use_cases.refresh_session import RefreshSessionUseCase
from events_api.application.use_cases.register_user import RegisterUserUseCase
from events_api.domain.enums import UserRole, UserStatus
from events_api.domain.errors import (
    AuthenticationError, ConflictError, NotFoundError, TokenInvalidError, TokenReusedError, ValidationError,
)
from events_api.infrastructure.orm import AuditLogModel, RefreshTokenModel, UserModel
from events_api.infrastructure.repositories.unit_of_work_impl import UnitOfWorkImpl


@pytest.fixture
def auth(settings, make_uow, password_hasher):
    """Builds use cases the way the API does: one unit of work shared with the token service"""

    def build(use_case_class, with_hasher=False):
        unit_of_work = make_uow()
        token_service = TokenService(settings, unit_of_work)
        if with_hasher:
            return use_case_class(unit_of_work, token_service, password_hasher)
        return use_case_class(unit_of_work, token_service)

    return build


def set_status(session_factory, user, status):
    session = session_factory()
    session.execute(update(UserModel).where(UserModel.id == user.id.value).values(status=status))
    session.commit()
    session.close()


class TestRegister:

    async def test_register_returns_session(self, auth, token_service):
        result = await auth(RegisterUserUseCase, with_hasher=True).execute(RegisterUserDto(
            email="New.Person@Example.com", password="long-enough", first_name="New", last_name="Person",
        ))

        assert result.user.email == "new.person@example.com"
        assert result.user.role == UserRole.USER
        assert result.refresh_token
        assert token_service.verify_access_token(result.access_token).user_id.value == result.user.id

    async def test_duplicate_email_is_case_insensitive(self, auth, users):
        with pytest.raises(ConflictError) as exc_info:
            await auth(RegisterUserUseCase, with_hasher=True).execute(RegisterUserDto(
                email="ALICE@example.com", password="long-enough", first_name="Alice", last_name="Again",
            ))
        assert exc_info.value.message == "Email already registered"

    async def test_short_password(self, auth):
        with pytest.raises(ValidationError):
            await auth(RegisterUserUseCase, with_hasher=True).execute(RegisterUserDto(
                email="short@example.com", password="short", first_name="Sam", last_name="Short",
            ))


class TestLogin:

    async def test_success_records_login(self, auth, users, password, make_uow):
        result = await auth(LoginUserUseCase, with_hasher=True).execute(
            LoginUserDto(email="alice@example.com", password=password)
        )

        assert result.user.id == users["user"].id.value
        stored = await make_uow().users.get_by_id(users["user"].id)
        assert stored.last_login_at is not None

    async def test_unknown_email_and_wrong_password_look_the_same(self, auth, users, password):
        with pytest.raises(AuthenticationError) as unknown:
            await auth(LoginUserUseCase, with_hasher=True).execute(
                LoginUserDto(email="nobody@example.com", password=password)
            )
        with pytest.raises(AuthenticationError) as wrong:
            await auth(LoginUserUseCase, with_hasher=True).execute(
                LoginUserDto(email="alice@example.com", password="wrong-password")
            )
        assert unknown.value.message == wrong.value.message == "Invalid email or password"

    async def test_inactive_account_reported_only_after_password_check(
        self, auth, users, password, session_factory,
    ):
        set_status(session_factory, users["user"], UserStatus.SUSPENDED)

        with pytest.raises(AuthenticationError) as wrong:
            await auth(LoginUserUseCase, with_hasher=True).execute(
                LoginUserDto(email="alice@example.com", password="wrong-password")
            )
        assert wrong.value.message == "Invalid email or password"

        with pytest.raises(AuthenticationError) as right:
            await auth(LoginUserUseCase, with_hasher=True).execute(
                LoginUserDto(email="alice@example.com", password=password)
            )
        assert right.value.message == "Account not active"

    async def test_deleted_account_is_unknown(self, auth, users, password, session_factory):
        set_status(session_factory, users["user"], UserStatus.DELETED)

        with pytest.raises(AuthenticationError) as exc_info:
            await auth(LoginUserUseCase, with_hasher=True).execute(
                LoginUserDto(email="alice@example.com", password=password)
            )
        assert exc_info.value.message == "Invalid email or password"


class TestRefreshAndLogout:

    async def login(self, auth, password):
        return await auth(LoginUserUseCase, with_hasher=True).execute(
            LoginUserDto(email="alice@example.com", password=password)
        )

    async def test_refresh_rotates(self, auth, users, password):
        session = await self.login(auth, password)

        refreshed = await auth(RefreshSessionUseCase).execute(session.refresh_token)

        assert refreshed.refresh_token != session.refresh_token
        assert refreshed.user.id == users["user"].id.value

    async def test_missing_token(self, auth):
        with pytest.raises(TokenInvalidError):
            await auth(RefreshSessionUseCase).execute(None)

    async def test_reuse_is_audited_and_sessions_end(self, auth, users, password, session_factory):
        first = await self.login(auth, password)
        second = await auth(RefreshSessionUseCase).execute(first.refresh_token)

        with pytest.raises(TokenReusedError):
            await auth(RefreshSessionUseCase).execute(first.refresh_token)
        with pytest.raises(TokenReusedError):
            await auth(RefreshSessionUseCase).execute(second.refresh_token)

        session = session_factory()
        try:
            live = session.query(RefreshTokenModel).filter(RefreshTokenModel.revoked_at.is_(None)).count()
            audited = session.query(AuditLogModel).filter(AuditLogModel.action == "security.token_reuse").count()
        finally:
            session.close()
        assert live == 0
        assert audited == 2

    async def test_concurrent_refreshes_of_one_token(self, auth, users, password, settings, session_factory):
        presented = (await self.login(auth, password)).refresh_token
        attempts = 6
        barrier = threading.Barrier(attempts)

        def attempt() -> str:
            session = session_factory()
            try:
                unit_of_work = UnitOfWorkImpl(session)
                use_case = RefreshSessionUseCase(unit_of_work, TokenService(settings, unit_of_work))
                barrier.wait(timeout=10)
                asyncio.run(use_case.execute(presented))
                return "rotated"
            except TokenReusedError:
                return "reused"
            finally:
                session.close()

        with ThreadPoolExecutor(max_workers=attempts) as pool:
            outcomes = list(pool.map(lambda _: attempt(), range(attempts)))

        assert outcomes.count("rotated") == 1
        assert outcomes.count("reused") == attempts - 1

    async def test_logout_is_idempotent(self, auth, users, password):
        session = await self.login(auth, password)

        await auth(LogoutUserUseCase).execute(session.refresh_token)
        await auth(LogoutUserUseCase).execute(session.refresh_token)
        await auth(LogoutUserUseCase).execute(None)

        with pytest.raises(TokenReusedError):
            await auth(RefreshSessionUseCase).execute(session.refresh_token)


class TestProfile:

    async def test_profile(self, uow, users):
        profile = await GetUserProfileUseCase(uow).execute(users["organizer"].id)
        assert profile.role == UserRole.ORGANIZER

    async def test_deleted_user_has_no_profile(self, uow, users, session_factory):
        set_status(session_factory, users["user"], UserStatus.DELETED)
        with pytest.raises(NotFoundError):
            await GetUserProfileUseCase(uow).execute(users["user"].id)
