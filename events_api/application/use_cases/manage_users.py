"""User administration use cases"""

import logging

from ...core.security import PasswordHasher, validate_password_strength
from ...domain.entities.user import User
from ...domain.enums import UserStatus
from ...domain.errors import ConflictError, ForbiddenError, NotFoundError
from ...domain.policies import Action, Subject, authorize
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import UserId
from ..dtos.common import Page, PaginationMeta
from ..dtos.user_dtos import ChangeUserRoleDto, ChangeUserStatusDto, CreateUserByAdminDto, UserDto
from ..services.token_service import TokenService
from ._common import log_domain_events, parse_email


logger = logging.getLogger(__name__)


class ListUsersUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, subject: Subject, page: int = 1, limit: int = 20) -> Page[UserDto]:
        authorize(subject, Action.MANAGE_USERS)
        async with self.unit_of_work:
            users = await self.unit_of_work.users.get_paginated(page, limit)
            total = await self.unit_of_work.users.count()
        return Page[UserDto](
            data=[UserDto.from_entity(user) for user in users],
            meta=PaginationMeta(page=page, limit=limit, total=total),
        )


class CreateUserByAdminUseCase:
    """Administrators may create accounts of any role; these need a strong password"""

    def __init__(self, unit_of_work: IUnitOfWork, password_hasher: PasswordHasher):
        self.unit_of_work = unit_of_work
        self.password_hasher = password_hasher

    async def execute(self, subject: Subject, request: CreateUserByAdminDto) -> UserDto:
        authorize(subject, Action.MANAGE_USERS)
        email = parse_email(request.email)
        validate_password_strength(request.password, strong=True)
        hashed_password = self.password_hasher.hash(request.password)

        async with self.unit_of_work:
            if await self.unit_of_work.users.exists_by_email(email):
                raise ConflictError("Email already registered")

            user = User.create(
                email=email,
                hashed_password=hashed_password,
                first_name=request.first_name,
                last_name=request.last_name,
                phone=request.phone,
                role=request.role,
            )
            await self.unit_of_work.users.add(user)
            await self.unit_of_work.audit_logs.record(
                "user.created",
                user_id=subject.id,
                resource_type="user",
                resource_id=str(user.id),
                details={"role": user.role.value},
            )
            await self.unit_of_work.commit()

        logger.info("User created by administrator", extra={"user_id": str(user.id), "admin_id": str(subject.id)})
        return UserDto.from_entity(user)


class ChangeUserRoleUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, subject: Subject, user_id: UserId, request: ChangeUserRoleDto) -> UserDto:
        authorize(subject, Action.MANAGE_USERS)
        if user_id == subject.id:
            raise ForbiddenError("Administrators cannot change their own role")

        async with self.unit_of_work:
            user = await self.unit_of_work.users.get_by_id(user_id)
            if user is None:
                raise NotFoundError("User", user_id)

            old_role = user.role
            user.change_role(request.role)
            await self.unit_of_work.users.update(user)
            await self.unit_of_work.audit_logs.record(
                "user.role_changed",
                user_id=subject.id,
                resource_type="user",
                resource_id=str(user.id),
                details={"from": old_role.value, "to": user.role.value},
            )
            await self.unit_of_work.commit()

        log_domain_events(user.get_events())
        return UserDto.from_entity(user)


class ChangeUserStatusUseCase:
    """Activate, suspend or soft-delete an account.

    Any move away from ACTIVE also ends every session of the user.
    """

    def __init__(self, unit_of_work: IUnitOfWork, token_service: TokenService):
        self.unit_of_work = unit_of_work
        self.token_service = token_service

    async def execute(self, subject: Subject, user_id: UserId, request: ChangeUserStatusDto) -> UserDto:
        authorize(subject, Action.MANAGE_USERS)
        if user_id == subject.id:
            raise ForbiddenError("Administrators cannot change their own status")

        async with self.unit_of_work:
            user = await self.unit_of_work.users.get_by_id(user_id)
            if user is None:
                raise NotFoundError("User", user_id)

            old_status = user.status
            user.change_status(request.status)
            await self.unit_of_work.users.update(user)
            if user.status != UserStatus.ACTIVE:
                await self.token_service.revoke_all_for_user(user.id)
            await self.unit_of_work.audit_logs.record(
                "user.status_changed",
                user_id=subject.id,
                resource_type="user",
                resource_id=str(user.id),
                details={"from": old_status.value, "to": user.status.value},
            )
            await self.unit_of_work.commit()

        log_domain_events(user.get_events())
        return UserDto.from_entity(user)
