"""User administration routes"""

from fastapi import APIRouter, Depends, Query, status

from ...application.dtos.common import Page
from ...application.dtos.user_dtos import ChangeUserRoleDto, ChangeUserStatusDto, CreateUserByAdminDto, UserDto
from ...application.services.token_service import TokenService
from ...application.use_cases.manage_users import (
    ChangeUserRoleUseCase, ChangeUserStatusUseCase, CreateUserByAdminUseCase, ListUsersUseCase,
)
from ...core.security import PasswordHasher
from ...domain.enums import UserRole
from ...domain.policies import Subject
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import UserId
from ..dependencies import get_password_hasher, get_token_service, get_unit_of_work, parse_path_id, require_roles

router = APIRouter()

admin_only = require_roles(UserRole.ADMIN)


@router.get("", response_model=Page[UserDto])
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    subject: Subject = Depends(admin_only),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    return await ListUsersUseCase(unit_of_work).execute(subject, page=page, limit=limit)


@router.post("", response_model=UserDto, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: CreateUserByAdminDto,
    subject: Subject = Depends(admin_only),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
):
    return await CreateUserByAdminUseCase(unit_of_work, password_hasher).execute(subject, user_data)


@router.patch("/{user_id}/role", response_model=UserDto)
async def change_user_role(
    user_id: str,
    role_data: ChangeUserRoleDto,
    subject: Subject = Depends(admin_only),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    return await ChangeUserRoleUseCase(unit_of_work).execute(subject, parse_path_id(UserId, user_id), role_data)


@router.patch("/{user_id}/status", response_model=UserDto)
async def change_user_status(
    user_id: str,
    status_data: ChangeUserStatusDto,
    subject: Subject = Depends(admin_only),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    token_service: TokenService = Depends(get_token_service),
):
    use_case = ChangeUserStatusUseCase(unit_of_work, token_service)
    return await use_case.execute(subject, parse_path_id(UserId, user_id), status_data)
