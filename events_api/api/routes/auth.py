"""Authentication routes"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status

from ...application.dtos.user_dtos import (
    AccessTokenDto, AuthResponse, AuthResult, LoginUserDto, RefreshTokenDto, RegisterUserDto, UserDto,
)
from ...application.services.token_service import TokenService
from ...application.use_cases.get_user_profile import GetUserProfileUseCase
from ...application.use_cases.login_user import LoginUserUseCase
from ...application.use_cases.logout_user import LogoutUserUseCase
from ...application.use_cases.refresh_session import RefreshSessionUseCase
from ...application.use_cases.register_user import RegisterUserUseCase
from ...core.config import Settings
from ...core.security import PasswordHasher
from ...domain.policies import Subject
from ...domain.repositories.unit_of_work import IUnitOfWork
from ..dependencies import (
    get_current_subject, get_password_hasher, get_settings, get_token_service, get_unit_of_work, rate_limited,
)

router = APIRouter()


def _set_refresh_cookie(response: Response, settings: Settings, result: AuthResult) -> None:
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=result.refresh_token,
        max_age=result.refresh_expires_in,
        path=settings.REFRESH_COOKIE_PATH,
        httponly=True,
        secure=settings.REFRESH_COOKIE_SECURE,
        samesite="strict",
    )


def _presented_refresh_token(request: Request, settings: Settings, body: Optional[RefreshTokenDto]) -> Optional[str]:
    """Cookie first; the body is for clients without a cookie jar"""
    return request.cookies.get(settings.REFRESH_COOKIE_NAME) or (body.refresh_token if body else None)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    user_data: RegisterUserDto,
    response: Response,
    settings: Settings = Depends(get_settings),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    token_service: TokenService = Depends(get_token_service),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
):
    """Register a new user"""
    result = await RegisterUserUseCase(unit_of_work, token_service, password_hasher).execute(user_data)
    _set_refresh_cookie(response, settings, result)
    return result.to_response()


@router.post("/login", response_model=AuthResponse, dependencies=[Depends(rate_limited("login"))])
async def login_user(
    login_data: LoginUserDto,
    response: Response,
    settings: Settings = Depends(get_settings),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    token_service: TokenService = Depends(get_token_service),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
):
    """Login user"""
    result = await LoginUserUseCase(unit_of_work, token_service, password_hasher).execute(login_data)
    _set_refresh_cookie(response, settings, result)
    return result.to_response()


@router.post("/refresh", response_model=AccessTokenDto, dependencies=[Depends(rate_limited("refresh"))])
async def refresh_token(
    request: Request,
    response: Response,
    body: Optional[RefreshTokenDto] = None,
    settings: Settings = Depends(get_settings),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    token_service: TokenService = Depends(get_token_service),
):
    """Rotate the refresh token and return a new access token"""
    presented = _presented_refresh_token(request, settings, body)
    result = await RefreshSessionUseCase(unit_of_work, token_service).execute(presented)
    _set_refresh_cookie(response, settings, result)
    return result.to_access_token()


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout_user(
    request: Request,
    body: Optional[RefreshTokenDto] = None,
    settings: Settings = Depends(get_settings),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    token_service: TokenService = Depends(get_token_service),
):
    """Revoke the current refresh token"""
    presented = _presented_refresh_token(request, settings, body)
    await LogoutUserUseCase(unit_of_work, token_service).execute(presented)
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(
        settings.REFRESH_COOKIE_NAME,
        path=settings.REFRESH_COOKIE_PATH,
        secure=settings.REFRESH_COOKIE_SECURE,
        httponly=True,
        samesite="strict",
    )
    return response


@router.get("/profile", response_model=UserDto)
async def get_profile(
    subject: Subject = Depends(get_current_subject),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    """Get current user profile"""
    return await GetUserProfileUseCase(unit_of_work).execute(subject.id)
