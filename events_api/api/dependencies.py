"""API dependencies"""

from typing import Optional, Type, TypeVar

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ..application.services.token_service import TokenService
from ..core.config import Settings
from ..core.logging import get_security_logger
from ..core.security import PasswordHasher
from ..db.database import get_db
from ..domain.enums import UserRole
from ..domain.errors import AuthenticationError, ForbiddenError
from ..domain.policies import Subject
from ..domain.repositories.unit_of_work import IUnitOfWork
from ..infrastructure.repositories.unit_of_work_impl import UnitOfWorkImpl


security = HTTPBearer(auto_error=False)
security_logger = get_security_logger()

IdT = TypeVar("IdT")


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_unit_of_work(db: Session = Depends(get_db)) -> IUnitOfWork:
    """Get unit of work (one per request, shared by every dependency)"""
    return UnitOfWorkImpl(db)


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_token_service(
    settings: Settings = Depends(get_settings),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
) -> TokenService:
    return TokenService(settings, unit_of_work)


async def _resolve_subject(request: Request, token: str, token_service: TokenService, unit_of_work: IUnitOfWork) -> Subject:
    claims = token_service.verify_access_token(token)

    # The role in the token is only a hint; the stored account decides
    async with unit_of_work:
        user = await unit_of_work.users.get_by_id(claims.user_id)
    if user is None or not user.is_active:
        raise AuthenticationError("Account not active")

    request.state.subject_id = str(user.id)
    return Subject(id=user.id, role=user.role)


async def get_current_subject(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    token_service: TokenService = Depends(get_token_service),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
) -> Subject:
    """Get the authenticated caller"""
    if credentials is None:
        raise AuthenticationError("Not authenticated")
    return await _resolve_subject(request, credentials.credentials, token_service, unit_of_work)


async def get_optional_subject(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    token_service: TokenService = Depends(get_token_service),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
) -> Optional[Subject]:
    """The caller if a bearer token was sent; anonymous otherwise"""
    if credentials is None:
        return None
    return await _resolve_subject(request, credentials.credentials, token_service, unit_of_work)


def require_roles(*roles: UserRole):
    """Route guard admitting only the given roles"""

    async def guard(subject: Subject = Depends(get_current_subject)) -> Subject:
        if subject.role not in roles:
            raise ForbiddenError(f"Requires one of: {', '.join(role.value for role in roles)}")
        return subject

    return guard


def rate_limited(scope: str):
    """Throttle a route per client address using the application's rate limiter"""

    async def guard(request: Request) -> None:
        limiter = request.app.state.rate_limiter
        if limiter is None:
            return
        client = request.client.host if request.client else "unknown"
        result = await limiter.hit(f"{scope}:{client}")
        if not result.allowed:
            security_logger.warning("Rate limit exceeded", extra={"scope": scope, "client": client})
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many attempts, try again later",
                headers={"Retry-After": str(result.retry_after)},
            )

    return guard


def parse_path_id(id_type: Type[IdT], value: str) -> IdT:
    """Entity id from a path segment; malformed ids are a 400"""
    try:
        return id_type.from_str(value)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Malformed identifier")
