"""User DTOs for API layer"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from ...domain.entities.user import User
from ...domain.enums import UserRole, UserStatus


class RegisterUserDto(BaseModel):
    """DTO for user registration"""
    email: EmailStr
    password: str = Field(..., max_length=128)
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    phone: Optional[str] = Field(None, max_length=32)


class CreateUserByAdminDto(RegisterUserDto):
    """DTO for accounts created by an administrator"""
    role: UserRole = UserRole.USER


class LoginUserDto(BaseModel):
    """DTO for user login"""
    email: EmailStr
    password: str = Field(..., max_length=128)


class RefreshTokenDto(BaseModel):
    """Body fallback for clients that cannot use the refresh cookie"""
    refresh_token: Optional[str] = None


class ChangeUserRoleDto(BaseModel):
    role: UserRole


class ChangeUserStatusDto(BaseModel):
    status: UserStatus


class UserDto(BaseModel):
    """DTO for user response"""
    id: UUID
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    role: UserRole
    status: UserStatus
    email_verified: bool
    created_at: datetime
    last_login_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, user: User) -> "UserDto":
        return cls(
            id=user.id.value,
            email=str(user.email),
            first_name=user.first_name,
            last_name=user.last_name,
            phone=user.phone,
            role=user.role,
            status=user.status,
            email_verified=user.email_verified,
            created_at=user.created_at,
            last_login_at=user.last_login_at,
        )


class AccessTokenDto(BaseModel):
    """DTO for the access token returned in response bodies"""
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class AuthResponse(AccessTokenDto):
    """User response with access token (the refresh token travels in a cookie)"""
    user: UserDto


class AuthResult(BaseModel):
    """What the auth use cases hand to the HTTP layer"""
    user: UserDto
    access_token: str
    expires_in: int
    refresh_token: str = Field(..., repr=False)
    refresh_expires_in: int

    def to_response(self) -> AuthResponse:
        return AuthResponse(user=self.user, access_token=self.access_token, expires_in=self.expires_in)

    def to_access_token(self) -> AccessTokenDto:
        return AccessTokenDto(access_token=self.access_token, expires_in=self.expires_in)
