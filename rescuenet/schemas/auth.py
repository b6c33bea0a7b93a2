"""Auth schemas."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from rescuenet.models.user import UserRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)
    full_name: str = Field(min_length=1, max_length=255)
    role: UserRole = UserRole.CITIZEN
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)

    @field_validator("role")
    @classmethod
    def _self_service_role(cls, v: UserRole) -> UserRole:
        if v not in (UserRole.CITIZEN, UserRole.VOLUNTEER):
            raise ValueError("Valid role (citizen or volunteer) is required")
        return v


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserMe(BaseModel):
    id: int
    email: str
    full_name: str
    role: UserRole
    is_active: bool
    latitude: float | None = None
    longitude: float | None = None
    has_push_token: bool = False
    created_at: datetime

    model_config = {"from_attributes": True}


class UpdateProfileRequest(BaseModel):
    full_name: str | None = Field(default=None, min_length=1, max_length=255)
