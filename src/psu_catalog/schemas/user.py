from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from psu_catalog.auth.passwords import MAX_PASSWORD_BYTES

# empty string allowed: "" means "not provided" on update / list requests
EMAIL_PATTERN = r"^$|^[^@\s]+@[^@\s]+\.[^@\s]+$"


def check_password_bytes(password: str) -> str:
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes in UTF-8")
    return password


Password = Annotated[str, Field(min_length=6, max_length=72), AfterValidator(check_password_bytes)]


class UserCreateRequest(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    password: Password
    email: str = Field(default="", max_length=100, pattern=EMAIL_PATTERN)
    phone: str = Field(default="", max_length=20)
    nickname: str = Field(default="", max_length=50)
    avatar: str = Field(default="", max_length=255)


class UserUpdateRequest(BaseModel):
    """Sparse patch: empty strings and `None` leave the stored value untouched."""

    email: str = Field(default="", max_length=100, pattern=EMAIL_PATTERN)
    phone: str = Field(default="", max_length=20)
    nickname: str = Field(default="", max_length=50)
    avatar: str = Field(default="", max_length=255)
    status: int | None = Field(default=None, ge=0, le=1)


class UserListRequest(BaseModel):
    page: int = 1
    page_size: int = 10
    username: str = ""
    email: str = ""
    status: int | None = Field(default=None, ge=0, le=1)


class LoginRequest(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    password: Password


class UserResponse(BaseModel):
    """Outward view of a user. The password hash is never part of it."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str | None = None
    phone: str | None = None
    nickname: str | None = None
    avatar: str | None = None
    status: int
    created_at: datetime
    updated_at: datetime


class LoginResponse(BaseModel):
    token: str
    user: UserResponse


class TokenResponse(BaseModel):
    token: str
