from .common import ApiResponse, SUCCESS_CODE, SUCCESS_MESSAGE
from .query_options import PowerSupplyQueryOptions, UserQueryOptions
from .user import (
    LoginRequest,
    LoginResponse,
    TokenResponse,
    UserCreateRequest,
    UserListRequest,
    UserResponse,
    UserUpdateRequest,
)
from .power_supply import (
    PowerSupplyCreateRequest,
    PowerSupplyListRequest,
    PowerSupplyResponse,
    PowerSupplyUpdateRequest,
)

__all__ = [
    "ApiResponse",
    "SUCCESS_CODE",
    "SUCCESS_MESSAGE",
    "UserQueryOptions",
    "PowerSupplyQueryOptions",
    "LoginRequest",
    "LoginResponse",
    "TokenResponse",
    "UserCreateRequest",
    "UserListRequest",
    "UserResponse",
    "UserUpdateRequest",
    "PowerSupplyCreateRequest",
    "PowerSupplyListRequest",
    "PowerSupplyResponse",
    "PowerSupplyUpdateRequest",
]
