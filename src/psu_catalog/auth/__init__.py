from .jwt_manager import JWTManager, TokenClaims
from .passwords import PasswordHasher

__all__ = ["JWTManager", "TokenClaims", "PasswordHasher"]
