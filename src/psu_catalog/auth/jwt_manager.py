"""
JWT issuing and verification (HS256).

Tokens carry the user id in `sub` and the username in a `username` claim.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from psu_catalog.exceptions.base import InvalidTokenError, TokenExpiredError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    username: str
    expires_at: datetime


class JWTManager:
    ALGORITHM = "HS256"
    DEFAULT_EXPIRE_HOURS = 24

    def __init__(self, secret: str, expire_hours: int = DEFAULT_EXPIRE_HOURS):
        if not secret:
            raise ValueError("JWT secret cannot be empty")
        self._secret = secret
        self._expire = timedelta(hours=expire_hours)

    def issue_token(self, user_id: int, username: str, expires_delta: timedelta | None = None) -> str:
        now = datetime.now(tz=timezone.utc)
        payload = {
            "sub": str(user_id),
            "username": username,
            "iat": now,
            "nbf": now,
            "exp": now + (expires_delta if expires_delta is not None else self._expire),
        }
        return jwt.encode(payload, self._secret, algorithm=self.ALGORITHM)

    def parse_token(self, token: str) -> TokenClaims:
        """
        Verify signature, algorithm and expiry, then return the claims.

        Raises:
            TokenExpiredError: the token was valid but `exp` has passed.
            InvalidTokenError: anything else (bad signature, wrong algorithm,
                missing or malformed claims).
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.ALGORITHM],
                options={"require": ["exp", "sub"]},
            )
            return TokenClaims(
                user_id=int(payload["sub"]),
                username=payload["username"],
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        # ExpiredSignatureError is a subclass of jwt.InvalidTokenError: check it first
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError(cause=e) from e
        except jwt.InvalidTokenError as e:
            logger.info("auth.token.invalid", extra={"reason": type(e).__name__})
            raise InvalidTokenError(cause=e) from e
        except (KeyError, ValueError, TypeError) as e:
            logger.info("auth.token.malformed_claims", extra={"reason": type(e).__name__})
            raise InvalidTokenError(cause=e) from e

    def refresh_token(self, token: str) -> str:
        """Re-issue a token with a fresh expiry for the same subject. Expired tokens are rejected."""
        claims = self.parse_token(token)
        return self.issue_token(claims.user_id, claims.username)
