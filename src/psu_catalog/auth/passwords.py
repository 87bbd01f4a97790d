"""Password hashing with bcrypt."""

import bcrypt

from psu_catalog.exceptions.base import InvalidParamError

DEFAULT_ROUNDS = 12
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """
    Hash and verify passwords with bcrypt.

    `rounds` is the bcrypt work factor (log2 of iterations). 12 is the
    production default; tests use the minimum (4) to stay fast.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self._rounds = rounds

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash(self, password: str) -> str:
        """
        Raises:
            InvalidParamError: the password is longer than bcrypt's 72-byte input limit.
        """
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise InvalidParamError(
                f"password must be at most {MAX_PASSWORD_BYTES} bytes in UTF-8",
                fields=["password"],
            )
        salt = bcrypt.gensalt(rounds=self._rounds)
        hashed = bcrypt.hashpw(encoded, salt)
        return hashed.decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time comparison; a malformed hash is a mismatch, not an error."""
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"),
                password_hash.encode("utf-8"),
            )
        except (ValueError, TypeError):
            return False
