from sqlalchemy import Integer, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from psu_catalog.database.base import Base, TimestampMixin


class User(TimestampMixin, Base):
    """
    SQLAlchemy model for User.

    Represents an account with credentials and profile information.
    Username and email uniqueness is enforced by unique indexes.
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True
    )

    username: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        index=True,
        nullable=False
    )

    # Nullable: several NULLs never collide on a unique index
    email: Mapped[str | None] = mapped_column(
        String(100),
        unique=True,
        index=True,
        nullable=True
    )

    # Hashed password (never store plain-text passwords)
    hashed_password: Mapped[str] = mapped_column(
        String(255),    # Can handle long hashes like bcrypt
        nullable=False
    )

    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    nickname: Mapped[str | None] = mapped_column(String(50), nullable=True)
    avatar: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # 1 = enabled, 0 = disabled
    status: Mapped[int] = mapped_column(
        SmallInteger,
        default=1,
        server_default="1",
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id!r}, username={self.username!r}, email={self.email!r})>"
