from decimal import Decimal

from sqlalchemy import Boolean, Integer, Numeric, SmallInteger, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column

from psu_catalog.database.base import Base, TimestampMixin


class PowerSupply(TimestampMixin, Base):
    """
    SQLAlchemy model for a power-supply-unit catalog entry.

    No uniqueness constraints: the same brand/model may be listed several times.
    """
    __tablename__ = "power_supplies"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    brand: Mapped[str | None] = mapped_column(String(50), index=True, nullable=True)
    model: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Rated wattage
    power: Mapped[int | None] = mapped_column(Integer, index=True, nullable=True)

    # Certification label, e.g. "80 Plus Gold"
    efficiency: Mapped[str | None] = mapped_column(String(20), nullable=True)

    modular: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=false(),
        nullable=False
    )

    price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

    stock: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default="0",
        nullable=False
    )

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # 1 = listed, 0 = unlisted
    status: Mapped[int] = mapped_column(
        SmallInteger,
        default=1,
        server_default="1",
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<PowerSupply(id={self.id!r}, name={self.name!r}, power={self.power!r})>"
