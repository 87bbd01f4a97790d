from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class PowerSupplyCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    brand: str = Field(default="", max_length=50)
    model: str = Field(default="", max_length=50)
    power: int = Field(ge=0)
    efficiency: str = Field(default="", max_length=20)
    modular: bool = False
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    stock: int = Field(default=0, ge=0)
    description: str = ""


class PowerSupplyUpdateRequest(BaseModel):
    """
    Sparse patch. Strings apply when non-empty; numbers and `modular` apply
    whenever they are not `None`, so 0 and False are real updates.
    """

    name: str = Field(default="", max_length=100)
    brand: str = Field(default="", max_length=50)
    model: str = Field(default="", max_length=50)
    power: int | None = Field(default=None, ge=0)
    efficiency: str = Field(default="", max_length=20)
    modular: bool | None = None
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    stock: int | None = Field(default=None, ge=0)
    description: str = ""
    status: int | None = Field(default=None, ge=0, le=1)


class PowerSupplyListRequest(BaseModel):
    page: int = 1
    page_size: int = 10
    name: str = ""
    brand: str = ""
    min_power: int | None = Field(default=None, ge=0)
    max_power: int | None = Field(default=None, ge=0)
    min_price: Decimal | None = Field(default=None, ge=0)
    max_price: Decimal | None = Field(default=None, ge=0)
    efficiency: str = ""
    status: int | None = Field(default=None, ge=0, le=1)


class PowerSupplyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    brand: str | None = None
    model: str | None = None
    power: int | None = None
    efficiency: str | None = None
    modular: bool
    price: Decimal | None = None
    stock: int
    description: str | None = None
    status: int
    created_at: datetime
    updated_at: datetime
