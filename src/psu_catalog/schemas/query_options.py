"""
Per-resource list/count criteria passed from services to repositories.

`None` on an optional field means "no filter". It is distinct from 0, False
and "", which are real values to filter on (except for the LIKE fields, where
an empty string is treated as absent).
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class UserQueryOptions:
    username: str = ""
    email: str = ""
    status: int | None = None
    page: int = 1
    page_size: int = 10


@dataclass(frozen=True)
class PowerSupplyQueryOptions:
    name: str = ""
    brand: str = ""
    min_power: int | None = None
    max_power: int | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    efficiency: str = ""
    status: int | None = None
    page: int = 1
    page_size: int = 10
