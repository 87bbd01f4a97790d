from .base_repository import BaseRepository
from .user_repository import UserRepository
from .power_supply_repository import PowerSupplyRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "PowerSupplyRepository",
]
