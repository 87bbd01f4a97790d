from .user_service import UserService
from .power_supply_service import PowerSupplyService

__all__ = ["UserService", "PowerSupplyService"]
