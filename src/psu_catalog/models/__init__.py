"""
Single import point for every ORM model, so that `Base.metadata` knows all
tables once this package is imported:

    from psu_catalog.models import User, PowerSupply
"""

from .user import User
from .power_supply import PowerSupply

__all__ = [
    "User",
    "PowerSupply",
]
