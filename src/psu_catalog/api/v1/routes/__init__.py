from fastapi import APIRouter

from . import auth, power_supplies, users

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(power_supplies.router)

__all__ = ["api_router"]
