"""Fixtures for service tests."""

import pytest

from psu_catalog.auth.passwords import PasswordHasher
from psu_catalog.models.user import User
from psu_catalog.repositories.power_supply_repository import PowerSupplyRepository
from psu_catalog.repositories.user_repository import UserRepository
from psu_catalog.schemas.user import UserCreateRequest
from psu_catalog.services.power_supply_service import PowerSupplyService
from psu_catalog.services.user_service import UserService


@pytest.fixture
def password_hasher() -> PasswordHasher:
    # minimum bcrypt work factor keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
async def user_service(user_repository: UserRepository, password_hasher: PasswordHasher) -> UserService:
    return UserService(user_repository, password_hasher)


@pytest.fixture
async def power_supply_service(power_supply_repository: PowerSupplyRepository) -> PowerSupplyService:
    return PowerSupplyService(power_supply_repository)


@pytest.fixture
async def registered_user(user_service: UserService) -> User:
    """A user registered through the service, password "secret123"."""
    return await user_service.create(
        UserCreateRequest(
            username="alice",
            password="secret123",
            email="alice@example.com",
            nickname="Alice",
        )
    )
