import logging
from typing import Any

from psu_catalog.models.power_supply import PowerSupply
from psu_catalog.repositories.power_supply_repository import PowerSupplyRepository
from psu_catalog.schemas.power_supply import (
    PowerSupplyCreateRequest,
    PowerSupplyListRequest,
    PowerSupplyUpdateRequest,
)
from psu_catalog.schemas.query_options import PowerSupplyQueryOptions
from psu_catalog.utils.pagination import get_page_info

logger = logging.getLogger(__name__)

STATUS_LISTED = 1

_STRING_FIELDS = ("name", "brand", "model", "efficiency", "description")
_OPTIONAL_FIELDS = ("power", "modular", "price", "stock", "status")


class PowerSupplyService:
    """Catalog management for power supply units."""

    def __init__(self, repository: PowerSupplyRepository):
        self.repository = repository

    async def create(self, request: PowerSupplyCreateRequest) -> PowerSupply:
        """New entries are always listed (status = 1)."""
        power_supply = PowerSupply(
            name=request.name,
            brand=request.brand,
            model=request.model,
            power=request.power,
            efficiency=request.efficiency,
            modular=request.modular,
            price=request.price,
            stock=request.stock,
            description=request.description,
            status=STATUS_LISTED,
        )
        power_supply = await self.repository.create(power_supply)
        logger.info(
            "power_supply.create.success",
            extra={"power_supply_id": power_supply.id, "power_supply_name": power_supply.name},
        )
        return power_supply

    async def get_by_id(self, power_supply_id: int) -> PowerSupply:
        return await self.repository.get_by_id(power_supply_id)

    async def update(self, power_supply_id: int, request: PowerSupplyUpdateRequest) -> PowerSupply:
        """
        Sparse patch. Strings are written when non-empty; power, modular, price,
        stock and status whenever they are not None (0 and False included).
        """
        power_supply = await self.repository.get_by_id(power_supply_id)

        updates: dict[str, Any] = {}
        for field in _STRING_FIELDS:
            value = getattr(request, field)
            if value != "":
                updates[field] = value
        for field in _OPTIONAL_FIELDS:
            value = getattr(request, field)
            if value is not None:
                updates[field] = value

        if not updates:
            return power_supply

        await self.repository.update(power_supply, updates)
        return await self.repository.get_by_id(power_supply_id)

    async def delete(self, power_supply_id: int) -> None:
        await self.repository.delete(power_supply_id)
        logger.info("power_supply.delete.success", extra={"power_supply_id": power_supply_id})

    @staticmethod
    def _query_options(request: PowerSupplyListRequest) -> PowerSupplyQueryOptions:
        page, page_size = get_page_info(request.page, request.page_size)
        return PowerSupplyQueryOptions(
            name=request.name,
            brand=request.brand,
            min_power=request.min_power,
            max_power=request.max_power,
            min_price=request.min_price,
            max_price=request.max_price,
            efficiency=request.efficiency,
            status=request.status,
            page=page,
            page_size=page_size,
        )

    async def list_power_supplies(self, request: PowerSupplyListRequest) -> tuple[list[PowerSupply], int]:
        options = self._query_options(request)
        total = await self.repository.count_by_options(options)
        items = await self.repository.list_by_options(options)
        return items, total

    async def count(self, request: PowerSupplyListRequest) -> int:
        return await self.repository.count_by_options(self._query_options(request))
