import logging

from sqlalchemy.ext.asyncio import AsyncSession

from psu_catalog.models.power_supply import PowerSupply
from psu_catalog.schemas.query_options import PowerSupplyQueryOptions

from .base_repository import BaseRepository
from .query import (
    Filter,
    equals_if,
    equals_if_present,
    gte_if_present,
    like,
    lte_if_present,
    order_by_desc,
    paginate,
)

logger = logging.getLogger(__name__)


class PowerSupplyRepository(BaseRepository[PowerSupply]):
    """Repository for the power-supply catalog."""

    resource_name = "power supply"

    def __init__(self, db: AsyncSession, *, query_timeout: float | None = None):
        super().__init__(PowerSupply, db, query_timeout=query_timeout)

    @staticmethod
    def option_filters(options: PowerSupplyQueryOptions) -> list[Filter]:
        return [
            like("name", options.name),
            like("brand", options.brand),
            gte_if_present("power", options.min_power),
            lte_if_present("power", options.max_power),
            gte_if_present("price", options.min_price),
            lte_if_present("price", options.max_price),
            # efficiency is a certification label: exact match, "" = any
            equals_if(options.efficiency != "", "efficiency", options.efficiency),
            equals_if_present("status", options.status),
        ]

    async def list_by_options(self, options: PowerSupplyQueryOptions) -> list[PowerSupply]:
        """One page of catalog entries matching `options`, newest id first."""
        items = await self.get_all(
            *self.option_filters(options),
            order_by_desc("id"),
            paginate(options.page, options.page_size),
        )
        logger.debug(
            "power_supply_repo.list_by_options",
            extra={"page": options.page, "page_size": options.page_size, "count": len(items)},
        )
        return items

    async def count_by_options(self, options: PowerSupplyQueryOptions) -> int:
        return await self.count(*self.option_filters(options))
