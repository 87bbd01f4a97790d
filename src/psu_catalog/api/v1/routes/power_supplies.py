from typing import Annotated

from fastapi import APIRouter, Depends, Query

from psu_catalog.api.deps import PowerSupplyServiceDep, get_current_claims
from psu_catalog.api.v1.responses import page, success
from psu_catalog.schemas.power_supply import (
    PowerSupplyCreateRequest,
    PowerSupplyListRequest,
    PowerSupplyResponse,
    PowerSupplyUpdateRequest,
)
from psu_catalog.utils.pagination import get_page_info

router = APIRouter(
    prefix="/powers",
    tags=["power supplies"],
    dependencies=[Depends(get_current_claims)],
)


@router.get("")
async def list_power_supplies(
    params: Annotated[PowerSupplyListRequest, Query()],
    service: PowerSupplyServiceDep,
):
    items, total = await service.list_power_supplies(params)
    page_number, size = get_page_info(params.page, params.page_size)
    return page([PowerSupplyResponse.model_validate(p) for p in items], total, page_number, size)


@router.post("")
async def create_power_supply(payload: PowerSupplyCreateRequest, service: PowerSupplyServiceDep):
    power_supply = await service.create(payload)
    return success(PowerSupplyResponse.model_validate(power_supply))


@router.get("/{power_supply_id}")
async def get_power_supply(power_supply_id: int, service: PowerSupplyServiceDep):
    power_supply = await service.get_by_id(power_supply_id)
    return success(PowerSupplyResponse.model_validate(power_supply))


@router.put("/{power_supply_id}")
async def update_power_supply(
    power_supply_id: int,
    payload: PowerSupplyUpdateRequest,
    service: PowerSupplyServiceDep,
):
    power_supply = await service.update(power_supply_id, payload)
    return success(PowerSupplyResponse.model_validate(power_supply))


@router.delete("/{power_supply_id}")
async def delete_power_supply(power_supply_id: int, service: PowerSupplyServiceDep):
    await service.delete(power_supply_id)
    return success()
