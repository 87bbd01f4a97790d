from typing import Annotated

from fastapi import APIRouter, Depends, Query

from psu_catalog.api.deps import UserServiceDep, get_current_claims
from psu_catalog.api.v1.responses import page, success
from psu_catalog.schemas.user import UserListRequest, UserResponse, UserUpdateRequest
from psu_catalog.utils.pagination import get_page_info

router = APIRouter(
    prefix="/users",
    tags=["users"],
    dependencies=[Depends(get_current_claims)],
)


@router.get("")
async def list_users(params: Annotated[UserListRequest, Query()], service: UserServiceDep):
    users, total = await service.list_users(params)
    page_number, size = get_page_info(params.page, params.page_size)
    return page([UserResponse.model_validate(u) for u in users], total, page_number, size)


@router.get("/{user_id}")
async def get_user(user_id: int, service: UserServiceDep):
    user = await service.get_by_id(user_id)
    return success(UserResponse.model_validate(user))


@router.put("/{user_id}")
async def update_user(user_id: int, payload: UserUpdateRequest, service: UserServiceDep):
    user = await service.update(user_id, payload)
    return success(UserResponse.model_validate(user))


@router.delete("/{user_id}")
async def delete_user(user_id: int, service: UserServiceDep):
    await service.delete(user_id)
    return success()
