from typing import Any, Sequence

from pydantic import BaseModel

from psu_catalog.schemas.common import ApiResponse


def _dump(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    return data


def success(data: Any = None) -> dict:
    """{"code": 0, "message": "success", "data": ...}"""
    return ApiResponse[Any](data=_dump(data)).model_dump(mode="json")


def page(items: Sequence[Any], total: int, page_number: int, size: int) -> dict:
    """Paged listing: data = {"list": [...], "total": n, "page": p, "size": s}"""
    return success(
        {
            "list": [_dump(item) for item in items],
            "total": total,
            "page": page_number,
            "size": size,
        }
    )
