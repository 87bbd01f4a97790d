from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

SUCCESS_CODE = 0
SUCCESS_MESSAGE = "success"


class ApiResponse(BaseModel, Generic[T]):
    """Envelope for every JSON response: {"code": 0, "message": "success", "data": ...}"""

    code: int = SUCCESS_CODE
    message: str = SUCCESS_MESSAGE
    data: T | None = None
