from typing import Generic, TypeVar

from pydantic import BaseModel

DataT = TypeVar("DataT")


class SuccessResponse(BaseModel, Generic[DataT]):
    """Envelope for successful responses: {"success": true, "data": ...}."""

    success: bool = True
    data: DataT


class ErrorResponse(BaseModel):
    error: str
