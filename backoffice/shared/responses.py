"""Response envelopes shared by routers."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Single-object success envelope."""

    success: bool = True
    data: T


class DataResponse(BaseModel, Generic[T]):
    """Read-only payload envelope."""

    data: T
