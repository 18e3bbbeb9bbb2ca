"""
Common response schemas and validator helpers
"""
import re
from pydantic import BaseModel
from typing import Any, Generic, TypeVar, Optional, List

T = TypeVar("T")


class ResponseBase(BaseModel):
    success: bool
    message: str


class DataResponse(ResponseBase, Generic[T]):
    data: Optional[T] = None


class PaginationResponse(ResponseBase, Generic[T]):
    data: List[T]
    total: int
    page: int
    size: int
    pages: int


def fix_pg_timezone(v: Any) -> Any:
    """
    Fix datetime timezone format from PostgreSQL
    PostgreSQL returns: '2025-10-01 09:17:39.587802+00'
    Pydantic expects: '2025-10-01 09:17:39.587802+00:00'
    """
    if v == '' or v is None:
        return None

    if isinstance(v, str):
        # Match timezone like +00, +07, -05 at the end
        if re.search(r'([+-]\d{2})$', v):
            v = v + ':00'

    return v
