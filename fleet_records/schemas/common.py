# fleet_records/schemas/common.py
"""Shared field types, pagination envelope and list-query parameters."""

from pydantic import BaseModel, Field
from typing import Annotated, Optional

NonNegativeInt = Annotated[int, Field(ge=0)]
NonNegativeFloat = Annotated[float, Field(ge=0)]
TirePressure = Annotated[float, Field(ge=0, le=200)]   # PSI


class PageRequest(BaseModel):
    page: int = 1
    limit: Optional[int] = None       # None -> entity default page size
    sort_by: Optional[str] = None     # unknown values fall back to the default column
    order: Optional[str] = None       # "asc" | "desc"; None -> entity default


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
