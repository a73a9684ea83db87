from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.api.v1.terms.schemas import TermResponse


class AcademicYearCreate(BaseModel):
    """Create academic year for the caller's tenant."""

    name: str = Field(..., min_length=1, max_length=50, description="e.g. 2025-2026")
    start_date: date = Field(..., description="Academic year start date")
    end_date: date = Field(..., description="Academic year end date (must be after start_date)")
    is_current: bool = Field(
        False,
        description="Set this year as current? If true, all other years of the tenant become non-current.",
    )
    is_locked: bool = Field(False, description="Create the year already locked")

    class Config:
        str_strip_whitespace = True


class AcademicYearUpdate(BaseModel):
    """Update academic year. Refused while the year is locked."""

    name: Optional[str] = Field(None, min_length=1, max_length=50)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_current: Optional[bool] = None

    class Config:
        str_strip_whitespace = True


class AcademicYearResponse(BaseModel):
    id: UUID
    tenant_id: UUID
    name: str
    start_date: date
    end_date: date
    is_current: bool
    is_locked: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AcademicYearWithTerms(AcademicYearResponse):
    terms: List[TermResponse] = Field(default_factory=list)
