from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class TermCreate(BaseModel):
    """Create a term inside an academic year of the caller's tenant."""

    academic_year_id: UUID
    name: str = Field(..., min_length=1, max_length=50, description="e.g. Autumn")
    start_date: date
    end_date: date = Field(..., description="Must be after start_date and inside the academic year")
    is_locked: bool = Field(False, description="Create the term already locked")

    class Config:
        str_strip_whitespace = True


class TermUpdate(BaseModel):
    """Partial update. Lock state changes only through the lock/unlock actions."""

    name: Optional[str] = Field(None, min_length=1, max_length=50)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    class Config:
        str_strip_whitespace = True


class TermResponse(BaseModel):
    id: UUID
    academic_year_id: UUID
    name: str
    start_date: date
    end_date: date
    is_locked: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
