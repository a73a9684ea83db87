from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import check_permission
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.core.schemas import SuccessResponse
from app.db.session import get_db
from app.db.unit_of_work import UnitOfWork, get_unit_of_work

from .schemas import AcademicYearCreate, AcademicYearResponse, AcademicYearUpdate, AcademicYearWithTerms
from . import service

router = APIRouter(prefix="/api/v1/academic-years", tags=["academic-years"])


@router.post(
    "",
    response_model=SuccessResponse[AcademicYearResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("academic_years", "create"))],
)
async def create_academic_year(
    payload: AcademicYearCreate,
    uow: UnitOfWork = Depends(get_unit_of_work),
    current_user: CurrentUser = Depends(get_current_user),
) -> SuccessResponse[AcademicYearResponse]:
    """Create academic year. Use is_current=true to make it the tenant's only current year."""
    try:
        created = await service.create_academic_year(uow, current_user.tenant_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return SuccessResponse(data=created)


@router.get(
    "",
    response_model=SuccessResponse[List[AcademicYearWithTerms]],
    dependencies=[Depends(check_permission("academic_years", "read"))],
)
async def list_academic_years(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> SuccessResponse[List[AcademicYearWithTerms]]:
    """List academic years of the current tenant with their terms. Admin and teacher."""
    years = await service.list_academic_years(db, current_user.tenant_id)
    return SuccessResponse(data=years)


@router.get(
    "/current",
    response_model=SuccessResponse[Optional[AcademicYearResponse]],
    dependencies=[Depends(check_permission("academic_years", "read"))],
)
async def get_current_academic_year(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> SuccessResponse[Optional[AcademicYearResponse]]:
    """Get the current academic year (is_current=true) for the tenant; data is null when none is set."""
    current = await service.get_current_academic_year(db, current_user.tenant_id)
    return SuccessResponse(data=current)


@router.get(
    "/{academic_year_id}",
    response_model=SuccessResponse[AcademicYearResponse],
    dependencies=[Depends(check_permission("academic_years", "read"))],
)
async def get_academic_year(
    academic_year_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> SuccessResponse[AcademicYearResponse]:
    ay = await service.get_academic_year(db, current_user.tenant_id, academic_year_id)
    if not ay:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Academic year not found")
    return SuccessResponse(data=ay)


@router.put(
    "/{academic_year_id}",
    response_model=SuccessResponse[AcademicYearResponse],
    dependencies=[Depends(check_permission("academic_years", "update"))],
)
async def update_academic_year(
    academic_year_id: UUID,
    payload: AcademicYearUpdate,
    uow: UnitOfWork = Depends(get_unit_of_work),
    current_user: CurrentUser = Depends(get_current_user),
) -> SuccessResponse[AcademicYearResponse]:
    """Update academic year. Refused while the year is locked. Admin only."""
    try:
        updated = await service.update_academic_year(uow, current_user.tenant_id, academic_year_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return SuccessResponse(data=updated)


@router.delete(
    "/{academic_year_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    dependencies=[Depends(check_permission("academic_years", "delete"))],
)
async def delete_academic_year(
    academic_year_id: UUID,
    uow: UnitOfWork = Depends(get_unit_of_work),
    current_user: CurrentUser = Depends(get_current_user),
) -> Response:
    """Delete academic year and its terms. Refused while the year is locked. Admin only."""
    try:
        await service.delete_academic_year(uow, current_user.tenant_id, academic_year_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{academic_year_id}/set-current",
    response_model=SuccessResponse[AcademicYearResponse],
    dependencies=[Depends(check_permission("academic_years", "set_current"))],
)
async def set_academic_year_current(
    academic_year_id: UUID,
    uow: UnitOfWork = Depends(get_unit_of_work),
    current_user: CurrentUser = Depends(get_current_user),
) -> SuccessResponse[AcademicYearResponse]:
    """Set this academic year as current. All others for tenant become non-current. Admin only."""
    try:
        current = await service.set_academic_year_current(uow, current_user.tenant_id, academic_year_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return SuccessResponse(data=current)


@router.post(
    "/{academic_year_id}/lock",
    response_model=SuccessResponse[AcademicYearResponse],
    dependencies=[Depends(check_permission("academic_years", "lock"))],
)
async def lock_academic_year(
    academic_year_id: UUID,
    uow: UnitOfWork = Depends(get_unit_of_work),
    current_user: CurrentUser = Depends(get_current_user),
) -> SuccessResponse[AcademicYearResponse]:
    """Lock the year (administrative close-out). The year and its terms become read-only. Admin only."""
    try:
        locked = await service.lock_academic_year(uow, current_user.tenant_id, academic_year_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return SuccessResponse(data=locked)


@router.post(
    "/{academic_year_id}/unlock",
    response_model=SuccessResponse[AcademicYearResponse],
    dependencies=[Depends(check_permission("academic_years", "unlock"))],
)
async def unlock_academic_year(
    academic_year_id: UUID,
    uow: UnitOfWork = Depends(get_unit_of_work),
    current_user: CurrentUser = Depends(get_current_user),
) -> SuccessResponse[AcademicYearResponse]:
    """Explicitly unlock a locked year. Admin only."""
    try:
        unlocked = await service.unlock_academic_year(uow, current_user.tenant_id, academic_year_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return SuccessResponse(data=unlocked)
