from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import check_permission
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.core.schemas import SuccessResponse
from app.db.session import get_db
from app.db.unit_of_work import UnitOfWork, get_unit_of_work

from .schemas import TermCreate, TermResponse, TermUpdate
from . import service

router = APIRouter(prefix="/api/v1/terms", tags=["terms"])


@router.get(
    "",
    response_model=SuccessResponse[List[TermResponse]],
    dependencies=[Depends(check_permission("terms", "read"))],
)
async def list_terms(
    academic_year_id: UUID = Query(..., description="Academic year whose terms to list"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> SuccessResponse[List[TermResponse]]:
    """List terms of an academic year, earliest first. Admin and teacher."""
    try:
        terms = await service.list_terms(db, current_user.tenant_id, academic_year_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return SuccessResponse(data=terms)


@router.get(
    "/{term_id}",
    response_model=SuccessResponse[TermResponse],
    dependencies=[Depends(check_permission("terms", "read"))],
)
async def get_term(
    term_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> SuccessResponse[TermResponse]:
    try:
        term = await service.get_term(db, current_user.tenant_id, term_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return SuccessResponse(data=term)


@router.post(
    "",
    response_model=SuccessResponse[TermResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("terms", "create"))],
)
async def create_term(
    payload: TermCreate,
    uow: UnitOfWork = Depends(get_unit_of_work),
    current_user: CurrentUser = Depends(get_current_user),
) -> SuccessResponse[TermResponse]:
    """Create a term inside an unlocked academic year. Admin only."""
    try:
        created = await service.create_term(uow, current_user.tenant_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return SuccessResponse(data=created)


@router.put(
    "/{term_id}",
    response_model=SuccessResponse[TermResponse],
    dependencies=[Depends(check_permission("terms", "update"))],
)
async def update_term(
    term_id: UUID,
    payload: TermUpdate,
    uow: UnitOfWork = Depends(get_unit_of_work),
    current_user: CurrentUser = Depends(get_current_user),
) -> SuccessResponse[TermResponse]:
    """Update a term. Refused when the term or its academic year is locked. Admin only."""
    try:
        updated = await service.update_term(uow, current_user.tenant_id, term_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return SuccessResponse(data=updated)


@router.delete(
    "/{term_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    dependencies=[Depends(check_permission("terms", "delete"))],
)
async def delete_term(
    term_id: UUID,
    uow: UnitOfWork = Depends(get_unit_of_work),
    current_user: CurrentUser = Depends(get_current_user),
) -> Response:
    try:
        await service.delete_term(uow, current_user.tenant_id, term_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{term_id}/lock",
    response_model=SuccessResponse[TermResponse],
    dependencies=[Depends(check_permission("terms", "lock"))],
)
async def lock_term(
    term_id: UUID,
    uow: UnitOfWork = Depends(get_unit_of_work),
    current_user: CurrentUser = Depends(get_current_user),
) -> SuccessResponse[TermResponse]:
    try:
        locked = await service.lock_term(uow, current_user.tenant_id, term_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return SuccessResponse(data=locked)


@router.post(
    "/{term_id}/unlock",
    response_model=SuccessResponse[TermResponse],
    dependencies=[Depends(check_permission("terms", "unlock"))],
)
async def unlock_term(
    term_id: UUID,
    uow: UnitOfWork = Depends(get_unit_of_work),
    current_user: CurrentUser = Depends(get_current_user),
) -> SuccessResponse[TermResponse]:
    try:
        unlocked = await service.unlock_term(uow, current_user.tenant_id, term_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return SuccessResponse(data=unlocked)
