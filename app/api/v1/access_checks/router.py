from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import ownership
from app.auth.dependencies import get_current_user
from app.auth.rbac import check_permission
from app.auth.schemas import CurrentUser
from app.core.enums import RelationKind
from app.core.exceptions import ServiceError
from app.core.schemas import SuccessResponse
from app.db.session import get_db

from .schemas import AccessCheckRequest, AccessCheckResponse, AccessibleResourcesResponse

router = APIRouter(prefix="/api/v1/access-checks", tags=["access-checks"])


@router.post(
    "",
    response_model=SuccessResponse[AccessCheckResponse],
    dependencies=[Depends(check_permission("access_checks", "read"))],
)
async def check_access(
    payload: AccessCheckRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> SuccessResponse[AccessCheckResponse]:
    """Allow/deny for one resource instance. Denied and nonexistent resources both answer 403."""
    try:
        await ownership.verify_access(db, current_user, payload.resource_id, payload.relation)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return SuccessResponse(
        data=AccessCheckResponse(allowed=True, relation=payload.relation, resource_id=payload.resource_id)
    )


@router.get(
    "/{relation}",
    response_model=SuccessResponse[AccessibleResourcesResponse],
    dependencies=[Depends(check_permission("access_checks", "read"))],
)
async def list_accessible_resources(
    relation: RelationKind,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> SuccessResponse[AccessibleResourcesResponse]:
    """Resource ids the caller holds the relation to, e.g. a parent's children."""
    try:
        ids = await ownership.accessible_resource_ids(db, current_user, relation)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return SuccessResponse(data=AccessibleResourcesResponse(relation=relation, resource_ids=ids))
