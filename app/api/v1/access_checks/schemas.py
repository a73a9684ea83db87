from typing import List
from uuid import UUID

from pydantic import BaseModel

from app.core.enums import RelationKind


class AccessCheckRequest(BaseModel):
    """Ask whether the caller holds `relation` to the resource `resource_id`."""

    relation: RelationKind
    resource_id: UUID


class AccessCheckResponse(BaseModel):
    allowed: bool
    relation: RelationKind
    resource_id: UUID


class AccessibleResourcesResponse(BaseModel):
    relation: RelationKind
    resource_ids: List[UUID]
