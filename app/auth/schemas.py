from uuid import UUID

from pydantic import BaseModel

from app.core.enums import Role


class CurrentUser(BaseModel):
    """Lightweight representation of the resolved actor for authorization and ownership checks."""

    id: UUID
    tenant_id: UUID
    external_identity_id: str
    role: Role
