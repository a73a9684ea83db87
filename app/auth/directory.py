"""User directory: external identity -> internal actor."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.auth.schemas import CurrentUser
from app.core.enums import Role, UserStatus


async def resolve_actor(db: AsyncSession, external_identity_id: str) -> Optional[CurrentUser]:
    """Return the active actor for an identity provider subject, or None when the directory has no match."""
    result = await db.execute(select(User).where(User.external_identity_id == external_identity_id))
    user = result.scalar_one_or_none()
    if not user or user.status != UserStatus.ACTIVE.value:
        return None
    try:
        role = Role(user.role)
    except ValueError:
        return None
    return CurrentUser(
        id=user.id,
        tenant_id=user.tenant_id,
        external_identity_id=user.external_identity_id,
        role=role,
    )
