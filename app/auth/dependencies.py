import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.auth.directory import resolve_actor
from app.auth.schemas import CurrentUser
from app.auth.security import decode_subject
from app.db.session import get_session_factory

logger = logging.getLogger("records.auth")

# Tokens come from the external identity provider; tokenUrl only documents where to obtain one.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/oauth/token", auto_error=False)


async def get_optional_user(
    token: Optional[str] = Depends(oauth2_scheme),
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> Optional[CurrentUser]:
    """Resolve the actor behind the bearer token, or None when no actor identity is resolvable."""
    if not token:
        return None
    external_id = decode_subject(token)
    if external_id is None:
        return None
    # Short-lived session: the directory read must not hold a transaction open while the request writes.
    async with session_factory() as db:
        actor = await resolve_actor(db, external_id)
    if actor is None:
        logger.info("No active directory entry for identity %s", external_id)
    return actor


async def get_current_user(
    actor: Optional[CurrentUser] = Depends(get_optional_user),
) -> CurrentUser:
    if actor is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return actor
