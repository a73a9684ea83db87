from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from app.core.config import settings


def create_access_token(
    *, subject: Dict, expires_minutes: Optional[int] = None
) -> str:
    """Mint a token in the identity provider's format. Used by local tooling and tests."""
    if expires_minutes is None:
        expires_minutes = settings.access_token_expire_minutes

    to_encode = subject.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(
        to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm
    )
    return encoded_jwt


def decode_subject(token: str) -> Optional[str]:
    """Return the external identity id (``sub``) of a valid token, or None."""
    try:
        payload: Dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None
    subject = payload.get("sub")
    if not subject or not isinstance(subject, str):
        return None
    return subject
