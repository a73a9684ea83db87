"""
AuthorizationGate: one static table of required roles per operation and a pure decision function.

Every route declares its operation with ``Depends(check_permission(module, action))``; the check runs
before the handler loads anything, so ineligible actors never learn whether a resource exists.
"""

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Optional, Tuple

from fastapi import Depends, HTTPException, status

from app.auth.dependencies import get_optional_user
from app.auth.schemas import CurrentUser
from app.core.enums import DenyKind, Role

logger = logging.getLogger("records.auth")

ADMIN_ONLY: FrozenSet[Role] = frozenset({Role.ADMIN})
STAFF: FrozenSet[Role] = frozenset({Role.ADMIN, Role.TEACHER})
ANY_ROLE: FrozenSet[Role] = frozenset(Role)

_CALENDAR_ACTIONS: Dict[str, FrozenSet[Role]] = {
    "read": STAFF,
    "create": ADMIN_ONLY,
    "update": ADMIN_ONLY,
    "delete": ADMIN_ONLY,
    "lock": ADMIN_ONLY,
    "unlock": ADMIN_ONLY,
}

REQUIRED_ROLES: Dict[Tuple[str, str], FrozenSet[Role]] = {
    **{("academic_years", action): roles for action, roles in _CALENDAR_ACTIONS.items()},
    ("academic_years", "set_current"): ADMIN_ONLY,
    **{("terms", action): roles for action, roles in _CALENDAR_ACTIONS.items()},
    ("access_checks", "read"): ANY_ROLE,
}


@dataclass(frozen=True)
class Decision:
    allowed: bool
    kind: Optional[DenyKind] = None


ALLOW = Decision(allowed=True)


def authorize(actor_role: Optional[Role], required_roles: Iterable[Role]) -> Decision:
    """Allow when the actor's role is in required_roles. No actor means Unauthenticated."""
    if actor_role is None:
        return Decision(allowed=False, kind=DenyKind.UNAUTHENTICATED)
    if actor_role not in frozenset(required_roles):
        return Decision(allowed=False, kind=DenyKind.FORBIDDEN)
    return ALLOW


def required_roles_for(module: str, action: str) -> FrozenSet[Role]:
    try:
        return REQUIRED_ROLES[(module, action)]
    except KeyError:
        raise LookupError(f"No role requirement declared for {module}:{action}") from None


def check_permission(module: str, action: str):
    """
    Dependency factory to enforce the role requirement of one operation.

    Example:
        Depends(check_permission("academic_years", "create"))
    """
    required = required_roles_for(module, action)

    async def _checker(actor: Optional[CurrentUser] = Depends(get_optional_user)) -> Optional[CurrentUser]:
        decision = authorize(actor.role if actor else None, required)
        if decision.kind is DenyKind.UNAUTHENTICATED:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Could not validate credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )
        if decision.kind is DenyKind.FORBIDDEN:
            logger.info("Denied %s:%s for actor %s (role %s)", module, action, actor.id, actor.role.value)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return actor

    return _checker
