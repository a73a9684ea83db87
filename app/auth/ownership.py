"""
OwnershipVerifier: does an actor hold a specific relation to one resource instance?

Each relation kind is a small predicate that builds the query of resource ids related to an actor inside
its tenant. The facade composes it into a single EXISTS check, or lists the ids for the actor. A missing
resource and a resource owned by someone else produce the same answer.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.schemas import CurrentUser
from app.core.enums import RelationKind, Role
from app.core.exceptions import ForbiddenError
from app.core.models import Lesson, SchoolClass, Student, StudentResult

logger = logging.getLogger("records.auth")

ACCESS_DENIED_MESSAGE = "You do not have permission to access this resource"


@dataclass(frozen=True)
class RelationPolicy:
    subject_role: Role
    # (tenant_id, actor_id) -> select of a single resource id column
    related_ids: Callable[[UUID, UUID], Select]


def _teacher_lessons(tenant_id: UUID, actor_id: UUID) -> Select:
    return select(Lesson.id).where(Lesson.tenant_id == tenant_id, Lesson.teacher_id == actor_id)


def _teacher_classes(tenant_id: UUID, actor_id: UUID) -> Select:
    return select(SchoolClass.id).where(SchoolClass.tenant_id == tenant_id, SchoolClass.supervisor_id == actor_id)


def _parent_students(tenant_id: UUID, actor_id: UUID) -> Select:
    return select(Student.id).where(Student.tenant_id == tenant_id, Student.parent_id == actor_id)


def _student_records(tenant_id: UUID, actor_id: UUID) -> Select:
    return (
        select(StudentResult.id)
        .join(Student, Student.id == StudentResult.student_id)
        .where(StudentResult.tenant_id == tenant_id, Student.user_id == actor_id)
    )


def _student_classes(tenant_id: UUID, actor_id: UUID) -> Select:
    return select(Student.class_id).where(
        Student.tenant_id == tenant_id,
        Student.user_id == actor_id,
        Student.class_id.is_not(None),
    )


POLICIES: Dict[RelationKind, RelationPolicy] = {
    RelationKind.TEACHER_OWNS_LESSON: RelationPolicy(Role.TEACHER, _teacher_lessons),
    RelationKind.TEACHER_SUPERVISES_CLASS: RelationPolicy(Role.TEACHER, _teacher_classes),
    RelationKind.PARENT_OWNS_STUDENT: RelationPolicy(Role.PARENT, _parent_students),
    RelationKind.STUDENT_OWNS_RECORD: RelationPolicy(Role.STUDENT, _student_records),
    RelationKind.STUDENT_IN_CLASS: RelationPolicy(Role.STUDENT, _student_classes),
}


async def verify(
    db: AsyncSession,
    tenant_id: UUID,
    actor_id: UUID,
    resource_id: UUID,
    relation: RelationKind,
) -> bool:
    """One targeted existence check for the relation between actor and resource."""
    related = POLICIES[relation].related_ids(tenant_id, actor_id)
    column = related.selected_columns[0]
    found = await db.scalar(select(related.where(column == resource_id).exists()))
    return bool(found)


async def can_access(db: AsyncSession, actor: CurrentUser, resource_id: UUID, relation: RelationKind) -> bool:
    if actor.role is not POLICIES[relation].subject_role:
        return False
    return await verify(db, actor.tenant_id, actor.id, resource_id, relation)


async def verify_access(db: AsyncSession, actor: CurrentUser, resource_id: UUID, relation: RelationKind) -> None:
    """Raise ForbiddenError unless the relation holds. Nonexistent resources are reported the same way."""
    if not await can_access(db, actor, resource_id, relation):
        logger.info("Ownership check %s failed for actor %s", relation.value, actor.id)
        raise ForbiddenError(ACCESS_DENIED_MESSAGE)


async def accessible_resource_ids(db: AsyncSession, actor: CurrentUser, relation: RelationKind) -> List[UUID]:
    """All resource ids the actor holds the relation to (e.g. a parent's children)."""
    policy = POLICIES[relation]
    if actor.role is not policy.subject_role:
        raise ForbiddenError(ACCESS_DENIED_MESSAGE)
    result = await db.execute(policy.related_ids(actor.tenant_id, actor.id))
    return [row[0] for row in result.all()]
