from uuid import uuid4

import pytest
from httpx import AsyncClient

from app.core.enums import Role
from app.core.models import Lesson, SchoolClass, Student, StudentResult

BASE = "/api/v1/access-checks"
DENIED = {"error": "You do not have permission to access this resource"}


@pytest.fixture()
async def roster(seed, tenant, teacher):
    """One class supervised by `teacher`, one lesson, one student with a parent and one result."""
    student_user = await seed.user(tenant, Role.STUDENT)
    parent_user = await seed.user(tenant, Role.PARENT)
    school_class = await seed.add(SchoolClass(tenant_id=tenant.id, name="5A", supervisor_id=teacher.id))
    lesson = await seed.add(
        Lesson(tenant_id=tenant.id, class_id=school_class.id, teacher_id=teacher.id, name="Mathematics")
    )
    student = await seed.add(
        Student(tenant_id=tenant.id, user_id=student_user.id, parent_id=parent_user.id, class_id=school_class.id)
    )
    result = await seed.add(StudentResult(tenant_id=tenant.id, student_id=student.id, score=87))
    return {
        "student_user": student_user,
        "parent_user": parent_user,
        "class": school_class,
        "lesson": lesson,
        "student": student,
        "result": result,
    }


async def _check(client: AsyncClient, headers, relation: str, resource_id):
    return await client.post(BASE, json={"relation": relation, "resource_id": str(resource_id)}, headers=headers)


@pytest.mark.asyncio
async def test_teacher_owns_lesson(client: AsyncClient, teacher_headers, roster) -> None:
    response = await _check(client, teacher_headers, "teacher_owns_lesson", roster["lesson"].id)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["allowed"] is True
    assert data["resource_id"] == str(roster["lesson"].id)


@pytest.mark.asyncio
async def test_teacher_supervises_class(client: AsyncClient, teacher_headers, roster) -> None:
    response = await _check(client, teacher_headers, "teacher_supervises_class", roster["class"].id)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_other_teacher_is_denied(client: AsyncClient, seed, tenant, headers_for, roster) -> None:
    other = await seed.user(tenant, Role.TEACHER)
    response = await _check(client, headers_for(other), "teacher_owns_lesson", roster["lesson"].id)
    assert response.status_code == 403
    assert response.json() == DENIED


@pytest.mark.asyncio
async def test_parent_owns_student(client: AsyncClient, headers_for, roster) -> None:
    headers = headers_for(roster["parent_user"])
    assert (await _check(client, headers, "parent_owns_student", roster["student"].id)).status_code == 200


@pytest.mark.asyncio
async def test_student_owns_record(client: AsyncClient, headers_for, roster) -> None:
    headers = headers_for(roster["student_user"])
    assert (await _check(client, headers, "student_owns_record", roster["result"].id)).status_code == 200


@pytest.mark.asyncio
async def test_student_in_class(client: AsyncClient, headers_for, roster) -> None:
    headers = headers_for(roster["student_user"])
    assert (await _check(client, headers, "student_in_class", roster["class"].id)).status_code == 200


@pytest.mark.asyncio
async def test_missing_and_foreign_resources_look_the_same(
    client: AsyncClient, seed, headers_for, teacher_headers, roster
) -> None:
    other_tenant = await seed.tenant("Other School")
    other_teacher = await seed.user(other_tenant, Role.TEACHER)
    other_class = await seed.add(SchoolClass(tenant_id=other_tenant.id, name="9Z", supervisor_id=other_teacher.id))
    foreign_lesson = await seed.add(
        Lesson(tenant_id=other_tenant.id, class_id=other_class.id, teacher_id=other_teacher.id, name="Art")
    )

    missing = await _check(client, teacher_headers, "teacher_owns_lesson", uuid4())
    foreign = await _check(client, teacher_headers, "teacher_owns_lesson", foreign_lesson.id)
    assert missing.status_code == foreign.status_code == 403
    assert missing.json() == foreign.json() == DENIED


@pytest.mark.asyncio
async def test_role_mismatch_is_denied(client: AsyncClient, headers_for, admin_headers, roster) -> None:
    # A parent never holds a teacher relation, even to a resource that exists.
    parent_headers = headers_for(roster["parent_user"])
    assert (await _check(client, parent_headers, "teacher_owns_lesson", roster["lesson"].id)).status_code == 403
    assert (await _check(client, admin_headers, "parent_owns_student", roster["student"].id)).status_code == 403


@pytest.mark.asyncio
async def test_parent_cannot_see_another_child(client: AsyncClient, seed, tenant, headers_for, roster) -> None:
    other_parent = await seed.user(tenant, Role.PARENT)
    response = await _check(client, headers_for(other_parent), "parent_owns_student", roster["student"].id)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_unknown_relation_is_rejected(client: AsyncClient, teacher_headers) -> None:
    response = await _check(client, teacher_headers, "teacher_owns_everything", uuid4())
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_anonymous_check_is_unauthenticated(client: AsyncClient, roster) -> None:
    response = await client.post(BASE, json={"relation": "teacher_owns_lesson", "resource_id": str(uuid4())})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_list_parent_children(client: AsyncClient, seed, tenant, headers_for, roster) -> None:
    sibling_user = await seed.user(tenant, Role.STUDENT)
    sibling = await seed.add(Student(tenant_id=tenant.id, user_id=sibling_user.id, parent_id=roster["parent_user"].id))

    response = await client.get(f"{BASE}/parent_owns_student", headers=headers_for(roster["parent_user"]))
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["relation"] == "parent_owns_student"
    assert sorted(data["resource_ids"]) == sorted([str(roster["student"].id), str(sibling.id)])


@pytest.mark.asyncio
async def test_list_for_wrong_role_is_forbidden(client: AsyncClient, teacher_headers, roster) -> None:
    response = await client.get(f"{BASE}/parent_owns_student", headers=teacher_headers)
    assert response.status_code == 403
    assert response.json() == DENIED
