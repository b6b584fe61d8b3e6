import pytest
from httpx import AsyncClient
from sqlmodel import select

from diligence_labs.core.database.entities.activity import ActivityLog

# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio


async def test_open_project_for_assignment(
    client: AsyncClient, session, make_user, make_project, make_admin, admin_headers
):
    moderator = await make_admin(role="MODERATOR")
    project = await make_project(await make_user(), status="SUBMITTED")

    response = await client.patch(
        f"/api/v1/admin/projects/{project.id}/status",
        json={"status": "EXPERT_ASSIGNMENT"},
        headers=admin_headers(moderator),
    )

    assert response.status_code == 200
    assert response.json()["status"] == "EXPERT_ASSIGNMENT"
    entry = (await session.execute(select(ActivityLog))).scalar_one()
    assert entry.action == "PROJECT_STATUS_CHANGED"
    assert entry.admin_id == moderator.id
    assert entry.get_details() == {
        "project_id": project.id,
        "previous_status": "SUBMITTED",
        "new_status": "EXPERT_ASSIGNMENT",
    }


async def test_unknown_status(client: AsyncClient, make_user, make_project, make_admin, admin_headers):
    moderator = await make_admin(role="MODERATOR")
    project = await make_project(await make_user())

    response = await client.patch(
        f"/api/v1/admin/projects/{project.id}/status", json={"status": "ARCHIVED"}, headers=admin_headers(moderator)
    )

    assert response.status_code == 400


async def test_unknown_project(client: AsyncClient, make_admin, admin_headers):
    moderator = await make_admin(role="MODERATOR")

    response = await client.patch(
        "/api/v1/admin/projects/missing/status", json={"status": "PUBLISHED"}, headers=admin_headers(moderator)
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Project not found"
