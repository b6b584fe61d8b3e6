import pytest
from httpx import AsyncClient

from diligence_labs.core.database.entities.consultations import Report

# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio

REPORTS_URL = "/api/v1/admin/reports"


async def _report(session, user, status="PENDING", title="Bridge risk review"):
    report = Report(
        user_id=user.id,
        type="DUE_DILIGENCE",
        title=title,
        description="Assess the bridge contracts and validator set.",
        status=status,
    )
    session.add(report)
    await session.commit()
    await session.refresh(report)
    return report


async def test_list_with_status_filter(client: AsyncClient, session, make_user, make_admin, admin_headers):
    moderator = await make_admin(role="MODERATOR")
    user = await make_user()
    await _report(session, user)
    done = await _report(session, user, status="COMPLETED", title="Token audit")

    everything = (await client.get(REPORTS_URL, headers=admin_headers(moderator))).json()
    completed = (await client.get(REPORTS_URL, params={"status": "COMPLETED"}, headers=admin_headers(moderator))).json()

    assert len(everything) == 2
    assert [r["id"] for r in completed] == [done.id]


async def test_deliver_report(client: AsyncClient, session, make_user, make_admin, admin_headers):
    moderator = await make_admin(role="MODERATOR")
    report = await _report(session, await make_user())

    response = await client.patch(
        f"{REPORTS_URL}/{report.id}",
        json={"status": "COMPLETED", "fileUrl": "https://files.example.com/report.pdf"},
        headers=admin_headers(moderator),
    )

    body = response.json()
    assert response.status_code == 200
    assert body["status"] == "COMPLETED"
    assert body["fileUrl"] == "https://files.example.com/report.pdf"


async def test_status_change_keeps_file(client: AsyncClient, session, make_user, make_admin, admin_headers):
    moderator = await make_admin(role="MODERATOR")
    report = await _report(session, await make_user())
    report.file_url = "https://files.example.com/draft.pdf"
    session.add(report)
    await session.commit()

    response = await client.patch(
        f"{REPORTS_URL}/{report.id}", json={"status": "IN_PROGRESS"}, headers=admin_headers(moderator)
    )

    body = response.json()
    assert body["status"] == "IN_PROGRESS"
    assert body["fileUrl"] == "https://files.example.com/draft.pdf"


async def test_unknown_report(client: AsyncClient, make_admin, admin_headers):
    moderator = await make_admin(role="MODERATOR")

    response = await client.patch(
        f"{REPORTS_URL}/missing", json={"status": "CANCELLED"}, headers=admin_headers(moderator)
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Report not found"


async def test_user_token_rejected(client: AsyncClient, make_user, user_headers):
    user = await make_user()

    response = await client.get(REPORTS_URL, headers=user_headers(user))

    assert response.status_code == 401
