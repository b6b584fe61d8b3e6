import pytest
from httpx import AsyncClient
from sqlmodel import select

from diligence_labs.core.database.entities.admins import StaffAssignment
from diligence_labs.core.database.entities.consultations import ConsultationSession, Report

# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio

ASSIGNMENTS_URL = "/api/v1/admin/assignments"


@pytest.fixture
def report(session, make_user):
    async def _make(status="PENDING", report_type="DUE_DILIGENCE"):
        user = await make_user(email=f"{report_type.lower()}-{status.lower()}@example.com")
        record = Report(
            user_id=user.id, type=report_type, title="Lending protocol review", description="Audit", status=status
        )
        session.add(record)
        await session.commit()
        await session.refresh(record)
        return record

    return _make


@pytest.fixture
def booking(session):
    async def _make(status="PENDING", consultation_type="TOKEN_LAUNCH"):
        record = ConsultationSession(
            consultation_type=consultation_type, status=status, guest_email="guest@example.com"
        )
        session.add(record)
        await session.commit()
        await session.refresh(record)
        return record

    return _make


async def _assign(client, headers, item_id, item_type, assignee_ids, **fields):
    body = {"itemId": item_id, "itemType": item_type, "assigneeIds": assignee_ids, **fields}
    return await client.post(ASSIGNMENTS_URL, json=body, headers=headers)


class TestAssignStaff:
    async def test_lead_and_contributor(self, client: AsyncClient, session, report, make_admin, admin_headers):
        admin = await make_admin()
        lead = await make_admin(email="lead@example.com", role="MODERATOR")
        helper = await make_admin(email="helper@example.com", role="MODERATOR")
        item = await report()

        response = await _assign(
            client, admin_headers(admin), item.id, "report", [lead.id, helper.id], estimatedHours=12
        )

        body = response.json()
        assert response.status_code == 201
        assert body["message"] == "Assignments created successfully"
        roles = {a["assignee"]["email"]: a["role"] for a in body["assignments"]}
        assert roles == {"lead@example.com": "LEAD", "helper@example.com": "CONTRIBUTOR"}
        assert all(a["itemTitle"] == "Lending protocol review" for a in body["assignments"])
        assert all(a["estimatedHours"] == 12 for a in body["assignments"])
        await session.refresh(item)
        assert item.status == "IN_PROGRESS"

    async def test_session_is_scheduled(self, client: AsyncClient, session, booking, make_admin, admin_headers):
        admin = await make_admin()
        item = await booking()

        response = await _assign(client, admin_headers(admin), item.id, "session", [admin.id], role="CONTRIBUTOR")

        assert response.json()["assignments"][0]["role"] == "CONTRIBUTOR"
        assert response.json()["assignments"][0]["itemTitle"] == "TOKEN_LAUNCH Consultation"
        await session.refresh(item)
        assert item.status == "SCHEDULED"

    async def test_already_assigned(self, client: AsyncClient, session, report, make_admin, admin_headers):
        admin = await make_admin()
        item = await report()
        await _assign(client, admin_headers(admin), item.id, "report", [admin.id])

        response = await _assign(client, admin_headers(admin), item.id, "report", [admin.id])

        assert response.status_code == 409
        assert len((await session.execute(select(StaffAssignment))).scalars().all()) == 1

    async def test_inactive_assignee(self, client: AsyncClient, session, report, make_admin, admin_headers):
        admin = await make_admin()
        gone = await make_admin(email="gone@example.com", is_active=False)
        item = await report()

        response = await _assign(client, admin_headers(admin), item.id, "report", [admin.id, gone.id])

        assert response.status_code == 404
        assert response.json()["detail"] == "Team member not found"
        assert (await session.execute(select(StaffAssignment))).scalars().all() == []

    async def test_unknown_item(self, client: AsyncClient, make_admin, admin_headers):
        admin = await make_admin()

        response = await _assign(client, admin_headers(admin), "missing", "session", [admin.id])

        assert response.status_code == 404
        assert response.json()["detail"] == "Session not found"

    @pytest.mark.parametrize(
        "overrides", [{"assigneeIds": []}, {"itemType": "project"}, {"estimatedHours": 0}]
    )
    async def test_invalid_request(self, client: AsyncClient, report, make_admin, admin_headers, overrides):
        admin = await make_admin()
        item = await report()
        body = {"itemId": item.id, "itemType": "report", "assigneeIds": [admin.id], **overrides}

        response = await client.post(ASSIGNMENTS_URL, json=body, headers=admin_headers(admin))

        assert response.status_code == 400

    async def test_moderators_cannot_assign(self, client: AsyncClient, report, make_admin, admin_headers):
        moderator = await make_admin(role="MODERATOR")
        item = await report()

        response = await _assign(client, admin_headers(moderator), item.id, "report", [moderator.id])

        assert response.status_code == 403


class TestPendingWork:
    async def test_queue_and_suggestions(self, client: AsyncClient, report, booking, make_admin, admin_headers):
        admin = await make_admin()
        diligence = await report()
        research = await report(report_type="MARKET_RESEARCH")
        staffed = await report(status="IN_PROGRESS", report_type="ADVISORY_NOTES")
        unstaffed = await booking(status="SCHEDULED")
        await booking(status="COMPLETED")
        await _assign(client, admin_headers(admin), staffed.id, "report", [admin.id])

        body = (await client.get(f"{ASSIGNMENTS_URL}/pending", headers=admin_headers(admin))).json()

        items = {i["id"]: i for i in body["items"]}
        assert set(items) == {diligence.id, research.id, unstaffed.id}
        assert (items[diligence.id]["suggestedTeamSize"], items[diligence.id]["suggestedHours"]) == (2, 16)
        assert (items[research.id]["suggestedTeamSize"], items[research.id]["suggestedHours"]) == (1, 8)
        assert (items[unstaffed.id]["suggestedTeamSize"], items[unstaffed.id]["suggestedHours"]) == (2, 3)
        assert items[unstaffed.id]["requestedBy"] == "guest@example.com"
        assert body["stats"] == {"totalPending": 3, "unassignedItems": 3}


class TestListAndUpdate:
    async def test_list(self, client: AsyncClient, report, make_admin, admin_headers):
        admin = await make_admin()
        moderator = await make_admin(email="mod@example.com", role="MODERATOR")
        item = await report()
        await _assign(client, admin_headers(admin), item.id, "report", [moderator.id])

        body = (await client.get(ASSIGNMENTS_URL, headers=admin_headers(moderator))).json()

        assert [(a["itemId"], a["itemType"], a["assignee"]["id"]) for a in body["assignments"]] == [
            (item.id, "report", moderator.id)
        ]

    async def test_progress_stamps_times(self, client: AsyncClient, report, make_admin, admin_headers):
        admin = await make_admin()
        item = await report()
        created = (await _assign(client, admin_headers(admin), item.id, "report", [admin.id])).json()
        url = f"{ASSIGNMENTS_URL}/{created['assignments'][0]['id']}"

        started = (await client.patch(url, json={"status": "IN_PROGRESS"}, headers=admin_headers(admin))).json()
        done = (
            await client.patch(
                url, json={"status": "COMPLETED", "actualHours": 10, "notes": "Shipped"}, headers=admin_headers(admin)
            )
        ).json()

        assert started["startedAt"] is not None
        assert started["completedAt"] is None
        assert done["status"] == "COMPLETED"
        assert done["startedAt"] == started["startedAt"]
        assert done["completedAt"] is not None
        assert done["actualHours"] == 10
        assert done["notes"] == "Shipped"

    async def test_unknown_assignment(self, client: AsyncClient, make_admin, admin_headers):
        admin = await make_admin()

        response = await client.patch(
            f"{ASSIGNMENTS_URL}/missing", json={"status": "COMPLETED"}, headers=admin_headers(admin)
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Assignment not found"
