import pytest
from httpx import AsyncClient

from diligence_labs.core.database.entities.consultations import Report

# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio

REPORTS_URL = "/api/v1/reports"


def _report_body(**overrides) -> dict:
    body = {
        "type": "DUE_DILIGENCE",
        "title": "Lending audit",
        "description": "Full due diligence on our lending protocol.",
        "projectName": "Lendy",
        "projectUrl": "https://lendy.example.com",
        "priority": "HIGH",
    }
    body.update(overrides)
    return body


async def test_request_report(client: AsyncClient, session, make_user, user_headers):
    user = await make_user()

    response = await client.post(
        REPORTS_URL,
        json=_report_body(deadline="2026-12-01", additionalNotes="Focus on oracles"),
        headers=user_headers(user),
    )

    body = response.json()
    assert response.status_code == 201
    assert body["message"] == "Report request submitted successfully"
    assert body["report"]["status"] == "PENDING"
    report = await session.get(Report, body["report"]["id"])
    assert report.description.startswith("Project: Lendy\n\nFull due diligence")
    assert "Project URL: https://lendy.example.com" in report.description
    assert "Preferred Deadline: 2026-12-01" in report.description
    assert "Additional Notes:\nFocus on oracles" in report.description
    assert report.description.endswith("Priority: HIGH")


async def test_empty_project_url_is_allowed(client: AsyncClient, make_user, user_headers):
    user = await make_user()

    response = await client.post(REPORTS_URL, json=_report_body(projectUrl=""), headers=user_headers(user))

    assert response.status_code == 201
    assert "Project URL" not in response.json()["report"]["description"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"title": "Tiny"},
        {"description": "short"},
        {"projectName": "L"},
        {"projectUrl": "not a url"},
        {"type": "HOROSCOPE"},
    ],
)
async def test_invalid_request(client: AsyncClient, make_user, user_headers, overrides):
    user = await make_user()

    response = await client.post(REPORTS_URL, json=_report_body(**overrides), headers=user_headers(user))

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


async def test_list_own_reports(client: AsyncClient, make_user, user_headers):
    user = await make_user()
    other = await make_user(email="other@example.com")
    await client.post(REPORTS_URL, json=_report_body(), headers=user_headers(user))
    await client.post(REPORTS_URL, json=_report_body(), headers=user_headers(other))

    response = await client.get(REPORTS_URL, headers=user_headers(user))

    assert [r["userId"] for r in response.json()] == [user.id]


async def test_requires_authentication(client: AsyncClient):
    assert (await client.post(REPORTS_URL, json=_report_body())).status_code == 401
