import pytest
from httpx import AsyncClient

from diligence_labs.core.database.entities.consultations import ConsultationSession, Report
from diligence_labs.core.database.entities.rewards import ExpertPayout, RewardDistribution

# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio

STATS_URL = "/api/v1/admin/stats"


async def test_empty_platform(client: AsyncClient, make_admin, admin_headers):
    moderator = await make_admin(role="MODERATOR")

    response = await client.get(STATS_URL, headers=admin_headers(moderator))

    assert response.status_code == 200
    assert response.json() == {
        "totalUsers": 0,
        "sessionsByStatus": {},
        "reportsByStatus": {},
        "activeSubscriptions": 0,
        "projectsByStatus": {},
        "verifiedExperts": 0,
        "totalRewardsDistributed": 0.0,
    }


async def test_counts(client: AsyncClient, session, make_user, make_expert, make_project, make_admin, admin_headers):
    moderator = await make_admin(role="MODERATOR")
    founder = await make_user(email="founder@example.com")
    expert_user, profile = await make_expert()
    await make_expert(email="pending@example.com", verification_status="PENDING")
    project = await make_project(founder)
    await make_project(founder, name="Other Protocol", status="PUBLISHED")

    session.add(ConsultationSession(user_id=founder.id, consultation_type="DUE_DILIGENCE"))
    session.add(ConsultationSession(guest_email="g@example.com", consultation_type="DUE_DILIGENCE", status="COMPLETED"))
    session.add(Report(user_id=founder.id, type="DUE_DILIGENCE", title="Review", description="Full review please."))
    distribution = RewardDistribution(
        project_id=project.id, total_fee=100, platform_fee=30, expert_pool=65, submitter_bonus=5
    )
    session.add(distribution)
    await session.commit()
    session.add_all(
        [
            ExpertPayout(distribution_id=distribution.id, user_id=expert_user.id, expert_id=profile.id, amount=40.5),
            ExpertPayout(distribution_id=distribution.id, user_id=founder.id, payout_type="SUBMITTER_BONUS", amount=5),
        ]
    )
    await session.commit()

    body = (await client.get(STATS_URL, headers=admin_headers(moderator))).json()

    assert body["totalUsers"] == 3
    assert body["sessionsByStatus"] == {"PENDING": 1, "COMPLETED": 1}
    assert body["reportsByStatus"] == {"PENDING": 1}
    assert body["activeSubscriptions"] == 0
    assert body["projectsByStatus"] == {"EXPERT_ASSIGNMENT": 1, "PUBLISHED": 1}
    assert body["verifiedExperts"] == 1
    assert body["totalRewardsDistributed"] == pytest.approx(45.5)


async def test_requires_admin(client: AsyncClient, make_user, user_headers):
    user = await make_user()

    response = await client.get(STATS_URL, headers=user_headers(user))

    assert response.status_code == 401
