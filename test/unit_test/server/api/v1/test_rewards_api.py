import pytest
from httpx import AsyncClient
from sqlmodel import select

from diligence_labs.core.database.entities.projects import ProjectEvaluation
from diligence_labs.core.database.entities.reputation import Achievement
from diligence_labs.core.database.entities.rewards import ExpertPayout
from diligence_labs.core.database.entities.users import User

# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio

DISTRIBUTE_URL = "/api/v1/rewards/distribute"


@pytest.fixture
def evaluated_project(session, make_user, make_expert, make_project):
    """A project with approved evaluations from a DIAMOND and a BRONZE expert."""

    async def _make(project_score=8.5):
        founder = await make_user(email="founder@example.com", name="Founder")
        project = await make_project(founder, status="EVALUATION_COMPLETE", overall_score=project_score)
        _, diamond = await make_expert(email="diamond@example.com", tier="DIAMOND")
        _, bronze = await make_expert(email="bronze@example.com", tier="BRONZE")
        session.add(ProjectEvaluation(project_id=project.id, expert_id=diamond.id, overall_score=6, status="APPROVED"))
        session.add(ProjectEvaluation(project_id=project.id, expert_id=bronze.id, overall_score=5, status="APPROVED"))
        _, rejected = await make_expert(email="rejected@example.com", tier="GOLD")
        session.add(ProjectEvaluation(project_id=project.id, expert_id=rejected.id, overall_score=2, status="REJECTED"))
        await session.commit()
        return founder, project, diamond, bronze

    return _make


class TestDistribute:
    async def test_pays_experts_and_submitter(
        self, client: AsyncClient, session, evaluated_project, make_admin, admin_headers
    ):
        founder, project, diamond, bronze = await evaluated_project()
        admin = await make_admin()

        response = await client.post(
            DISTRIBUTE_URL, json={"projectId": project.id, "totalFee": 1000}, headers=admin_headers(admin)
        )

        body = response.json()
        assert response.status_code == 200
        assert body["message"] == "Rewards distributed successfully"
        assert body["distribution"] == {
            "totalFee": pytest.approx(1000),
            "platformFee": pytest.approx(300),
            "expertPool": pytest.approx(650),
            "submitterBonus": pytest.approx(50),
            "expertsRewarded": 2,
            "totalExpertRewards": pytest.approx(406.25 + 325),
        }

        await session.refresh(diamond)
        await session.refresh(bronze)
        await session.refresh(project)
        await session.refresh(founder)
        assert diamond.total_rewards == pytest.approx(406.25)
        assert diamond.reputation_points == 4062
        assert bronze.total_rewards == pytest.approx(325)
        assert bronze.monthly_evaluations == 1
        assert project.status == "PUBLISHED"
        assert founder.reputation_points == 1000

        payouts = (await session.execute(select(ExpertPayout))).scalars().all()
        assert sorted(p.payout_type for p in payouts) == ["EVALUATION_REWARD", "EVALUATION_REWARD", "SUBMITTER_BONUS"]
        achievement = (await session.execute(select(Achievement))).scalar_one()
        assert achievement.achievement_type == "QUALITY_SUBMITTER"
        assert achievement.points_awarded == 1000

    async def test_low_score_skips_submitter_bonus(
        self, client: AsyncClient, session, evaluated_project, make_admin, admin_headers
    ):
        founder, project, _, _ = await evaluated_project(project_score=7.9)
        admin = await make_admin()

        response = await client.post(
            DISTRIBUTE_URL, json={"projectId": project.id, "totalFee": 1000}, headers=admin_headers(admin)
        )

        assert response.json()["distribution"]["submitterBonus"] == 0
        await session.refresh(founder)
        assert founder.reputation_points == 0

    async def test_requires_approved_evaluations(
        self, client: AsyncClient, make_user, make_project, make_admin, admin_headers
    ):
        project = await make_project(await make_user())
        admin = await make_admin()

        response = await client.post(
            DISTRIBUTE_URL, json={"projectId": project.id, "totalFee": 1000}, headers=admin_headers(admin)
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Project has no approved evaluations"

    async def test_unknown_project(self, client: AsyncClient, make_admin, admin_headers):
        admin = await make_admin()

        response = await client.post(
            DISTRIBUTE_URL, json={"projectId": "missing", "totalFee": 10}, headers=admin_headers(admin)
        )

        assert response.status_code == 404

    async def test_moderator_is_refused(self, client: AsyncClient, make_admin, admin_headers):
        moderator = await make_admin(role="MODERATOR")

        response = await client.post(
            DISTRIBUTE_URL, json={"projectId": "x", "totalFee": 10}, headers=admin_headers(moderator)
        )

        assert response.status_code == 403

    async def test_fee_must_be_positive(self, client: AsyncClient, make_admin, admin_headers):
        admin = await make_admin()

        response = await client.post(
            DISTRIBUTE_URL, json={"projectId": "x", "totalFee": 0}, headers=admin_headers(admin)
        )

        assert response.status_code == 400


class TestHistory:
    async def test_admin_sees_all(
        self, client: AsyncClient, evaluated_project, make_admin, admin_headers
    ):
        _, project, _, _ = await evaluated_project()
        admin = await make_admin()
        payload = {"projectId": project.id, "totalFee": 1000}
        await client.post(DISTRIBUTE_URL, json=payload, headers=admin_headers(admin))

        body = (await client.get(DISTRIBUTE_URL, headers=admin_headers(admin))).json()

        assert body["pagination"]["total"] == 1
        assert body["distributions"][0]["projectId"] == project.id
        assert len(body["distributions"][0]["payouts"]) == 3

    async def test_users_see_their_own(
        self, client: AsyncClient, session, evaluated_project, make_user, make_admin, admin_headers, user_headers
    ):
        founder, project, diamond, _ = await evaluated_project()
        stranger = await make_user(email="stranger@example.com")
        admin = await make_admin()
        payload = {"projectId": project.id, "totalFee": 1000}
        await client.post(DISTRIBUTE_URL, json=payload, headers=admin_headers(admin))
        expert_user = await session.get(User, diamond.user_id)

        submitter_view = (await client.get(DISTRIBUTE_URL, headers=user_headers(founder))).json()
        expert_view = (await client.get(DISTRIBUTE_URL, headers=user_headers(expert_user))).json()
        stranger_view = (await client.get(DISTRIBUTE_URL, headers=user_headers(stranger))).json()

        assert submitter_view["pagination"]["total"] == 1
        assert expert_view["pagination"]["total"] == 1
        assert stranger_view["distributions"] == []

    async def test_requires_authentication(self, client: AsyncClient):
        assert (await client.get(DISTRIBUTE_URL)).status_code == 401
