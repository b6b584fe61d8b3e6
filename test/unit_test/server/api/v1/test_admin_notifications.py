from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlmodel import select

from diligence_labs.core.database import utc_now
from diligence_labs.core.database.entities.activity import AdminNotificationLog
from diligence_labs.core.database.entities.subscriptions import Subscription
from diligence_labs.server.api.v1.admin_notifications import start_of_day

NOTIFICATIONS_URL = "/api/v1/admin/notifications"
EXPIRY_URL = f"{NOTIFICATIONS_URL}/subscription-expiry"
HISTORY_URL = f"{NOTIFICATIONS_URL}/history"


@pytest.fixture
def subscriber(session, make_user):
    """Factory for a user with an ACTIVE subscription ending at ``period_end``."""

    async def _make(email: str, period_end: datetime, status: str = "ACTIVE"):
        user = await make_user(email=email, name=email.split("@")[0].title())
        subscription = Subscription(
            user_id=user.id, plan_type="PROFESSIONAL_MONTHLY", status=status, current_period_end=period_end
        )
        session.add(subscription)
        await session.commit()
        return user, subscription

    return _make


def _in_days(days: int) -> datetime:
    return start_of_day(utc_now()) + timedelta(days=days, hours=12)


def test_start_of_day():
    assert start_of_day(datetime(2026, 3, 4, 17, 45, 12, 9)) == datetime(2026, 3, 4)


@pytest.mark.asyncio
class TestExpiryReminders:
    async def test_emails_matching_subscribers(
        self, client: AsyncClient, session, subscriber, make_admin, admin_headers, email_sender
    ):
        admin = await make_admin()
        user, subscription = await subscriber("week@example.com", _in_days(7))
        await subscriber("later@example.com", _in_days(9))
        await subscriber("gone@example.com", _in_days(7), status="CANCELED")

        response = await client.post(EXPIRY_URL, json={"daysToCheck": [7]}, headers=admin_headers(admin))

        body = response.json()
        assert response.status_code == 200
        assert body["summary"] == {"subscriptionsChecked": 1, "notificationsSent": 1, "errors": 0}
        assert body["notifications"] == [
            {
                "userId": user.id,
                "email": "week@example.com",
                "subscriptionId": subscription.id,
                "daysRemaining": 7,
                "status": "SENT",
                "error": None,
            }
        ]
        assert email_sender.sent[0][1].subject.startswith("Important: Your Professional subscription expires in 7 days")
        log = (await session.execute(select(AdminNotificationLog))).scalar_one()
        assert log.days_remaining == 7
        assert log.get_details() == {"subscriptionId": subscription.id, "planType": "PROFESSIONAL_MONTHLY"}

    async def test_second_run_is_deduplicated(
        self, client: AsyncClient, subscriber, make_admin, admin_headers, email_sender
    ):
        admin = await make_admin()
        await subscriber("soon@example.com", _in_days(3))
        await client.post(EXPIRY_URL, json={"daysToCheck": [3]}, headers=admin_headers(admin))

        body = (await client.post(EXPIRY_URL, json={"daysToCheck": [3]}, headers=admin_headers(admin))).json()

        assert body["notifications"][0]["status"] == "SKIPPED"
        assert body["summary"]["notificationsSent"] == 0
        assert len(email_sender.sent) == 1

    async def test_test_mode_sends_nothing(
        self, client: AsyncClient, session, subscriber, make_admin, admin_headers, email_sender
    ):
        admin = await make_admin()
        await subscriber("soon@example.com", _in_days(1))

        body = (
            await client.post(EXPIRY_URL, json={"daysToCheck": [1], "testMode": True}, headers=admin_headers(admin))
        ).json()

        assert body["testMode"] is True
        assert body["notifications"][0]["status"] == "TEST_MODE"
        assert email_sender.sent == []
        assert (await session.execute(select(AdminNotificationLog))).first() is None

    async def test_delivery_failure(self, client: AsyncClient, subscriber, make_admin, admin_headers, email_sender):
        admin = await make_admin()
        await subscriber("soon@example.com", _in_days(14))
        email_sender.fail = True

        body = (await client.post(EXPIRY_URL, json={"daysToCheck": [14]}, headers=admin_headers(admin))).json()

        assert body["summary"]["errors"] == 1
        assert body["notifications"][0]["status"] == "FAILED"
        assert body["notifications"][0]["error"] == "Email delivery failed"

    async def test_default_days_without_body(
        self, client: AsyncClient, subscriber, make_admin, admin_headers, email_sender
    ):
        admin = await make_admin()
        await subscriber("month@example.com", _in_days(30))

        body = (await client.post(EXPIRY_URL, headers=admin_headers(admin))).json()

        assert body["summary"]["subscriptionsChecked"] == 1
        assert email_sender.recipients() == ["month@example.com"]

    async def test_moderator_cannot_send(self, client: AsyncClient, make_admin, admin_headers):
        moderator = await make_admin(role="MODERATOR")

        response = await client.post(EXPIRY_URL, json={}, headers=admin_headers(moderator))

        assert response.status_code == 403


@pytest.mark.asyncio
class TestUpcomingExpiries:
    async def test_flags_urgent_and_critical(self, client: AsyncClient, subscriber, make_admin, admin_headers):
        moderator = await make_admin(role="MODERATOR")
        now = utc_now()
        await subscriber("relaxed@example.com", now + timedelta(days=10, hours=-1))
        await subscriber("critical@example.com", now + timedelta(days=2, hours=-1))
        await subscriber("far@example.com", now + timedelta(days=40))

        body = (await client.get(EXPIRY_URL, headers=admin_headers(moderator))).json()

        assert [s["userEmail"] for s in body["subscriptions"]] == ["critical@example.com", "relaxed@example.com"]
        critical, relaxed = body["subscriptions"]
        assert critical["daysRemaining"] == 2
        assert critical["isCritical"] is True
        assert critical["isUrgent"] is True
        assert relaxed["daysRemaining"] == 10
        assert relaxed["isUrgent"] is False
        assert body["summary"] == {"total": 2, "urgent": 1, "critical": 1}

    async def test_window(self, client: AsyncClient, subscriber, make_admin, admin_headers):
        moderator = await make_admin(role="MODERATOR")
        await subscriber("relaxed@example.com", utc_now() + timedelta(days=10))

        body = (await client.get(EXPIRY_URL, params={"days": 5}, headers=admin_headers(moderator))).json()

        assert body["subscriptions"] == []


@pytest.mark.asyncio
class TestHistory:
    async def test_filters(self, client: AsyncClient, session, make_user, make_admin, admin_headers):
        moderator = await make_admin(role="MODERATOR")
        first = await make_user(email="first@example.com")
        second = await make_user(email="second@example.com")
        for user, kind in ((first, "custom"), (first, "security_alert"), (second, "custom")):
            session.add(
                AdminNotificationLog(
                    user_id=user.id, notification_type=kind, subject="Hi", recipient_email=user.email
                )
            )
        await session.commit()

        by_user = (
            await client.get(HISTORY_URL, params={"userId": first.id}, headers=admin_headers(moderator))
        ).json()
        by_type = (
            await client.get(HISTORY_URL, params={"type": "custom"}, headers=admin_headers(moderator))
        ).json()

        assert by_user["pagination"]["total"] == 2
        assert sorted(n["recipientEmail"] for n in by_type["notifications"]) == [
            "first@example.com",
            "second@example.com",
        ]
