import pytest
from httpx import AsyncClient

from diligence_labs.server.core.config import settings

# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio


async def test_message_is_forwarded_to_admin_inbox(client: AsyncClient, email_sender):
    response = await client.post(
        "/api/v1/contact",
        json={"name": "Ann", "email": "ann@example.com", "message": "Do you audit bridges?", "subject": "Bridges"},
    )

    assert response.status_code == 200
    assert response.json() == {"message": "Message sent successfully"}
    to, template = email_sender.sent[0]
    assert to == settings.admin_notification_email
    assert template.subject == "Contact Form: Bridges"
    assert "ann@example.com" in template.text


async def test_delivery_failure(client: AsyncClient, email_sender):
    email_sender.fail = True

    response = await client.post("/api/v1/contact", json={"name": "Ann", "email": "ann@example.com", "message": "Hi"})

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to send message. Please try again later."


async def test_invalid_input(client: AsyncClient, email_sender):
    response = await client.post("/api/v1/contact", json={"name": "", "email": "ann", "message": ""})

    assert response.status_code == 400
    assert email_sender.sent == []
