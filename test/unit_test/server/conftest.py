from typing import AsyncGenerator, List, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from diligence_labs.server.services.email import EmailSender
from diligence_labs.server.services.email_templates import EmailTemplate


class RecordingEmailSender(EmailSender):
    """Email sender that keeps outgoing messages instead of delivering them."""

    def __init__(self) -> None:
        super().__init__()
        self.sent: List[Tuple[str, EmailTemplate]] = []
        self.fail = False

    async def send(self, to: str, template: EmailTemplate) -> bool:
        self.sent.append((to, template))
        return not self.fail

    def recipients(self) -> List[str]:
        return [to for to, _ in self.sent]


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest_asyncio.fixture(name="client")
async def client_fixture(
    session: AsyncSession, email_sender: RecordingEmailSender
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with overridden dependencies."""
    from diligence_labs.core.database import get_session
    from diligence_labs.server.main import app
    from diligence_labs.server.services.email import get_email_sender

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_email_sender] = lambda: email_sender

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client

    app.dependency_overrides.clear()
