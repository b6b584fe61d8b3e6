"""
Contact Form Endpoint.

Forwards a visitor's message to the admin inbox.
"""

from fastapi import APIRouter, Depends

from diligence_labs.core.errors import DiligenceError
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.io.auth import MessageResponse
from diligence_labs.core.models.io.contact import ContactRequest
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.server.core.config import settings
from diligence_labs.server.services import email_templates
from diligence_labs.server.services.deps import EmailSenderDep
from diligence_labs.server.services.rate_limiter import rate_limit

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=MessageResponse,
    summary="Contact Us",
    description="Send a message to the Diligence Labs team.",
    responses={400: {"description": "Invalid input"}, 500: {"description": "The message could not be sent"}},
    dependencies=[Depends(rate_limit)],
)
async def contact(payload: ContactRequest, sender: EmailSenderDep) -> MessageResponse:
    template = email_templates.contact_submission(payload.name, payload.email, payload.message, payload.subject)
    if not await sender.send(settings.admin_notification_email, template):
        raise DiligenceError("Failed to send message. Please try again later.")

    log_business_event("contact.submitted", sender_email=payload.email)
    return MessageResponse(message="Message sent successfully")
