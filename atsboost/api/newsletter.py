import logging

from fastapi import APIRouter

from atsboost.libs.database import get_database
from atsboost.libs.exceptions import BadRequestException
from atsboost.schemas import MessageResponse, NewsletterRequest
from atsboost.utils.util import is_valid_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/newsletter", tags=["newsletter"])


@router.post("")
@router.post("/subscribe")
def subscribe(request: NewsletterRequest) -> MessageResponse:
    if not is_valid_email(request.email):
        raise BadRequestException("Please provide a valid email address", error="Invalid email")
    email = (request.email or "").strip().lower()
    db = get_database()
    if db.get_newsletter_subscription(email) is None:
        db.create_newsletter_subscription(email)
        logger.info("New newsletter subscriber")
    return MessageResponse(message="Successfully subscribed to newsletter")
