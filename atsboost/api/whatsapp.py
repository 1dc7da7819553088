from fastapi import APIRouter, Depends

from atsboost.api.deps import get_current_user
from atsboost.schemas import (
    MessageResponse,
    User,
    WhatsAppConfirmRequest,
    WhatsAppSettingsResponse,
    WhatsAppSettingsUpdate,
    WhatsAppVerifyRequest,
)
from atsboost.services.whatsapp_service import get_whatsapp_service


router = APIRouter(tags=["whatsapp"])


@router.get("/whatsapp-settings")
def get_whatsapp_settings(user: User = Depends(get_current_user)) -> WhatsAppSettingsResponse:
    return get_whatsapp_service().get_settings(user.id)


@router.post("/whatsapp-settings")
def update_whatsapp_settings(
    request: WhatsAppSettingsUpdate,
    user: User = Depends(get_current_user),
) -> WhatsAppSettingsResponse:
    return get_whatsapp_service().update_settings(user.id, request.enabled, request.phone_number)


@router.post("/whatsapp-verify")
async def send_whatsapp_code(
    request: WhatsAppVerifyRequest,
    user: User = Depends(get_current_user),
) -> MessageResponse:
    sent = await get_whatsapp_service().send_verification_code(user.id, request.phone_number)
    if not sent:
        return MessageResponse(success=False, message="Could not send the verification code")
    return MessageResponse(message="Verification code sent")


@router.post("/whatsapp-verify/confirm")
def confirm_whatsapp_code(
    request: WhatsAppConfirmRequest,
    user: User = Depends(get_current_user),
) -> WhatsAppSettingsResponse:
    return get_whatsapp_service().confirm_verification(user.id, request.code)
