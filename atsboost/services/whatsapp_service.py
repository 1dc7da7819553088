"""
WhatsApp Service - notification settings, number verification and message delivery

Messages go through the Twilio REST API when Twilio credentials are configured.
Without credentials the service runs in demo mode: messages are logged and
reported as sent.
"""

from __future__ import annotations

import asyncio
import logging
import re
import secrets
from datetime import timedelta
from typing import Any

import httpx

from atsboost.config import settings
from atsboost.libs.database import Database, get_database
from atsboost.libs.exceptions import BadRequestException
from atsboost.libs.security import hash_password, verify_password
from atsboost.schemas import SaProfile, WhatsAppSettingsResponse, utcnow

logger = logging.getLogger(__name__)

SA_PHONE_PATTERN = re.compile(r"^(\+27|0)[6-8][0-9]{8}$")

TEMPLATES: dict[str, str] = {
    "cv_analysis_complete": (
        'ATSBoost: Your CV "{cv_name}" analysis is complete! Your ATS score is {score}%. '
        "View details: {dashboard_url}"
    ),
    "job_match": (
        "ATSBoost: We found a job match for you! {job_title} at {company} in {location}. "
        "View details: {job_url}"
    ),
    "subscription_confirmation": (
        "ATSBoost: Thank you for subscribing to our {plan_name} plan! Your subscription is "
        "active until {expiry_date}. View your account: {dashboard_url}"
    ),
    "payment_confirmation": (
        "ATSBoost: We received your payment of {amount} for {service_type}. "
        "View your account: {dashboard_url}"
    ),
    "verification_code": (
        "ATSBoost: Your WhatsApp verification code is {verification_code}. "
        "It is valid for {valid_minutes} minutes."
    ),
}


def is_valid_sa_phone_number(phone_number: str | None) -> bool:
    if not phone_number:
        return False
    return bool(SA_PHONE_PATTERN.match(re.sub(r"[\s\-()]", "", phone_number)))


def normalize_sa_phone_number(phone_number: str) -> str:
    """Return the number in +27 international format; raises ``BadRequestException`` when invalid."""
    compact = re.sub(r"[\s\-()]", "", phone_number)
    if not SA_PHONE_PATTERN.match(compact):
        raise BadRequestException(
            "Please enter a valid South African mobile number", error="Invalid phone number"
        )
    if compact.startswith("0"):
        return "+27" + compact[1:]
    return compact


def format_template_message(template_name: str, data: dict[str, Any]) -> str:
    template = TEMPLATES.get(template_name)
    if template is None:
        return f'ATSBoost notification: Template "{template_name}" not found.'
    return template.format(**data)


class WhatsAppService:
    def __init__(self, db: Database | None = None) -> None:
        self._db = db

    @property
    def db(self) -> Database:
        return self._db or get_database()

    @property
    def enabled(self) -> bool:
        return bool(
            settings.twilio_account_sid and settings.twilio_auth_token and settings.twilio_phone_number
        )

    @property
    def dashboard_url(self) -> str:
        return settings.public_base_url.rstrip("/") + "/dashboard"

    # ========================================================================
    # DELIVERY
    # ========================================================================

    async def send_template(self, phone_number: str, template_name: str, data: dict[str, Any]) -> bool:
        if not is_valid_sa_phone_number(phone_number):
            logger.error("Invalid South African phone number for WhatsApp message")
            return False
        to = normalize_sa_phone_number(phone_number)
        body = format_template_message(template_name, data)

        if not self.enabled:
            logger.info("WhatsApp %s message (demo mode) to %s: %s", template_name, to, body)
            return True

        url = f"{settings.twilio_api_url}/Accounts/{settings.twilio_account_sid}/Messages.json"
        payload = {
            "From": f"whatsapp:{settings.twilio_phone_number}",
            "To": f"whatsapp:{to}",
            "Body": body,
        }
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    url,
                    data=payload,
                    auth=(settings.twilio_account_sid or "", settings.twilio_auth_token or ""),
                    timeout=15.0,
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Failed to send WhatsApp %s message: %s", template_name, exc)
            return False
        logger.info("WhatsApp %s message sent with SID %s", template_name, response.json().get("sid"))
        return True

    # ========================================================================
    # SETTINGS & VERIFICATION
    # ========================================================================

    def get_settings(self, user_id: int) -> WhatsAppSettingsResponse:
        profile = self.db.get_sa_profile(user_id)
        if profile is None:
            return WhatsAppSettingsResponse()
        return WhatsAppSettingsResponse(
            enabled=profile.whatsapp_enabled,
            verified=profile.whatsapp_verified,
            phone_number=profile.whatsapp_number,
        )

    def update_settings(self, user_id: int, enabled: bool, phone_number: str | None) -> WhatsAppSettingsResponse:
        profile = self.db.get_sa_profile(user_id)
        updates: dict[str, Any] = {"whatsapp_enabled": enabled}
        current_number = profile.whatsapp_number if profile else None

        if phone_number:
            normalized = normalize_sa_phone_number(phone_number)
            if normalized != current_number:
                updates.update(
                    whatsapp_number=normalized,
                    whatsapp_verified=False,
                    verification_code_hash=None,
                    verification_expires_at=None,
                )
            current_number = normalized

        if enabled and not current_number:
            raise BadRequestException(
                "A phone number is required to enable WhatsApp notifications",
                error="Phone number required",
            )

        self.db.upsert_sa_profile(user_id, **updates)
        return self.get_settings(user_id)

    def _issue_verification_code(self, user_id: int, phone_number: str | None) -> tuple[str, str]:
        profile = self.db.get_sa_profile(user_id)
        number = phone_number or (profile.whatsapp_number if profile else None)
        if not number:
            raise BadRequestException("A phone number is required", error="Phone number required")
        normalized = normalize_sa_phone_number(number)

        code = f"{secrets.randbelow(900000) + 100000}"
        updates: dict[str, Any] = {
            "verification_code_hash": hash_password(code),
            "verification_expires_at": utcnow() + timedelta(minutes=settings.whatsapp_code_ttl_minutes),
        }
        if profile is None or profile.whatsapp_number != normalized:
            updates.update(whatsapp_number=normalized, whatsapp_verified=False)
        self.db.upsert_sa_profile(user_id, **updates)
        return normalized, code

    async def send_verification_code(self, user_id: int, phone_number: str | None = None) -> bool:
        loop = asyncio.get_running_loop()
        normalized, code = await loop.run_in_executor(
            None, self._issue_verification_code, user_id, phone_number
        )
        return await self.send_template(
            normalized,
            "verification_code",
            {"verification_code": code, "valid_minutes": settings.whatsapp_code_ttl_minutes},
        )

    def confirm_verification(self, user_id: int, code: str) -> WhatsAppSettingsResponse:
        profile = self.db.get_sa_profile(user_id)
        if profile is None or not profile.verification_code_hash or profile.verification_expires_at is None:
            raise BadRequestException("No verification code has been requested", error="Verification failed")
        if profile.verification_expires_at < utcnow():
            raise BadRequestException("The verification code has expired", error="Verification failed")
        if not verify_password(code, profile.verification_code_hash):
            raise BadRequestException("The verification code is incorrect", error="Verification failed")
        self.db.upsert_sa_profile(
            user_id,
            whatsapp_verified=True,
            verification_code_hash=None,
            verification_expires_at=None,
        )
        return self.get_settings(user_id)

    # ========================================================================
    # NOTIFICATIONS
    # ========================================================================

    def _notifiable_profile(self, user_id: int | None) -> SaProfile | None:
        if not user_id:
            return None
        profile = self.db.get_sa_profile(user_id)
        if profile is None or not (profile.whatsapp_enabled and profile.whatsapp_verified):
            return None
        if not profile.whatsapp_number:
            return None
        return profile

    async def _notify(self, user_id: int | None, template_name: str, data: dict[str, Any]) -> bool:
        loop = asyncio.get_running_loop()
        profile = await loop.run_in_executor(None, self._notifiable_profile, user_id)
        if profile is None:
            return False
        return await self.send_template(profile.whatsapp_number or "", template_name, data)

    async def notify_analysis_complete(self, user_id: int | None, cv_name: str, score: int) -> bool:
        return await self._notify(
            user_id,
            "cv_analysis_complete",
            {"cv_name": cv_name, "score": score, "dashboard_url": self.dashboard_url},
        )

    async def notify_subscription(self, user_id: int, plan_name: str, expiry_date: str) -> bool:
        return await self._notify(
            user_id,
            "subscription_confirmation",
            {"plan_name": plan_name, "expiry_date": expiry_date, "dashboard_url": self.dashboard_url},
        )

    async def notify_job_match(
        self, user_id: int, job_id: int, job_title: str, company: str, location: str | None = None
    ) -> bool:
        return await self._notify(
            user_id,
            "job_match",
            {
                "job_title": job_title,
                "company": company,
                "location": location or "South Africa",
                "job_url": f"{settings.public_base_url.rstrip('/')}/jobs/{job_id}",
            },
        )


_whatsapp_service: WhatsAppService | None = None


def get_whatsapp_service() -> WhatsAppService:
    """Get WhatsApp service instance (singleton)."""
    global _whatsapp_service
    if _whatsapp_service is None:
        _whatsapp_service = WhatsAppService()
    return _whatsapp_service
