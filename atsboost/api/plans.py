import asyncio
from typing import Any

from fastapi import APIRouter, Depends, status

from atsboost.api.deps import get_current_user, get_optional_user
from atsboost.libs.database import get_database
from atsboost.schemas import Plan, SubscribeRequest, User
from atsboost.services.plan_service import get_plan_service
from atsboost.services.whatsapp_service import get_whatsapp_service


router = APIRouter(tags=["plans"])


@router.get("/plans")
def list_plans() -> list[Plan]:
    return get_database().list_plans()


@router.get("/plan-features")
def plan_features(user: User | None = Depends(get_optional_user)) -> dict[str, Any]:
    features = get_plan_service().get_user_plan_features(user.id if user else None)
    return {"plan": features.name, "features": features.to_dict()}


@router.get("/scans-remaining")
def scans_remaining(user: User | None = Depends(get_optional_user)) -> dict[str, Any]:
    remaining = get_plan_service().get_scans_remaining(user.id if user else None)
    return {"scans_remaining": remaining, "unlimited": remaining is None}


@router.post("/subscriptions", status_code=status.HTTP_201_CREATED)
async def subscribe(request: SubscribeRequest, user: User = Depends(get_current_user)) -> dict[str, Any]:
    plans = get_plan_service()
    loop = asyncio.get_running_loop()
    subscription = await loop.run_in_executor(None, plans.subscribe, user.id, request.plan_id)
    plan_name = await loop.run_in_executor(None, plans.get_user_plan_name, user.id)
    await get_whatsapp_service().notify_subscription(
        user.id, plan_name, f"{subscription.current_period_end:%d %B %Y}"
    )
    return {
        "success": True,
        "plan": plan_name,
        "subscription": subscription.model_dump(mode="json"),
    }
