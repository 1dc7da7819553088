from typing import Any

from fastapi import APIRouter, Depends, Query

from atsboost.api.deps import require_admin
from atsboost.schemas import (
    AdminLoginRequest,
    AdminLoginResponse,
    AdminUser,
    AdminUserUpdate,
    UserPublic,
)
from atsboost.services.admin_service import get_admin_service
from atsboost.services.auth_service import get_auth_service


router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/login")
def admin_login(request: AdminLoginRequest) -> AdminLoginResponse:
    return get_auth_service().admin_login(request.email, request.password)


@router.get("/me")
def admin_me(admin: AdminUser = Depends(require_admin)) -> AdminUser:
    return admin


@router.get("/stats")
def admin_stats(admin: AdminUser = Depends(require_admin)) -> dict[str, Any]:
    return get_admin_service().get_stats()


@router.get("/users")
def admin_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    admin: AdminUser = Depends(require_admin),
) -> dict[str, Any]:
    return get_admin_service().list_users(page=page, limit=limit)


@router.get("/cvs")
def admin_cvs(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    admin: AdminUser = Depends(require_admin),
) -> dict[str, Any]:
    return get_admin_service().list_cvs(page=page, limit=limit)


@router.put("/users/{user_id}")
def admin_update_user(
    user_id: int,
    update: AdminUserUpdate,
    admin: AdminUser = Depends(require_admin),
) -> UserPublic:
    user = get_admin_service().update_user(user_id, update, acting_admin_id=admin.id)
    return UserPublic.from_user(user)
