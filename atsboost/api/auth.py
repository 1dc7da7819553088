from fastapi import APIRouter, Depends, status

from atsboost.api.deps import get_current_user
from atsboost.schemas import AuthResponse, SignInRequest, SignUpRequest, User, UserPublic
from atsboost.services.auth_service import get_auth_service


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(request: SignUpRequest) -> AuthResponse:
    return get_auth_service().signup(request)


@router.post("/signin")
def signin(request: SignInRequest) -> AuthResponse:
    return get_auth_service().signin(request.email, request.password)


@router.get("/me")
def me(user: User = Depends(get_current_user)) -> UserPublic:
    return UserPublic.from_user(user)
