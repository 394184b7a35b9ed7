import logging
from fastapi import APIRouter, Depends, Request, Response, status

from app.api.deps import SESSION_COOKIE, get_current_user, get_session_token
from app.core.config import COOKIE_SECURE, SESSION_TTL_HOURS
from app.models.user import User
from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    PasswordChangeRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    UserResponse,
)
from app.schemas.response import MessageResponse, SuccessResponse
from app.services import auth_service

log = logging.getLogger("uvicorn")

router = APIRouter()
account_router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def register_endpoint(payload: RegisterRequest):
    user = await auth_service.register(
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=payload.role,
        birth_date=payload.birth_date,
    )
    return SuccessResponse(data=UserResponse.from_model(user).model_dump(mode="json"))


@router.post("/login", response_model=SuccessResponse)
async def login_endpoint(payload: LoginRequest, response: Response):
    """Creates a session; the token is returned in the body and as an HTTP-only cookie."""
    user, session = await auth_service.login(payload.email, payload.password)
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session.token,
        max_age=SESSION_TTL_HOURS * 3600,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="none" if COOKIE_SECURE else "lax",
        path="/",
    )
    data = LoginResponse(
        user=UserResponse.from_model(user),
        token=session.token,
        expires_at=session.expires_at,
    ).model_dump(mode="json")
    return SuccessResponse(data=data)


# ----------- Account (authenticated) -----------

@account_router.get("", response_model=SuccessResponse)
async def get_account_endpoint(user: User = Depends(get_current_user)):
    return SuccessResponse(data=UserResponse.from_model(user).model_dump(mode="json"))


@account_router.put("", response_model=SuccessResponse)
async def update_account_endpoint(payload: ProfileUpdateRequest, user: User = Depends(get_current_user)):
    user = await auth_service.update_profile(
        user, name=payload.name, email=payload.email, birth_date=payload.birth_date
    )
    return SuccessResponse(data=UserResponse.from_model(user).model_dump(mode="json"))


@account_router.put("/password", response_model=SuccessResponse)
async def change_password_endpoint(
    payload: PasswordChangeRequest, response: Response, user: User = Depends(get_current_user)
):
    await auth_service.change_password(user, payload.current_password, payload.new_password)
    response.delete_cookie(SESSION_COOKIE, path="/")
    return SuccessResponse(data=MessageResponse(message="Password changed. Please login again.").model_dump())


@account_router.post("/logout", response_model=SuccessResponse)
async def logout_endpoint(request: Request, response: Response, user: User = Depends(get_current_user)):
    await auth_service.logout(get_session_token(request))
    response.delete_cookie(SESSION_COOKIE, path="/")
    log.info(f"User {user.id} logged out")
    return SuccessResponse(data=MessageResponse(message="Logged out successfully").model_dump())
