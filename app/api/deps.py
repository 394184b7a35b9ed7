from typing import Optional

from fastapi import Depends, Request

from app.core.errors import Forbidden, Unauthorized
from app.models.user import User, UserRole
from app.services import auth_service

SESSION_COOKIE = "session_token"


def get_session_token(request: Request) -> Optional[str]:
    """Bearer token from the Authorization header, falling back to the session cookie."""
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[len("Bearer "):].strip()
        if token:
            return token
    return request.cookies.get(SESSION_COOKIE) or None


async def get_current_user(request: Request) -> User:
    token = get_session_token(request)
    if not token:
        raise Unauthorized("No session token provided. Please login.")
    return await auth_service.resolve_session(token)


def require_roles(*roles: UserRole):
    """Dependency factory that only lets users with one of ``roles`` through."""
    async def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise Forbidden(f"Access denied. Required role: {' or '.join(r.value for r in roles)}")
        return user
    return checker
