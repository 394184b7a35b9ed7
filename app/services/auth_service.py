import logging
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Tuple

from tortoise.exceptions import IntegrityError

from app.core.config import SESSION_TTL_HOURS
from app.core.errors import Conflict, Unauthorized, ValidationError
from app.core.security import hash_password, verify_password
from app.models.user import Session, User, UserRole

log = logging.getLogger("auth_service")

# Roles a user may pick at sign-up; admins are promoted by another admin
SELF_SERVICE_ROLES = (UserRole.CUSTOMER, UserRole.TRUCK_OWNER)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


async def register(
    name: str,
    email: str,
    password: str,
    role: Optional[str] = None,
    birth_date: Optional[date] = None,
) -> User:
    if not name.strip() or not email.strip() or not password:
        raise ValidationError("Name, email, and password are required")

    email = normalize_email(email)
    if await User.filter(email=email).exists():
        raise Conflict("An account with this email already exists")

    user_role = UserRole(role) if role in {r.value for r in SELF_SERVICE_ROLES} else UserRole.CUSTOMER
    try:
        user = await User.create(
            name=name.strip(),
            email=email,
            password_hash=hash_password(password),
            role=user_role,
            birth_date=birth_date,
        )
    except IntegrityError:
        raise Conflict("An account with this email already exists")
    log.info(f"Registered user {user.id} as {user.role.value}")
    return user


async def login(email: str, password: str) -> Tuple[User, Session]:
    user = await User.get_or_none(email=normalize_email(email))
    if not user or not verify_password(user.password_hash, password):
        raise Unauthorized("Invalid email or password")

    session = await Session.create(
        user=user,
        token=uuid.uuid4().hex,
        expires_at=datetime.now(timezone.utc) + timedelta(hours=SESSION_TTL_HOURS),
    )
    log.info(f"User {user.id} logged in")
    return user, session


async def resolve_session(token: str) -> User:
    """Returns the session's user; expired sessions are deleted and rejected."""
    session = await Session.get_or_none(token=token).select_related("user")
    if not session:
        raise Unauthorized("Invalid session token. Please login.")
    if datetime.now(timezone.utc) > _aware(session.expires_at):
        await session.delete()
        raise Unauthorized("Your session has expired. Please login again.")
    return session.user


async def logout(token: str) -> None:
    await Session.filter(token=token).delete()


async def update_profile(
    user: User,
    name: Optional[str] = None,
    email: Optional[str] = None,
    birth_date: Optional[date] = None,
) -> User:
    update_fields = []
    if name is not None:
        if not name.strip():
            raise ValidationError("Name cannot be empty")
        user.name = name.strip()
        update_fields.append("name")
    if email is not None:
        email = normalize_email(email)
        if email != user.email:
            if await User.filter(email=email).exclude(id=user.id).exists():
                raise Conflict("Email already in use")
            user.email = email
            update_fields.append("email")
    if birth_date is not None:
        user.birth_date = birth_date
        update_fields.append("birth_date")

    if not update_fields:
        raise ValidationError("No data provided")
    await user.save(update_fields=update_fields)
    return user


async def change_password(user: User, current_password: str, new_password: str) -> None:
    if not verify_password(user.password_hash, current_password):
        raise Unauthorized("Current password is incorrect")
    if not new_password:
        raise ValidationError("New password is required")
    user.password_hash = hash_password(new_password)
    await user.save(update_fields=["password_hash"])
    # Every session is revoked, including the current one
    await Session.filter(user_id=user.id).delete()
