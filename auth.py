# EduFam Access - actor resolution (bearer token -> Actor, refreshed from the users table)
import logging
from datetime import timedelta

from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from access import Actor
from access.clock import utcnow
from config import get_settings
from database.database import get_db
from database.models import User

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)

ANONYMOUS_ID = "anonymous"
DEV_TOKEN_EXPIRE_MINUTES = 60


def decode_token(token: str) -> dict | None:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def create_dev_token(user: User, expires_minutes: int = DEV_TOKEN_EXPIRE_MINUTES) -> str:
    """Development/test tokens only; production tokens come from the identity provider."""
    settings = get_settings()
    expire = utcnow() + timedelta(minutes=expires_minutes)
    claims = {"sub": user.id, "role": user.role, "school_id": user.school_id, "exp": expire}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def anonymous_actor() -> Actor:
    return Actor(id=ANONYMOUS_ID, role=None)


async def resolve_actor(session: AsyncSession, claims: dict | None) -> Actor:
    """
    Build the Actor for this request. Role and home school are re-read from the users
    table so a demotion or transfer applies immediately; the token only names the user.
    Unknown or deactivated users resolve to an anonymous actor.
    """
    if not claims or not claims.get("sub"):
        return anonymous_actor()
    user = await session.get(User, str(claims["sub"]))
    if user is None or not user.is_active:
        logger.info("token subject %s has no active account", claims.get("sub"))
        return anonymous_actor()
    return Actor(id=user.id, role=user.role, home_school_id=user.school_id, resolved_at=utcnow())


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: AsyncSession = Depends(get_db),
) -> Actor:
    claims = decode_token(credentials.credentials) if credentials else None
    try:
        return await resolve_actor(db, claims)
    except SQLAlchemyError as exc:
        logger.error("actor lookup failed: %s", exc)
        raise HTTPException(status_code=503, detail="Identity lookup unavailable")


async def require_actor(actor: Actor = Depends(get_current_actor)) -> Actor:
    """401 unless the bearer token named an active user."""
    if actor.id == ANONYMOUS_ID:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return actor
