"""
PIN / password hashing and login sessions.

Secrets are stored as bcrypt hashes. A successful login issues an opaque
bearer token kept in ``auth_sessions`` until it expires or the user logs out.
"""

import logging
import secrets
from datetime import timedelta
from typing import Optional

import bcrypt
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.core.config import get_settings
from restopos.core.exceptions import AuthenticationFailed
from restopos.core.timeutils import as_utc, utcnow
from restopos.models import AuthSession, SessionKind

settings = get_settings()
logger = logging.getLogger(__name__)


def hash_secret(secret: str) -> str:
    """Hash a PIN or password with bcrypt."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(secret.encode("utf-8"), salt).decode("utf-8")


def verify_secret(secret: str, hashed: Optional[str]) -> bool:
    """Check a PIN or password against its stored hash."""
    if not secret or not hashed:
        return False
    try:
        return bcrypt.checkpw(secret.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        logger.warning("Malformed password hash encountered")
        return False


async def create_session(db: AsyncSession, kind: SessionKind, subject_id: str) -> AuthSession:
    """Issue a new bearer token for a POS account or an admin."""
    now = utcnow()
    session = AuthSession(
        token=secrets.token_urlsafe(32),
        kind=kind,
        subject_id=subject_id,
        created_at=now,
        expires_at=now + timedelta(hours=settings.session_ttl_hours),
    )
    db.add(session)
    await db.flush()
    logger.debug(f"Session issued for {kind.value} {subject_id}")
    return session


async def resolve_session(db: AsyncSession, token: Optional[str], kind: SessionKind) -> AuthSession:
    """
    Look up a live session of the given kind.

    Raises:
        AuthenticationFailed: token missing, unknown, of the wrong kind or expired
    """
    if not token:
        raise AuthenticationFailed("Authentication required")

    result = await db.execute(select(AuthSession).where(AuthSession.token == token))
    session = result.scalar_one_or_none()

    if session is None or session.kind != kind:
        raise AuthenticationFailed("Invalid or expired session")

    if as_utc(session.expires_at) <= utcnow():
        await db.delete(session)
        await db.commit()
        raise AuthenticationFailed("Invalid or expired session")

    return session


async def logout(db: AsyncSession, token: str) -> None:
    """Forget a bearer token. Unknown tokens are ignored."""
    await db.execute(delete(AuthSession).where(AuthSession.token == token))
    await db.commit()


async def purge_expired_sessions(db: AsyncSession) -> int:
    """Delete sessions past their expiry; returns how many were removed."""
    result = await db.execute(delete(AuthSession).where(AuthSession.expires_at <= utcnow()))
    await db.commit()
    return result.rowcount or 0
