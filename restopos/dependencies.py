"""
API dependencies for dependency injection

Bearer-token authentication for the POS and the super-admin console.

Usage:
    @router.get("/example")
    async def example(account: PosAccount = Depends(get_current_account)):
        ...
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.core.exceptions import AuthenticationFailed, NotFound, PermissionDenied
from restopos.database import get_db
from restopos.models import AccountStatus, AdminUser, PosAccount, SessionKind
from restopos.services import accounts, security

bearer_scheme = HTTPBearer(auto_error=False)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    return credentials.credentials if credentials else None


async def get_current_account(
    token: Optional[str] = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db),
) -> PosAccount:
    """
    The POS account behind the bearer token.

    Disabled or expired accounts are rejected even with a live session.
    """
    session = await security.resolve_session(db, token, SessionKind.POS)
    try:
        account = await accounts.load_account(db, session.subject_id)
    except NotFound:
        raise AuthenticationFailed("Invalid or expired session")

    if account.status != AccountStatus.ACTIVE:
        raise PermissionDenied("Account is disabled. Please contact support.")
    if not accounts.is_license_valid(account):
        raise PermissionDenied("License expired. Please renew your subscription.")
    return account


async def require_admin(
    token: Optional[str] = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db),
) -> AdminUser:
    """The super-admin behind the bearer token."""
    session = await security.resolve_session(db, token, SessionKind.ADMIN)
    admin = await db.get(AdminUser, session.subject_id)
    if admin is None:
        raise AuthenticationFailed("Invalid or expired session")
    return admin
