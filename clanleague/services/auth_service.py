import logging
from datetime import datetime
from functools import lru_cache

from fastapi import Depends, HTTPException, status

from clanleague.core import security
from clanleague.core.config import settings
from clanleague.core.exceptions import NotAuthorized
from clanleague.core.security import AuthorizedContext
from clanleague.schemas import auth_schemas

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _admin_password_hash() -> str:
    return security.get_password_hash(settings.ADMIN_PASSWORD)


def authenticate_admin(password: str) -> AuthorizedContext:
    """Exchange the admin password for the capability mutating operations require."""
    if not password or not security.verify_password(password, _admin_password_hash()):
        logger.warning("Rejected admin login attempt")
        raise NotAuthorized("Incorrect admin password.")
    return AuthorizedContext(subject=security.ADMIN_SUBJECT, issued_at=datetime.utcnow())


def issue_token(ctx: AuthorizedContext) -> auth_schemas.Token:
    access_token = security.create_access_token(data={"sub": ctx.subject})
    return auth_schemas.Token(access_token=access_token, token_type="bearer")


def context_from_token(token: str) -> AuthorizedContext:
    return security.verify_token(token)


def get_authorized_context(token: str = Depends(security.oauth2_scheme)) -> AuthorizedContext:
    try:
        return context_from_token(token)
    except NotAuthorized as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )
