from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi.security import OAuth2PasswordBearer

from clanleague.core.config import settings
from clanleague.core.exceptions import NotAuthorized

SECRET_KEY = settings.SECRET_KEY
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES
ADMIN_SUBJECT = "admin"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


@dataclass(frozen=True)
class AuthorizedContext:
    """Capability handed to every mutating engine operation."""
    subject: str
    issued_at: datetime


def require_context(ctx) -> AuthorizedContext:
    if not isinstance(ctx, AuthorizedContext):
        raise NotAuthorized("An authorized context is required for this operation.")
    return ctx


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "iat": datetime.utcnow()})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def verify_token(token: str) -> AuthorizedContext:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        raise NotAuthorized(f"Could not validate credentials: {e}")
    subject = payload.get("sub")
    if subject is None:
        raise NotAuthorized("Could not validate credentials: missing subject")
    issued_at = payload.get("iat")
    issued = datetime.utcfromtimestamp(issued_at) if issued_at else datetime.utcnow()
    return AuthorizedContext(subject=subject, issued_at=issued)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)
