"""
Authentication utilities - JWT token handling and principal dependencies

Tokens are issued by the login service; this module only needs to read them.
create_access_token exists for tooling and tests.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from clubhouse.config import settings

ADMIN_TOKEN = "access"
PLAYER_TOKEN = "player"

# Security scheme for Bearer token
security = HTTPBearer()


@dataclass(frozen=True)
class Principal:
    """Who is calling, and which club they belong to"""
    subject_id: str
    club_id: str
    token_type: str


def create_access_token(subject_id: str, club_id: str, token_type: str = ADMIN_TOKEN) -> str:
    """Create a JWT for an admin (access) or a player"""
    expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": str(subject_id),
        "club_id": str(club_id),
        "exp": expire,
        "type": token_type,
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str, token_type: str = ADMIN_TOKEN) -> Optional[Principal]:
    """Verify a JWT token and return the principal if valid"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != token_type:
        return None
    subject_id = payload.get("sub")
    club_id = payload.get("club_id")
    if not subject_id or not club_id:
        return None
    return Principal(subject_id=subject_id, club_id=club_id, token_type=token_type)


def _principal(credentials: HTTPAuthorizationCredentials, token_type: str) -> Principal:
    principal = verify_token(credentials.credentials, token_type)
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal


def get_current_admin(credentials: HTTPAuthorizationCredentials = Depends(security)) -> Principal:
    """
    FastAPI dependency for club administrator routes.
    Use this in route functions: admin: Principal = Depends(get_current_admin)
    """
    return _principal(credentials, ADMIN_TOKEN)


def get_current_player(credentials: HTTPAuthorizationCredentials = Depends(security)) -> Principal:
    """FastAPI dependency for a logged-in player viewing their own data"""
    return _principal(credentials, PLAYER_TOKEN)
