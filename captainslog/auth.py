import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from config import settings
from captainslog.schemas import SessionUser

logger = logging.getLogger(__name__)

# Tokens are minted by the Trello login flow, never by this service's routes
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)


# JWT token functions
def create_session_token(user: SessionUser, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=settings.JWT_EXPIRATION_HOURS))
    to_encode = {
        "sub": user.member_id,
        "username": user.username,
        "trello_token": user.trello_token,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_session_token(token: str) -> Optional[SessionUser]:
    """Session user from a token, None if it is invalid or expired"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"❌ JWT Error: {e}")
        return None

    member_id = payload.get("sub")
    trello_token = payload.get("trello_token")
    if not member_id or not trello_token:
        logger.warning("❌ Session token without member id or Trello token")
        return None
    return SessionUser(member_id=member_id, username=payload.get("username"), trello_token=trello_token)


# Viewers may be anonymous
async def get_optional_user(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[SessionUser]:
    if not token:
        return None
    return decode_session_token(token)


# Write-back actions need a signed-in planner
async def get_current_user(token: Optional[str] = Depends(oauth2_scheme)) -> SessionUser:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise credentials_exception

    user = decode_session_token(token)
    if user is None:
        raise credentials_exception
    logger.info(f"✅ Session for member {user.member_id}")
    return user
