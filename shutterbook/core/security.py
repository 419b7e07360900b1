"""
Security utilities for authentication and authorization
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
import logging
import time
import uuid

from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from shutterbook.config import settings
from shutterbook.core.database import get_session
from shutterbook.core.exceptions import AuthenticationError, AuthorizationError
from shutterbook.core.redis import TokenBlacklist, get_redis
from shutterbook.models.customer import Customer
from shutterbook.models.user import User

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# OAuth2 scheme
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login")

PRINCIPAL_USER = "user"
PRINCIPAL_CUSTOMER = "customer"

# Role permission that grants every key
ALL_PERMISSIONS = "*"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def _encode(subject: str, principal: str, token_type: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = {
        "sub": subject,
        "principal": principal,
        "type": token_type,
        "jti": uuid.uuid4().hex,
        "iat": int(time.time()),
        "exp": now + expires_delta,
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(
    subject: str,
    principal: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT access token
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode(subject, principal, "access", expires_delta)


def create_refresh_token(
    subject: str,
    principal: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT refresh token
    """
    if expires_delta is None:
        expires_delta = timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS)
    return _encode(subject, principal, "refresh", expires_delta)


def decode_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify a JWT token
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        logger.warning(f"JWT decode error: {e}")
        raise AuthenticationError("Could not validate credentials")


def remaining_lifetime(payload: Dict[str, Any]) -> int:
    """Seconds until the token expires"""
    return max(0, int(payload.get("exp", 0) - time.time()))


async def get_token_payload(
    token: str = Depends(oauth2_scheme),
    redis_client=Depends(get_redis)
) -> Dict[str, Any]:
    """
    Verified access-token claims, rejecting revoked tokens
    """
    payload = decode_token(token)
    if payload.get("type") != "access":
        raise AuthenticationError("Invalid token type. Expected access")

    jti = payload.get("jti")
    if not jti or await TokenBlacklist(redis_client).contains(jti):
        raise AuthenticationError("Token has been invalidated")

    if payload.get("sub") is None:
        raise AuthenticationError("Could not validate credentials")
    return payload


def token_subject_id(payload: Dict[str, Any]) -> uuid.UUID:
    try:
        return uuid.UUID(payload["sub"])
    except (KeyError, ValueError):
        raise AuthenticationError("Could not validate credentials")


async def get_current_user(
    payload: Dict[str, Any] = Depends(get_token_payload),
    db: AsyncSession = Depends(get_session)
) -> User:
    """
    Administrator behind the presented token
    """
    if payload.get("principal") != PRINCIPAL_USER:
        raise AuthorizationError("Administrator access required")

    stmt = (
        select(User)
        .options(selectinload(User.role))
        .where(User.id == token_subject_id(payload))
    )
    user = (await db.execute(stmt)).scalar_one_or_none()
    if not user:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("Account is deactivated")
    return user


async def get_current_customer(
    payload: Dict[str, Any] = Depends(get_token_payload),
    db: AsyncSession = Depends(get_session)
) -> Customer:
    """
    Customer behind the presented token
    """
    if payload.get("principal") != PRINCIPAL_CUSTOMER:
        raise AuthorizationError("Customer access required")

    customer = await db.get(Customer, token_subject_id(payload))
    if not customer:
        raise AuthenticationError("Customer not found")
    if not customer.is_active:
        raise AuthenticationError("Account is deactivated")
    return customer


def require_permission(permission: str):
    """
    Dependency factory: the administrator's role must carry ``permission``
    """

    async def checker(current_user: User = Depends(get_current_user)) -> User:
        granted = current_user.permissions
        if ALL_PERMISSIONS not in granted and permission not in granted:
            logger.warning(
                "Permission denied",
                extra={"user_id": str(current_user.id), "permission": permission}
            )
            raise AuthorizationError(f"Missing permission: {permission}")
        return current_user

    return checker
