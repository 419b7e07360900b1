"""
Authentication endpoints for administrators and customers
"""

from typing import Any, Dict
import logging
from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from shutterbook.config import settings
from shutterbook.core.database import get_session
from shutterbook.core.exceptions import AuthenticationError
from shutterbook.core.redis import TokenBlacklist, get_redis
from shutterbook.core.security import (
    PRINCIPAL_CUSTOMER,
    PRINCIPAL_USER,
    create_access_token,
    create_refresh_token,
    get_token_payload,
    remaining_lifetime,
    verify_password,
    token_subject_id,
)
from shutterbook.models.customer import Customer
from shutterbook.models.user import User
from shutterbook.schemas.auth import CustomerLogin, PrincipalResponse, RoleBrief, Token
from shutterbook.schemas.response import ApiResponse

logger = logging.getLogger(__name__)
router = APIRouter()


def _issue_tokens(subject_id, principal: str) -> Token:
    return Token(
        access_token=create_access_token(str(subject_id), principal),
        refresh_token=create_refresh_token(str(subject_id), principal),
        expires_in=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


@router.post("/login", response_model=ApiResponse[Token])
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Administrator login; ``username`` carries the email address
    """
    result = await db.execute(select(User).where(User.email == form_data.username))
    user = result.scalar_one_or_none()

    if not user or not verify_password(form_data.password, user.password_hash):
        raise AuthenticationError("Incorrect email or password")
    if not user.is_active:
        raise AuthenticationError("Account is deactivated")

    logger.info("Administrator logged in", extra={"user_id": str(user.id)})
    return ApiResponse(message="Login successful", data=_issue_tokens(user.id, PRINCIPAL_USER))


@router.post("/customer/login", response_model=ApiResponse[Token])
async def customer_login(
    credentials: CustomerLogin,
    db: AsyncSession = Depends(get_session)
) -> Any:
    result = await db.execute(select(Customer).where(Customer.email == credentials.email))
    customer = result.scalar_one_or_none()

    if not customer or not verify_password(credentials.password, customer.password_hash):
        raise AuthenticationError("Incorrect email or password")
    if not customer.is_active:
        raise AuthenticationError("Account is deactivated")

    logger.info("Customer logged in", extra={"customer_id": str(customer.id)})
    return ApiResponse(message="Login successful", data=_issue_tokens(customer.id, PRINCIPAL_CUSTOMER))


@router.post("/logout", response_model=ApiResponse[dict])
async def logout(
    payload: Dict[str, Any] = Depends(get_token_payload),
    redis_client=Depends(get_redis)
) -> Any:
    """
    Revoke the presented access token
    """
    await TokenBlacklist(redis_client).add(payload["jti"], remaining_lifetime(payload))
    return ApiResponse(message="Successfully logged out", data={})


@router.get("/me", response_model=ApiResponse[PrincipalResponse])
async def me(
    payload: Dict[str, Any] = Depends(get_token_payload),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Profile of whoever owns the token
    """
    subject_id = token_subject_id(payload)

    if payload.get("principal") == PRINCIPAL_CUSTOMER:
        customer = await db.get(Customer, subject_id)
        if not customer or not customer.is_active:
            raise AuthenticationError("Customer not found")
        profile = PrincipalResponse(
            id=customer.id,
            principal=PRINCIPAL_CUSTOMER,
            email=customer.email,
            first_name=customer.first_name,
            last_name=customer.last_name,
            mobile_number=customer.mobile_number,
            customer_no=customer.customer_no,
        )
    else:
        result = await db.execute(
            select(User).options(selectinload(User.role)).where(User.id == subject_id)
        )
        user = result.scalar_one_or_none()
        if not user or not user.is_active:
            raise AuthenticationError("User not found")
        profile = PrincipalResponse(
            id=user.id,
            principal=PRINCIPAL_USER,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            mobile_number=user.mobile_number,
            username=user.username,
            role=RoleBrief.model_validate(user.role) if user.role else None,
        )

    return ApiResponse(message="Profile fetched successfully", data=profile)
