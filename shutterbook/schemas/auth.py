"""
Authentication schemas
"""

from pydantic import EmailStr
from typing import List, Optional
from uuid import UUID

from shutterbook.schemas.base import BaseSchema, IDSchema


class CustomerLogin(BaseSchema):
    """Customer login schema"""
    email: EmailStr
    password: str

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "client@example.com",
                "password": "Client123!"
            }
        }
    }


class Token(BaseSchema):
    """Token response schema"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class RoleBrief(IDSchema):
    name: str
    permissions: List[str] = []


class PrincipalResponse(IDSchema):
    """Whoever the presented token belongs to"""
    principal: str
    email: str
    first_name: str
    last_name: str
    mobile_number: Optional[str] = None
    username: Optional[str] = None
    customer_no: Optional[str] = None
    role: Optional[RoleBrief] = None
