"""
Base Pydantic schemas
"""

from pydantic import BaseModel, ConfigDict, PlainSerializer
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional
from uuid import UUID


# Stored as NUMERIC(10, 2), rendered as a JSON number
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class BaseSchema(BaseModel):
    """Base schema with common configuration"""
    model_config = ConfigDict(
        from_attributes=True,
        use_enum_values=True,
    )


class TimestampSchema(BaseSchema):
    """Schema with timestamp fields"""
    created_at: datetime
    updated_at: Optional[datetime] = None


class IDSchema(BaseSchema):
    """Schema with ID field"""
    id: UUID


class AuditSchema(BaseSchema):
    """Soft-delete flag and actor columns"""
    is_active: bool = True
    created_by: Optional[UUID] = None
    updated_by: Optional[UUID] = None
