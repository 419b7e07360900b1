"""
Base model class with common fields
"""

from datetime import datetime, timezone
import secrets
import string
import uuid

from sqlalchemy import Boolean, Column, DateTime, Uuid, func

from shutterbook.core.database import Base

_REFERENCE_ALPHABET = string.ascii_uppercase + string.digits


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def enum_values(enum_cls) -> list:
    """Persist enum values ("Pending") rather than member names ("PENDING")"""
    return [member.value for member in enum_cls]


def generate_reference(prefix: str) -> str:
    """Human readable reference such as TXN-7Q2M9D0K"""
    suffix = "".join(secrets.choice(_REFERENCE_ALPHABET) for _ in range(8))
    return f"{prefix}-{suffix}"


class BaseModel(Base):
    """
    Abstract base model with common fields
    """
    __abstract__ = True

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False
    )
    created_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False
    )


class AuditMixin:
    """
    Soft-delete flag and actor columns.

    Actors are either administrators or customers, so these ids carry no
    foreign key.
    """
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_by = Column(Uuid(as_uuid=True), nullable=True)
    updated_by = Column(Uuid(as_uuid=True), nullable=True)
    deleted_by = Column(Uuid(as_uuid=True), nullable=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
