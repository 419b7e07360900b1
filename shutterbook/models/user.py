"""
Administrator user and role models
"""

from sqlalchemy import Column, String, Boolean, ForeignKey, JSON, Uuid
from sqlalchemy.orm import relationship

from shutterbook.models.base import BaseModel


class Role(BaseModel):
    """
    Named set of permission keys such as ``transaction:approve``
    """
    __tablename__ = "roles"

    name = Column(String(50), unique=True, nullable=False)
    description = Column(String(255))
    permissions = Column(JSON, default=list, nullable=False)

    users = relationship("User", back_populates="role")

    def __repr__(self):
        return f"<Role(id={self.id}, name={self.name})>"


class User(BaseModel):
    """
    Back-office user (administrator, front desk, ...)
    """
    __tablename__ = "users"

    username = Column(String(30), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(25), nullable=False)
    last_name = Column(String(25), nullable=False)
    mobile_number = Column(String(20), nullable=False)
    profile_image = Column(String(500))
    role_id = Column(Uuid(as_uuid=True), ForeignKey("roles.id"), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    role = relationship("Role", back_populates="users")

    @property
    def permissions(self) -> list:
        return list(self.role.permissions or []) if self.role else []

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"
