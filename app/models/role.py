"""
Role and Permission Models
Roles are global or scoped to one organization
"""

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from app.database import Base


class Permission(Base):
    __tablename__ = "permissions"

    id = Column(String(36), primary_key=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(String(255), nullable=True)
    scope = Column(String(20), nullable=False)  # 'global' or 'organization'


class Role(Base):
    __tablename__ = "roles"
    __table_args__ = (
        UniqueConstraint("name", "scope", "scope_id", name="uq_roles_name_scope"),
    )

    id = Column(String(36), primary_key=True)
    name = Column(String(100), nullable=False)
    scope = Column(String(20), nullable=False)
    # organization id when scope is 'organization', removed together with the organization
    scope_id = Column(String(36), nullable=True, index=True)
    is_default = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    permissions = relationship("Permission", secondary="role_permissions")


class RolePermission(Base):
    __tablename__ = "role_permissions"

    role_id = Column(String(36), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True)
    permission_id = Column(String(36), ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True)
