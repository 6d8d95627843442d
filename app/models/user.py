"""
User Models
Accounts, per-organization role assignments and password reset tokens
"""

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from app.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    is_verified = Column(Boolean, default=False)
    global_role_id = Column(String(36), ForeignKey("roles.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    global_role = relationship("Role", foreign_keys=[global_role_id])


class UserOrganizationRole(Base):
    """At most one role per (user, organization)"""
    __tablename__ = "user_organization_roles"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    organization_id = Column(
        String(36), ForeignKey("organizations.id", ondelete="CASCADE"), primary_key=True
    )
    role_id = Column(String(36), ForeignKey("roles.id", ondelete="CASCADE"), nullable=False)


class Token(Base):
    """Password reset token (bcrypt hash, deleted on use)"""
    __tablename__ = "tokens"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
