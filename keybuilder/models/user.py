"""User and role SQLAlchemy models."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from keybuilder.database import Base


class Role(Base):
    __tablename__ = "role"

    role_id = Column(Integer, primary_key=True, autoincrement=True)

    infos = relationship("RoleInfo", back_populates="role", cascade="all, delete-orphan")
    permissions = relationship("RolePermission", back_populates="role", cascade="all, delete-orphan")


class RoleInfo(Base):
    __tablename__ = "role_info"

    role_info_id = Column(Integer, primary_key=True, autoincrement=True)
    role_id = Column(Integer, ForeignKey("role.role_id"), nullable=False)
    language_code = Column(String(2), nullable=False)
    name = Column(String(100), nullable=False)
    description = Column(String(500))

    role = relationship("Role", back_populates="infos")


class RolePermission(Base):
    __tablename__ = "role_permissions"

    role_permission_id = Column(Integer, primary_key=True, autoincrement=True)
    role_id = Column(Integer, ForeignKey("role.role_id"), nullable=False)
    permission_name = Column(String(50), nullable=False)  # BROWSE_KEYS/CREATE_KEY/EDIT_KEY/...

    role = relationship("Role", back_populates="permissions")

    __table_args__ = (
        Index("idx_role_permissions_role", "role_id", "permission_name", unique=True),
    )


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    idp_id = Column(String(255), unique=True, nullable=False)  # OIDC subject
    name = Column(String(200), nullable=False)
    email = Column(String(200))
    organization_id = Column(Integer, ForeignKey("organization.organization_id"), nullable=True)
    role_id = Column(Integer, ForeignKey("role.role_id"), nullable=True)
    expires_at = Column(Integer)
    scope = Column(String(255))
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    organization = relationship("Organization")
    role = relationship("Role")
    workgroup_memberships = relationship("UserWorkgroup", back_populates="user", cascade="all, delete-orphan")
