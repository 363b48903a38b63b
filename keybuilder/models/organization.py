"""Organization and workgroup SQLAlchemy models."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from keybuilder.database import Base


class Organization(Base):
    __tablename__ = "organization"

    organization_id = Column(Integer, primary_key=True, autoincrement=True)
    idp_id = Column(String(255), unique=True)  # IdP group id (fc:org)
    status = Column(String(20), nullable=False, default="ACTIVE")  # ACTIVE/INACTIVE
    created_at = Column(DateTime, server_default=func.now())

    infos = relationship("OrganizationInfo", back_populates="organization", cascade="all, delete-orphan")


class OrganizationInfo(Base):
    __tablename__ = "organization_info"

    organization_info_id = Column(Integer, primary_key=True, autoincrement=True)
    organization_id = Column(Integer, ForeignKey("organization.organization_id"), nullable=False)
    language_code = Column(String(2), nullable=False)
    full_name = Column(String(200), nullable=False)
    short_name = Column(String(50))
    description = Column(String(1000))
    home_url = Column(String(500))

    organization = relationship("Organization", back_populates="infos")


class Workgroup(Base):
    __tablename__ = "workgroup"

    workgroup_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)
    organization_id = Column(Integer, ForeignKey("organization.organization_id"), nullable=False)
    created_by = Column(Integer, ForeignKey("users.user_id"))
    created_at = Column(DateTime, server_default=func.now())

    members = relationship("UserWorkgroup", back_populates="workgroup", cascade="all, delete-orphan")


class UserWorkgroup(Base):
    __tablename__ = "user_workgroups"

    user_workgroups_id = Column(Integer, primary_key=True, autoincrement=True)
    workgroup_id = Column(Integer, ForeignKey("workgroup.workgroup_id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)

    workgroup = relationship("Workgroup", back_populates="members")
    user = relationship("User", back_populates="workgroup_memberships")

    __table_args__ = (
        Index("idx_user_workgroups_pair", "workgroup_id", "user_id", unique=True),
    )
