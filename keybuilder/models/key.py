"""Identification key SQLAlchemy models: key, metadata, editors and revisions."""

import uuid

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from keybuilder.database import Base


def _uuid4() -> str:
    return str(uuid.uuid4())


class Key(Base):
    __tablename__ = "artsapp_key"

    key_id = Column(String(36), primary_key=True, default=_uuid4)
    status = Column(String(20), nullable=False, default="PRIVATE")  # PRIVATE/BETA/PUBLISHED/HIDDEN
    version = Column(String(50))
    creators = Column(JSON)
    contributors = Column(JSON)
    license_url = Column(String(500))
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    workgroup_id = Column(Integer, ForeignKey("workgroup.workgroup_id"), nullable=True)
    group_id = Column(Integer, ForeignKey("key_group.key_group_id"), nullable=True)
    # Current accepted revision; no FK to avoid a cycle with key_revisions.
    revision_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    infos = relationship("KeyInfo", back_populates="key", cascade="all, delete-orphan")
    creator = relationship("User")
    workgroup = relationship("Workgroup")


class KeyInfo(Base):
    __tablename__ = "key_info"

    key_info_id = Column(Integer, primary_key=True, autoincrement=True)
    key_id = Column(String(36), ForeignKey("artsapp_key.key_id"), nullable=False)
    language_code = Column(String(2), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text)

    key = relationship("Key", back_populates="infos")

    __table_args__ = (
        Index("idx_key_info_language", "key_id", "language_code", unique=True),
    )


class KeyLanguage(Base):
    __tablename__ = "languages"

    languages_id = Column(Integer, primary_key=True, autoincrement=True)
    key_id = Column(String(36), ForeignKey("artsapp_key.key_id"), nullable=False)
    language_code = Column(String(2), nullable=False)


class KeyPublisher(Base):
    __tablename__ = "publishers"

    publishers_id = Column(Integer, primary_key=True, autoincrement=True)
    key_id = Column(String(36), ForeignKey("artsapp_key.key_id"), nullable=False)
    organization_id = Column(Integer, ForeignKey("organization.organization_id"), nullable=False)


class Editor(Base):
    __tablename__ = "editors"

    editors_id = Column(Integer, primary_key=True, autoincrement=True)
    key_id = Column(String(36), ForeignKey("artsapp_key.key_id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)

    user = relationship("User")

    __table_args__ = (
        Index("idx_editors_pair", "key_id", "user_id", unique=True),
    )


class Revision(Base):
    __tablename__ = "revision"

    revision_id = Column(String(36), primary_key=True, default=_uuid4)
    content = Column(JSON, nullable=False, default=dict)
    media = Column(JSON, nullable=False, default=dict)
    note = Column(String(500))
    status = Column(String(20), nullable=False, default="DRAFT")  # DRAFT/REVIEW/ACCEPTED
    mode = Column(Integer, nullable=False, default=1)  # 1=simple, 2=advanced
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class KeyRevision(Base):
    __tablename__ = "revisions"

    revisions_id = Column(Integer, primary_key=True, autoincrement=True)
    key_id = Column(String(36), ForeignKey("artsapp_key.key_id"), nullable=False)
    revision_id = Column(String(36), ForeignKey("revision.revision_id"), unique=True, nullable=False)

    __table_args__ = (
        Index("idx_revisions_key", "key_id"),
    )
