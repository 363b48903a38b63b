"""Key group and collection SQLAlchemy models."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from keybuilder.database import Base


class KeyGroup(Base):
    __tablename__ = "key_group"

    key_group_id = Column(Integer, primary_key=True, autoincrement=True)
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    infos = relationship("GroupInfo", back_populates="group", cascade="all, delete-orphan")


class GroupInfo(Base):
    __tablename__ = "key_group_info"

    key_group_info_id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey("key_group.key_group_id"), nullable=False)
    language_code = Column(String(2), nullable=False)
    name = Column(String(200), nullable=False)
    description = Column(Text)

    group = relationship("KeyGroup", back_populates="infos")


class GroupParent(Base):
    __tablename__ = "key_group_parents"

    key_group_parents_id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey("key_group.key_group_id"), unique=True, nullable=False)
    parent_id = Column(Integer, ForeignKey("key_group.key_group_id"), nullable=False)


class Collection(Base):
    __tablename__ = "collection"

    collection_id = Column(Integer, primary_key=True, autoincrement=True)
    workgroup_id = Column(Integer, ForeignKey("workgroup.workgroup_id"), nullable=False)
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    infos = relationship("CollectionInfo", back_populates="collection", cascade="all, delete-orphan")


class CollectionInfo(Base):
    __tablename__ = "collection_info"

    collection_info_id = Column(Integer, primary_key=True, autoincrement=True)
    collection_id = Column(Integer, ForeignKey("collection.collection_id"), nullable=False)
    language_code = Column(String(2), nullable=False)
    name = Column(String(200), nullable=False)
    description = Column(Text)

    collection = relationship("Collection", back_populates="infos")


class KeyCollection(Base):
    __tablename__ = "collections"

    collections_id = Column(Integer, primary_key=True, autoincrement=True)
    key_id = Column(String(36), ForeignKey("artsapp_key.key_id"), nullable=False)
    collection_id = Column(Integer, ForeignKey("collection.collection_id"), nullable=False)

    __table_args__ = (
        Index("idx_collections_key", "key_id", "collection_id"),
    )
