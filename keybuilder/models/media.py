"""Media file SQLAlchemy models and their links to keys, groups and collections."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from keybuilder.database import Base


class Media(Base):
    __tablename__ = "media"

    media_id = Column(Integer, primary_key=True, autoincrement=True)
    file_name = Column(String(255))
    file_path = Column(String(1000))
    thumbnail_name = Column(String(255))
    thumbnail_path = Column(String(1000))
    media_type = Column(String(50), nullable=False)  # image/jpeg/image/png
    creators = Column(JSON)
    license_url = Column(String(500))
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    infos = relationship("MediaInfo", back_populates="media", cascade="all, delete-orphan")


class MediaInfo(Base):
    __tablename__ = "media_info"

    media_info_id = Column(Integer, primary_key=True, autoincrement=True)
    media_id = Column(Integer, ForeignKey("media.media_id"), nullable=False)
    language_code = Column(String(2), nullable=False)
    title = Column(String(200), nullable=False)

    media = relationship("Media", back_populates="infos")


class KeyMedia(Base):
    __tablename__ = "key_media"

    key_media_id = Column(Integer, primary_key=True, autoincrement=True)
    key_id = Column(String(36), ForeignKey("artsapp_key.key_id"), nullable=False)
    media_id = Column(Integer, ForeignKey("media.media_id"), nullable=False)

    __table_args__ = (
        Index("idx_key_media_key", "key_id"),
    )


class GroupMedia(Base):
    __tablename__ = "key_group_media"

    key_group_media_id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey("key_group.key_group_id"), nullable=False)
    media_id = Column(Integer, ForeignKey("media.media_id"), nullable=False)


class CollectionMedia(Base):
    __tablename__ = "collection_media"

    collection_media_id = Column(Integer, primary_key=True, autoincrement=True)
    collection_id = Column(Integer, ForeignKey("collection.collection_id"), nullable=False)
    media_id = Column(Integer, ForeignKey("media.media_id"), nullable=False)
