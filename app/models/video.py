"""Video and watch history models."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text

from app.database import Base


class Video(Base):
    """Published video owned by a channel (user)."""

    __tablename__ = "video"

    id = Column(Integer, primary_key=True, autoincrement=True)
    video_file = Column(String(1024), nullable=False)  # media host url
    thumbnail = Column(String(1024), nullable=False)  # media host url
    title = Column(String(512), nullable=False)
    description = Column(Text, nullable=False)
    duration = Column(Float, nullable=False)
    views = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=True)
    owner_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class WatchHistoryEntry(Base):
    """A video a user has watched."""

    __tablename__ = "watch_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    video_id = Column(Integer, ForeignKey("video.id"), nullable=False, index=True)
    watched_at = Column(DateTime, nullable=False, default=datetime.utcnow)
