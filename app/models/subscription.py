"""Subscription model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint

from app.database import Base


class Subscription(Base):
    """``subscriber_id`` follows the channel owned by ``channel_id``."""

    __tablename__ = "subscription"
    __table_args__ = (UniqueConstraint("subscriber_id", "channel_id", name="uq_subscription_pair"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    subscriber_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    channel_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
