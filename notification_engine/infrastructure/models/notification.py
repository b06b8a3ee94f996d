"""SQLAlchemy models for broadcast notifications and per-user deliveries."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from notification_engine.infrastructure.database import Base
from notification_engine.utils import now_in_app_naive_datetime


class NotificationModel(Base):
    """Broadcast record, written once per published event."""

    __tablename__ = "notification"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(50), nullable=False, index=True)
    payload = Column(JSON, nullable=False, default=dict)
    priority = Column(String(10), nullable=False, default="medium")
    related_entity_type = Column(String(50), nullable=True)
    related_entity_id = Column(Integer, nullable=True)
    target_roles = Column(JSON, nullable=False, default=list)
    recipient_ids = Column(JSON, nullable=True)
    created_by = Column(Integer, ForeignKey("user.id"), nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)

    deliveries = relationship("UserNotificationModel", back_populates="notification")


class UserNotificationModel(Base):
    """Delivery row: one per (notification, recipient)."""

    __tablename__ = "user_notification"
    __table_args__ = (
        UniqueConstraint("notification_id", "user_id", name="uq_user_notification_recipient"),
        Index("ix_user_notification_inbox", "user_id", "is_visible"),
    )

    id = Column(Integer, primary_key=True, index=True)
    notification_id = Column(
        Integer,
        ForeignKey("notification.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(Integer, ForeignKey("user.id"), nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime(), nullable=True)
    is_visible = Column(Boolean, nullable=False, default=True)
    hidden_at = Column(DateTime(), nullable=True)
    is_email_sent = Column(Boolean, nullable=False, default=False)
    email_sent_at = Column(DateTime(), nullable=True)
    email_attempts = Column(Integer, nullable=False, default=0)
    title = Column(String(255), nullable=True)
    message = Column(Text, nullable=True)
    language = Column(String(5), nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)

    notification = relationship("NotificationModel", back_populates="deliveries", lazy="joined")


__all__ = ["NotificationModel", "UserNotificationModel"]
