"""SQLAlchemy model for per-user notification preferences."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, JSON, String, UniqueConstraint

from notification_engine.infrastructure.database import Base


class NotificationPreferenceModel(Base):
    """Channel enablement, language and thresholds for one notification type."""

    __tablename__ = "notification_preference"
    __table_args__ = (
        UniqueConstraint("user_id", "notification_type", name="uq_notification_preference_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    notification_type = Column(String(50), nullable=False)
    in_app_enabled = Column(Boolean, nullable=False, default=True)
    email_enabled = Column(Boolean, nullable=False, default=True)
    language = Column(String(5), nullable=True)
    threshold = Column(JSON, nullable=True)


__all__ = ["NotificationPreferenceModel"]
