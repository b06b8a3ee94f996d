"""SQLAlchemy model remembering the last stock band notified per user."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from notification_engine.infrastructure.database import Base
from notification_engine.utils import now_in_app_naive_datetime


class StockAlertStateModel(Base):
    __tablename__ = "stock_alert_state"
    __table_args__ = (
        UniqueConstraint("product_id", "user_id", name="uq_stock_alert_state_pair"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(
        Integer, ForeignKey("product.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    last_severity = Column(String(10), nullable=False, default="none")
    updated_at = Column(
        DateTime,
        nullable=False,
        default=now_in_app_naive_datetime,
        onupdate=now_in_app_naive_datetime,
    )


__all__ = ["StockAlertStateModel"]
