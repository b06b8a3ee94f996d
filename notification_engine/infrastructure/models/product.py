"""SQLAlchemy model for the stock fields of a product."""

from sqlalchemy import Column, DateTime, Integer, String

from notification_engine.infrastructure.database import Base
from notification_engine.utils import now_in_app_naive_datetime


class ProductModel(Base):
    """Product row; ``stock_version`` guards compare-and-set stock writes."""

    __tablename__ = "product"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    category = Column(String(80), nullable=True)
    stock_quantity = Column(Integer, nullable=False, default=0)
    stock_version = Column(Integer, nullable=False, default=0)
    updated_at = Column(
        DateTime,
        nullable=False,
        default=now_in_app_naive_datetime,
        onupdate=now_in_app_naive_datetime,
    )


__all__ = ["ProductModel"]
