from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class EventModel(Base):
    """Projection of the event service's events; this service only reads it."""

    __tablename__ = 'event'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), default='', nullable=False)
    status: Mapped[str] = mapped_column(String(20), default='draft', nullable=False)
    starts_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    price: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default='USD', nullable=False)
    total_seats: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
