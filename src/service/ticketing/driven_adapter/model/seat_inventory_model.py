from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class SeatInventoryModel(Base):
    """
    One row per event. `seats` is the ordered seat map:
    [{"seat_id": "S001", "occupied": true, "holder_id": 7}, ...]
    """

    __tablename__ = 'seat_inventory'

    event_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    total_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    seats: Mapped[list] = mapped_column(JSON, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
