from sqlalchemy import Column, Integer, ForeignKey, String, Boolean, DateTime, Numeric
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from app.data.database import Base


class ListingModel(Base):
    __tablename__ = "listings"

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)

    title = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    listing_type = Column(String, nullable=False, default="SELL")  # SELL, RENT, BOTH
    is_available = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    owner = relationship("StudentModel")
