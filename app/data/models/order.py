from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric, CheckConstraint, Index, text
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from app.data.database import Base

# aktywne = wszystko poza statusami koncowymi
_ACTIVE_ORDER_CLAUSE = text("status NOT IN ('REJECTED', 'CANCELLED', 'COMPLETED')")


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    listing_id = Column(Integer, ForeignKey("listings.id"), nullable=False, index=True)
    buyer_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    seller_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)

    type = Column(String, nullable=False, default="SELL")
    status = Column(String, nullable=False, default="PENDING")
    total_price = Column(Numeric(10, 2), nullable=False)  # snapshot ceny z ogloszenia

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    listing = relationship("ListingModel")
    buyer = relationship("StudentModel", foreign_keys=[buyer_id])
    seller = relationship("StudentModel", foreign_keys=[seller_id])

    __table_args__ = (
        CheckConstraint("buyer_id <> seller_id", name="ck_orders_buyer_not_seller"),
        # jeden aktywny order na pare kupujacy + ogloszenie
        Index(
            "uq_orders_active_buyer_listing",
            "buyer_id",
            "listing_id",
            unique=True,
            postgresql_where=_ACTIVE_ORDER_CLAUSE,
            sqlite_where=_ACTIVE_ORDER_CLAUSE,
        ),
    )
