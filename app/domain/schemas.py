# app/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from decimal import Decimal
from datetime import datetime

from app.domain.order_state_machine import OrderStatus


class SellOrderCreate(BaseModel):
    """Schema dla zlozenia zamowienia SELL."""

    listing_id: int = Field(..., gt=0, description="ID ogloszenia (musi być > 0)")


class OrderStatusUpdate(BaseModel):
    """Schema dla zmiany statusu zamowienia."""

    status: OrderStatus = Field(..., description="Nowy status zamowienia")


class ListingSummaryOut(BaseModel):
    id: int
    title: str
    price: Decimal
    listing_type: str
    is_available: bool

    model_config = ConfigDict(from_attributes=True)


class ParticipantOut(BaseModel):
    """Publiczna tozsamosc strony zamowienia."""

    id: int
    user_id: int
    email: str | None = None


class OrderOut(BaseModel):
    """Schema dla zamówienia (response)."""

    id: int
    listing_id: int
    buyer_id: int
    seller_id: int
    type: str
    status: OrderStatus
    total_price: Decimal
    created_at: datetime
    updated_at: datetime
    listing: ListingSummaryOut | None = None
    buyer: ParticipantOut | None = None
    seller: ParticipantOut | None = None

    model_config = ConfigDict(from_attributes=True)
