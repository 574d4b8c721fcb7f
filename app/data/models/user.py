from sqlalchemy import Column, Integer, String, DateTime
from datetime import datetime, timezone

from app.data.database import Base


class UserModel(Base):
    """Konto z modulu auth; tutaj czytamy tylko email."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String, nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
