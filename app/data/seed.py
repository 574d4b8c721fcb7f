# app/data/seed.py
from decimal import Decimal

from app.data.database import SessionLocal, init_db
from app.data.models import UserModel, StudentModel, ListingModel
from app.domain.order_state_machine import ListingType
from app.utils.logging import get_logger

logger = get_logger(__name__)


def seed(session_factory=SessionLocal):
    """Demo: sprzedajacy z jednym ogloszeniem i kupujacy."""
    db = session_factory()
    try:
        # not forcing: only seed if empty
        if db.query(StudentModel).first():
            return False

        seller_user = UserModel(email="seller@campus.example")
        buyer_user = UserModel(email="buyer@campus.example")
        db.add_all([seller_user, buyer_user])
        db.flush()

        seller = StudentModel(user_id=seller_user.id, is_active=True)
        buyer = StudentModel(user_id=buyer_user.id, is_active=True)
        db.add_all([seller, buyer])
        db.flush()

        db.add(
            ListingModel(
                owner_id=seller.id,
                title="Calculus textbook",
                price=Decimal("100.00"),
                listing_type=ListingType.SELL.value,
                is_available=True,
            )
        )
        db.commit()
        logger.info(f"Seeded demo seller {seller.id} and buyer {buyer.id}")
        return True
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
    seed()
