# app/repos/order_repo.py
from datetime import datetime, timezone
from typing import List

from sqlalchemy import select, update
from sqlalchemy.orm import Session, joinedload

from app.data.models.listing import ListingModel
from app.data.models.order import OrderModel
from app.data.models.student import StudentModel
from app.domain.order_state_machine import ACTIVE_STATUSES


def _with_parties(stmt):
    return stmt.options(
        joinedload(OrderModel.listing),
        joinedload(OrderModel.buyer).joinedload(StudentModel.user),
        joinedload(OrderModel.seller).joinedload(StudentModel.user),
    )


class OrderRepo:
    """
    Dostep do zamowien, ogloszen i studentow.
    Metody zapisujace nie commituja; commit/rollback robi serwis,
    zeby zmiana statusu i ogloszenia szly w jednej transakcji.
    """

    def __init__(self, db: Session):
        self.db = db

    # odczyt
    def find_student_by_user_id(self, user_id: int) -> StudentModel | None:
        return self.db.execute(
            select(StudentModel).where(StudentModel.user_id == user_id)
        ).scalar_one_or_none()

    def find_listing_by_id(self, listing_id: int) -> ListingModel | None:
        return self.db.get(ListingModel, listing_id)

    def find_order_by_id(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            _with_parties(select(OrderModel)).where(OrderModel.id == order_id)
        ).unique().scalar_one_or_none()

    def find_active_orders_by_buyer_and_listing(self, buyer_id: int, listing_id: int) -> List[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel).where(
                    OrderModel.buyer_id == buyer_id,
                    OrderModel.listing_id == listing_id,
                    OrderModel.status.in_([s.value for s in ACTIVE_STATUSES]),
                )
            ).scalars().all()
        )

    def find_orders_by_buyer(self, buyer_id: int) -> List[OrderModel]:
        return self._find_orders(OrderModel.buyer_id == buyer_id)

    def find_orders_by_seller(self, seller_id: int) -> List[OrderModel]:
        return self._find_orders(OrderModel.seller_id == seller_id)

    def _find_orders(self, condition) -> List[OrderModel]:
        # najnowsze najpierw, id rozstrzyga remis na created_at
        stmt = (
            _with_parties(select(OrderModel))
            .where(condition)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        )
        return list(self.db.execute(stmt).unique().scalars().all())

    # zapis
    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def update_order_status(self, order_id: int, expected_status: str, status: str) -> int:
        """
        Warunkowy update: UPDATE orders SET status=:status
        WHERE id=:id AND status=:expected_status.
        Zwraca rowcount; 0 oznacza, ze ktos zmienil status w miedzyczasie.
        """
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.status == expected_status)
            .values(status=status, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def update_listing_availability(self, listing_id: int, is_available: bool) -> ListingModel | None:
        listing = self.find_listing_by_id(listing_id)
        if listing:
            listing.is_available = is_available
            self.db.flush()
        return listing

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()

    def refresh(self, instance):
        self.db.refresh(instance)
