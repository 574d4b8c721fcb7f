# app/services/order_service.py
from contextlib import nullcontext
from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.data.models.student import StudentModel
from app.domain.errors import (
    ConcurrentModification,
    DuplicateActiveOrder,
    InactiveAccount,
    NotAParticipant,
    NotAuthorized,
    NotFound,
    SelfTrade,
    Unavailable,
    WrongListingType,
)
from app.domain.order_state_machine import (
    ListingType,
    OrderStatus,
    OrderType,
    StatusLike,
    to_status,
    validate_cancellation,
    validate_status_transition,
)
from app.repos.order_repo import OrderRepo
from app.services.lock_service import LockService
from app.services.notification_service import NotificationService
from app.utils.logging import get_logger

logger = get_logger(__name__)

SELLABLE_LISTING_TYPES = frozenset({ListingType.SELL.value, ListingType.BOTH.value})

# tylko sprzedajacy moze zatwierdzic albo odrzucic
SELLER_ONLY_STATUSES = frozenset({OrderStatus.APPROVED, OrderStatus.REJECTED})


class OrderService:
    """
    Serwis odpowiedzialny za cykl zycia zamowienia.

    Legalnosc przejscia sprawdza maszyna stanow, a serwis dokłada
    reguly rol (kupujacy / sprzedajacy), zapis i efekt uboczny na ogloszeniu.
    Zmiana statusu i ogloszenia ida w jednej transakcji.
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService | None = None,
        notification_service: NotificationService | None = None,
    ):
        self.repo = OrderRepo(db)
        self.lock_service = lock_service
        self.notification_service = notification_service or NotificationService()

    # =====================================================
    # COMMANDS
    # =====================================================
    def create_sell_order(self, listing_id: int, buyer_user_id: int) -> Dict[str, Any]:
        """
        Use Case: Zlozenie zamowienia SELL na ogloszenie.

        Kolejnosc walidacji:
        1. kupujacy jest aktywnym studentem
        2. ogloszenie istnieje i jest dostepne
        3. typ ogloszenia pozwala na sprzedaz
        4. kupujacy nie jest wlascicielem
        5. brak aktywnego zamowienia na to samo ogloszenie
        """
        buyer = self._require_student(buyer_user_id, "Tylko studenci moga skladac zamowienia")

        if not buyer.is_active:
            raise InactiveAccount("Konto studenta jest nieaktywne")

        listing = self.repo.find_listing_by_id(listing_id)

        if not listing:
            raise NotFound("Ogloszenie nie istnieje")

        if not listing.is_available:
            raise Unavailable("Ogloszenie nie jest dostepne")

        if listing.listing_type not in SELLABLE_LISTING_TYPES:
            raise WrongListingType("Ogloszenie nie jest przeznaczone na sprzedaz")

        if listing.owner_id == buyer.id:
            raise SelfTrade("Nie mozna kupic wlasnego ogloszenia")

        if self.repo.find_active_orders_by_buyer_and_listing(buyer.id, listing.id):
            raise DuplicateActiveOrder("Masz juz aktywne zamowienie na to ogloszenie")

        order = OrderModel(
            listing_id=listing.id,
            buyer_id=buyer.id,
            seller_id=listing.owner_id,
            type=OrderType.SELL.value,
            status=OrderStatus.PENDING.value,
            total_price=listing.price,
        )

        try:
            self.repo.create_order(order)
            self.repo.commit()
        except IntegrityError as e:
            # rownolegly request wstawil aktywne zamowienie przed nami
            self.repo.rollback()
            logger.warning(f"Duplicate active order for buyer {buyer.id} on listing {listing_id}: {e.orig}")
            raise DuplicateActiveOrder("Masz juz aktywne zamowienie na to ogloszenie") from e

        created = self.repo.find_order_by_id(order.id)

        logger.info(f"Order {created.id} created by student {buyer.id} for listing {listing_id}")

        self.notification_service.send_order_notification(
            created.seller_id, created.id, created.status
        )

        return self._format_order(created)

    def update_order_status(
        self,
        order_id: int,
        new_status: StatusLike,
        acting_user_id: int,
    ) -> Dict[str, Any]:
        """
        Use Case: Zmiana statusu zamowienia.

        Przejscie do COMPLETED oznacza ogloszenie jako niedostepne
        w tej samej transakcji co zapis statusu.
        """
        with self._order_lock(order_id):
            order = self._require_order(order_id)
            student = self._require_student(acting_user_id, "Profil studenta nie istnieje")

            is_seller = order.seller_id == student.id

            validate_status_transition(order.status, new_status)
            target = to_status(new_status)

            if target in SELLER_ONLY_STATUSES and not is_seller:
                raise NotAuthorized("Tylko sprzedajacy moze zatwierdzic lub odrzucic zamowienie")

            self._apply_status(order, target)

        self._notify_counterpart(order, student)

        return self._format_order(order)

    def cancel_order(self, order_id: int, acting_user_id: int) -> Dict[str, Any]:
        """
        Use Case: Anulowanie zamowienia przez kupujacego lub sprzedajacego.
        Tylko ze statusow pre-paid; ogloszenie zostaje bez zmian.
        """
        with self._order_lock(order_id):
            order = self._require_order(order_id)
            student = self._require_student(acting_user_id, "Profil studenta nie istnieje")

            validate_cancellation(order.status)

            if student.id not in (order.buyer_id, order.seller_id):
                raise NotAuthorized("Mozesz anulowac tylko wlasne zamowienia")

            self._apply_status(order, OrderStatus.CANCELLED)

        self._notify_counterpart(order, student)

        return self._format_order(order)

    # =====================================================
    # QUERY
    # =====================================================
    def get_buyer_orders(self, user_id: int) -> List[Dict[str, Any]]:
        buyer = self._require_student(user_id, "Profil studenta nie istnieje")
        return [self._format_order(o) for o in self.repo.find_orders_by_buyer(buyer.id)]

    def get_seller_orders(self, user_id: int) -> List[Dict[str, Any]]:
        seller = self._require_student(user_id, "Profil studenta nie istnieje")
        return [self._format_order(o) for o in self.repo.find_orders_by_seller(seller.id)]

    # =====================================================
    # helpers
    # =====================================================
    def _order_lock(self, order_id: int):
        if self.lock_service is None:
            return nullcontext()
        return self.lock_service.order_lock(order_id)

    def _require_order(self, order_id: int) -> OrderModel:
        order = self.repo.find_order_by_id(order_id)
        if not order:
            raise NotFound("Zamowienie nie istnieje")
        return order

    def _require_student(self, user_id: int, message: str) -> StudentModel:
        student = self.repo.find_student_by_user_id(user_id)
        if not student:
            raise NotAParticipant(message)
        return student

    def _apply_status(self, order: OrderModel, target: OrderStatus):
        """
        Jedna jednostka pracy: warunkowy update statusu (+ ogloszenie przy COMPLETED).
        UPDATE ... WHERE status = <status, ktory walidowalismy>
        """
        current = order.status
        listing_id = order.listing_id

        try:
            rowcount = self.repo.update_order_status(order.id, current, target.value)

            if rowcount == 0:
                raise ConcurrentModification(
                    "Konflikt wspolbieznosci - zamowienie zostalo zmodyfikowane przez inna operacje"
                )

            if target == OrderStatus.COMPLETED:
                self.repo.update_listing_availability(listing_id, False)

            self.repo.commit()
        except Exception as e:
            logger.error(f"Status change {current} -> {target.value} for order {order.id} rolled back: {e}")
            self.repo.rollback()
            raise

        self.repo.refresh(order)

        logger.info(f"Order {order.id} status {current} -> {target.value}")

    def _notify_counterpart(self, order: OrderModel, actor: StudentModel):
        recipient = order.buyer_id if actor.id == order.seller_id else order.seller_id
        self.notification_service.send_order_notification(recipient, order.id, order.status)

    @staticmethod
    def _party(student: StudentModel | None) -> Dict[str, Any] | None:
        if student is None:
            return None
        return {
            "id": student.id,
            "user_id": student.user_id,
            "email": student.user.email if student.user else None,
        }

    def _format_order(self, order: OrderModel) -> Dict[str, Any]:
        listing = order.listing
        return {
            "id": order.id,
            "listing_id": order.listing_id,
            "buyer_id": order.buyer_id,
            "seller_id": order.seller_id,
            "type": order.type,
            "status": order.status,
            "total_price": order.total_price,
            "created_at": order.created_at,
            "updated_at": order.updated_at,
            "listing": {
                "id": listing.id,
                "title": listing.title,
                "price": listing.price,
                "listing_type": listing.listing_type,
                "is_available": listing.is_available,
            } if listing else None,
            "buyer": self._party(order.buyer),
            "seller": self._party(order.seller),
        }
