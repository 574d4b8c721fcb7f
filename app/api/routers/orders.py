# app/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.errors import (
    ConcurrentModification,
    DuplicateActiveOrder,
    NotFound,
    OrderError,
)
from app.domain.schemas import OrderOut, OrderStatusUpdate, SellOrderCreate
from app.services.lock_service import LockService
from app.services.order_service import OrderService
from app.utils.logging import get_logger
from app.utils.settings import ORDER_LOCK_ENABLED

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(
        db=db,
        lock_service=LockService() if ORDER_LOCK_ENABLED else None,
    )


def _http_error(e: OrderError) -> HTTPException:
    if isinstance(e, NotFound):
        status_code = 404
    elif isinstance(e, PermissionError):
        status_code = 403
    elif isinstance(e, (DuplicateActiveOrder, ConcurrentModification)):
        status_code = 409
    else:
        status_code = 400
    logger.warning(f"Order request rejected: {e.code} ({e.message})")
    return HTTPException(status_code=status_code, detail=e.to_dict())


@router.post("/sell", response_model=OrderOut, status_code=201)
def create_sell_order(
    payload: SellOrderCreate,
    user_id: int = Query(...),
    svc: OrderService = Depends(get_service),
):
    """
    Sklada zamowienie SELL na ogloszenie w imieniu kupujacego.
    """
    try:
        return svc.create_sell_order(payload.listing_id, user_id)
    except OrderError as e:
        raise _http_error(e)


@router.get("/buyer", response_model=List[OrderOut])
def get_buyer_orders(
    user_id: int = Query(...),
    svc: OrderService = Depends(get_service),
):
    try:
        return svc.get_buyer_orders(user_id)
    except OrderError as e:
        raise _http_error(e)


@router.get("/seller", response_model=List[OrderOut])
def get_seller_orders(
    user_id: int = Query(...),
    svc: OrderService = Depends(get_service),
):
    try:
        return svc.get_seller_orders(user_id)
    except OrderError as e:
        raise _http_error(e)


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    user_id: int = Query(...),
    svc: OrderService = Depends(get_service),
):
    """
    Zmienia status zamowienia. Przy bledzie przejscia w odpowiedzi
    sa dozwolone statusy (detail.allowed).
    """
    try:
        return svc.update_order_status(order_id, payload.status, user_id)
    except OrderError as e:
        raise _http_error(e)


@router.patch("/{order_id}/cancel", response_model=OrderOut)
def cancel_order(
    order_id: int,
    user_id: int = Query(...),
    svc: OrderService = Depends(get_service),
):
    try:
        return svc.cancel_order(order_id, user_id)
    except OrderError as e:
        raise _http_error(e)
