# app/domain/order_state_machine.py
"""
Maszyna stanow zamowienia.

Czyste funkcje, bez I/O. Tabela przejsc jest budowana raz przy imporcie i jest tylko do odczytu.
Uprawnienia (kto moze wykonac przejscie) sprawdza serwis, nie ten modul.
"""
from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional, Union

from app.domain.errors import CancellationNotAllowed, InvalidTransition


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    NEGOTIATING = "NEGOTIATING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    PAYMENT_PENDING = "PAYMENT_PENDING"
    PAID = "PAID"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class OrderType(str, Enum):
    SELL = "SELL"


class ListingType(str, Enum):
    SELL = "SELL"
    RENT = "RENT"
    BOTH = "BOTH"


StatusLike = Union[OrderStatus, str]

ALLOWED_TRANSITIONS: Mapping[OrderStatus, FrozenSet[OrderStatus]] = MappingProxyType({
    OrderStatus.PENDING: frozenset({OrderStatus.NEGOTIATING, OrderStatus.CANCELLED}),
    OrderStatus.NEGOTIATING: frozenset({OrderStatus.APPROVED, OrderStatus.REJECTED, OrderStatus.CANCELLED}),
    OrderStatus.APPROVED: frozenset({OrderStatus.PAYMENT_PENDING, OrderStatus.CANCELLED}),
    OrderStatus.PAYMENT_PENDING: frozenset({OrderStatus.PAID, OrderStatus.CANCELLED}),
    OrderStatus.PAID: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.REJECTED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
})

# pre-paid, mozna anulowac
CANCELLABLE_STATUSES: FrozenSet[OrderStatus] = frozenset({
    OrderStatus.PENDING,
    OrderStatus.NEGOTIATING,
    OrderStatus.APPROVED,
    OrderStatus.PAYMENT_PENDING,
})

TERMINAL_STATUSES: FrozenSet[OrderStatus] = frozenset({
    OrderStatus.REJECTED,
    OrderStatus.COMPLETED,
    OrderStatus.CANCELLED,
})

ACTIVE_STATUSES: FrozenSet[OrderStatus] = frozenset(OrderStatus) - TERMINAL_STATUSES


def to_status(value: StatusLike) -> Optional[OrderStatus]:
    """Zamienia string na OrderStatus; nieznana wartosc -> None."""
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        return None


def get_allowed_transitions(current: StatusLike) -> FrozenSet[OrderStatus]:
    status = to_status(current)
    if status is None:
        return frozenset()
    return ALLOWED_TRANSITIONS[status]


def is_valid_transition(current: StatusLike, new: StatusLike) -> bool:
    target = to_status(new)
    return target is not None and target in get_allowed_transitions(current)


def can_cancel(current: StatusLike) -> bool:
    return to_status(current) in CANCELLABLE_STATUSES


def is_terminal(status: StatusLike) -> bool:
    return to_status(status) in TERMINAL_STATUSES


def validate_status_transition(current: StatusLike, new: StatusLike) -> None:
    """
    Rzuca InvalidTransition, jesli przejscia nie ma w tabeli.
    Wyjatek niesie aktualny status, zadany status i zbior dozwolonych.
    """
    if not is_valid_transition(current, new):
        raise InvalidTransition(current, new, get_allowed_transitions(current))


def validate_cancellation(current: StatusLike) -> None:
    if not can_cancel(current):
        raise CancellationNotAllowed(current, get_allowed_transitions(current))
