# app/domain/errors.py
"""
Wyjatki domeny zamowien.

Serwis rzuca je w miejscu wykrycia, router tlumaczy na HTTP.
Kazdy wyjatek dziedziczy tez po wbudowanym typie (LookupError,
PermissionError, ValueError, RuntimeError).
"""
from typing import Any, Dict, Iterable


def _status_value(status: Any) -> str:
    return getattr(status, "value", status)


class OrderError(Exception):
    code = "ORDER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class NotFound(OrderError, LookupError):
    code = "NOT_FOUND"


class NotAParticipant(OrderError, PermissionError):
    code = "NOT_A_PARTICIPANT"


class InactiveAccount(OrderError, PermissionError):
    code = "INACTIVE_ACCOUNT"


class NotAuthorized(OrderError, PermissionError):
    code = "NOT_AUTHORIZED"


class Unavailable(OrderError, ValueError):
    code = "LISTING_UNAVAILABLE"


class WrongListingType(OrderError, ValueError):
    code = "WRONG_LISTING_TYPE"


class SelfTrade(OrderError, ValueError):
    code = "SELF_TRADE"


class DuplicateActiveOrder(OrderError, ValueError):
    code = "DUPLICATE_ACTIVE_ORDER"


class InvalidTransition(OrderError, ValueError):
    code = "INVALID_TRANSITION"

    def __init__(self, current: Any, requested: Any, allowed: Iterable[Any]):
        self.current = _status_value(current)
        self.requested = _status_value(requested)
        self.allowed = sorted(_status_value(s) for s in allowed)
        super().__init__(
            f"Niedozwolona zmiana statusu z {self.current} na {self.requested}. "
            f"Dozwolone: {', '.join(self.allowed) or 'brak'}"
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            current_status=self.current,
            requested_status=self.requested,
            allowed=self.allowed,
        )
        return data


class CancellationNotAllowed(OrderError, ValueError):
    code = "CANCELLATION_NOT_ALLOWED"

    def __init__(self, current: Any, allowed: Iterable[Any]):
        self.current = _status_value(current)
        self.allowed = sorted(_status_value(s) for s in allowed)
        super().__init__(
            f"Nie mozna anulowac zamowienia w statusie {self.current}. "
            "Zamowienia PAID, COMPLETED, REJECTED i CANCELLED nie podlegaja anulowaniu."
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(current_status=self.current, allowed=self.allowed)
        return data


class ConcurrentModification(OrderError, RuntimeError):
    code = "CONCURRENT_MODIFICATION"
