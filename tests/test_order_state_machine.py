from itertools import product

import pytest

from app.domain.errors import CancellationNotAllowed, InvalidTransition
from app.domain.order_state_machine import (
    ALLOWED_TRANSITIONS,
    OrderStatus,
    can_cancel,
    get_allowed_transitions,
    is_terminal,
    is_valid_transition,
    validate_cancellation,
    validate_status_transition,
)

S = OrderStatus

TABLE = {
    (S.PENDING, S.NEGOTIATING),
    (S.PENDING, S.CANCELLED),
    (S.NEGOTIATING, S.APPROVED),
    (S.NEGOTIATING, S.REJECTED),
    (S.NEGOTIATING, S.CANCELLED),
    (S.APPROVED, S.PAYMENT_PENDING),
    (S.APPROVED, S.CANCELLED),
    (S.PAYMENT_PENDING, S.PAID),
    (S.PAYMENT_PENDING, S.CANCELLED),
    (S.PAID, S.COMPLETED),
}


@pytest.mark.parametrize(("current", "new"), list(product(S, S)))
def test_is_valid_transition_matches_table(current, new):
    assert is_valid_transition(current, new) == ((current, new) in TABLE)


@pytest.mark.parametrize("status", list(S))
def test_same_status_is_never_valid(status):
    assert not is_valid_transition(status, status)


def test_skipping_states_is_rejected():
    assert not is_valid_transition(S.PENDING, S.PAID)
    assert not is_valid_transition(S.PENDING, S.COMPLETED)
    assert not is_valid_transition(S.APPROVED, S.PAID)


def test_accepts_plain_strings():
    assert is_valid_transition("PENDING", "NEGOTIATING")
    assert not is_valid_transition("PENDING", "SHIPPED")
    assert not is_valid_transition("UNKNOWN", "PENDING")


@pytest.mark.parametrize("status", [S.COMPLETED, S.REJECTED, S.CANCELLED])
def test_terminal_statuses_have_no_transitions(status):
    assert get_allowed_transitions(status) == frozenset()
    assert is_terminal(status)


def test_unknown_status_has_no_transitions():
    assert get_allowed_transitions("SHIPPED") == frozenset()


def test_transition_table_is_read_only():
    with pytest.raises(TypeError):
        ALLOWED_TRANSITIONS[S.PAID] = frozenset({S.CANCELLED})


@pytest.mark.parametrize("status", list(S))
def test_can_cancel_only_pre_paid(status):
    pre_paid = {S.PENDING, S.NEGOTIATING, S.APPROVED, S.PAYMENT_PENDING}
    assert can_cancel(status) == (status in pre_paid)


def test_validate_status_transition_carries_diagnostics():
    with pytest.raises(InvalidTransition) as exc:
        validate_status_transition(S.PENDING, S.PAID)

    err = exc.value
    assert err.current == "PENDING"
    assert err.requested == "PAID"
    assert err.allowed == ["CANCELLED", "NEGOTIATING"]
    assert err.to_dict()["code"] == "INVALID_TRANSITION"


def test_validate_status_transition_passes_for_legal_move():
    validate_status_transition(S.PAID, S.COMPLETED)


@pytest.mark.parametrize("status", [S.PAID, S.COMPLETED, S.REJECTED, S.CANCELLED])
def test_validate_cancellation_rejects_non_cancellable(status):
    with pytest.raises(CancellationNotAllowed) as exc:
        validate_cancellation(status)
    assert exc.value.current == status.value


def test_validation_errors_are_value_errors():
    with pytest.raises(ValueError):
        validate_cancellation(S.PAID)
