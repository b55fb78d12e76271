"""
TRANSACTION LIFECYCLE DOMAIN RULES

The ONLY allowed status transitions for day book transactions.

- No database writes
- No side effects
- Approving an already-approved transaction is reported as a no-op,
  not an error (ledger effect is identical).
"""

from transactions.models import Transaction

# ============================================================
# DOMAIN ERRORS
# ============================================================


class TransactionLifecycleError(Exception):
    pass


class InvalidTransactionTransitionError(TransactionLifecycleError):
    pass


class TransactionNotEditableError(TransactionLifecycleError):
    pass


# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Transaction.STATUS_REJECTED,
}

ALLOWED_TRANSITIONS = {
    Transaction.STATUS_PENDING: {
        Transaction.STATUS_APPROVED,
        Transaction.STATUS_REJECTED,
    },
}

EDITABLE_STATES = {
    Transaction.STATUS_PENDING,
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def is_noop_transition(*, from_status: str, to_status: str) -> bool:
    return from_status == to_status == Transaction.STATUS_APPROVED


def validate_transition(*, txn: Transaction, target_status: str):
    if not can_transition(from_status=txn.status, to_status=target_status):
        raise InvalidTransactionTransitionError(
            f"Transaction {txn.id} cannot transition from "
            f"'{txn.status}' to '{target_status}'"
        )


def validate_editable(*, txn: Transaction):
    if txn.status not in EDITABLE_STATES:
        raise TransactionNotEditableError(
            f"Transaction {txn.id} is {txn.status}; only pending transactions can be changed"
        )
