"""
BILL REVIEW RULES

pending -> approved | rejected. Both are terminal.
Re-approving an approved bill is a no-op.
"""

from bills.models import Bill


class BillLifecycleError(Exception):
    pass


class InvalidBillTransitionError(BillLifecycleError):
    pass


TERMINAL_STATES = {
    Bill.STATUS_APPROVED,
    Bill.STATUS_REJECTED,
}

ALLOWED_TRANSITIONS = {
    Bill.STATUS_PENDING: {
        Bill.STATUS_APPROVED,
        Bill.STATUS_REJECTED,
    },
}


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False
    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, bill: Bill, target_status: str):
    if not can_transition(from_status=bill.status, to_status=target_status):
        raise InvalidBillTransitionError(
            f"Bill {bill.bill_number} cannot transition from '{bill.status}' to '{target_status}'"
        )
