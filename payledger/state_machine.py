"""
state_machine.py - Dispute lifecycle of a recorded transaction

    UNDISPUTED --dispute--> DISPUTED --resolve----> RESOLVED
                               |                       |
                               +--chargeback--> CHARGEDBACK
    RESOLVED --dispute--> DISPUTED

A resolved transaction may be disputed again. A charged back transaction
stays in history but accepts no further transitions.

All functions here are pure. Callers check the transition before touching
any balance, so a rejected transition never leaves a partial mutation.
"""

from __future__ import annotations
from typing import Dict, FrozenSet, Optional

from .core import IllegalStateTransition, Transaction, TransactionState


LEGAL_TRANSITIONS: Dict[TransactionState, FrozenSet[TransactionState]] = {
    TransactionState.UNDISPUTED: frozenset({TransactionState.DISPUTED}),
    TransactionState.DISPUTED: frozenset({TransactionState.RESOLVED, TransactionState.CHARGEDBACK}),
    TransactionState.RESOLVED: frozenset({TransactionState.DISPUTED}),
    TransactionState.CHARGEDBACK: frozenset(),
}


def can_transition(current: TransactionState, target: TransactionState) -> bool:
    """Return True if target is reachable from current in one step."""
    return target in LEGAL_TRANSITIONS[current]


def transition(
    current: TransactionState,
    target: TransactionState,
    client: Optional[int] = None,
    tx: Optional[int] = None,
) -> TransactionState:
    """
    Validate a single state change.

    Args:
        current: State the transaction is in now
        target: State requested by the instruction
        client: Client id, for error reporting only
        tx: Transaction id, for error reporting only

    Returns:
        target, when the change is legal

    Raises:
        IllegalStateTransition: carrying the attempted (current, target) pair
    """
    if not can_transition(current, target):
        raise IllegalStateTransition(current, target, client=client, tx=tx)
    return target


def advance(record: Transaction, target: TransactionState) -> None:
    """Move a history record to target, or raise without touching it."""
    record.state = transition(record.state, target, client=record.client, tx=record.tx)
