"""
test_state_machine.py - Unit tests for the dispute lifecycle

Tests:
- Legal transition table
- transition(): returns the target or raises with the attempted pair
- advance(): mutates a record only on success
"""

import pytest
from decimal import Decimal

from payledger import (
    Transaction, TransactionState, IllegalStateTransition,
    LEGAL_TRANSITIONS, can_transition, transition, advance,
)

U = TransactionState.UNDISPUTED
D = TransactionState.DISPUTED
R = TransactionState.RESOLVED
C = TransactionState.CHARGEDBACK

LEGAL = {(U, D), (R, D), (D, R), (D, C)}
ALL_PAIRS = [(old, new) for old in TransactionState for new in TransactionState]


class TestTransitionTable:

    def test_table_covers_every_state(self):
        assert set(LEGAL_TRANSITIONS) == set(TransactionState)

    def test_chargedback_is_terminal(self):
        assert LEGAL_TRANSITIONS[C] == frozenset()

    @pytest.mark.parametrize("old,new", ALL_PAIRS)
    def test_can_transition_matches_table(self, old, new):
        assert can_transition(old, new) == ((old, new) in LEGAL)


class TestTransition:

    @pytest.mark.parametrize("old,new", sorted(LEGAL, key=lambda p: (p[0].value, p[1].value)))
    def test_legal_transition_returns_target(self, old, new):
        assert transition(old, new) is new

    @pytest.mark.parametrize("old,new", [p for p in ALL_PAIRS if p not in LEGAL])
    def test_illegal_transition_raises_with_pair(self, old, new):
        with pytest.raises(IllegalStateTransition) as exc_info:
            transition(old, new, client=2, tx=3)
        assert exc_info.value.old_state is old
        assert exc_info.value.new_state is new
        assert exc_info.value.client == 2
        assert exc_info.value.tx == 3

    def test_same_state_is_illegal(self):
        """Disputing a disputed transaction is the classic double dispute."""
        with pytest.raises(IllegalStateTransition, match="disputed => disputed"):
            transition(D, D)


class TestAdvance:

    def test_full_lifecycle(self):
        record = Transaction(1, 1, Decimal("10"))
        advance(record, D)
        advance(record, R)
        advance(record, D)
        advance(record, C)
        assert record.state == C

    def test_failed_advance_leaves_state(self):
        record = Transaction(1, 1, Decimal("10"))
        with pytest.raises(IllegalStateTransition):
            advance(record, R)
        assert record.state == U

    def test_error_identifies_record(self):
        record = Transaction(8, 42, Decimal("10"))
        with pytest.raises(IllegalStateTransition) as exc_info:
            advance(record, C)
        assert (exc_info.value.client, exc_info.value.tx) == (8, 42)
