"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the ledger engine.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. balance_invariant.py - total == available + held, rejections have no effect
2. dispute_lifecycle.py - Transactions follow the dispute state machine
3. shard_equivalence.py - Sharded replay matches sequential replay

These tests use hypothesis for property-based testing.
"""
