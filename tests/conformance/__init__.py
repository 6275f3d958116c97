"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the share ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. test_conservation.py - Share conservation and value conservation
2. test_atomicity.py - Failed operations leave no trace
3. test_identifiers.py - Monotonic asset ids

These tests use hypothesis for property-based testing.
"""
