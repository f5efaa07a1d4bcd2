"""
Test suite for the marketplace ledger

Contains:
- tests/unit/          : Unit tests for individual modules and ledger scenarios
"""
