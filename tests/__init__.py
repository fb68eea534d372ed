"""
Test suite for the hypersphere AMM

Contains:
- tests/unit/          : Unit tests for individual modules
"""
