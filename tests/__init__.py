"""
Test suite for probspace

Contains:
- tests/unit/          : Unit tests for individual modules
"""
