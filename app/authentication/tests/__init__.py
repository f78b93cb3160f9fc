"""
Tests for the accounts app.

Usage:
    pytest authentication/tests/
"""
