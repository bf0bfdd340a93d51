"""
Tests for authentication app.

This package contains test modules for:
- test_models.py: User and Profile model tests
- test_managers.py: UserManager tests
- test_signals.py: Profile auto-creation
- test_directory.py: ProfileUserDirectory tests
- test_views.py: Token, profile and user search endpoints

Usage:
    pytest authentication/tests/
    pytest authentication/tests/test_directory.py
"""
