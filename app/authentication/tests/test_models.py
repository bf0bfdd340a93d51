"""
Tests for authentication models and the user manager.
"""

import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError

from authentication.models import User
from authentication.tests.factories import UserFactory


class TestUserManager:
    """Tests for UserManager.create_user / create_superuser."""

    def test_create_user_normalizes_email_domain(self, db):
        """The domain part of the email is lowercased."""
        user = User.objects.create_user(email="Someone@EXAMPLE.com", password="x1y2z3w4")

        assert user.email == "Someone@example.com"
        assert user.check_password("x1y2z3w4")

    def test_create_user_without_password_is_unusable(self, db):
        """Users created without a password cannot log in with one."""
        user = User.objects.create_user(email="nopass@example.com")

        assert not user.has_usable_password()

    def test_create_user_requires_email(self, db):
        """An empty email is rejected."""
        with pytest.raises(ValueError):
            User.objects.create_user(email="")

    def test_create_superuser_sets_flags(self, db):
        """Superusers are staff and superuser."""
        admin = User.objects.create_superuser(email="root@example.com", password="pw")

        assert admin.is_staff
        assert admin.is_superuser


class TestUserDisplayName:
    """Tests for User.get_full_name fallbacks."""

    def test_full_name_from_profile(self, db):
        """First and last name are joined."""
        user = UserFactory(first_name="Ada", last_name="Lovelace")

        assert user.get_full_name() == "Ada Lovelace"

    def test_falls_back_to_username(self, db):
        """Without names, the username is used."""
        user = UserFactory(first_name="", last_name="", username="ada")

        assert user.get_full_name() == "ada"

    def test_falls_back_to_email(self, db):
        """With an empty profile, the email is used."""
        user = UserFactory(first_name="", last_name="", username="")

        assert user.get_full_name() == user.email


class TestProfile:
    """Tests for Profile normalization and constraints."""

    def test_username_lowercased_on_save(self, db):
        """Usernames are stored lowercase."""
        user = UserFactory(username="MixedCase")

        user.profile.refresh_from_db()
        assert user.profile.username == "mixedcase"

    def test_username_unique_case_insensitive(self, db):
        """Two profiles cannot share a username differing only in case."""
        UserFactory(username="shared")

        with pytest.raises(IntegrityError):
            UserFactory(username="SHARED")

    def test_reserved_username_fails_validation(self, db):
        """Reserved usernames are rejected by model validation."""
        user = UserFactory()
        user.profile.username = "admin"

        with pytest.raises(ValidationError):
            user.profile.full_clean()
