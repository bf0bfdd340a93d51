"""
Tests for UserManager.

The manager creates users keyed by email:
- create_user(): Regular users, unusable password when none is given
- create_superuser(): Staff superusers for the admin site
"""

import pytest

from authentication.models import User


class TestCreateUser:
    """Tests for UserManager.create_user()."""

    def test_creates_user_with_hashed_password(self, db):
        """The password is stored hashed and checks out."""
        user = User.objects.create_user(email="reader@example.com", password="S3cret!pass")

        assert user.pk is not None
        assert user.password != "S3cret!pass"
        assert user.check_password("S3cret!pass")
        assert user.is_active is True
        assert user.is_staff is False
        assert user.is_superuser is False

    def test_normalizes_email_domain(self, db):
        """The domain part is lowercased."""
        user = User.objects.create_user(email="Reader@EXAMPLE.COM", password="pass")

        assert user.email == "Reader@example.com"

    @pytest.mark.parametrize("email", ["", None])
    def test_email_required(self, db, email):
        """Missing emails are rejected."""
        with pytest.raises(ValueError, match="Email"):
            User.objects.create_user(email=email, password="pass")

    def test_without_password_is_unusable(self, db):
        """Users created without a password cannot log in with one."""
        user = User.objects.create_user(email="nopass@example.com")

        assert user.has_usable_password() is False

    def test_profile_created(self, db):
        """The post_save signal creates an empty profile."""
        user = User.objects.create_user(email="profiled@example.com", password="pass")

        assert user.profile.username == ""


class TestCreateSuperuser:
    """Tests for UserManager.create_superuser()."""

    def test_sets_admin_flags(self, db):
        """Superusers are staff and superuser."""
        admin = User.objects.create_superuser(email="root@example.com", password="pass")

        assert admin.is_staff is True
        assert admin.is_superuser is True

    @pytest.mark.parametrize("flag", ["is_staff", "is_superuser"])
    def test_flags_cannot_be_disabled(self, db, flag):
        """Passing False for either flag is an error."""
        with pytest.raises(ValueError, match=flag):
            User.objects.create_superuser(
                email="root@example.com", password="pass", **{flag: False}
            )
