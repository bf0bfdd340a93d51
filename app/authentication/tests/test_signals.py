"""
Tests for authentication signals.
"""

from authentication.models import Profile, User


class TestCreateUserProfileSignal:
    """Tests for the create_user_profile signal handler."""

    def test_profile_created_when_user_is_created(self, db):
        """A Profile is created automatically for a new User."""
        user = User.objects.create_user(
            email="newuser@example.com",
            password="SecurePass123!",
        )

        assert Profile.objects.filter(user=user).exists()
        assert user.profile.user == user

    def test_profile_starts_with_empty_fields(self, db):
        """The auto-created Profile has empty display fields."""
        user = User.objects.create_user(email="blank@example.com")

        profile = Profile.objects.get(user=user)
        assert profile.username == ""
        assert profile.first_name == ""
        assert profile.avatar == ""

    def test_profile_not_duplicated_on_user_update(self, db):
        """Saving an existing User does not create a second Profile."""
        user = User.objects.create_user(email="again@example.com")

        user.is_staff = True
        user.save()

        assert Profile.objects.filter(user=user).count() == 1
