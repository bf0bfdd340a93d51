"""
Factory Boy factories for authentication models.

Usage:
    from authentication.tests.factories import UserFactory

    # User with generated name and username on its profile
    user = UserFactory()

    # Override profile fields directly
    user = UserFactory(first_name="Ada", last_name="Lovelace", username="ada")

    # User whose profile is left empty (directory falls back to email)
    user = UserFactory(first_name="", last_name="", username="")
"""

import factory

from authentication.models import User

PROFILE_FIELDS = ("first_name", "last_name", "username", "avatar")


class UserFactory(factory.django.DjangoModelFactory):
    """
    Factory for User model.

    Profile fields are accepted as factory arguments and written to the
    profile that the post_save signal creates.
    """

    class Meta:
        model = User
        skip_postgeneration_save = True

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    is_active = True
    is_staff = False

    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")
    username = factory.Sequence(lambda n: f"member{n}")
    avatar = ""

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Create through UserManager.create_user() and fill the profile."""
        profile_fields = {
            name: kwargs.pop(name) for name in PROFILE_FIELDS if name in kwargs
        }
        password = kwargs.pop("password", "TestPass123!")
        user = model_class.objects.create_user(
            email=kwargs.pop("email"), password=password, **kwargs
        )

        profile = user.profile
        for name, value in profile_fields.items():
            setattr(profile, name, value)
        profile.save()
        return user
