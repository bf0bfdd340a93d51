"""
Django app configuration for authentication.
"""

from django.apps import AppConfig


class AuthenticationConfig(AppConfig):
    """Configuration for the authentication application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "authentication"
    verbose_name = "Authentication"

    def ready(self):
        """Connect signal handlers and register the user subject kind."""
        from authentication import signals  # noqa: F401
        from core.subjects import subjects

        subjects.register("user", self.get_model("User"))
