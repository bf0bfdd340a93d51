"""
Django app configuration for the activity log.
"""

from django.apps import AppConfig


class ActivityConfig(AppConfig):
    """Configuration for the activity application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "activity"
    verbose_name = "Activity"
