"""
Django admin configuration for the activity log.
"""

from django.contrib import admin

from activity.models import Activity


@admin.register(Activity)
class ActivityAdmin(admin.ModelAdmin):
    list_display = ("action", "subject_kind", "subject_id", "actor", "created_at")
    list_filter = ("action", "subject_kind")
    search_fields = ("action", "actor__email")
    raw_id_fields = ("actor",)
    readonly_fields = (
        "actor",
        "action",
        "subject_kind",
        "subject_id",
        "properties",
        "created_at",
    )
    ordering = ("-created_at",)
