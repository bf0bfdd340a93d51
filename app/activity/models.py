"""
Activity log model.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.subjects import SubjectRef


class Activity(models.Model):
    """
    A single recorded action.

    Fields:
        actor: User who performed the action (null for system actions)
        action: Dotted action name, e.g. "participant.added"
        subject_kind / subject_id: SubjectRef of the object acted upon
        properties: Free-form JSON context (ids, old/new values)
        created_at: When the action was recorded
    """

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="activities",
        help_text="User who performed the action",
    )
    action = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Dotted action name",
    )
    subject_kind = models.CharField(
        max_length=50,
        help_text="Registered subject kind",
    )
    subject_id = models.BigIntegerField(
        help_text="Primary key of the subject",
    )
    properties = models.JSONField(
        default=dict,
        blank=True,
        help_text="Additional context for the action",
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="When the action was recorded",
    )

    class Meta:
        db_table = "activities"
        ordering = ["-created_at", "-id"]
        verbose_name_plural = "activities"
        indexes = [
            models.Index(
                fields=["subject_kind", "subject_id", "-created_at"],
                name="activity_subject_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.action} on {self.subject_kind}:{self.subject_id}"

    @property
    def subject(self) -> SubjectRef:
        return SubjectRef(kind=self.subject_kind, id=self.subject_id)
