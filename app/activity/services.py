"""
Activity log service.

Records actions against SubjectRef subjects. Callers that change state
record the activity inside the same transaction as the change, so a
rolled-back change leaves no activity behind.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import models

from activity.models import Activity
from core.services import BaseService
from core.subjects import SubjectRef, subjects

if TYPE_CHECKING:
    from typing import Any

    from django.db.models import QuerySet

    from authentication.models import User


class ActivityLog(BaseService):
    """Append and query activity entries."""

    @classmethod
    def record(
        cls,
        action: str,
        subject: SubjectRef | models.Model,
        actor: User | None = None,
        properties: dict[str, Any] | None = None,
    ) -> Activity:
        """
        Append an activity entry.

        Args:
            action: Dotted action name
            subject: SubjectRef, or a model instance of a registered kind
            actor: User performing the action
            properties: Extra JSON-serializable context

        Raises:
            core.exceptions.ValidationError: subject kind is not registered
        """
        ref = subject if isinstance(subject, SubjectRef) else subjects.ref_for(subject)
        subjects.model_for(ref.kind)

        entry = Activity.objects.create(
            actor=actor,
            action=action,
            subject_kind=ref.kind,
            subject_id=ref.id,
            properties=properties or {},
        )
        cls.get_logger().debug(f"Recorded {action} on {ref} by {actor.pk if actor else None}")
        return entry

    @classmethod
    def for_subject(cls, subject: SubjectRef | models.Model) -> QuerySet[Activity]:
        """Entries for one subject, newest first."""
        ref = subject if isinstance(subject, SubjectRef) else subjects.ref_for(subject)
        return Activity.objects.filter(subject_kind=ref.kind, subject_id=ref.id)
