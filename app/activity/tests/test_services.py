"""
Tests for ActivityLog.

Covers:
- Recording against model instances and SubjectRefs
- Unknown subject kinds rejected
- Entries rolled back with the surrounding transaction
- for_subject ordering and scoping
"""

import pytest
from django.db import transaction

from activity.models import Activity
from activity.services import ActivityLog
from authentication.tests.factories import UserFactory
from chat.tests.factories import GroupConversationFactory
from core.exceptions import ValidationError
from core.subjects import SubjectRef


class TestRecord:
    """Tests for ActivityLog.record()."""

    def test_records_model_instance(self, db):
        """A registered model instance is stored as its SubjectRef."""
        actor = UserFactory()
        conversation = GroupConversationFactory(created_by=actor)

        entry = ActivityLog.record(
            "conversation.updated",
            conversation,
            actor=actor,
            properties={"fields": ["name"]},
        )

        entry.refresh_from_db()
        assert entry.subject == SubjectRef("conversation", conversation.pk)
        assert entry.actor == actor
        assert entry.properties == {"fields": ["name"]}

    def test_records_subject_ref(self, db):
        """A SubjectRef can be used for objects that no longer exist."""
        entry = ActivityLog.record("conversation.deleted", SubjectRef("conversation", 12345))

        assert entry.subject_kind == "conversation"
        assert entry.subject_id == 12345
        assert entry.actor is None
        assert entry.properties == {}

    def test_unknown_kind_rejected(self, db):
        """Unregistered kinds raise ValidationError and store nothing."""
        with pytest.raises(ValidationError) as exc_info:
            ActivityLog.record("thing.happened", SubjectRef("thing", 1))

        assert exc_info.value.error_code == "UNKNOWN_SUBJECT_KIND"
        assert Activity.objects.count() == 0

    def test_unregistered_model_rejected(self, db):
        """Instances of models without a kind are rejected."""
        existing = ActivityLog.record("conversation.deleted", SubjectRef("conversation", 1))

        with pytest.raises(ValidationError):
            ActivityLog.record("activity.touched", existing)

        assert Activity.objects.count() == 1

    def test_rolled_back_with_transaction(self, db):
        """An entry recorded in a failed transaction disappears with it."""
        conversation = GroupConversationFactory()

        with pytest.raises(RuntimeError):
            with transaction.atomic():
                ActivityLog.record("conversation.updated", conversation)
                raise RuntimeError("boom")

        assert not ActivityLog.for_subject(conversation).exists()


class TestForSubject:
    """Tests for ActivityLog.for_subject()."""

    def test_newest_first_and_scoped(self, db):
        """Only the subject's entries, newest first."""
        conversation = GroupConversationFactory()
        other = GroupConversationFactory()
        ActivityLog.record("conversation.participant_added", conversation)
        ActivityLog.record("conversation.role_changed", conversation)
        ActivityLog.record("conversation.updated", other)

        actions = list(ActivityLog.for_subject(conversation).values_list("action", flat=True))

        assert actions == ["conversation.role_changed", "conversation.participant_added"]

    def test_accepts_ref(self, db):
        """for_subject accepts a SubjectRef."""
        conversation = GroupConversationFactory()
        ActivityLog.record("conversation.updated", conversation)

        ref = SubjectRef("conversation", conversation.pk)

        assert ActivityLog.for_subject(ref).count() == 1
