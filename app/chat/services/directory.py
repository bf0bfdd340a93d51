"""
Conversation lifecycle and membership.

ConversationDirectory owns every write to Conversation, DirectConversationPair
and Participant rows (apart from the last_message_at bump done by MessageLog
and the read watermark owned by ReadTracker).

Methods:
    start_direct: Get or create the direct conversation for a user pair
    create_group: Create a group with the creator as admin
    update_group: Change group name, description or avatar
    add_participant / remove_participant / leave: Group membership changes
    change_role: Promote or demote a group member
    set_muted: Toggle the caller's mute flag
    delete_conversation: Hard delete a group
    get_for_member / list_for_user: Membership-scoped lookups

Activity:
    Every state change records an activity entry inside the same
    transaction as the change.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import IntegrityError
from django.db.models import Q
from django.db.models.functions import Coalesce
from django.utils import timezone

from activity.services import ActivityLog
from chat.constants import CONVERSATION_CONFIG
from chat.errors import ErrorCode
from chat.models import (
    Conversation,
    ConversationType,
    DirectConversationPair,
    Participant,
    ParticipantRole,
)
from core.services import BaseService, ServiceResult

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from authentication.models import User


class ConversationDirectory(BaseService):
    """
    Service for conversation lifecycle and membership operations.

    All methods take the acting user explicitly and return a ServiceResult
    for expected failures. Permission failures use the codes in
    chat.errors.ErrorCode.
    """

    # -------------------------------------------------------------------------
    # Direct conversations
    # -------------------------------------------------------------------------

    @classmethod
    def start_direct(
        cls,
        initiator: User,
        other: User,
    ) -> ServiceResult[tuple[Conversation, bool]]:
        """
        Create or retrieve the direct conversation between two users.

        Direct conversations are unique per user pair. The pair is stored in
        canonical order, so start_direct(a, b) and start_direct(b, a) return
        the same conversation.

        Implementation:
            1. Validate users are different
            2. Canonicalize order (lower user id first)
            3. Return the existing conversation if the pair is known
            4. Otherwise create conversation, pair and both participants
               in one transaction
            5. If a concurrent call won the race, the pair insert fails on
               the uniqueness constraint; fetch and return the winner

        Args:
            initiator: User starting the conversation (recorded as created_by)
            other: The other participant

        Returns:
            ServiceResult with (conversation, created)

        Error codes:
            SAME_USER: Cannot start a direct conversation with yourself
        """
        if initiator.pk == other.pk:
            return ServiceResult.failure(
                "Cannot create a direct conversation with yourself",
                error_code=ErrorCode.SAME_USER,
            )

        lower_id, higher_id = DirectConversationPair.canonical(initiator.pk, other.pk)

        existing = cls._find_direct(lower_id, higher_id)
        if existing is not None:
            cls.get_logger().debug(
                f"Found existing direct conversation {existing.id} "
                f"between users {lower_id} and {higher_id}"
            )
            return ServiceResult.success((cls._reactivate(existing), False))

        try:
            with cls.atomic():
                conversation = Conversation.objects.create(
                    conversation_type=ConversationType.DIRECT,
                    created_by=initiator,
                )
                DirectConversationPair.objects.create(
                    conversation=conversation,
                    user_lower_id=lower_id,
                    user_higher_id=higher_id,
                )

                now = timezone.now()
                for user_id in (lower_id, higher_id):
                    Participant.objects.create(
                        conversation=conversation,
                        user_id=user_id,
                        role=ParticipantRole.MEMBER,
                        joined_at=now,
                        last_read_at=now,
                    )

                ActivityLog.record(
                    "conversation.direct_started",
                    conversation,
                    actor=initiator,
                    properties={"user_ids": [lower_id, higher_id]},
                )
        except IntegrityError:
            winner = cls._find_direct(lower_id, higher_id)
            if winner is None:
                raise
            cls.get_logger().warning(
                f"Direct conversation race between users {lower_id} and "
                f"{higher_id} resolved to existing conversation {winner.id}"
            )
            return ServiceResult.success((cls._reactivate(winner), False))

        cls.get_logger().info(
            f"Created direct conversation {conversation.id} "
            f"between users {lower_id} and {higher_id}"
        )
        return ServiceResult.success((conversation, True))

    @classmethod
    def _find_direct(cls, lower_id: int, higher_id: int) -> Conversation | None:
        pair = (
            DirectConversationPair.objects.select_related("conversation")
            .filter(user_lower_id=lower_id, user_higher_id=higher_id)
            .first()
        )
        return pair.conversation if pair else None

    @classmethod
    def _reactivate(cls, conversation: Conversation) -> Conversation:
        if not conversation.is_active:
            Conversation.objects.filter(pk=conversation.pk).update(
                is_active=True, updated_at=timezone.now()
            )
            conversation.is_active = True
            cls.get_logger().info(f"Reactivated direct conversation {conversation.id}")
        return conversation

    # -------------------------------------------------------------------------
    # Groups
    # -------------------------------------------------------------------------

    @classmethod
    def create_group(
        cls,
        creator: User,
        name: str,
        description: str = "",
        avatar: str = "",
        initial_members: list[User] | None = None,
    ) -> ServiceResult[Conversation]:
        """
        Create a new group conversation.

        The creator becomes an admin. Initial members are added as members;
        duplicates and the creator are dropped from the list.

        Error codes:
            NAME_REQUIRED: Group name cannot be empty
        """
        name = name.strip() if name else ""
        if not name:
            return ServiceResult.failure(
                "Group name is required",
                error_code=ErrorCode.NAME_REQUIRED,
            )

        members: list[User] = []
        seen = {creator.pk}
        for member in initial_members or []:
            if member.pk not in seen:
                seen.add(member.pk)
                members.append(member)

        with cls.atomic():
            conversation = Conversation.objects.create(
                conversation_type=ConversationType.GROUP,
                name=name[: CONVERSATION_CONFIG.MAX_NAME_LENGTH],
                description=description or "",
                avatar=avatar or "",
                created_by=creator,
            )

            now = timezone.now()
            Participant.objects.create(
                conversation=conversation,
                user=creator,
                role=ParticipantRole.ADMIN,
                joined_at=now,
                last_read_at=now,
            )
            for member in members:
                Participant.objects.create(
                    conversation=conversation,
                    user=member,
                    role=ParticipantRole.MEMBER,
                    joined_at=now,
                    last_read_at=now,
                )

            ActivityLog.record(
                "conversation.group_created",
                conversation,
                actor=creator,
                properties={"name": name, "member_ids": [m.pk for m in members]},
            )

        cls.get_logger().info(
            f"Created group conversation {conversation.id} "
            f"named '{name}' with {1 + len(members)} participants"
        )
        return ServiceResult.success(conversation)

    @classmethod
    def update_group(
        cls,
        conversation: Conversation,
        caller: User,
        name: str | None = None,
        description: str | None = None,
        avatar: str | None = None,
    ) -> ServiceResult[Conversation]:
        """
        Update group details. Only admins can update; None leaves a field as is.

        Error codes:
            NOT_GROUP: Direct conversations have no editable details
            CONVERSATION_NOT_FOUND: Caller is not a member
            NOT_ADMIN: Caller is not an admin
            NAME_REQUIRED: Name given but blank
        """
        if conversation.is_direct:
            return ServiceResult.failure(
                "Cannot edit details of a direct conversation",
                error_code=ErrorCode.NOT_GROUP,
            )

        participant = cls.get_participant(conversation, caller)
        if participant is None:
            return cls._not_found()
        if not participant.is_admin:
            return ServiceResult.failure(
                "Only admins can edit group details",
                error_code=ErrorCode.NOT_ADMIN,
            )

        changes: dict[str, str] = {}
        if name is not None:
            name = name.strip()
            if not name:
                return ServiceResult.failure(
                    "Group name cannot be empty",
                    error_code=ErrorCode.NAME_REQUIRED,
                )
            changes["name"] = name[: CONVERSATION_CONFIG.MAX_NAME_LENGTH]
        if description is not None:
            changes["description"] = description
        if avatar is not None:
            changes["avatar"] = avatar

        if not changes:
            return ServiceResult.success(conversation)

        with cls.atomic():
            for field_name, value in changes.items():
                setattr(conversation, field_name, value)
            conversation.save(update_fields=[*changes, "updated_at"])

            ActivityLog.record(
                "conversation.updated",
                conversation,
                actor=caller,
                properties={"fields": sorted(changes)},
            )

        cls.get_logger().info(
            f"User {caller.id} updated {sorted(changes)} on conversation {conversation.id}"
        )
        return ServiceResult.success(conversation)

    @classmethod
    def delete_conversation(
        cls,
        conversation: Conversation,
        caller: User,
    ) -> ServiceResult[None]:
        """
        Permanently delete a group with its participants and messages.

        Error codes:
            NOT_GROUP: Direct conversations cannot be deleted
            CONVERSATION_NOT_FOUND: Caller is not a member
            NOT_CREATOR: Only the creator can delete the group
        """
        if conversation.is_direct:
            return ServiceResult.failure(
                "Direct conversations cannot be deleted",
                error_code=ErrorCode.NOT_GROUP,
            )
        if cls.get_participant(conversation, caller) is None:
            return cls._not_found()
        if not conversation.is_creator(caller):
            return ServiceResult.failure(
                "Only the creator can delete this conversation",
                error_code=ErrorCode.NOT_CREATOR,
            )

        conversation_id = conversation.id
        with cls.atomic():
            ActivityLog.record(
                "conversation.deleted",
                conversation,
                actor=caller,
                properties={"name": conversation.name},
            )
            conversation.delete()

        cls.get_logger().info(f"User {caller.id} deleted conversation {conversation_id}")
        return ServiceResult.success(None)

    # -------------------------------------------------------------------------
    # Membership
    # -------------------------------------------------------------------------

    @classmethod
    def add_participant(
        cls,
        conversation: Conversation,
        caller: User,
        user: User,
        role: str = ParticipantRole.MEMBER,
    ) -> ServiceResult[Participant]:
        """
        Add a user to a group.

        Error codes:
            DIRECT_MEMBERSHIP_FIXED: Direct conversations have fixed membership
            INVALID_ROLE: Role is not admin or member
            CONVERSATION_NOT_FOUND: Caller is not a member
            NOT_ADMIN: Caller is not an admin
            ALREADY_PARTICIPANT: User is already a member
        """
        if conversation.is_direct:
            return cls._membership_fixed()
        if role not in ParticipantRole.values:
            return cls._invalid_role(role)

        caller_participant = cls.get_participant(conversation, caller)
        if caller_participant is None:
            return cls._not_found()
        if not caller_participant.is_admin:
            return ServiceResult.failure(
                "Only admins can add participants",
                error_code=ErrorCode.NOT_ADMIN,
            )

        if cls.is_member(conversation, user):
            return cls._already_participant(user)

        try:
            with cls.atomic():
                now = timezone.now()
                participant = Participant.objects.create(
                    conversation=conversation,
                    user=user,
                    role=role,
                    joined_at=now,
                    last_read_at=now,
                )
                ActivityLog.record(
                    "conversation.participant_added",
                    conversation,
                    actor=caller,
                    properties={"user_id": user.pk, "role": role},
                )
        except IntegrityError:
            return cls._already_participant(user)

        cls.get_logger().info(
            f"User {caller.id} added user {user.id} to conversation "
            f"{conversation.id} as {role}"
        )
        return ServiceResult.success(participant)

    @classmethod
    def remove_participant(
        cls,
        conversation: Conversation,
        caller: User,
        user: User,
    ) -> ServiceResult[None]:
        """
        Remove another member from a group.

        Admins can remove members; only the creator can remove other admins.
        The creator can never be removed.

        Error codes:
            DIRECT_MEMBERSHIP_FIXED: Direct conversations have fixed membership
            CANNOT_REMOVE_SELF: Use leave() instead
            CONVERSATION_NOT_FOUND: Caller is not a member
            CANNOT_REMOVE_CREATOR: Target is the creator
            NOT_ADMIN: Caller is not an admin
            TARGET_NOT_PARTICIPANT: Target is not a member
            CANNOT_REMOVE_ADMIN: Target is an admin and caller is not the creator
        """
        if conversation.is_direct:
            return cls._membership_fixed()
        if caller.pk == user.pk:
            return ServiceResult.failure(
                "Use leave to remove yourself from a conversation",
                error_code=ErrorCode.CANNOT_REMOVE_SELF,
            )

        caller_participant = cls.get_participant(conversation, caller)
        if caller_participant is None:
            return cls._not_found()
        if conversation.is_creator(user):
            return ServiceResult.failure(
                "The conversation creator cannot be removed",
                error_code=ErrorCode.CANNOT_REMOVE_CREATOR,
            )
        if not caller_participant.is_admin:
            return ServiceResult.failure(
                "Only admins can remove participants",
                error_code=ErrorCode.NOT_ADMIN,
            )

        target = cls.get_participant(conversation, user)
        if target is None:
            return cls._target_not_participant()
        if target.is_admin and not conversation.is_creator(caller):
            return ServiceResult.failure(
                "Only the creator can remove admins",
                error_code=ErrorCode.CANNOT_REMOVE_ADMIN,
            )

        with cls.atomic():
            target.delete()
            ActivityLog.record(
                "conversation.participant_removed",
                conversation,
                actor=caller,
                properties={"user_id": user.pk},
            )

        cls.get_logger().info(
            f"User {caller.id} removed user {user.id} from conversation {conversation.id}"
        )
        return ServiceResult.success(None)

    @classmethod
    def leave(cls, conversation: Conversation, user: User) -> ServiceResult[None]:
        """
        Leave a group.

        Error codes:
            DIRECT_MEMBERSHIP_FIXED: Direct conversations cannot be left
            CONVERSATION_NOT_FOUND: User is not a member
            CREATOR_CANNOT_LEAVE: The creator must stay in the group
        """
        if conversation.is_direct:
            return cls._membership_fixed()

        participant = cls.get_participant(conversation, user)
        if participant is None:
            return cls._not_found()
        if conversation.is_creator(user):
            return ServiceResult.failure(
                "The conversation creator cannot leave",
                error_code=ErrorCode.CREATOR_CANNOT_LEAVE,
            )

        with cls.atomic():
            participant.delete()
            ActivityLog.record("conversation.participant_left", conversation, actor=user)

        cls.get_logger().info(f"User {user.id} left conversation {conversation.id}")
        return ServiceResult.success(None)

    @classmethod
    def change_role(
        cls,
        conversation: Conversation,
        caller: User,
        user: User,
        role: str,
    ) -> ServiceResult[Participant]:
        """
        Change a member's role.

        Error codes:
            NOT_GROUP: Direct conversations have no roles to manage
            INVALID_ROLE: Role is not admin or member
            CONVERSATION_NOT_FOUND: Caller is not a member
            NOT_ADMIN: Caller is not an admin
            CANNOT_CHANGE_CREATOR_ROLE: Target is the creator
            TARGET_NOT_PARTICIPANT: Target is not a member
        """
        if conversation.is_direct:
            return ServiceResult.failure(
                "Roles cannot be changed in a direct conversation",
                error_code=ErrorCode.NOT_GROUP,
            )
        if role not in ParticipantRole.values:
            return cls._invalid_role(role)

        caller_participant = cls.get_participant(conversation, caller)
        if caller_participant is None:
            return cls._not_found()
        if not caller_participant.is_admin:
            return ServiceResult.failure(
                "Only admins can change roles",
                error_code=ErrorCode.NOT_ADMIN,
            )
        if conversation.is_creator(user):
            return ServiceResult.failure(
                "The creator's role cannot be changed",
                error_code=ErrorCode.CANNOT_CHANGE_CREATOR_ROLE,
            )

        target = cls.get_participant(conversation, user)
        if target is None:
            return cls._target_not_participant()
        if target.role == role:
            return ServiceResult.success(target)

        old_role = target.role
        with cls.atomic():
            target.role = role
            target.save(update_fields=["role", "updated_at"])
            ActivityLog.record(
                "conversation.role_changed",
                conversation,
                actor=caller,
                properties={"user_id": user.pk, "from": old_role, "to": role},
            )

        cls.get_logger().info(
            f"User {caller.id} changed role of user {user.id} in conversation "
            f"{conversation.id} from {old_role} to {role}"
        )
        return ServiceResult.success(target)

    @classmethod
    def set_muted(
        cls,
        conversation: Conversation,
        user: User,
        muted: bool,
    ) -> ServiceResult[Participant]:
        """Set the caller's own mute flag."""
        participant = cls.get_participant(conversation, user)
        if participant is None:
            return cls._not_found()

        if participant.is_muted != muted:
            participant.is_muted = muted
            participant.save(update_fields=["is_muted", "updated_at"])
            cls.get_logger().debug(
                f"User {user.id} set muted={muted} on conversation {conversation.id}"
            )
        return ServiceResult.success(participant)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @classmethod
    def get_for_member(
        cls,
        conversation_id: int,
        user: User,
    ) -> ServiceResult[Conversation]:
        """
        Fetch an active conversation the user belongs to.

        Absent, inactive and not-a-member all fail the same way, so the
        response does not reveal whether the conversation exists.
        """
        conversation = (
            Conversation.objects.filter(
                pk=conversation_id,
                is_active=True,
                participants__user=user,
            )
            .select_related("created_by")
            .first()
        )
        if conversation is None:
            return cls._not_found()
        return ServiceResult.success(conversation)

    @classmethod
    def list_for_user(cls, user: User) -> QuerySet[Conversation]:
        """
        Active conversations the user belongs to, most recent activity first.

        Conversations without messages rank by their creation time.
        """
        return (
            Conversation.objects.filter(is_active=True, participants__user=user)
            .annotate(activity_at=Coalesce("last_message_at", "created_at"))
            .order_by("-activity_at", "-created_at", "-id")
        )

    @classmethod
    def get_participant(cls, conversation: Conversation, user: User) -> Participant | None:
        return Participant.objects.filter(conversation=conversation, user=user).first()

    @classmethod
    def is_member(cls, conversation: Conversation, user: User) -> bool:
        return Participant.objects.filter(conversation=conversation, user=user).exists()

    @classmethod
    def list_participants(cls, conversation: Conversation) -> QuerySet[Participant]:
        """Current members in join order, with user profiles loaded."""
        return (
            Participant.objects.filter(conversation=conversation)
            .select_related("conversation", "user", "user__profile")
            .order_by("joined_at", "id")
        )

    @classmethod
    def direct_partner_id(cls, conversation: Conversation, user: User) -> int | None:
        """Id of the other user in a direct conversation."""
        return (
            Participant.objects.filter(conversation=conversation)
            .filter(~Q(user=user))
            .values_list("user_id", flat=True)
            .first()
        )

    # -------------------------------------------------------------------------
    # Failures
    # -------------------------------------------------------------------------

    @staticmethod
    def _not_found() -> ServiceResult:
        return ServiceResult.failure(
            "Conversation not found",
            error_code=ErrorCode.CONVERSATION_NOT_FOUND,
        )

    @staticmethod
    def _membership_fixed() -> ServiceResult:
        return ServiceResult.failure(
            "Direct conversation membership cannot change",
            error_code=ErrorCode.DIRECT_MEMBERSHIP_FIXED,
        )

    @staticmethod
    def _target_not_participant() -> ServiceResult:
        return ServiceResult.failure(
            "User is not a participant in this conversation",
            error_code=ErrorCode.TARGET_NOT_PARTICIPANT,
        )

    @staticmethod
    def _already_participant(user: User) -> ServiceResult:
        return ServiceResult.failure(
            f"User {user.pk} is already a participant",
            error_code=ErrorCode.ALREADY_PARTICIPANT,
        )

    @staticmethod
    def _invalid_role(role: str) -> ServiceResult:
        return ServiceResult.failure(
            f"Invalid role '{role}'",
            error_code=ErrorCode.INVALID_ROLE,
            errors={"role": [f"Must be one of: {', '.join(ParticipantRole.values)}"]},
        )
