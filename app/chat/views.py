"""
ViewSets for chat API.

This module provides REST API endpoints for the chat system:
- ConversationViewSet: Conversation lifecycle and per-user actions
- ParticipantViewSet: Participant management (nested under conversation)
- MessageViewSet: Message operations (nested under conversation)

URL Structure:
    /api/v1/conversations/                                GET, POST
    /api/v1/conversations/direct/                         POST
    /api/v1/conversations/{id}/                           GET, PATCH, DELETE
    /api/v1/conversations/{id}/read/                      POST
    /api/v1/conversations/{id}/leave/                     POST
    /api/v1/conversations/{id}/mute/                      POST
    /api/v1/conversations/{id}/participants/              GET, POST
    /api/v1/conversations/{id}/participants/{user_id}/    PATCH, DELETE
    /api/v1/conversations/{id}/messages/                  GET, POST
    /api/v1/conversations/{id}/messages/{message_id}/     PATCH

Design Decisions:
    - Every operation goes through the service layer
    - Conversations the caller is not a member of are reported as not found
    - Service failures are raised as core.exceptions via chat.errors and
      rendered by core.handlers.api_exception_handler
"""

from __future__ import annotations

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
    extend_schema_view,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from authentication.models import User
from chat.constants import MESSAGE_CONFIG
from chat.errors import ErrorCode, raise_for_failure
from chat.models import Conversation
from chat.pagination import ConversationPagination
from chat.serializers import (
    ConversationCreateSerializer,
    ConversationUpdateSerializer,
    ConversationViewSerializer,
    DirectConversationSerializer,
    MessageCreateSerializer,
    MessageEditSerializer,
    MessagePageQuerySerializer,
    MessageSerializer,
    MuteSerializer,
    ParticipantCreateSerializer,
    ParticipantSerializer,
    ParticipantUpdateSerializer,
)
from chat.services import (
    ConversationDirectory,
    ConversationViewBuilder,
    MessageLog,
    ReadTracker,
)
from core.exceptions import NotFoundError


def get_active_user(user_id: int) -> User:
    """Resolve a user referenced in a request body."""
    user = User.objects.filter(pk=user_id, is_active=True).first()
    if user is None:
        raise NotFoundError("User not found", error_code=ErrorCode.USER_NOT_FOUND)
    return user


class ConversationMemberMixin:
    """Resolves the URL's conversation, scoped to the requesting member."""

    conversation_url_kwarg = "conversation_pk"

    def get_conversation(self) -> Conversation:
        result = ConversationDirectory.get_for_member(
            self.kwargs[self.conversation_url_kwarg],
            self.request.user,
        )
        raise_for_failure(result)
        return result.data

    def conversation_detail(self, conversation: Conversation) -> dict:
        view = ConversationViewBuilder.build(conversation, self.request.user)
        data = ConversationViewSerializer(view).data
        data["participants"] = ParticipantSerializer(
            ConversationDirectory.list_participants(conversation),
            many=True,
        ).data
        return data


@extend_schema_view(
    list=extend_schema(
        operation_id="list_conversations",
        summary="List conversations",
        tags=["Chat - Conversations"],
        parameters=[
            OpenApiParameter("page", int, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("per_page", int, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: ConversationViewSerializer(many=True)},
    ),
    create=extend_schema(
        operation_id="create_group_conversation",
        summary="Create group conversation",
        tags=["Chat - Conversations"],
        request=ConversationCreateSerializer,
        responses={201: ConversationViewSerializer},
    ),
    retrieve=extend_schema(
        operation_id="get_conversation",
        summary="Get conversation",
        tags=["Chat - Conversations"],
        responses={200: ConversationViewSerializer},
    ),
    partial_update=extend_schema(
        operation_id="update_conversation",
        summary="Update group details",
        tags=["Chat - Conversations"],
        request=ConversationUpdateSerializer,
        responses={200: ConversationViewSerializer},
    ),
    destroy=extend_schema(
        operation_id="delete_conversation",
        summary="Delete group conversation",
        tags=["Chat - Conversations"],
        responses={204: OpenApiResponse(description="Deleted")},
    ),
)
class ConversationViewSet(ConversationMemberMixin, viewsets.ViewSet):
    """
    ViewSet for conversation operations.

    list:
        Conversations of the current user, most recent activity first, with
        last-message preview and unread count.

    create:
        Create a group. The caller becomes its admin and creator.

    direct:
        Get or start the direct conversation with another user. Returns
        200 with exists=true for an existing conversation, 201 otherwise.

    retrieve:
        Conversation view including its participants.

    partial_update:
        Update group name, description or avatar (admins only).

    destroy:
        Delete a group with all its messages (creator only).
    """

    permission_classes = [IsAuthenticated]
    conversation_url_kwarg = "pk"
    lookup_value_regex = r"\d+"

    def list(self, request):
        conversations = ConversationDirectory.list_for_user(request.user)

        paginator = ConversationPagination()
        page = paginator.paginate_queryset(conversations, request, view=self)
        views = ConversationViewBuilder.build_many(page, request.user)
        return paginator.get_paginated_response(
            ConversationViewSerializer(views, many=True).data
        )

    def create(self, request):
        serializer = ConversationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        members = [get_active_user(user_id) for user_id in dict.fromkeys(data["participant_ids"])]

        result = ConversationDirectory.create_group(
            creator=request.user,
            name=data["name"],
            description=data["description"],
            avatar=data["avatar"],
            initial_members=members,
        )
        raise_for_failure(result)

        return Response(self.conversation_detail(result.data), status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        conversation = self.get_conversation()
        return Response(self.conversation_detail(conversation))

    def partial_update(self, request, pk=None):
        conversation = self.get_conversation()
        serializer = ConversationUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = ConversationDirectory.update_group(
            conversation,
            request.user,
            **serializer.validated_data,
        )
        raise_for_failure(result)

        return Response(self.conversation_detail(result.data))

    def destroy(self, request, pk=None):
        conversation = self.get_conversation()
        result = ConversationDirectory.delete_conversation(conversation, request.user)
        raise_for_failure(result)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        operation_id="start_direct_conversation",
        summary="Start or get direct conversation",
        tags=["Chat - Conversations"],
        request=DirectConversationSerializer,
        responses={200: ConversationViewSerializer, 201: ConversationViewSerializer},
    )
    @action(detail=False, methods=["post"])
    def direct(self, request):
        serializer = DirectConversationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        other = get_active_user(serializer.validated_data["user_id"])

        result = ConversationDirectory.start_direct(request.user, other)
        raise_for_failure(result)
        conversation, created = result.data

        data = self.conversation_detail(conversation)
        data["exists"] = not created
        return Response(
            data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    @extend_schema(
        operation_id="mark_conversation_read",
        summary="Mark conversation as read",
        tags=["Chat - Conversations"],
        request=None,
    )
    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        conversation = self.get_conversation()
        result = ReadTracker.mark_read(conversation, request.user)
        raise_for_failure(result)
        return Response({"status": "read", "last_read_at": result.data})

    @extend_schema(
        operation_id="leave_conversation",
        summary="Leave conversation",
        tags=["Chat - Conversations"],
        request=None,
    )
    @action(detail=True, methods=["post"])
    def leave(self, request, pk=None):
        conversation = self.get_conversation()
        result = ConversationDirectory.leave(conversation, request.user)
        raise_for_failure(result)
        return Response({"status": "left"})

    @extend_schema(
        operation_id="mute_conversation",
        summary="Mute or unmute conversation",
        tags=["Chat - Conversations"],
        request=MuteSerializer,
    )
    @action(detail=True, methods=["post"])
    def mute(self, request, pk=None):
        conversation = self.get_conversation()
        serializer = MuteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ConversationDirectory.set_muted(
            conversation,
            request.user,
            serializer.validated_data["is_muted"],
        )
        raise_for_failure(result)
        return Response({"is_muted": result.data.is_muted})


@extend_schema_view(
    list=extend_schema(
        operation_id="list_participants",
        summary="List participants",
        tags=["Chat - Participants"],
        responses={200: ParticipantSerializer(many=True)},
    ),
    create=extend_schema(
        operation_id="add_participant",
        summary="Add participant",
        tags=["Chat - Participants"],
        request=ParticipantCreateSerializer,
        responses={201: ParticipantSerializer},
    ),
    partial_update=extend_schema(
        operation_id="change_participant_role",
        summary="Change participant role",
        tags=["Chat - Participants"],
        request=ParticipantUpdateSerializer,
        responses={200: ParticipantSerializer},
    ),
    destroy=extend_schema(
        operation_id="remove_participant",
        summary="Remove participant",
        tags=["Chat - Participants"],
        responses={204: OpenApiResponse(description="Removed")},
    ),
)
class ParticipantViewSet(ConversationMemberMixin, viewsets.ViewSet):
    """
    ViewSet for participant management in group conversations.

    Participants are addressed by user id.
    """

    permission_classes = [IsAuthenticated]

    def list(self, request, conversation_pk=None):
        conversation = self.get_conversation()
        participants = ConversationDirectory.list_participants(conversation)
        return Response(ParticipantSerializer(participants, many=True).data)

    def create(self, request, conversation_pk=None):
        conversation = self.get_conversation()
        serializer = ParticipantCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = get_active_user(serializer.validated_data["user_id"])

        result = ConversationDirectory.add_participant(
            conversation,
            request.user,
            user,
            role=serializer.validated_data["role"],
        )
        raise_for_failure(result)

        return Response(ParticipantSerializer(result.data).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, conversation_pk=None, user_id=None):
        conversation = self.get_conversation()
        serializer = ParticipantUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = get_active_user(user_id)

        result = ConversationDirectory.change_role(
            conversation,
            request.user,
            user,
            serializer.validated_data["role"],
        )
        raise_for_failure(result)

        return Response(ParticipantSerializer(result.data).data)

    def destroy(self, request, conversation_pk=None, user_id=None):
        conversation = self.get_conversation()
        user = User.objects.filter(pk=user_id).first()
        if user is None:
            raise NotFoundError(
                "User is not a participant in this conversation",
                error_code=ErrorCode.TARGET_NOT_PARTICIPANT,
            )

        result = ConversationDirectory.remove_participant(conversation, request.user, user)
        raise_for_failure(result)
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema_view(
    list=extend_schema(
        operation_id="list_messages",
        summary="List messages",
        description=(
            "Newest-first page of messages. Fetching the first page (no cursor) "
            "marks the conversation read up to the newest message returned."
        ),
        tags=["Chat - Messages"],
        parameters=[
            OpenApiParameter("cursor", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("per_page", int, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: MessageSerializer(many=True)},
    ),
    create=extend_schema(
        operation_id="send_message",
        summary="Send message",
        tags=["Chat - Messages"],
        request=MessageCreateSerializer,
        responses={201: MessageSerializer},
    ),
    partial_update=extend_schema(
        operation_id="edit_message",
        summary="Edit message",
        tags=["Chat - Messages"],
        request=MessageEditSerializer,
        responses={200: MessageSerializer},
    ),
)
class MessageViewSet(ConversationMemberMixin, viewsets.ViewSet):
    """ViewSet for messages within a conversation."""

    permission_classes = [IsAuthenticated]

    def list(self, request, conversation_pk=None):
        conversation = self.get_conversation()
        query = MessagePageQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        cursor = query.validated_data.get("cursor") or None

        result = MessageLog.page(
            conversation,
            request.user,
            cursor=cursor,
            page_size=query.validated_data.get("per_page", MESSAGE_CONFIG.DEFAULT_PAGE_SIZE),
        )
        raise_for_failure(result)
        page = result.data

        if cursor is None and page.newest is not None:
            ReadTracker.mark_read(conversation, request.user, at=page.newest.created_at)

        return Response(
            {
                "messages": MessageSerializer(
                    page.messages, many=True, context={"request": request}
                ).data,
                "next_cursor": page.next_cursor,
                "has_more": page.has_more,
            }
        )

    def create(self, request, conversation_pk=None):
        conversation = self.get_conversation()
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = MessageLog.append(
            conversation,
            request.user,
            data["content"],
            message_type=data["type"],
            reply_to_id=data.get("reply_to_id"),
            attachments=[dict(item) for item in data.get("attachments", [])],
        )
        raise_for_failure(result)

        return Response(
            MessageSerializer(result.data, context={"request": request}).data,
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request, conversation_pk=None, pk=None):
        conversation = self.get_conversation()
        serializer = MessageEditSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        lookup = MessageLog.get_message(conversation, pk)
        raise_for_failure(lookup)

        result = MessageLog.edit(lookup.data, request.user, serializer.validated_data["content"])
        raise_for_failure(result)

        return Response(MessageSerializer(result.data, context={"request": request}).data)
