"""
Serializers for authentication models.

This module provides DRF serializers for:
- User model (read operations, nested in chat payloads)
- Profile model (read/update of the caller's own display data)
- User search (query validation and results)

Security:
    - Email is only exposed on the caller's own profile and in search
      results, matching what the user directory already returns
"""

import re

from rest_framework import serializers

from authentication.models import RESERVED_USERNAMES, Profile, User


class UserSerializer(serializers.ModelSerializer):
    """Compact user representation used across the API."""

    name = serializers.SerializerMethodField()
    username = serializers.CharField(source="profile.username", read_only=True)
    avatar = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "name", "username", "avatar"]
        read_only_fields = fields

    def get_name(self, obj):
        return obj.get_full_name()

    def get_avatar(self, obj):
        try:
            return obj.profile.avatar or None
        except Profile.DoesNotExist:
            return None


class ProfileSerializer(serializers.ModelSerializer):
    """Profile read serializer for the caller's own profile."""

    user_id = serializers.IntegerField(source="user.id", read_only=True)
    email = serializers.EmailField(source="user.email", read_only=True)
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = Profile
        fields = [
            "user_id",
            "email",
            "username",
            "first_name",
            "last_name",
            "full_name",
            "avatar",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """
    Serializer for updating the caller's display data.

    Username is validated for format, reserved names and case-insensitive
    uniqueness against other profiles.
    """

    username = serializers.CharField(
        min_length=3,
        max_length=30,
        required=False,
        help_text="Unique username (3-30 chars, alphanumeric + _ + -)",
    )
    avatar = serializers.URLField(
        required=False,
        allow_blank=True,
        max_length=500,
    )

    class Meta:
        model = Profile
        fields = ["username", "first_name", "last_name", "avatar"]

    def validate_username(self, value):
        username = value.lower().strip()

        if not re.match(r"^[a-zA-Z0-9_-]{3,30}$", username):
            raise serializers.ValidationError(
                "Username must be 3-30 characters and contain only "
                "letters, numbers, underscores, and hyphens."
            )

        if username in RESERVED_USERNAMES:
            raise serializers.ValidationError(
                f"The username '{username}' is reserved and cannot be used."
            )

        user = self.context.get("user")
        existing = Profile.objects.filter(username__iexact=username)
        if user:
            existing = existing.exclude(user=user)
        if existing.exists():
            raise serializers.ValidationError("This username is already taken.")

        return username


class UserSearchQuerySerializer(serializers.Serializer):
    """Query parameters for user search."""

    q = serializers.CharField(min_length=2, max_length=50, trim_whitespace=True)


class UserSummarySerializer(serializers.Serializer):
    """Serializes core.protocols.UserSummary instances."""

    id = serializers.IntegerField()
    name = serializers.CharField()
    username = serializers.CharField(allow_blank=True)
    email = serializers.EmailField()
    avatar = serializers.CharField(allow_null=True)
