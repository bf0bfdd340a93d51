"""
Authentication application.

Identity for the messaging backend: users, their display profiles, JWT
token endpoints and the user directory consumed by the chat app.

Usage:
    from authentication.models import User, Profile
    from authentication.directory import ProfileUserDirectory
"""
