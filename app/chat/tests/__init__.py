"""
Tests for chat app.

This package contains test modules for:
- test_models.py: Conversation, Participant, Message constraints
- test_directory.py: ConversationDirectory tests
- test_message_log.py: MessageLog and cursor tests
- test_read_tracker.py: ReadTracker tests
- test_view_builder.py: ConversationViewBuilder tests
- test_views.py: REST API endpoint tests
- test_integration.py: Multi-endpoint user journeys

Usage:
    pytest chat/tests/
    pytest chat/tests/test_message_log.py
"""
