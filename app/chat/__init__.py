"""
Chat app: direct and group messaging.

This app handles:
- Conversations (direct and group) and their membership
- Message sending, replies, edits and cursor pagination
- Read watermarks and unread counts
- Per-viewer conversation projections

Usage:
    from chat.services import ConversationDirectory, MessageLog

    result = ConversationDirectory.start_direct(alice, bob)
    conversation, created = result.data

    MessageLog.append(conversation, sender=alice, content="Hello!")
"""
