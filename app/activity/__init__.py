"""
Activity app: an append-only log of who did what to which subject.

Subjects are core.subjects.SubjectRef values, so any app can record
activity for its objects once it registers their kinds.

Usage:
    from activity.services import ActivityLog

    ActivityLog.record("conversation.group_created", conversation, actor=user)
"""
