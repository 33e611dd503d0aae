"""Database models package."""

from .user import User, ROLES, ROLE_ADMIN, ROLE_EDITOR, ROLE_INBOX
from .cms import CmsEntry
from .submission import (Submission, SubmissionField, SubmissionFile,
                         SubmissionReply, SubmissionStatus, SubmissionType)

__all__ = [
    'User',
    'ROLES',
    'ROLE_ADMIN',
    'ROLE_EDITOR',
    'ROLE_INBOX',
    'CmsEntry',
    'Submission',
    'SubmissionField',
    'SubmissionFile',
    'SubmissionReply',
    'SubmissionStatus',
    'SubmissionType',
]
