"""Errors raised while loading, merging and saving the workflow document.

An incoming payload without phases is not an error: the merge treats it as a
no-op and hands back the existing document.
"""

from datetime import datetime
from typing import Optional


class WorkflowSyncError(Exception):
    """Base class for workflow sync failures."""


class MissingMetadataError(WorkflowSyncError):
    """The stored document has no metadata block and cannot be merged into."""

    def __init__(self, message: str = "Existing workflow document has no metadata"):
        super().__init__(message)


class DocumentNotFoundError(WorkflowSyncError):
    """The store holds no workflow document yet."""


class PersistenceError(WorkflowSyncError):
    """A store read or write failed. Never retried here."""


class ConflictError(WorkflowSyncError):
    """The stored document was modified after the caller's base version."""

    def __init__(
        self,
        last_modified: Optional[datetime],
        last_modified_by: Optional[str] = None,
    ):
        self.last_modified = last_modified
        self.last_modified_by = last_modified_by
        super().__init__(
            "File was modified by another user. Please refresh and try again."
        )
