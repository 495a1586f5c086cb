"""Workflow document stores."""

from sdlc_sync.persistence.base import SaveResult, WorkflowStore
from sdlc_sync.persistence.factory import get_workflow_store
from sdlc_sync.persistence.file_store import FileWorkflowStore
from sdlc_sync.persistence.github_client import GitHubWorkflowStore

__all__ = [
    "FileWorkflowStore",
    "GitHubWorkflowStore",
    "SaveResult",
    "WorkflowStore",
    "get_workflow_store",
]
