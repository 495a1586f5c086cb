"""Store selection from environment variables.

    WORKFLOW_STORE         "file" (default) or "github"
    WORKFLOW_FILE          local document path (default sdlc-workflow.json)
    GITHUB_TOKEN           token for the github store
    GITHUB_REPO            owner/repo
    GITHUB_BRANCH          branch to commit to (default main)
    GITHUB_PATH            document path inside the repo
    ENABLE_CONFLICT_CHECK  "true" rejects saves based on a stale lastModified
"""

import logging
import os
from typing import Optional, Union

from sdlc_sync.persistence.file_store import FileWorkflowStore
from sdlc_sync.persistence.github_client import DEFAULT_PATH, GitHubWorkflowStore

logger = logging.getLogger(__name__)

DEFAULT_WORKFLOW_FILE = "sdlc-workflow.json"

_store: Optional[Union[FileWorkflowStore, GitHubWorkflowStore]] = None


def create_store(kind: str) -> Union[FileWorkflowStore, GitHubWorkflowStore]:
    """Build a store of the given kind from the environment.

    Raises:
        ValueError: If kind is not "file" or "github"
    """
    if kind == "file":
        return FileWorkflowStore(os.environ.get("WORKFLOW_FILE", DEFAULT_WORKFLOW_FILE))
    elif kind == "github":
        return GitHubWorkflowStore(
            token=os.environ.get("GITHUB_TOKEN"),
            repo=os.environ.get("GITHUB_REPO"),
            branch=os.environ.get("GITHUB_BRANCH", "main"),
            path=os.environ.get("GITHUB_PATH", DEFAULT_PATH),
        )
    else:
        raise ValueError(f"Unknown WORKFLOW_STORE: '{kind}'. Expected 'file' or 'github'.")


def get_workflow_store() -> Union[FileWorkflowStore, GitHubWorkflowStore]:
    """Get or create the global store instance."""
    global _store
    if _store is None:
        _store = create_store(os.environ.get("WORKFLOW_STORE", "file").lower())
        logger.info(f"Using {_store.kind} workflow store")
    return _store


def reset_workflow_store() -> None:
    """Drop the cached store so the next call re-reads the environment."""
    global _store
    _store = None


def conflict_check_enabled() -> bool:
    return os.environ.get("ENABLE_CONFLICT_CHECK", "").lower() == "true"
