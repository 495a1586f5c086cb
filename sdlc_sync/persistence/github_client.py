"""GitHub persistence for the workflow document.

The hosted board has no database: the JSON file committed to a GitHub
repository IS the source of truth. Every save becomes a commit on the
configured branch, made through the contents API:

1. GET the file → current content and blob SHA (404 means "not created yet")
2. PUT the new base64 content, passing the SHA when updating

Requires environment variables (see factory.get_workflow_store):
    GITHUB_TOKEN: token with contents:write scope
    GITHUB_REPO: owner/repo (e.g., acme/sdlc-board)
"""

import base64
import logging
from typing import Any, Optional

import httpx

from sdlc_sync.persistence.base import SaveResult, dumps_document, parse_document
from sdlc_sync.workflow.errors import PersistenceError
from sdlc_sync.workflow.schemas import WorkflowDocument

logger = logging.getLogger(__name__)

DEFAULT_PATH = "sdlc-workflow-new.json"


class GitHubWorkflowStore:
    """Loads and commits the workflow document in a GitHub repository."""

    kind = "github"

    def __init__(
        self,
        token: Optional[str] = None,
        repo: Optional[str] = None,
        branch: str = "main",
        path: str = DEFAULT_PATH,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.token = token
        self.repo = repo
        self.branch = branch
        self.path = path
        self.enabled = bool(token and repo)

        if not self.enabled:
            self._client = None
            if not token:
                logger.warning("GITHUB_TOKEN not set — GitHub store is disabled")
            if not repo:
                logger.warning("GITHUB_REPO not set — GitHub store is disabled")
            return

        self._client = client or httpx.AsyncClient(
            base_url="https://api.github.com",
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=30.0,
        )
        logger.info(f"GitHub store enabled for {repo}:{path} (branch: {branch})")

    @property
    def _contents_url(self) -> str:
        return f"/repos/{self.repo}/contents/{self.path}"

    def _require_enabled(self) -> None:
        if not self.enabled:
            raise PersistenceError(
                "GitHub persistence not configured (no GITHUB_TOKEN/GITHUB_REPO)"
            )

    async def _fetch(self) -> Optional[dict[str, Any]]:
        """GET the file metadata+content, or None if it does not exist."""
        self._require_enabled()
        try:
            resp = await self._client.get(self._contents_url, params={"ref": self.branch})
            if resp.status_code == 404:
                return None
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            error_body = e.response.text[:500]
            logger.error(f"GitHub API error reading {self.path}: {e.response.status_code} — {error_body}")
            raise PersistenceError(
                f"GitHub API error: {e.response.status_code} — {error_body}"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"GitHub HTTP error reading {self.path}: {e}")
            raise PersistenceError(f"GitHub HTTP error: {e}") from e

    async def load(self) -> Optional[WorkflowDocument]:
        """Load the committed document, or None if the file is missing."""
        file_data = await self._fetch()
        if file_data is None:
            logger.info(f"{self.path} not found in {self.repo}")
            return None
        raw = base64.b64decode(file_data.get("content", "")).decode("utf-8")
        return parse_document(raw, f"{self.repo}:{self.path}")

    async def save(self, document: WorkflowDocument, message: str) -> SaveResult:
        """Commit the document, creating the file if it does not exist yet."""
        current = await self._fetch()
        content = base64.b64encode(dumps_document(document).encode("utf-8")).decode("ascii")
        payload: dict[str, Any] = {
            "message": message,
            "content": content,
            "branch": self.branch,
        }
        if current is not None:
            payload["sha"] = current["sha"]

        try:
            resp = await self._client.put(self._contents_url, json=payload)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            error_body = e.response.text[:500]
            logger.error(f"GitHub API error during commit: {e.response.status_code} — {error_body}")
            raise PersistenceError(
                f"GitHub API error: {e.response.status_code} — {error_body}"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"GitHub HTTP error during commit: {e}")
            raise PersistenceError(f"GitHub HTTP error: {e}") from e

        result = resp.json()
        commit_sha = result.get("commit", {}).get("sha")
        html_url = result.get("content", {}).get("html_url")
        verb = "Updated" if current is not None else "Created"
        logger.info(f"{verb} {self.path} in {self.repo} (SHA: {(commit_sha or '')[:8]})")
        return SaveResult(
            success=True,
            message=f"{verb} {self.path} on {self.branch}",
            sha=commit_sha,
            url=html_url,
        )

    def describe(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "github_enabled": self.enabled,
            "repo": self.repo if self.enabled else None,
            "branch": self.branch if self.enabled else None,
            "path": self.path,
        }

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
