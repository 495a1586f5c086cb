"""Workflow document API routes.

GET returns the canonical document, POST merges a (possibly partial)
document into it and PUT replaces it wholesale. Every save goes to the
configured store (local file or GitHub).

Error bodies keep the board's `{success: false, error}` shape rather than
FastAPI's `{detail}` so the HTML page can show them as-is.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Header
from fastapi.responses import JSONResponse

from sdlc_sync.api.routes.meta import mark_document_modified
from sdlc_sync.persistence.factory import conflict_check_enabled, get_workflow_store
from sdlc_sync.workflow.errors import (
    ConflictError,
    DocumentNotFoundError,
    MissingMetadataError,
    PersistenceError,
)
from sdlc_sync.workflow.merger import utc_now
from sdlc_sync.workflow.schemas import WorkflowDocument
from sdlc_sync.workflow.sync import SyncOutcome, WorkflowSyncService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workflow", tags=["workflow"])


def get_sync_service() -> WorkflowSyncService:
    return WorkflowSyncService(get_workflow_store(), conflict_check=conflict_check_enabled())


def _error(status_code: int, error: str, **extra: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, **extra},
    )


def _conflict(e: ConflictError) -> JSONResponse:
    return _error(
        409,
        "Conflict detected",
        message=str(e),
        lastModified=e.last_modified.isoformat() if e.last_modified else None,
        lastModifiedBy=e.last_modified_by,
    )


def _saved(outcome: SyncOutcome, message: str) -> dict[str, Any]:
    body: dict[str, Any] = {
        "success": True,
        "message": message,
        "timestamp": utc_now().isoformat(),
        "totals": outcome.totals.model_dump(),
    }
    if outcome.save_result is not None:
        body["commit"] = outcome.save_result.sha
        body["url"] = outcome.save_result.url
    return body


@router.get("")
async def get_workflow():
    """Get the current workflow document."""
    try:
        document = await get_sync_service().load()
    except DocumentNotFoundError as e:
        return _error(404, str(e))
    except PersistenceError as e:
        return _error(500, str(e))
    return document.to_dict()


@router.post("")
async def merge_workflow(
    payload: WorkflowDocument,
    x_user_email: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
):
    """Merge a (possibly partial) document into the stored one and save it.

    Phases in the payload replace same-named fields of the stored phases;
    new phases are added. A payload without `phases` changes nothing.
    """
    try:
        outcome = await get_sync_service().sync(
            payload, user=x_user_email, user_name=x_user_name
        )
    except ConflictError as e:
        return _conflict(e)
    except DocumentNotFoundError as e:
        return _error(404, str(e))
    except (MissingMetadataError, PersistenceError) as e:
        logger.error(f"Error saving workflow data: {e}")
        return _error(500, str(e))

    if not outcome.changed:
        return _saved(outcome, "No phases in payload, nothing to update")

    mark_document_modified()
    return _saved(outcome, "JSON file updated successfully")


@router.put("")
async def replace_workflow(
    payload: WorkflowDocument,
    x_user_email: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
):
    """Replace the stored document with the payload, recounting its totals."""
    try:
        outcome = await get_sync_service().replace(
            payload, user=x_user_email, user_name=x_user_name
        )
    except ConflictError as e:
        return _conflict(e)
    except PersistenceError as e:
        logger.error(f"Error saving workflow data: {e}")
        return _error(500, str(e))

    mark_document_modified()
    saved_by = x_user_name or x_user_email
    return _saved(outcome, f"Data saved successfully by {saved_by}" if saved_by else "Data saved successfully")
