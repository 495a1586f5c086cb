"""Meta/system API routes.

Reports which store is active and when this process last saved the document,
so the board page can tell whether its copy may be stale.
"""

import logging
import time

from fastapi import APIRouter

from sdlc_sync.persistence.factory import conflict_check_enabled, get_workflow_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/meta", tags=["meta"])

# Track when this process last saved the document
_last_modified_at: float = time.time()


def mark_document_modified():
    """Call this whenever the document is saved to update the version."""
    global _last_modified_at
    _last_modified_at = time.time()


@router.get("/status")
async def get_status() -> dict:
    """Get store configuration and last in-process save time."""
    store = get_workflow_store()
    return {
        "last_modified": _last_modified_at,
        "conflict_check": conflict_check_enabled(),
        "persistence": store.describe(),
    }
