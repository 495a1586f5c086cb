"""Change history for the workflow document.

Saves made on behalf of a user append a ChangeRecord to
metadata.changeHistory and bump the document version. Only the most recent
MAX_CHANGE_HISTORY records are kept.
"""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from .merger import as_utc, utc_now
from .schemas import (
    MAX_CHANGE_HISTORY,
    ChangeRecord,
    WorkflowDocument,
    WorkflowMetadata,
)

logger = logging.getLogger(__name__)


def bump_version(version: Optional[str]) -> str:
    """Increase a "major.minor" version string by 0.1 ("1.0" -> "1.1").

    Missing or non-numeric versions count as "1.0".
    """
    try:
        current = Decimal(version or "1.0")
    except InvalidOperation:
        current = Decimal("NaN")
    if current.is_finite():
        try:
            return str((current + Decimal("0.1")).quantize(Decimal("0.1")))
        except InvalidOperation:
            pass
    logger.warning(f"Unparseable document version {version!r}, resetting")
    return "1.1"


def record_change(
    document: WorkflowDocument,
    user: str,
    action: str = "data_update",
    description: Optional[str] = None,
    user_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> WorkflowDocument:
    """Return a copy of `document` with one more change record.

    Also stamps lastModifiedBy/lastModifiedByName and bumps the version.
    """
    timestamp = as_utc(now or utc_now())
    display_name = user_name or user.split("@")[0]
    entry = ChangeRecord(
        timestamp=timestamp,
        user=user,
        userName=display_name,
        action=action,
        description=description or f"Updated by {display_name} ({user})",
    )

    metadata = document.metadata or WorkflowMetadata(version="1.0")
    history = [*metadata.change_history, entry][-MAX_CHANGE_HISTORY:]
    metadata = metadata.model_copy(
        update={
            "change_history": history,
            "last_modified_by": user,
            "last_modified_by_name": display_name,
            "version": bump_version(metadata.version),
        }
    )
    logger.info(
        f"Recorded {action} by {display_name} "
        f"(version {metadata.version}, {len(history)} history entries)"
    )
    return document.model_copy(update={"metadata": metadata})
