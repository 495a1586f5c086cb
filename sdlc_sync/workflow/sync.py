"""Load → merge → save driver for the workflow document.

WorkflowSyncService runs one sync event against a store: read the canonical
document, optionally reject a stale write, merge, record who changed it and
save. Failures propagate to the caller; nothing here retries.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from sdlc_sync.persistence.base import SaveResult, WorkflowStore
from sdlc_sync.persistence.file_store import FileWorkflowStore

from .errors import ConflictError, DocumentNotFoundError
from .history import record_change
from .merger import as_utc, count_totals, merge, recount, totals_of, utc_now
from .schemas import WorkflowDocument, WorkflowTotals

logger = logging.getLogger(__name__)


@dataclass
class SyncOutcome:
    """What a sync event produced."""
    document: WorkflowDocument
    changed: bool
    save_result: Optional[SaveResult] = None

    @property
    def totals(self) -> WorkflowTotals:
        if self.document.metadata is None:
            return count_totals(self.document.phases or {})
        return totals_of(self.document.metadata)


def commit_message(user: Optional[str] = None, now: Optional[datetime] = None) -> str:
    if user:
        return f"Update SDLC workflow data by {user}"
    return f"Update SDLC workflow data - {(now or utc_now()).isoformat()}"


class WorkflowSyncService:
    """Runs sync events against a single store."""

    def __init__(self, store: WorkflowStore, conflict_check: bool = False):
        self.store = store
        self.conflict_check = conflict_check

    async def load(self) -> WorkflowDocument:
        """Load the canonical document.

        Raises:
            DocumentNotFoundError: If the store has no document yet
        """
        document = await self.store.load()
        if document is None:
            raise DocumentNotFoundError(f"No workflow document in {self.store.kind} store")
        return document

    def _check_conflict(
        self,
        current: Optional[WorkflowDocument],
        base_last_modified: Optional[datetime],
    ) -> None:
        """Soft optimistic lock: reject if the stored copy is newer than the caller's base."""
        if not self.conflict_check or current is None or base_last_modified is None:
            return
        stored = current.metadata.last_modified if current.metadata else None
        if stored is None:
            return
        if as_utc(stored) > as_utc(base_last_modified):
            by = current.metadata.last_modified_by
            logger.warning(
                f"Potential conflict detected: stored {stored.isoformat()} by {by or 'unknown'} "
                f"is newer than base {base_last_modified.isoformat()}"
            )
            raise ConflictError(stored, by)

    async def sync(
        self,
        incoming: Optional[WorkflowDocument],
        user: Optional[str] = None,
        user_name: Optional[str] = None,
        base_last_modified: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> SyncOutcome:
        """Merge `incoming` into the stored document and save the result.

        The base timestamp for the conflict check defaults to the incoming
        document's own metadata.lastModified. A payload without phases is not
        saved.

        Raises:
            DocumentNotFoundError: If there is nothing to merge into
            ConflictError: If conflict checking is on and the store is newer
            MissingMetadataError: If the stored document lacks metadata
            PersistenceError: If the store read or write fails
        """
        existing = await self.load()
        if incoming is None or incoming.phases is None:
            logger.info("Incoming document has no phases, nothing to sync")
            return SyncOutcome(document=existing, changed=False)

        if base_last_modified is None and incoming.metadata:
            base_last_modified = incoming.metadata.last_modified
        self._check_conflict(existing, base_last_modified)

        merged = merge(existing, incoming, now=now)
        if user:
            merged = record_change(merged, user, user_name=user_name, now=now)

        result = await self.store.save(merged, commit_message(user_name or user, now))
        return SyncOutcome(document=merged, changed=True, save_result=result)

    async def replace(
        self,
        document: WorkflowDocument,
        user: Optional[str] = None,
        user_name: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> SyncOutcome:
        """Save a whole document, recounting its totals over every phase.

        Creates the stored document if none exists.
        """
        if self.conflict_check:
            current = await self.store.load()
            base = document.metadata.last_modified if document.metadata else None
            self._check_conflict(current, base)

        updated = recount(document, now=now)
        updated = updated.model_copy(
            update={
                "metadata": updated.metadata.model_copy(
                    update={"last_auto_save": updated.metadata.last_modified}
                )
            }
        )
        if user:
            updated = record_change(updated, user, user_name=user_name, now=now)

        result = await self.store.save(updated, commit_message(user_name or user, now))
        return SyncOutcome(document=updated, changed=True, save_result=result)


def merge_files(
    target: Union[str, Path],
    source: Union[str, Path],
    now: Optional[datetime] = None,
) -> SyncOutcome:
    """Merge the document in `source` into `target` and write `target` back.

    Raises:
        DocumentNotFoundError: If either file is missing
    """
    target_store = FileWorkflowStore(target)
    source_store = FileWorkflowStore(source)

    missing = [str(s.path) for s in (target_store, source_store) if not s.path.exists()]
    if missing:
        raise DocumentNotFoundError(f"Missing files: {', '.join(missing)}")

    existing = target_store.read()
    incoming = source_store.read()

    merged = merge(existing, incoming, now=now)
    if merged is existing:
        return SyncOutcome(document=existing, changed=False)

    result = target_store.write(merged)
    return SyncOutcome(document=merged, changed=True, save_result=result)
