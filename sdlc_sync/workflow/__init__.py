"""Workflow document module: schemas, merge and change history."""

from sdlc_sync.workflow.errors import (
    ConflictError,
    DocumentNotFoundError,
    MissingMetadataError,
    PersistenceError,
    WorkflowSyncError,
)
from sdlc_sync.workflow.merger import count_totals, merge, recount
from sdlc_sync.workflow.schemas import (
    Category,
    ChangeRecord,
    Phase,
    WorkflowDocument,
    WorkflowMetadata,
    WorkflowTotals,
)

__all__ = [
    "Category",
    "ChangeRecord",
    "ConflictError",
    "DocumentNotFoundError",
    "MissingMetadataError",
    "PersistenceError",
    "Phase",
    "WorkflowDocument",
    "WorkflowMetadata",
    "WorkflowSyncError",
    "WorkflowTotals",
    "count_totals",
    "merge",
    "recount",
]
