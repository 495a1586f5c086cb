"""Phase-data merge for the workflow document.

Every sync path (HTTP save, CLI file merge) funnels through merge():
take the canonical document, shallow-merge the incoming phases into it and
refresh the metadata totals.

Totals are counted over the *incoming* phases only, not the merged result.
Phases in the existing document that the payload does not mention do not
contribute. recount() gives the full-document numbers when those are wanted.
"""

import logging
from datetime import datetime, timezone
from typing import Mapping, Optional

from .errors import MissingMetadataError
from .schemas import Phase, WorkflowDocument, WorkflowMetadata, WorkflowTotals

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps from hand-edited files as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def count_totals(phases: Mapping[str, Phase]) -> WorkflowTotals:
    """Count phases, categories and items (ownership entries count as items)."""
    return WorkflowTotals(
        phases=len(phases),
        categories=sum(len(p.categories) for p in phases.values()),
        items=sum(p.item_total() for p in phases.values()),
    )


def totals_of(metadata: WorkflowMetadata) -> WorkflowTotals:
    return WorkflowTotals(
        phases=metadata.total_phases,
        categories=metadata.total_categories,
        items=metadata.total_items,
    )


def merge_phase(current: Phase, incoming: Phase) -> Phase:
    """Shallow merge: fields present in `incoming` win, the rest are kept.

    Lists and category maps are replaced whole, never merged element-wise.
    """
    return Phase.model_validate({**current.to_dict(), **incoming.to_dict()})


def _stamp(metadata: WorkflowMetadata, now: datetime, totals: WorkflowTotals) -> WorkflowMetadata:
    previous = metadata.last_modified
    if previous is not None and as_utc(previous) > now:
        now = as_utc(previous)
    return metadata.model_copy(
        update={
            "last_modified": now,
            "total_phases": totals.phases,
            "total_categories": totals.categories,
            "total_items": totals.items,
        }
    )


def merge(
    existing: WorkflowDocument,
    incoming: Optional[WorkflowDocument],
    now: Optional[datetime] = None,
) -> WorkflowDocument:
    """Merge `incoming` into `existing` and return the updated document.

    Neither argument is modified. A payload without phases returns `existing`
    itself, untouched.

    Args:
        existing: Canonical document; must carry metadata.
        incoming: Partial document, usually extracted from the HTML board.
        now: Clock override. lastModified never moves backwards.

    Raises:
        MissingMetadataError: If `existing` has no metadata block.
    """
    if incoming is None or incoming.phases is None:
        logger.info("Incoming document has no phases, skipping merge")
        return existing

    if existing.metadata is None:
        raise MissingMetadataError()

    totals = count_totals(incoming.phases)
    metadata = _stamp(existing.metadata, as_utc(now or utc_now()), totals)

    phases = {name: p.model_copy(deep=True) for name, p in (existing.phases or {}).items()}
    added = 0
    for name, phase in incoming.phases.items():
        current = phases.get(name)
        if current is None:
            phases[name] = phase.model_copy(deep=True)
            added += 1
        else:
            phases[name] = merge_phase(current, phase)

    logger.info(
        f"Merged {len(incoming.phases)} phase(s) ({added} new): "
        f"{totals.phases} phases, {totals.categories} categories, {totals.items} items"
    )
    return existing.model_copy(update={"metadata": metadata, "phases": phases})


def recount(document: WorkflowDocument, now: Optional[datetime] = None) -> WorkflowDocument:
    """Recompute totals over every phase in the document and stamp lastModified.

    Used when a whole document is saved rather than merged. A missing metadata
    block is created.
    """
    phases = document.phases or {}
    metadata = document.metadata or WorkflowMetadata(version="1.0")
    metadata = _stamp(metadata, as_utc(now or utc_now()), count_totals(phases))
    copied = {name: p.model_copy(deep=True) for name, p in phases.items()}
    return document.model_copy(update={"metadata": metadata, "phases": copied})
