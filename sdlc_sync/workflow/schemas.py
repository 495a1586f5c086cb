"""Workflow document schemas.

The workflow board is a single hand-authored JSON document:

    {
      "metadata": {"version": "1.0", "totalPhases": 6, ...},
      "phases": {
        "Coding": {
          "phaseNumber": 3,
          "ownership": ["Dev Team"],
          "categories": {"AI Coding:": {"items": ["Copilot"], "itemCount": 1}}
        }
      }
    }

Keys stay camelCase on the wire. Models are frozen; derive new values with
model_copy or model_validate instead of mutating in place. Fields the authors
add by hand (colours, notes, ...) are kept as extras and written back as-is.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

MAX_CHANGE_HISTORY = 50


class _DocumentModel(BaseModel):
    """Base for all document parts: frozen, camelCase, extras preserved."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        """Serialize only the fields that were supplied or explicitly set."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class Category(_DocumentModel):
    """A labeled bucket of items within a phase (e.g. "AI Coding:")."""

    items: list[str] = Field(default_factory=list)
    item_count: int = Field(default=0, alias="itemCount")

    @model_validator(mode="before")
    @classmethod
    def _derive_item_count(cls, data: Any) -> Any:
        """itemCount always mirrors len(items); a missing items list counts as empty."""
        if not isinstance(data, dict):
            return data
        items = data.get("items")
        if isinstance(items, list):
            return {**data, "itemCount": len(items)}
        if "itemCount" in data or "item_count" in data:
            data = {k: v for k, v in data.items() if k != "item_count"}
            return {**data, "itemCount": 0}
        return data


class Phase(_DocumentModel):
    """A named stage of the workflow, e.g. "Coding" or "Testing".

    Every field is optional so a partial phase can be posted for a merge.
    """

    phase_number: Optional[int] = Field(default=None, alias="phaseNumber", ge=1)
    description: Optional[str] = None
    user_story: Optional[str] = Field(default=None, alias="userStory")
    ownership: list[str] = Field(default_factory=list)
    categories: dict[str, Category] = Field(default_factory=dict)

    def item_total(self) -> int:
        """Items across all categories plus the ownership entries."""
        return sum(len(c.items) for c in self.categories.values()) + len(self.ownership)


class ChangeRecord(_DocumentModel):
    """One entry in metadata.changeHistory."""

    timestamp: datetime
    user: str
    user_name: Optional[str] = Field(default=None, alias="userName")
    action: str = "data_update"
    description: str = ""


class WorkflowMetadata(_DocumentModel):
    """Document-level bookkeeping: version, timestamps and totals."""

    version: str = "1.0"
    last_auto_save: Optional[datetime] = Field(default=None, alias="lastAutoSave")
    last_modified: Optional[datetime] = Field(default=None, alias="lastModified")
    last_modified_by: Optional[str] = Field(default=None, alias="lastModifiedBy")
    last_modified_by_name: Optional[str] = Field(
        default=None, alias="lastModifiedByName"
    )
    total_phases: int = Field(default=0, alias="totalPhases")
    total_categories: int = Field(default=0, alias="totalCategories")
    total_items: int = Field(default=0, alias="totalItems")
    change_history: list[ChangeRecord] = Field(
        default_factory=list,
        alias="changeHistory",
        description=f"Most recent changes, bounded to the last {MAX_CHANGE_HISTORY}",
    )


class WorkflowDocument(_DocumentModel):
    """The whole workflow board.

    `phases` is None when the payload carried no phases at all; that is what
    makes an incoming document a no-op for the merge. `metadata` is None when
    the stored file has no metadata block, which the merge refuses.
    """

    metadata: Optional[WorkflowMetadata] = None
    phases: Optional[dict[str, Phase]] = None

    @model_validator(mode="before")
    @classmethod
    def _lift_change_history(cls, data: Any) -> Any:
        """Older saves kept changeHistory at the top level; move it under metadata."""
        if isinstance(data, dict) and "changeHistory" in data:
            data = dict(data)
            history = data.pop("changeHistory")
            metadata = dict(data.get("metadata") or {})
            metadata.setdefault("changeHistory", history)
            data["metadata"] = metadata
        return data


class WorkflowTotals(BaseModel):
    """Aggregate counts reported after a merge or save."""

    phases: int
    categories: int
    items: int
