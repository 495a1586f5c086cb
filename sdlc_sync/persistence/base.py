"""Store interface shared by the file and GitHub backends."""

import json
from dataclasses import dataclass
from typing import Any, Optional, Protocol, runtime_checkable

from pydantic import ValidationError

from sdlc_sync.workflow.errors import PersistenceError
from sdlc_sync.workflow.schemas import WorkflowDocument


@dataclass
class SaveResult:
    """Result of a successful store write."""
    success: bool
    message: str = ""
    sha: Optional[str] = None
    url: Optional[str] = None


@runtime_checkable
class WorkflowStore(Protocol):
    """Somewhere the workflow document lives.

    load() returns None when no document exists yet. Both methods raise
    PersistenceError on any read/write failure.
    """

    kind: str

    async def load(self) -> Optional[WorkflowDocument]: ...

    async def save(self, document: WorkflowDocument, message: str) -> SaveResult: ...

    def describe(self) -> dict[str, Any]: ...


def dumps_document(document: WorkflowDocument) -> str:
    """Serialize with 2-space indentation, the format the board files use."""
    return json.dumps(document.to_dict(), indent=2, ensure_ascii=False) + "\n"


def parse_document(raw: str, source: str) -> WorkflowDocument:
    """Parse stored JSON text into a document, wrapping failures."""
    try:
        return WorkflowDocument.model_validate(json.loads(raw))
    except json.JSONDecodeError as e:
        raise PersistenceError(f"Invalid JSON in {source}: {e}") from e
    except ValidationError as e:
        raise PersistenceError(f"Invalid workflow document in {source}: {e}") from e
