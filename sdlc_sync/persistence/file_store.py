"""Local JSON file store for the workflow document."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional, Union

from sdlc_sync.persistence.base import SaveResult, dumps_document, parse_document
from sdlc_sync.workflow.errors import PersistenceError
from sdlc_sync.workflow.schemas import WorkflowDocument

logger = logging.getLogger(__name__)


class FileWorkflowStore:
    """Reads and writes the workflow document as a JSON file on disk.

    The sync methods are used directly by the CLI; the async pair satisfies
    WorkflowStore for the API.
    """

    kind = "file"

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def read(self) -> Optional[WorkflowDocument]:
        """Load the document, or None if the file does not exist."""
        if not self.path.exists():
            return None
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(f"Error reading {self.path}: {e}")
            raise PersistenceError(f"Could not read {self.path}: {e}") from e
        return parse_document(raw, str(self.path))

    def write(self, document: WorkflowDocument) -> SaveResult:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(dumps_document(document), encoding="utf-8")
        except OSError as e:
            logger.error(f"Error writing {self.path}: {e}")
            raise PersistenceError(f"Could not write {self.path}: {e}") from e

        logger.info(f"Successfully updated {self.path}")
        return SaveResult(success=True, message=f"Saved to {self.path}")

    async def load(self) -> Optional[WorkflowDocument]:
        return await asyncio.to_thread(self.read)

    async def save(self, document: WorkflowDocument, message: str = "") -> SaveResult:
        return await asyncio.to_thread(self.write, document)

    def describe(self) -> dict[str, Any]:
        return {"kind": self.kind, "path": str(self.path)}
