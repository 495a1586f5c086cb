"""
Tests for the sync service and the one-shot file merge.

Covers:
- sync(): merge + save, no-op payloads, change attribution
- Soft optimistic lock (ConflictError)
- replace(): whole-document saves with recount
- merge_files()
"""

import asyncio
import json
from datetime import timedelta

import pytest

from sdlc_sync.persistence.file_store import FileWorkflowStore
from sdlc_sync.workflow.errors import (
    ConflictError,
    DocumentNotFoundError,
    MissingMetadataError,
)
from sdlc_sync.workflow.schemas import WorkflowDocument
from sdlc_sync.workflow.sync import WorkflowSyncService, commit_message, merge_files


def doc(data):
    return WorkflowDocument.model_validate(data)


class RecordingStore(FileWorkflowStore):
    """File store that remembers commit messages."""

    def __init__(self, path):
        super().__init__(path)
        self.messages = []

    async def save(self, document, message=""):
        self.messages.append(message)
        return await super().save(document, message)


class TestSync:

    def test_merge_and_save(self, board_file, fixed_now):
        store = RecordingStore(board_file)
        service = WorkflowSyncService(store)
        incoming = doc({"phases": {"Testing": {"ownership": ["QA"]}}})

        outcome = asyncio.run(service.sync(incoming, now=fixed_now))

        assert outcome.changed
        assert outcome.save_result.success
        assert outcome.totals.phases == 1
        stored = store.read()
        assert set(stored.phases) == {"Planning", "Coding", "Testing"}
        assert stored.metadata.last_modified == fixed_now
        assert store.messages == [commit_message(None, fixed_now)]

    def test_noop_payload_not_saved(self, board_file):
        store = RecordingStore(board_file)
        before = board_file.read_text(encoding="utf-8")

        outcome = asyncio.run(WorkflowSyncService(store).sync(doc({})))

        assert not outcome.changed
        assert outcome.save_result is None
        assert store.messages == []
        assert board_file.read_text(encoding="utf-8") == before

    def test_user_change_recorded(self, board_file, fixed_now):
        store = RecordingStore(board_file)
        outcome = asyncio.run(
            WorkflowSyncService(store).sync(
                doc({"phases": {"Coding": {"description": "x"}}}),
                user="ana@team.com",
                user_name="Ana",
                now=fixed_now,
            )
        )
        meta = outcome.document.metadata
        assert meta.last_modified_by == "ana@team.com"
        assert meta.change_history[-1].user_name == "Ana"
        assert store.messages == ["Update SDLC workflow data by Ana"]
        assert store.read().metadata.version == "1.1"

    def test_missing_document(self, tmp_path):
        service = WorkflowSyncService(FileWorkflowStore(tmp_path / "none.json"))
        with pytest.raises(DocumentNotFoundError):
            asyncio.run(service.sync(doc({"phases": {}})))

    def test_missing_metadata(self, tmp_path):
        path = tmp_path / "b.json"
        path.write_text(json.dumps({"phases": {}}), encoding="utf-8")
        service = WorkflowSyncService(FileWorkflowStore(path))
        with pytest.raises(MissingMetadataError):
            asyncio.run(service.sync(doc({"phases": {"X": {}}})))


class TestConflictCheck:

    def test_stale_base_rejected(self, board_file, board):
        stored = board.metadata.last_modified
        service = WorkflowSyncService(RecordingStore(board_file), conflict_check=True)
        incoming = doc({
            "metadata": {"lastModified": (stored - timedelta(minutes=5)).isoformat()},
            "phases": {"X": {}},
        })
        with pytest.raises(ConflictError) as exc_info:
            asyncio.run(service.sync(incoming))
        assert exc_info.value.last_modified == stored
        assert service.store.messages == []

    def test_current_base_accepted(self, board_file, board, fixed_now):
        service = WorkflowSyncService(RecordingStore(board_file), conflict_check=True)
        outcome = asyncio.run(
            service.sync(
                doc({"phases": {"X": {}}}),
                base_last_modified=board.metadata.last_modified,
                now=fixed_now,
            )
        )
        assert outcome.changed

    def test_no_base_skips_check(self, board_file, fixed_now):
        service = WorkflowSyncService(RecordingStore(board_file), conflict_check=True)
        assert asyncio.run(service.sync(doc({"phases": {"X": {}}}), now=fixed_now)).changed

    def test_disabled_check_ignores_stale_base(self, board_file, board, fixed_now):
        service = WorkflowSyncService(RecordingStore(board_file))
        stale = board.metadata.last_modified - timedelta(days=1)
        outcome = asyncio.run(
            service.sync(doc({"phases": {"X": {}}}), base_last_modified=stale, now=fixed_now)
        )
        assert outcome.changed

    def test_stale_noop_payload_not_rejected(self, board_file, board):
        service = WorkflowSyncService(RecordingStore(board_file), conflict_check=True)
        stale = board.metadata.last_modified - timedelta(days=1)
        outcome = asyncio.run(service.sync(doc({"metadata": {"lastModified": stale.isoformat()}})))
        assert not outcome.changed
        assert outcome.document.to_dict() == board.to_dict()
        assert service.store.messages == []


class TestReplace:

    def test_replace_recounts_and_stamps(self, tmp_path, board, fixed_now):
        store = RecordingStore(tmp_path / "new.json")
        outcome = asyncio.run(
            WorkflowSyncService(store).replace(board, user="ana@team.com", now=fixed_now)
        )
        meta = store.read().metadata
        assert outcome.totals.items == 6
        assert meta.total_phases == 2
        assert meta.last_modified == fixed_now
        assert meta.last_auto_save == fixed_now
        assert meta.last_modified_by == "ana@team.com"

    def test_replace_conflict(self, board_file, board):
        service = WorkflowSyncService(RecordingStore(board_file), conflict_check=True)
        stale_meta = board.metadata.model_copy(
            update={"last_modified": board.metadata.last_modified - timedelta(hours=1)}
        )
        with pytest.raises(ConflictError):
            asyncio.run(service.replace(board.model_copy(update={"metadata": stale_meta})))


class TestMergeFiles:

    def test_merge_files(self, tmp_path, board_file, fixed_now):
        source = tmp_path / "export.json"
        source.write_text(json.dumps({
            "phases": {"Testing": {"categories": {"Tools": {"items": ["Jest", "Cypress"]}}, "ownership": ["QA"]}}
        }), encoding="utf-8")

        outcome = merge_files(board_file, source, now=fixed_now)

        assert outcome.changed
        written = json.loads(board_file.read_text(encoding="utf-8"))
        assert "Testing" in written["phases"]
        assert written["metadata"]["totalPhases"] == 1
        assert written["metadata"]["totalCategories"] == 1
        assert written["metadata"]["totalItems"] == 3
        assert written["phases"]["Testing"]["categories"]["Tools"]["itemCount"] == 2

    def test_merge_files_without_phases(self, tmp_path, board_file):
        source = tmp_path / "export.json"
        source.write_text("{}", encoding="utf-8")
        before = board_file.read_text(encoding="utf-8")
        assert not merge_files(board_file, source).changed
        assert board_file.read_text(encoding="utf-8") == before

    def test_merge_files_missing(self, tmp_path, board_file):
        with pytest.raises(DocumentNotFoundError, match="export.json"):
            merge_files(board_file, tmp_path / "export.json")
