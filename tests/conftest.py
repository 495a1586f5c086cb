"""
Shared pytest fixtures for the workflow sync test suite.

Provides:
    - fixed_now: Deterministic clock value
    - board_dict: A small hand-authored board as raw JSON data
    - board: The same board as a WorkflowDocument
    - board_file: The board written to a temp file
"""

import json
from datetime import datetime, timezone

import pytest

from sdlc_sync.persistence import factory
from sdlc_sync.workflow.schemas import WorkflowDocument

FIXED_NOW = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def board_dict():
    return {
        "metadata": {
            "version": "1.0",
            "lastAutoSave": "2025-02-01T09:00:00.000Z",
            "lastModified": "2025-02-01T09:00:00.000Z",
            "totalPhases": 2,
            "totalCategories": 3,
            "totalItems": 6,
        },
        "phases": {
            "Planning": {
                "phaseNumber": 1,
                "description": "Scope and estimate",
                "ownership": ["PM"],
                "categories": {
                    "Tools:": {"items": ["Jira"], "itemCount": 1},
                },
            },
            "Coding": {
                "phaseNumber": 2,
                "userStory": "As a dev I want fast feedback",
                "ownership": ["Dev Team"],
                "categories": {
                    "AI Coding:": {"items": ["Copilot", "Cursor"], "itemCount": 2},
                    "🚧 Blockers:": {"items": ["Flaky CI"], "itemCount": 1},
                },
                "color": "#3366ff",
            },
        },
    }


@pytest.fixture
def board(board_dict):
    return WorkflowDocument.model_validate(board_dict)


@pytest.fixture
def board_file(tmp_path, board_dict):
    path = tmp_path / "sdlc-workflow.json"
    path.write_text(json.dumps(board_dict, indent=2), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _reset_store(monkeypatch):
    """Every test starts without a cached store or store-related env."""
    for var in (
        "WORKFLOW_STORE",
        "WORKFLOW_FILE",
        "GITHUB_TOKEN",
        "GITHUB_REPO",
        "GITHUB_BRANCH",
        "GITHUB_PATH",
        "ENABLE_CONFLICT_CHECK",
    ):
        monkeypatch.delenv(var, raising=False)
    factory.reset_workflow_store()
    yield
    factory.reset_workflow_store()
