"""SDLC workflow board sync.

Keeps the hand-authored workflow board JSON in step across the HTML page,
local files and a GitHub-backed store:
- Workflow document schemas and the phase-data merge
- File and GitHub stores
- HTTP API and CLI drivers
"""

__version__ = "0.1.0"
