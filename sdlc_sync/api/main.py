"""SDLC Workflow Sync API.

Serves the workflow board document and accepts updates from the HTML page:
- GET the canonical document
- POST a partial document to merge and save
- PUT a whole document to replace it
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sdlc_sync import __version__
from sdlc_sync.api.routes import meta, workflow
from sdlc_sync.persistence.factory import conflict_check_enabled, get_workflow_store

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    store = get_workflow_store()
    logger.info(f"Workflow store: {store.describe()}")
    if conflict_check_enabled():
        logger.info("Conflict check enabled")
    logger.info("SDLC Workflow Sync API ready")
    yield
    logger.info("Shutting down SDLC Workflow Sync API")
    close = getattr(store, "close", None)
    if close is not None:
        await close()


app = FastAPI(
    title="SDLC Workflow Sync API",
    description="""
## Workflow board sync

- `GET /v1/workflow` - Current workflow document
- `POST /v1/workflow` - Merge a partial document and save
- `PUT /v1/workflow` - Replace the whole document
- `GET /v1/meta/status` - Store configuration
""",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(workflow.router, prefix="/v1")
app.include_router(meta.router, prefix="/v1")


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "service": "SDLC Workflow Sync API",
        "version": __version__,
        "docs": "/docs",
        "endpoints": {
            "workflow": "/v1/workflow",
            "status": "/v1/meta/status",
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    store = get_workflow_store()
    return {
        "status": "healthy",
        "store": store.kind,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "sdlc_sync.api.main:app",
        host="0.0.0.0",
        port=3001,
        reload=True,
    )
