"""AR Sync API Router.

Thin HTTP wrappers around one `SyncRunGuard`:
- POST /sync    run one reconciliation and return its counts
- GET  /health  liveness plus whether a run is active
- GET  /        short index page
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel

from src.arsync.use_cases.run_guard import SyncAlreadyRunningError, SyncRunGuard

logger = logging.getLogger(__name__)

sync_router = APIRouter(tags=["AR Sync"])


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------


class SyncResponse(BaseModel):
    success: bool = True
    updated: int
    created: int
    not_found: int
    errors: int


class SyncErrorResponse(BaseModel):
    success: bool = False
    error: str


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    sync_running: bool


_INDEX_HTML = """
<h1>NetSuite-HubSpot AR Sync</h1>
<p>POST /sync - Run sync manually</p>
<p>GET /health - Health check</p>
"""


def _guard(request: Request) -> SyncRunGuard:
    return request.app.state.sync_guard


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@sync_router.post(
    "/sync",
    response_model=SyncResponse,
    responses={409: {"model": SyncErrorResponse}, 500: {"model": SyncErrorResponse}},
)
def run_sync(request: Request):
    """Run one reconciliation. Blocks until the run finishes (runs in the threadpool)."""

    guard = _guard(request)
    try:
        outcome = guard.run()
    except SyncAlreadyRunningError as e:
        logger.warning("Rejected /sync trigger: %s", e)
        return JSONResponse(
            status_code=409,
            content=SyncErrorResponse(error=str(e)).model_dump(),
        )
    except Exception as e:
        logger.exception("AR sync run failed")
        return JSONResponse(
            status_code=500,
            content=SyncErrorResponse(error=str(e)).model_dump(),
        )

    return SyncResponse(**outcome.as_dict())


@sync_router.get("/health", response_model=HealthResponse)
def health(request: Request):
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        sync_running=_guard(request).is_running,
    )


@sync_router.get("/", response_class=HTMLResponse)
def index():
    return HTMLResponse(_INDEX_HTML)
