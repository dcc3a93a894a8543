import logging
import os

from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv

# FastAPI imports
from fastapi import FastAPI

# Local imports
from src.arsync.api.sync_router import sync_router
from src.arsync.config.settings import SyncSettings
from src.arsync.use_cases.ar_sync import build_ar_sync_service
from src.arsync.use_cases.run_guard import SyncRunGuard

load_dotenv(override=False)

# Configure logging level from environment variables
logging.basicConfig(
    level=getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
# requests/urllib3 log every connection at DEBUG; keep them quiet.
logging.getLogger("urllib3").setLevel(logging.WARNING)


def create_app(sync_guard: SyncRunGuard | None = None) -> FastAPI:
    """Build the FastAPI app.

    Without `sync_guard`, settings are read from the environment at startup and
    a missing credential stops the process before it serves anything.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger = logging.getLogger(__name__)

        if app.state.sync_guard is None:
            settings = SyncSettings.from_env()
            logging.getLogger().setLevel(
                getattr(logging, settings.log_level, logging.INFO)
            )
            service = build_ar_sync_service(settings)
            app.state.sync_guard = SyncRunGuard(service.run_sync)
            logger.info(
                "AR sync configured: account=%s name_policy=%s unmatched_policy=%s",
                settings.netsuite.account_id,
                settings.name_match_policy.value,
                settings.unmatched_policy.value,
            )
            if settings.sync_on_start:
                logger.info("SYNC_ON_START is set; starting a sync in the background")
                app.state.sync_guard.run_in_background()

        logger.info("Starting AR sync service...")
        yield
        logger.info("AR sync service shutdown complete")

    app = FastAPI(title="NetSuite-HubSpot AR Sync", lifespan=lifespan)
    app.state.sync_guard = sync_guard
    app.include_router(sync_router)
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        app,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "3000")),
    )
