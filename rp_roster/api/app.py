from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from loguru import logger

from rp_roster.config.settings import AppSettings, settings
from rp_roster.pipeline import RosterPipeline
from rp_roster.storage.cache_gateway import CacheGateway
from rp_roster.storage.supabase_client import build_cache_store


def create_app(
    pipeline: Optional[RosterPipeline] = None, app_settings: AppSettings = settings
) -> FastAPI:
    """Builds the roster app. A prebuilt pipeline skips the startup wiring."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = pipeline is None
        if owned:
            store = await build_cache_store(app_settings)
            gateway = CacheGateway(store, coalesce=app_settings.coalesce_cache_misses)
            app.state.pipeline = RosterPipeline.from_settings(gateway, app_settings)
        else:
            app.state.pipeline = pipeline
        logger.info(f"Roster service ready for board {app_settings.trello_board_id}")
        try:
            yield
        finally:
            if owned:
                await app.state.pipeline.close()
                await app.state.pipeline.gateway.store.close()

    app = FastAPI(title="Roleplay Roster", version="0.1.0", lifespan=lifespan)

    @app.get("/")
    async def get_roster(request: Request):
        try:
            roster = await request.app.state.pipeline.get_roster()
        except Exception as e:
            # Detail stays in the log; callers only ever see an opaque 500
            logger.exception(f"Error: {e}")
            return PlainTextResponse("Internal Server Error", status_code=500)
        return JSONResponse(roster)

    return app
