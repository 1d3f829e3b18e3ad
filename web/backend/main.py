import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from jukebox.core.config import (
    Config,
    get_database_path,
    get_log_file_path,
    load_config,
)
from jukebox.core.database import init_database
from jukebox.core.errors import (
    ConflictError,
    InvalidTransitionError,
    JukeboxError,
    NotFoundError,
    StorageError,
)
from jukebox.core.output import setup_loguru
from jukebox.domain.library import SqliteTrackCatalog, sync_library
from jukebox.domain.playback import MpvRenderer, Scheduler, check_mpv_available
from jukebox.domain.voting import SqliteVoteStore

from .sync_manager import SyncManager

# HTTP status per error family; handlers are matched along the exception MRO
ERROR_STATUS_CODES: dict[type[JukeboxError], int] = {
    NotFoundError: 404,
    ConflictError: 409,
    InvalidTransitionError: 400,
    StorageError: 500,
}


def _error_handler(status_code: int):
    async def handler(request: Request, exc: JukeboxError) -> JSONResponse:
        if status_code >= 500:
            logger.opt(exception=exc).error(
                f"{request.method} {request.url.path} failed: {exc}"
            )
        else:
            logger.debug(f"{request.method} {request.url.path} -> {status_code}: {exc}")
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    return handler


async def _scan_on_startup(catalog: SqliteTrackCatalog, config: Config) -> None:
    try:
        result = await asyncio.to_thread(sync_library, catalog, config.library)
    except StorageError:
        logger.exception("Startup library scan failed, serving the existing catalog")
        return
    logger.info(
        f"Startup scan: {len(result.added)} added, "
        f"{len(result.backfilled)} backfilled, {result.unchanged} unchanged"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    config: Config = app.state.config

    if app.state.configure_logging:
        setup_loguru(
            get_log_file_path(config),
            level=config.logging.level,
            max_file_size_mb=config.logging.max_file_size_mb,
            backup_count=config.logging.backup_count,
            console_output=config.logging.console_output,
        )

    db_path = get_database_path(config)
    init_database(db_path)

    catalog = SqliteTrackCatalog(db_path)
    votes = SqliteVoteStore(db_path)
    if config.library.scan_on_startup:
        await _scan_on_startup(catalog, config)

    scheduler = Scheduler(catalog, votes, auto_advance=config.player.auto_advance)
    sync_manager = SyncManager(scheduler)
    scheduler.subscribe(sync_manager)

    renderer: Optional[MpvRenderer] = None
    if config.player.renderer == "mpv":
        if check_mpv_available():
            renderer = MpvRenderer(scheduler.report_finished, volume=config.player.volume)
            scheduler.subscribe(renderer)
        else:
            logger.warning("player.renderer is 'mpv' but mpv is not installed; rendering disabled")

    app.state.catalog = catalog
    app.state.votes = votes
    app.state.scheduler = scheduler
    app.state.sync_manager = sync_manager

    try:
        await scheduler.restore()
    except StorageError:
        logger.exception("Could not restore playback from persisted votes")

    logger.info(f"Jukebox ready (database: {db_path})")
    try:
        yield
    finally:
        await scheduler.close()
        if renderer is not None:
            await renderer.close()
        logger.info("Jukebox stopped")


def create_app(config: Optional[Config] = None, configure_logging: bool = True) -> FastAPI:
    """Build the web app; config is loaded here once when not given.

    Served through uvicorn's factory mode, so importing this module has no
    side effects.
    """
    config = config or load_config()
    app = FastAPI(title="Vote Jukebox API", version="1.0.0", lifespan=lifespan)
    app.state.config = config
    app.state.configure_logging = configure_logging

    # CORS origins come from [web] allowed_origins or the ALLOWED_ORIGINS env var
    allowed_origins = config.web.allowed_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for exc_class, status_code in ERROR_STATUS_CODES.items():
        app.add_exception_handler(exc_class, _error_handler(status_code))

    # Include routers
    from web.backend.routers import live, player, tracks, votes

    app.include_router(player.router, prefix="/api", tags=["player"])
    app.include_router(votes.router, prefix="/api", tags=["votes"])
    app.include_router(tracks.router, prefix="/api", tags=["tracks"])
    app.include_router(live.router, prefix="/api", tags=["live"])

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app
