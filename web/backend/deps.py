import secrets
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from loguru import logger

from jukebox.core.config import Config
from jukebox.domain.library import SqliteTrackCatalog
from jukebox.domain.playback import Scheduler
from jukebox.domain.voting import SqliteVoteStore


def get_config(request: Request) -> Config:
    """FastAPI dependency for configuration."""
    return request.app.state.config


def get_scheduler(request: Request) -> Scheduler:
    """FastAPI dependency for the process-wide scheduler."""
    return request.app.state.scheduler


def get_catalog(request: Request) -> SqliteTrackCatalog:
    return request.app.state.catalog


def get_vote_store(request: Request) -> SqliteVoteStore:
    return request.app.state.votes


def require_admin(
    x_admin_token: Optional[str] = Header(default=None),
    config: Config = Depends(get_config),
) -> None:
    """Reject admin commands without the configured X-Admin-Token.

    An empty `web.admin_token` disables the check.
    """
    expected = config.web.admin_token
    if not expected:
        return
    if not x_admin_token or not secrets.compare_digest(x_admin_token, expected):
        logger.warning("Rejected admin command with missing or wrong token")
        raise HTTPException(403, "Admin token required")
