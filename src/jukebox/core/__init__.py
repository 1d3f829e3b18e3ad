"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Database connections and schema (SQLite)
- Logging setup (Loguru)
- The exception hierarchy shared by every layer
"""

from .config import (
    Config,
    load_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    get_database_path,
    get_log_file_path,
    create_default_config,
    ensure_directories,
)

from .database import (
    SCHEMA_VERSION,
    get_db_connection,
    init_database,
    migrate_database,
)

from .errors import (
    JukeboxError,
    NotFoundError,
    TrackNotFoundError,
    VoteNotFoundError,
    ConflictError,
    AlreadyVotedError,
    StorageError,
    InvalidTransitionError,
)

from .output import setup_loguru

__all__ = [
    # Config
    "Config",
    "load_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "get_database_path",
    "get_log_file_path",
    "create_default_config",
    "ensure_directories",
    # Database
    "SCHEMA_VERSION",
    "get_db_connection",
    "init_database",
    "migrate_database",
    # Errors
    "JukeboxError",
    "NotFoundError",
    "TrackNotFoundError",
    "VoteNotFoundError",
    "ConflictError",
    "AlreadyVotedError",
    "StorageError",
    "InvalidTransitionError",
    # Logging
    "setup_loguru",
]
