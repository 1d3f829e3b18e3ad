"""
Vote Jukebox CLI - entry point for the server and maintenance commands.
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from jukebox.core.config import (
    Config,
    get_database_path,
    get_log_file_path,
    load_config,
)
from jukebox.core.database import init_database
from jukebox.core.errors import JukeboxError
from jukebox.core.output import setup_loguru


def bootstrap(config_path: Optional[Path] = None) -> Config:
    """Load config, configure logging, and make sure the schema exists."""
    config = load_config(config_path)
    setup_loguru(
        get_log_file_path(config),
        level=config.logging.level,
        max_file_size_mb=config.logging.max_file_size_mb,
        backup_count=config.logging.backup_count,
        console_output=config.logging.console_output,
    )
    init_database(get_database_path(config))
    return config


def run_scan(config: Config) -> int:
    """Scan library folders into the catalog."""
    from jukebox.domain.library import SqliteTrackCatalog, sync_library

    catalog = SqliteTrackCatalog(get_database_path(config))
    try:
        result = sync_library(catalog, config.library)
    except JukeboxError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Added:      {len(result.added)}")
    print(f"Backfilled: {len(result.backfilled)}")
    print(f"Unchanged:  {result.unchanged}")
    return 0


def run_clear_votes(config: Config) -> int:
    """Remove every vote from the database."""
    from jukebox.domain.voting import SqliteVoteStore

    store = SqliteVoteStore(get_database_path(config))
    try:
        cleared = store.clear()
    except JukeboxError as e:
        print(f"Error clearing votes: {e}", file=sys.stderr)
        return 1

    print(f"Cleared {cleared} votes from database")
    return 0


def run_serve(
    config: Config,
    config_path: Optional[Path],
    host: Optional[str],
    port: Optional[int],
    reload: bool,
) -> int:
    """Run the web API with uvicorn."""
    import uvicorn

    # uvicorn builds the app through create_app, which loads config from this path
    if config_path:
        os.environ["JUKEBOX_CONFIG"] = str(config_path.resolve())

    host = host or config.web.host
    port = port or config.web.port
    logger.info(f"Jukebox server starting on http://{host}:{port}")
    uvicorn.run(
        "web.backend.main:create_app", factory=True, host=host, port=port, reload=reload
    )
    return 0


def main() -> None:
    """Main entry point for the jukebox command."""
    parser = argparse.ArgumentParser(
        description="Vote Jukebox - the most voted track plays next",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config.toml (default: ./config.toml or ~/.config/vote-jukebox)",
    )

    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the web API")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port")
    serve_parser.add_argument(
        "--reload", action="store_true", help="Reload on code changes (development)"
    )

    subparsers.add_parser("scan", help="Scan library folders into the catalog")
    subparsers.add_parser("clear-votes", help="Remove every vote")

    args = parser.parse_args()

    if not args.subcommand:
        parser.print_help()
        sys.exit(1)

    try:
        config = bootstrap(args.config)
    except JukeboxError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.subcommand == "serve":
        sys.exit(run_serve(config, args.config, args.host, args.port, args.reload))
    elif args.subcommand == "scan":
        sys.exit(run_scan(config))
    elif args.subcommand == "clear-votes":
        sys.exit(run_clear_votes(config))


if __name__ == "__main__":
    main()
