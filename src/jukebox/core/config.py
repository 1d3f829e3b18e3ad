"""
Configuration management for Vote Jukebox
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from loguru import logger


@dataclass
class LibraryConfig:
    """Configuration for music library settings."""

    library_paths: List[str] = field(
        default_factory=lambda: [str(Path.home() / "Music")]
    )
    supported_formats: List[str] = field(
        default_factory=lambda: [".mp3", ".wav", ".flac", ".m4a", ".ogg"]
    )
    scan_recursive: bool = True
    scan_on_startup: bool = True


@dataclass
class DatabaseConfig:
    """Configuration for the SQLite database."""

    path: Optional[str] = None  # default: <data dir>/jukebox.db


@dataclass
class PlayerConfig:
    """Configuration for playback scheduling and audio rendering."""

    auto_advance: bool = True  # Arm a timer from the track duration
    renderer: str = "none"  # 'none' or 'mpv'
    volume: int = 50

    def validate(self) -> None:
        """Validate player configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        valid_renderers = {"none", "mpv"}
        if self.renderer not in valid_renderers:
            raise ValueError(
                f"Invalid renderer: {self.renderer!r}. "
                f"Valid renderers are: {valid_renderers}"
            )
        if not 0 <= self.volume <= 100:
            raise ValueError(f"Volume must be between 0 and 100, got {self.volume}")


@dataclass
class WebConfig:
    """Configuration for the HTTP command surface."""

    host: str = "0.0.0.0"
    port: int = 3000
    allowed_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:5173"]
    )
    admin_token: str = ""  # Empty disables the admin check


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/vote-jukebox/jukebox.log)
    )
    max_file_size_mb: int = 10  # Maximum log file size before rotation
    backup_count: int = 5  # Number of backup files to keep
    console_output: bool = True  # Also output to stderr


@dataclass
class Config:
    """Main configuration object."""

    library: LibraryConfig = field(default_factory=LibraryConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    player: PlayerConfig = field(default_factory=PlayerConfig)
    web: WebConfig = field(default_factory=WebConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "vote-jukebox"
    return Path.home() / ".config" / "vote-jukebox"


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. JUKEBOX_CONFIG environment variable
    2. Current working directory
    3. XDG_CONFIG_HOME/vote-jukebox (or ~/.config/vote-jukebox)
    """
    env_config = os.environ.get("JUKEBOX_CONFIG")
    if env_config:
        return Path(env_config).expanduser()

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "vote-jukebox"
    return Path.home() / ".local" / "share" / "vote-jukebox"


def get_database_path(config: Config) -> Path:
    """Resolve the SQLite file path from config, falling back to the data dir."""
    if config.database.path:
        return Path(config.database.path).expanduser()
    return get_data_dir() / "jukebox.db"


def get_log_file_path(config: Config) -> Path:
    """Resolve the log file path from config, falling back to the data dir."""
    if config.logging.log_file:
        return Path(config.logging.log_file).expanduser()
    return get_data_dir() / "jukebox.log"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# Vote Jukebox Configuration

[library]
# Paths to scan for music files
library_paths = ["~/Music"]

# Supported audio file formats
supported_formats = [".mp3", ".wav", ".flac", ".m4a", ".ogg"]

# Recursively scan subdirectories
scan_recursive = true

# Scan the library when the server starts
scan_on_startup = true

[database]
# SQLite file (default: ~/.local/share/vote-jukebox/jukebox.db)
# path = "/var/lib/vote-jukebox/jukebox.db"

[player]
# Advance automatically when the track duration elapses
auto_advance = true

# Audio renderer: "none" (clients play the stream) or "mpv" (play on the server)
renderer = "none"

# Volume for the mpv renderer (0-100)
volume = 50

[web]
host = "0.0.0.0"
port = 3000

# Origins allowed to call the API from a browser
allowed_origins = ["http://localhost:5173"]

# Shared token required in X-Admin-Token for player commands, clearing
# votes and deleting tracks.
# Leave empty to disable the check.
admin_token = ""

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/vote-jukebox/jukebox.log)
# log_file = "/path/to/custom/jukebox.log"

# Maximum log file size in MB before rotation
max_file_size_mb = 10

# Number of rotated log files to keep
backup_count = 5

# Also output logs to stderr
console_output = true
""".strip()


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file or create default.

    Environment variables override TOML values:
    - JUKEBOX_DB_PATH
    - JUKEBOX_ADMIN_TOKEN
    - ALLOWED_ORIGINS (comma separated)
    """
    # Load .env file from config directory if it exists
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = config_path or get_config_path()

    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_default_config())
        logger.info(f"Created default configuration at: {config_path}")
        config = Config()
        _apply_env_overrides(config)
        return config

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Error loading configuration from {config_path}: {e}")
        logger.warning("Using default configuration.")
        config = Config()
        _apply_env_overrides(config)
        return config

    config = Config()

    if "library" in toml_data:
        library_data = toml_data["library"]
        config.library = LibraryConfig(
            library_paths=[
                str(Path(p).expanduser())
                for p in library_data.get("library_paths", config.library.library_paths)
            ],
            supported_formats=[
                ext.lower()
                for ext in library_data.get(
                    "supported_formats", config.library.supported_formats
                )
            ],
            scan_recursive=library_data.get(
                "scan_recursive", config.library.scan_recursive
            ),
            scan_on_startup=library_data.get(
                "scan_on_startup", config.library.scan_on_startup
            ),
        )

    if "database" in toml_data:
        db_path = toml_data["database"].get("path")
        config.database = DatabaseConfig(
            path=str(Path(db_path).expanduser()) if db_path else None
        )

    if "player" in toml_data:
        player_data = toml_data["player"]
        config.player = PlayerConfig(
            auto_advance=player_data.get("auto_advance", config.player.auto_advance),
            renderer=player_data.get("renderer", config.player.renderer),
            volume=player_data.get("volume", config.player.volume),
        )
        try:
            config.player.validate()
        except ValueError as e:
            logger.warning(f"Invalid player configuration: {e}")
            logger.warning("Using default player configuration.")
            config.player = PlayerConfig()

    if "web" in toml_data:
        web_data = toml_data["web"]
        config.web = WebConfig(
            host=web_data.get("host", config.web.host),
            port=web_data.get("port", config.web.port),
            allowed_origins=web_data.get(
                "allowed_origins", config.web.allowed_origins
            ),
            admin_token=web_data.get("admin_token", config.web.admin_token),
        )

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=log_file,
            max_file_size_mb=logging_data.get(
                "max_file_size_mb", config.logging.max_file_size_mb
            ),
            backup_count=logging_data.get("backup_count", config.logging.backup_count),
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    _apply_env_overrides(config)
    return config


def _apply_env_overrides(config: Config) -> None:
    """Override config values with environment variables if present."""
    db_path = os.environ.get("JUKEBOX_DB_PATH")
    admin_token = os.environ.get("JUKEBOX_ADMIN_TOKEN")
    allowed_origins = os.environ.get("ALLOWED_ORIGINS")

    if db_path:
        config.database.path = db_path
    if admin_token:
        config.web.admin_token = admin_token
    if allowed_origins:
        config.web.allowed_origins = [
            origin.strip() for origin in allowed_origins.split(",") if origin.strip()
        ]


def ensure_directories() -> None:
    """Ensure all necessary directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)
